import logging
from contextlib import asynccontextmanager
from datetime import timedelta

import uvicorn
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from uvicorn.middleware.proxy_headers import ProxyHeadersMiddleware

from core.config import Settings, get_settings
from core.database import build_engine, build_session_factory, create_tables
from core.errors import register_error_handlers
from core.security import TokenIssuer
from routers import auth_router, project_router, translation_router
from services.translation_service import TranslationClient

logger = logging.getLogger(__name__)


def configure_logging(level: str) -> None:
    logging.basicConfig(
        level=level.upper(),
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )


def create_app(settings: Settings | None = None) -> FastAPI:
    settings = settings or get_settings()
    configure_logging(settings.LOG_LEVEL)

    if settings.uses_insecure_jwt_secret:
        if settings.is_production:
            raise RuntimeError("JWT_SECRET must be set to a strong secret in production")
        logger.warning("JWT_SECRET is not set; tokens are signed with an insecure default key")

    engine = build_engine(settings)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        logger.info("Using %s database", engine.dialect.name)
        if settings.AUTO_CREATE_TABLES:
            create_tables(engine)
        yield
        engine.dispose()

    app = FastAPI(title="BIM Project Backend API", lifespan=lifespan)

    app.state.settings = settings
    app.state.engine = engine
    app.state.session_factory = build_session_factory(engine)
    app.state.token_issuer = TokenIssuer(settings.JWT_SECRET, ttl=timedelta(hours=settings.TOKEN_TTL_HOURS))
    app.state.translation_client = TranslationClient(settings)

    # Respect X-Forwarded-Proto/Host when behind a proxy (Docker/nginx/etc.)
    app.add_middleware(ProxyHeadersMiddleware, trusted_hosts="*")

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=False,
        allow_methods=["GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"],
        allow_headers=["Content-Type", "Authorization"],
    )

    register_error_handlers(app)

    app.include_router(auth_router.router)
    app.include_router(project_router.router)
    app.include_router(translation_router.router)

    @app.get("/health")
    def health():
        return {"status": "ok"}

    return app


app = create_app()


def run() -> None:
    settings = get_settings()
    uvicorn.run("main:app", host=settings.HOST, port=settings.PORT)
