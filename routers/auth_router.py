import logging

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from core.auth import get_current_user
from core.config import Settings, get_app_settings
from core.database import get_db
from core.errors import NotFound
from core.security import AuthIdentity, TokenIssuer, get_token_issuer
from crud.user_crud import get_user, register_user, verify_login
from schemas.auth_schema import AuthResponse, LoginRequest, RegisterRequest
from schemas.user_schema import UserResponse

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["Authentication"])


@router.post("/register", response_model=AuthResponse, status_code=status.HTTP_201_CREATED)
def register(
    body: RegisterRequest,
    db: Session = Depends(get_db),
    issuer: TokenIssuer = Depends(get_token_issuer),
    settings: Settings = Depends(get_app_settings),
):
    """
    Create an account and log it in straight away.
    """
    user = register_user(db, body.username, body.email, body.password, rounds=settings.BCRYPT_ROUNDS)
    token = issuer.issue(user.id, user.username)
    return AuthResponse(token=token, user=UserResponse.model_validate(user))


@router.post("/login", response_model=AuthResponse)
def login(
    body: LoginRequest,
    db: Session = Depends(get_db),
    issuer: TokenIssuer = Depends(get_token_issuer),
    settings: Settings = Depends(get_app_settings),
):
    """
    Exchange username and password for a bearer token.
    Unknown usernames and wrong passwords get the same 401.
    """
    user = verify_login(db, body.username, body.password, rounds=settings.BCRYPT_ROUNDS)
    logger.info("User %s logged in", user.id)
    token = issuer.issue(user.id, user.username)
    return AuthResponse(token=token, user=UserResponse.model_validate(user))


@router.get("/me", response_model=UserResponse)
def get_me(db: Session = Depends(get_db), current_user: AuthIdentity = Depends(get_current_user)):
    user = get_user(db, current_user.user_id)
    if not user:
        raise NotFound("User not found")
    return user
