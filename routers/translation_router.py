from typing import Any

from fastapi import APIRouter, Depends, File, UploadFile
from fastapi.concurrency import run_in_threadpool

from core.auth import get_current_user
from core.errors import InvalidArgument
from core.security import AuthIdentity
from schemas.translation_schema import TranslationUploadResponse, ViewerTokenRequest, ViewerTokenResponse
from services.translation_service import VIEWER_SCOPE, TranslationClient, get_translation_client


router = APIRouter(prefix="/api/forge", tags=["Translation"])


@router.post("/token", response_model=ViewerTokenResponse)
def viewer_token(
    body: ViewerTokenRequest | None = None,
    client: TranslationClient = Depends(get_translation_client),
    current_user: AuthIdentity = Depends(get_current_user),
):
    """
    Issue a read-only token for the browser model viewer.
    Only the token itself is passed back, never the client credentials.
    """
    scope = (body.scope if body else None) or VIEWER_SCOPE
    return ViewerTokenResponse(access_token=client.request_access_token(scope=scope))


@router.post("/upload", response_model=TranslationUploadResponse)
async def upload_model(
    file: UploadFile = File(...),
    client: TranslationClient = Depends(get_translation_client),
    current_user: AuthIdentity = Depends(get_current_user),
):
    data = await file.read()
    if not data:
        raise InvalidArgument("Uploaded file is empty")
    result = await run_in_threadpool(client.upload_and_translate, file.filename or "model", data)
    return TranslationUploadResponse(**result)


@router.get("/status/{urn}")
def translation_status(
    urn: str,
    client: TranslationClient = Depends(get_translation_client),
    current_user: AuthIdentity = Depends(get_current_user),
) -> dict[str, Any]:
    token = client.request_access_token()
    return client.get_manifest(token, urn)
