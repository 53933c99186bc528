from pydantic import BaseModel


class ViewerTokenRequest(BaseModel):
    scope: str | None = None


class ViewerTokenResponse(BaseModel):
    access_token: str


class TranslationUploadResponse(BaseModel):
    bucketKey: str
    objectKey: str
    urn: str
    status: str
