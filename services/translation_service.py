"""
Thin client for the remote model-translation service (Autodesk Platform Services).

Every method is a single HTTP call with no retry: a non-2xx answer raises
``TranslationServiceError`` carrying the remote status and body.
"""

import base64
import logging
import os
import re
import time
from typing import Any

import requests
from fastapi import Request

from core.config import Settings
from core.errors import InternalError, TranslationServiceError

logger = logging.getLogger(__name__)

VIEWER_SCOPE = "viewables:read"
WRITE_SCOPE = "data:write data:read bucket:create bucket:read bucket:delete"


def object_urn(bucket_key: str, object_key: str) -> str:
    """URL-safe, unpadded base64 of the OSS object id, as the derivative API expects."""
    object_id = f"urn:adsk.objects:os.object:{bucket_key}/{object_key}"
    return base64.urlsafe_b64encode(object_id.encode("utf-8")).decode("ascii").rstrip("=")


def generate_object_key(filename: str, now: float | None = None) -> str:
    """Make a unique, URL-safe object key from an uploaded file name."""
    base = os.path.basename(filename or "model")
    name, ext = os.path.splitext(base)
    name = name.strip().replace(" ", "_")
    name = re.sub(r"[^A-Za-z0-9._-]", "", name) or "model"
    timestamp = int(now if now is not None else time.time())
    return f"{name}_{timestamp}{ext.lower()}"


class TranslationClient:
    def __init__(self, settings: Settings, http=None):
        self.base_url = settings.FORGE_BASE_URL.rstrip("/")
        self.client_id = settings.FORGE_CLIENT_ID
        self.client_secret = settings.FORGE_CLIENT_SECRET
        self.bucket_key = settings.FORGE_BUCKET_KEY
        self.upload_timeout = settings.FORGE_UPLOAD_TIMEOUT_SECONDS
        # anything with requests' module-level request() signature
        self.http = http or requests

    def _send(self, operation: str, method: str, path: str, ok: tuple[int, ...], **kwargs) -> requests.Response:
        url = f"{self.base_url}{path}"
        try:
            resp = self.http.request(method, url, **kwargs)
        except requests.RequestException as exc:
            logger.error("%s: could not reach %s: %s", operation, url, exc)
            raise TranslationServiceError(operation, body=str(exc))
        if resp.status_code not in ok:
            logger.error("%s: remote returned %s: %s", operation, resp.status_code, resp.text)
            raise TranslationServiceError(operation, resp.status_code, resp.text)
        return resp

    @staticmethod
    def _auth(token: str) -> dict[str, str]:
        return {"Authorization": f"Bearer {token}"}

    def request_access_token(self, scope: str = WRITE_SCOPE) -> str:
        if not self.client_id or not self.client_secret:
            raise InternalError("Translation service credentials are not configured")
        resp = self._send(
            "Token request",
            "POST",
            "/authentication/v2/token",
            ok=(200,),
            data={
                "client_id": self.client_id,
                "client_secret": self.client_secret,
                "grant_type": "client_credentials",
                "scope": scope,
            },
            headers={"Content-Type": "application/x-www-form-urlencoded"},
        )
        try:
            token = resp.json()["access_token"]
        except (ValueError, KeyError, TypeError):
            raise TranslationServiceError("Token request", resp.status_code, "response has no access_token")
        return token

    def ensure_bucket(self, token: str, bucket_key: str) -> None:
        # 409 means the bucket is already there, which is all we need
        self._send(
            "Bucket creation",
            "POST",
            "/oss/v2/buckets",
            ok=(200, 409),
            json={"bucketKey": bucket_key, "policyKey": "transient"},
            headers=self._auth(token),
        )

    def put_object(self, token: str, bucket_key: str, object_key: str, data: bytes) -> None:
        headers = self._auth(token)
        headers["Content-Type"] = "application/octet-stream"
        self._send(
            "File upload",
            "PUT",
            f"/oss/v2/buckets/{bucket_key}/objects/{object_key}",
            ok=(200,),
            data=data,
            headers=headers,
            timeout=self.upload_timeout,
        )

    def submit_translation(self, token: str, urn: str) -> None:
        job = {
            "input": {"urn": urn},
            "output": {"formats": [{"type": "svf2", "views": ["2d", "3d"]}]},
        }
        self._send(
            "Translation job",
            "POST",
            "/modelderivative/v2/designdata/job",
            ok=(200, 201),
            json=job,
            headers=self._auth(token),
        )

    def get_manifest(self, token: str, urn: str) -> dict[str, Any]:
        resp = self._send(
            "Manifest lookup",
            "GET",
            f"/modelderivative/v2/designdata/{urn}/manifest",
            ok=(200,),
            headers=self._auth(token),
        )
        try:
            return resp.json()
        except ValueError:
            raise TranslationServiceError("Manifest lookup", resp.status_code, "response is not JSON")

    def upload_and_translate(self, filename: str, data: bytes) -> dict[str, str]:
        token = self.request_access_token()
        self.ensure_bucket(token, self.bucket_key)
        object_key = generate_object_key(filename)
        self.put_object(token, self.bucket_key, object_key, data)
        urn = object_urn(self.bucket_key, object_key)
        self.submit_translation(token, urn)
        logger.info("Uploaded %s (%d bytes) as %s, translation submitted", filename, len(data), object_key)
        return {
            "bucketKey": self.bucket_key,
            "objectKey": object_key,
            "urn": urn,
            "status": "processing",
        }


def get_translation_client(request: Request) -> TranslationClient:
    return request.app.state.translation_client
