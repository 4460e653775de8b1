# src/providers/adapters/cloudinary_adapter.py - v1
"""Cloudinary image host adapter using the signed upload HTTP API."""

from __future__ import annotations

import base64
import hashlib
import time

import httpx

from sproutintel.core.errors import UploadFailed
from sproutintel.core.models import RawImage, ResolvedImage
from sproutintel.providers.base import ImageHost
from sproutintel.providers.guard import raise_for_status

_PROVIDER = "cloudinary"
_API_BASE = "https://api.cloudinary.com/v1_1"
_THUMBNAIL_TRANSFORM = "c_thumb,w_300"


def sign_params(params: dict[str, str], api_secret: str) -> str:
    """SHA-1 signature over the sorted upload parameters plus the secret."""
    to_sign = "&".join(f"{k}={params[k]}" for k in sorted(params) if params[k] != "")
    return hashlib.sha1((to_sign + api_secret).encode("utf-8")).hexdigest()  # noqa: S324


def thumbnail_url(secure_url: str) -> str:
    """Delivery URL of a thumbnail derived on the fly from secure_url."""
    marker = "/upload/"
    if marker not in secure_url:
        return secure_url
    head, tail = secure_url.split(marker, 1)
    return f"{head}{marker}{_THUMBNAIL_TRANSFORM}/{tail}"


class CloudinaryAdapter(ImageHost):
    """Upload generated images into a Cloudinary folder."""

    def __init__(
        self,
        cloud_name: str = "",
        api_key: str = "",
        api_secret: str = "",
        folder: str = "ai_generated_products",
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self._cloud_name = cloud_name
        self._api_key = api_key
        self._api_secret = api_secret
        self._folder = folder
        self._transport = transport

    @property
    def provider_name(self) -> str:
        return _PROVIDER

    async def upload(self, image: RawImage, public_id: str) -> ResolvedImage:
        params = {
            "folder": self._folder,
            "public_id": public_id,
            "timestamp": str(int(time.time())),
        }
        data_uri = f"data:{image.mime_type};base64,{base64.b64encode(image.data).decode()}"
        form = {
            **params,
            "file": data_uri,
            "api_key": self._api_key,
            "signature": sign_params(params, self._api_secret),
        }

        url = f"{_API_BASE}/{self._cloud_name}/image/upload"
        async with httpx.AsyncClient(transport=self._transport) as client:
            response = await client.post(url, data=form)

        raise_for_status(_PROVIDER, response, error_cls=UploadFailed)
        try:
            secure_url = response.json()["secure_url"]
        except (ValueError, KeyError, TypeError) as e:
            raise UploadFailed(_PROVIDER, f"malformed response: {e}", "parse_error") from e

        return ResolvedImage(
            url=secure_url,
            thumbnail_url=thumbnail_url(secure_url),
            descriptor=public_id,
        )
