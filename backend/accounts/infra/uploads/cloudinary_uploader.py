"""HTTP image uploader speaking the Cloudinary upload API."""

from __future__ import annotations

import hashlib
import logging
import os
import time
from pathlib import Path

import requests

from accounts.services._shared.ports import ImageUploader, UploadedImage

log = logging.getLogger(__name__)

DEFAULT_API_BASE = "https://api.cloudinary.com/v1_1"


class CloudinaryImageUploader(ImageUploader):
    """
    Signed upload of a staged local file.

    The local file is removed after every attempt, successful or not.
    Failures are logged and reported as ``None``; the caller decides whether
    a missing image is fatal.
    """

    def __init__(
        self,
        *,
        cloud_name: str,
        api_key: str,
        api_secret: str,
        timeout: float = 15.0,
        api_base: str = DEFAULT_API_BASE,
        session: requests.Session | None = None,
    ) -> None:
        self.cloud_name = cloud_name
        self.api_key = api_key
        self.api_secret = api_secret
        self.timeout = timeout
        self.api_base = api_base.rstrip("/")
        self.http = session or requests.Session()

    @property
    def upload_url(self) -> str:
        return f"{self.api_base}/{self.cloud_name}/auto/upload"

    def sign(self, params: dict[str, str]) -> str:
        """Return the SHA-1 signature of the sorted ``params`` plus the secret."""
        to_sign = "&".join(f"{k}={params[k]}" for k in sorted(params))
        return hashlib.sha1(f"{to_sign}{self.api_secret}".encode()).hexdigest()

    def upload(self, local_path: str | os.PathLike[str] | None) -> UploadedImage | None:
        if not local_path:
            return None
        path = Path(local_path)
        try:
            params = {"timestamp": str(int(time.time()))}
            data = {**params, "api_key": self.api_key, "signature": self.sign(params)}
            with path.open("rb") as fh:
                resp = self.http.post(
                    self.upload_url,
                    data=data,
                    files={"file": (path.name, fh)},
                    timeout=self.timeout,
                )
            resp.raise_for_status()
            body = resp.json()
            url = body.get("secure_url") or body.get("url")
            if not url:
                log.warning("image.upload_no_url", extra={"event": "image.upload"})
                return None
            log.info("image.uploaded", extra={"event": "image.upload"})
            return UploadedImage(url=url, public_id=body.get("public_id"))
        except (OSError, ValueError, requests.RequestException):
            log.warning("image.upload_failed path=%s", path.name, exc_info=True)
            return None
        finally:
            path.unlink(missing_ok=True)
