"""Staging of multipart image uploads to the local temp directory."""

from __future__ import annotations

import logging
import uuid
from collections.abc import Iterable
from pathlib import Path

from flask import current_app
from werkzeug.datastructures import FileStorage
from werkzeug.utils import secure_filename

from accounts.core.errors import BadRequest

log = logging.getLogger(__name__)


def _temp_dir() -> Path:
    path = Path(current_app.config.get("UPLOAD_TEMP_DIR") or "./public/temp")
    path.mkdir(parents=True, exist_ok=True)
    return path


def stage_upload(file: FileStorage | None, *, field: str) -> str | None:
    """
    Save an uploaded image under ``UPLOAD_TEMP_DIR`` with a random name.

    :param file: Werkzeug file from ``request.files`` (``None`` when absent).
    :param field: Form field name, used in error messages.
    :returns: Local path of the staged file, ``None`` when nothing was sent.
    :raises BadRequest: When the extension is not an allowed image type.
    """
    if file is None or not file.filename:
        return None

    ext = Path(secure_filename(file.filename)).suffix.lower()
    allowed = current_app.config.get("ALLOWED_IMAGE_EXTENSIONS") or frozenset()
    if ext not in allowed:
        raise BadRequest(
            f"Unsupported file type for '{field}'",
            details={"allowed": sorted(allowed)},
        )

    target = _temp_dir() / f"{uuid.uuid4().hex}{ext}"
    file.save(target)
    return str(target)


def discard(paths: Iterable[str | None]) -> None:
    """Remove staged files the uploader never consumed."""
    for raw in paths:
        if not raw:
            continue
        try:
            Path(raw).unlink(missing_ok=True)
        except OSError:
            log.warning("upload.cleanup_failed path=%s", raw, exc_info=True)
