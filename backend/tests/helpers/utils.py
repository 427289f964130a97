"""Tiny helpers shared across test modules."""

from __future__ import annotations

import io
from contextlib import contextmanager

# Smallest valid PNG header; the stub uploader never decodes it
PNG_BYTES = b"\x89PNG\r\n\x1a\n" + b"\x00" * 16


@contextmanager
def not_raises(exception: type[BaseException]):
    """Context manager asserting that an exception is *not* raised.

    Parameters
    ----------
    exception: type[BaseException]
        Exception type that should not be raised within the context.
    """
    try:
        yield
    except exception as exc:  # pragma: no cover
        raise AssertionError(f"Did raise {exception}: {exc}") from exc


def image_file(name: str = "avatar.png") -> tuple[io.BytesIO, str]:
    """Return a ``(stream, filename)`` pair usable in multipart test requests."""
    return io.BytesIO(PNG_BYTES), name


def registration_form(**overrides) -> dict:
    """Multipart body for ``POST /users/register`` with an avatar attached."""
    data = {
        "fullName": "Ada Lovelace",
        "email": "ada@example.com",
        "username": "Ada",
        "password": "analytical-engine",
        "avatar": image_file("avatar.png"),
    }
    data.update(overrides)
    return {k: v for k, v in data.items() if v is not None}
