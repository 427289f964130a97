"""
accounts.services._shared.ports
===============================

Collection of *ports* (hexagonal interfaces) the services depend on.

Modules
-------
- :mod:`token_provider`:
    Defines :class:`~.TokenProvider`, abstraction for signing tokens and
    verifying refresh tokens.

- :mod:`refresh_token_store`:
    Defines :class:`~.RefreshTokenStore`, the per-user refresh-token slot
    with an atomic compare-and-swap.

- :mod:`image_uploader`:
    Defines :class:`~.ImageUploader` for avatar and cover-image hosting.

Concrete adapters (database, Redis, HTTP) live under ``accounts.infra``.
"""

from __future__ import annotations

from .image_uploader import ImageUploader, StubImageUploader, UploadedImage
from .refresh_token_store import InMemoryRefreshTokenStore, RefreshTokenStore
from .token_provider import StubTokenProvider, TokenProvider

__all__ = [
    "TokenProvider",
    "RefreshTokenStore",
    "ImageUploader",
    "UploadedImage",
    "InMemoryRefreshTokenStore",
    "StubTokenProvider",
    "StubImageUploader",
]
