"""Service layer public API.

Re-exports
----------
- Base primitives (from ``accounts.services._shared.base``)
    * :class:`BaseService`

- Auth service (from ``accounts.services.auth``)
    * :class:`AuthService`
    * DTOs: :class:`LoginIn`, :class:`LoginOut`, :class:`RefreshIn`,
      :class:`TokenPairOut`, :class:`UserPublicOut`, :class:`AuthTokenConfig`

- Registration service (from ``accounts.services.registration``)
    * :class:`UserRegistrationService`
    * DTOs: :class:`UserRegistrationIn`, :class:`RegistrationFiles`
"""

from __future__ import annotations

from ._shared.base import BaseService
from .auth.dto import (
    AuthTokenConfig,
    LoginIn,
    LoginOut,
    RefreshIn,
    TokenPairOut,
    UserPublicOut,
)
from .auth.service import AuthService
from .registration.dto import RegistrationFiles, UserRegistrationIn
from .registration.service import UserRegistrationService

__all__ = [
    # Base
    "BaseService",
    # Auth
    "AuthService",
    "AuthTokenConfig",
    "LoginIn",
    "LoginOut",
    "RefreshIn",
    "TokenPairOut",
    "UserPublicOut",
    # Registration
    "UserRegistrationService",
    "UserRegistrationIn",
    "RegistrationFiles",
]
