# accounts/services/auth/dto.py
from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Literal

LoginIdentifierPolicy = Literal["either", "both"]

# ---------------------------- Input DTOs ---------------------------------- #


@dataclass(frozen=True, slots=True)
class LoginIn:
    """
    Input DTO for login.

    :param password: Raw password (to be verified).
    :type password: str
    :param username: Username, may be omitted when ``email`` is given.
    :type username: str | None
    :param email: Email, may be omitted when ``username`` is given.
    :type email: str | None
    """

    password: str
    username: str | None = None
    email: str | None = None


@dataclass(frozen=True, slots=True)
class RefreshIn:
    """
    Input DTO for token refresh.

    :param refresh_token: Encoded refresh JWT (``None`` when the client sent none).
    :type refresh_token: str | None
    """

    refresh_token: str | None


# --------------------------- Output DTOs ---------------------------------- #


@dataclass(frozen=True, slots=True)
class UserPublicOut:
    """Public projection of a user: never carries the password or refresh token."""

    id: int
    username: str
    email: str
    full_name: str
    avatar: str
    cover_image: str
    created_at: datetime | None = None
    updated_at: datetime | None = None


@dataclass(frozen=True, slots=True)
class TokenPairOut:
    """
    Output DTO with access and refresh tokens.

    :param access_token: Encoded access JWT.
    :type access_token: str
    :param refresh_token: Encoded refresh JWT.
    :type refresh_token: str
    """

    access_token: str
    refresh_token: str


@dataclass(frozen=True, slots=True)
class LoginOut:
    user: UserPublicOut
    tokens: TokenPairOut


# ------------------------ Config DTO ------------------------------------- #


@dataclass(frozen=True, slots=True)
class AuthTokenConfig:
    """
    Token emission and login configuration.

    :param access_expires: Access token lifetime.
    :type access_expires: timedelta
    :param refresh_expires: Refresh token lifetime.
    :type refresh_expires: timedelta
    :param login_identifier_policy: ``"either"`` accepts username or email,
        ``"both"`` demands both.
    :type login_identifier_policy: str
    """

    access_expires: timedelta = timedelta(days=1)
    refresh_expires: timedelta = timedelta(days=10)
    login_identifier_policy: LoginIdentifierPolicy = "either"


def to_user_public(user) -> UserPublicOut:
    """
    Map ORM ``User`` to :class:`UserPublicOut`.

    :param user: ORM user instance.
    :type user: :class:`accounts.models.user.User`
    :rtype: :class:`UserPublicOut`
    """
    return UserPublicOut(
        id=user.id,
        username=user.username,
        email=user.email,
        full_name=user.full_name,
        avatar=user.avatar,
        cover_image=user.cover_image or "",
        created_at=getattr(user, "created_at", None),
        updated_at=getattr(user, "updated_at", None),
    )
