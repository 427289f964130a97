"""Cookie transport for the access/refresh token pair."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from enum import Enum
from typing import Any

from flask import Response

ACCESS_COOKIE = "accessToken"
REFRESH_COOKIE = "refreshToken"


class SameSitePolicy(str, Enum):
    """Values accepted by the ``SameSite`` cookie attribute."""

    LAX = "Lax"
    STRICT = "Strict"
    NONE = "None"

    @classmethod
    def parse(cls, raw: str | None) -> SameSitePolicy:
        """Parse a case-insensitive config value; unknown values raise ``ValueError``."""
        value = (raw or "lax").strip().lower()
        for member in cls:
            if member.value.lower() == value:
                return member
        raise ValueError(f"Unsupported SameSite policy: {raw!r}")


@dataclass(frozen=True, slots=True)
class CookieTransportConfig:
    """
    Attributes shared by both auth cookies.

    :param http_only: Hide the cookies from page scripts.
    :param secure_only: Send the cookies over HTTPS only.
    :param same_site: ``SameSite`` policy.
    """

    http_only: bool = True
    secure_only: bool = True
    same_site: SameSitePolicy = SameSitePolicy.LAX

    @classmethod
    def from_config(cls, config: Mapping[str, Any]) -> CookieTransportConfig:
        same_site = SameSitePolicy.parse(config.get("AUTH_COOKIE_SAMESITE"))
        secure = bool(config.get("AUTH_COOKIE_SECURE", True))
        if same_site is SameSitePolicy.NONE and not secure:
            # Browsers drop SameSite=None cookies that are not Secure
            raise ValueError("AUTH_COOKIE_SAMESITE=None requires AUTH_COOKIE_SECURE")
        return cls(
            http_only=bool(config.get("AUTH_COOKIE_HTTPONLY", True)),
            secure_only=secure,
            same_site=same_site,
        )

    def options(self) -> dict[str, Any]:
        """Keyword arguments for ``Response.set_cookie``/``delete_cookie``."""
        return {
            "httponly": self.http_only,
            "secure": self.secure_only,
            "samesite": self.same_site.value,
            "path": "/",
        }


def set_auth_cookies(
    response: Response, *, access_token: str, refresh_token: str, cfg: CookieTransportConfig
) -> Response:
    """Attach both tokens as session cookies."""
    opts = cfg.options()
    response.set_cookie(ACCESS_COOKIE, access_token, **opts)
    response.set_cookie(REFRESH_COOKIE, refresh_token, **opts)
    return response


def clear_auth_cookies(response: Response, *, cfg: CookieTransportConfig) -> Response:
    """Expire both cookies using the same attributes they were set with."""
    opts = cfg.options()
    response.delete_cookie(ACCESS_COOKIE, **opts)
    response.delete_cookie(REFRESH_COOKIE, **opts)
    return response
