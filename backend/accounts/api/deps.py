"""Shared API helpers: response envelope, auth guard and service wiring."""

from __future__ import annotations

import functools
import time
from collections.abc import Callable
from typing import Any, TypeVar, cast

from flask import Flask, Response, current_app, jsonify, request
from flask_jwt_extended import get_jwt_identity, verify_jwt_in_request

from accounts.api.cookies import CookieTransportConfig
from accounts.core.errors import Unauthorized
from accounts.services._shared.ports import (
    ImageUploader,
    RefreshTokenStore,
    StubImageUploader,
    TokenProvider,
)
from accounts.services.auth.dto import AuthTokenConfig
from accounts.services.auth.service import AuthService
from accounts.services.registration.service import UserRegistrationService

F = TypeVar("F", bound=Callable[..., Any])

REFRESH_STORE_KEY = "accounts.refresh_store"
UPLOADER_KEY = "accounts.image_uploader"
TOKEN_PROVIDER_KEY = "accounts.token_provider"


# --------------------------------------------------------------------------- #
# Responses
# --------------------------------------------------------------------------- #


def json_response(payload: Any, *, status: int = 200) -> Response:
    """Return a JSON response enforcing a consistent MIME type."""

    response = jsonify(payload)
    response.status_code = status
    return response


def api_response(data: Any, message: str = "Success", *, status: int = 200) -> Response:
    """Wrap ``data`` in the ``{statusCode, data, message, success}`` envelope."""

    return json_response(
        {"statusCode": status, "data": data, "message": message, "success": status < 400},
        status=status,
    )


def timing(func: F) -> F:
    """Decorator capturing handler execution time in milliseconds."""

    @functools.wraps(func)
    def wrapper(*args: Any, **kwargs: Any):
        start = time.perf_counter()
        try:
            return func(*args, **kwargs)
        finally:
            elapsed_ms = (time.perf_counter() - start) * 1000
            request_endpoint = getattr(request, "endpoint", None)
            current_app.logger.debug(
                "request.elapsed",
                extra={"endpoint": request_endpoint, "elapsed_ms": round(elapsed_ms, 2)},
            )

    return wrapper  # type: ignore[return-value]


# --------------------------------------------------------------------------- #
# Auth
# --------------------------------------------------------------------------- #


def require_auth(func: F) -> F:
    """Ensure the request carries a valid JWT access token (header or cookie)."""

    @functools.wraps(func)
    def wrapper(*args: Any, **kwargs: Any):
        verify_jwt_in_request(optional=False)
        return func(*args, **kwargs)

    return wrapper  # type: ignore[return-value]


def current_user_id() -> int:
    """Return the integer subject of the verified access token."""

    identity = get_jwt_identity()
    try:
        return int(identity)
    except (TypeError, ValueError) as exc:
        raise Unauthorized("Invalid access token") from exc


# --------------------------------------------------------------------------- #
# Service wiring
# --------------------------------------------------------------------------- #


def _build_refresh_store(app: Flask) -> RefreshTokenStore:
    kind = str(app.config.get("REFRESH_TOKEN_STORE", "database")).lower()
    if kind == "redis":
        from accounts.core.extensions import get_redis
        from accounts.infra.redis.redis_refresh_token_store import RedisRefreshTokenStore

        return RedisRefreshTokenStore(r=get_redis(), ttl=app.config["REFRESH_TOKEN_EXPIRES"])
    if kind == "database":
        from accounts.infra.sqlalchemy.user_refresh_token_store import (
            UserRecordRefreshTokenStore,
        )

        return UserRecordRefreshTokenStore()
    raise ValueError(f"Unknown REFRESH_TOKEN_STORE: {kind!r}")


def _build_uploader(app: Flask) -> ImageUploader:
    kind = str(app.config.get("IMAGE_UPLOADER", "cloudinary")).lower()
    if kind == "stub":
        return StubImageUploader()
    if kind == "cloudinary":
        from accounts.infra.uploads.cloudinary_uploader import CloudinaryImageUploader

        return CloudinaryImageUploader(
            cloud_name=app.config["CLOUDINARY_CLOUD_NAME"],
            api_key=app.config["CLOUDINARY_API_KEY"],
            api_secret=app.config["CLOUDINARY_API_SECRET"],
            timeout=float(app.config.get("IMAGE_UPLOAD_TIMEOUT", 30)),
        )
    raise ValueError(f"Unknown IMAGE_UPLOADER: {kind!r}")


def init_app(app: Flask) -> None:
    """Build the long-lived collaborators once and park them on the app.

    Tests may replace any of them through ``app.extensions``.
    """
    from accounts.infra.jwt.jwt_token_provider import JWTTokenProvider

    policy = str(app.config.get("LOGIN_IDENTIFIER_POLICY", "either")).lower()
    if policy not in ("either", "both"):
        raise ValueError(f"Unknown LOGIN_IDENTIFIER_POLICY: {policy!r}")
    # Fail at startup on a bad cookie configuration
    CookieTransportConfig.from_config(app.config)

    app.extensions[REFRESH_STORE_KEY] = _build_refresh_store(app)
    app.extensions[UPLOADER_KEY] = _build_uploader(app)
    app.extensions[TOKEN_PROVIDER_KEY] = JWTTokenProvider(
        refresh_secret=app.config["REFRESH_TOKEN_SECRET_KEY"],
        algorithm=app.config.get("JWT_ALGORITHM", "HS256"),
        refresh_expires=app.config["REFRESH_TOKEN_EXPIRES"],
    )


def cookie_config() -> CookieTransportConfig:
    return CookieTransportConfig.from_config(current_app.config)


def auth_service() -> AuthService:
    """Build an :class:`AuthService` for the current request."""

    cfg = current_app.config
    return AuthService(
        token_provider=cast(TokenProvider, current_app.extensions[TOKEN_PROVIDER_KEY]),
        refresh_store=cast(RefreshTokenStore, current_app.extensions[REFRESH_STORE_KEY]),
        token_cfg=AuthTokenConfig(
            access_expires=cfg["ACCESS_TOKEN_EXPIRES"],
            refresh_expires=cfg["REFRESH_TOKEN_EXPIRES"],
            login_identifier_policy=str(cfg.get("LOGIN_IDENTIFIER_POLICY", "either")).lower(),  # type: ignore[arg-type]
        ),
    )


def registration_service() -> UserRegistrationService:
    """Build a :class:`UserRegistrationService` for the current request."""

    return UserRegistrationService(
        uploader=cast(ImageUploader, current_app.extensions[UPLOADER_KEY]),
    )
