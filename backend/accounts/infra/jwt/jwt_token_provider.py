# accounts/infra/jwt/jwt_token_provider.py
from __future__ import annotations

import uuid
from dataclasses import dataclass
from datetime import UTC, datetime, timedelta
from typing import Any, cast

import jwt

from accounts.services._shared.errors import TokenVerificationError
from accounts.services._shared.ports import TokenProvider

REFRESH_TOKEN_TYPE = "refresh"


@dataclass(slots=True)
class JWTTokenProvider(TokenProvider):
    """
    Sign access tokens with Flask-JWT-Extended and refresh tokens with PyJWT.

    Access tokens go through the extension so ``verify_jwt_in_request``
    accepts them on protected routes. Refresh tokens are signed with their
    own secret, which the extension cannot do per token type.

    :param refresh_secret: Key for refresh tokens (``REFRESH_TOKEN_SECRET_KEY``).
    :param algorithm: JWS algorithm shared by both token kinds.
    :param refresh_expires: Default refresh lifetime.

    .. note::
       ``create_access_token`` requires an active Flask app context.
    """

    refresh_secret: str
    algorithm: str = "HS256"
    refresh_expires: timedelta = timedelta(days=10)

    def create_access_token(
        self,
        *,
        identity: str | int,
        additional_claims: dict[str, Any] | None = None,
        expires_delta: timedelta | None = None,
    ) -> str:
        from flask_jwt_extended import create_access_token as _create_access

        return cast(
            str,
            _create_access(
                identity=str(identity),
                additional_claims=additional_claims or {},
                expires_delta=expires_delta,
            ),
        )

    def create_refresh_token(
        self,
        *,
        identity: str | int,
        expires_delta: timedelta | None = None,
    ) -> str:
        now = datetime.now(UTC)
        payload = {
            "sub": str(identity),
            "iat": int(now.timestamp()),
            "exp": int((now + (expires_delta or self.refresh_expires)).timestamp()),
            "type": REFRESH_TOKEN_TYPE,
            # Random id keeps two tokens minted in the same second distinct.
            "jti": uuid.uuid4().hex,
        }
        return jwt.encode(payload, self.refresh_secret, algorithm=self.algorithm)

    def decode_refresh_token(self, token: str) -> dict[str, Any]:
        try:
            decoded = cast(
                dict[str, Any],
                jwt.decode(
                    token,
                    self.refresh_secret,
                    algorithms=[self.algorithm],
                    options={"require": ["sub", "exp"]},
                ),
            )
        except jwt.ExpiredSignatureError as exc:
            raise TokenVerificationError("Token has expired") from exc
        except jwt.InvalidTokenError as exc:
            raise TokenVerificationError(f"Invalid refresh token: {exc}") from exc

        if decoded.get("type") != REFRESH_TOKEN_TYPE:
            raise TokenVerificationError("Wrong token type")
        return decoded
