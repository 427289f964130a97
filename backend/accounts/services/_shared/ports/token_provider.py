from __future__ import annotations

from datetime import UTC, datetime, timedelta
from typing import Any, Protocol

from accounts.services._shared.errors import TokenVerificationError


class TokenProvider(Protocol):
    """Port for signing access/refresh tokens and verifying refresh tokens."""

    def create_access_token(
        self,
        *,
        identity: int | str,
        additional_claims: dict[str, Any] | None = None,
        expires_delta: timedelta | None = None,
    ) -> str: ...

    def create_refresh_token(
        self,
        *,
        identity: int | str,
        expires_delta: timedelta | None = None,
    ) -> str: ...

    def decode_refresh_token(self, token: str) -> dict[str, Any]:
        """
        Verify signature, expiry and token type.

        :raises TokenVerificationError: With a short human-readable reason.
        """
        ...


class StubTokenProvider(TokenProvider):
    """Deterministic token provider used in unit tests.

    Every token is unique (a sequence number is embedded), so two refresh
    tokens issued for the same user never compare equal.
    """

    def __init__(self) -> None:
        self._seq = 0
        self._issued: dict[str, dict[str, Any]] = {}

    def _mk(
        self,
        *,
        identity: int | str,
        ttype: str,
        exp_delta: timedelta,
        additional_claims: dict[str, Any] | None = None,
    ) -> str:
        self._seq += 1
        token = f"{ttype}.{identity}.{self._seq}"
        payload: dict[str, Any] = {
            "sub": str(identity),
            "type": ttype,
            "jti": f"jti-{self._seq}",
            "exp": int((datetime.now(tz=UTC) + exp_delta).timestamp()),
        }
        if additional_claims:
            payload.update(additional_claims)
        self._issued[token] = payload
        return token

    def create_access_token(
        self,
        *,
        identity: int | str,
        additional_claims: dict[str, Any] | None = None,
        expires_delta: timedelta | None = None,
    ) -> str:
        return self._mk(
            identity=identity,
            ttype="access",
            exp_delta=expires_delta or timedelta(days=1),
            additional_claims=additional_claims,
        )

    def create_refresh_token(
        self,
        *,
        identity: int | str,
        expires_delta: timedelta | None = None,
    ) -> str:
        return self._mk(
            identity=identity,
            ttype="refresh",
            exp_delta=expires_delta or timedelta(days=10),
        )

    def decode(self, token: str) -> dict[str, Any]:
        """Return the claims of any issued token without verification."""
        return self._issued[token]

    def decode_refresh_token(self, token: str) -> dict[str, Any]:
        payload = self._issued.get(token)
        if payload is None:
            raise TokenVerificationError("Invalid token")
        if payload["type"] != "refresh":
            raise TokenVerificationError("Wrong token type")
        if payload["exp"] <= int(datetime.now(tz=UTC).timestamp()):
            raise TokenVerificationError("Token has expired")
        return payload
