"""Tests for the JWT adapter (access via Flask-JWT-Extended, refresh via PyJWT)."""

from __future__ import annotations

from datetime import timedelta

import jwt
import pytest
from flask_jwt_extended import decode_token

from accounts.infra.jwt.jwt_token_provider import JWTTokenProvider
from accounts.services._shared.errors import TokenVerificationError

REFRESH_SECRET = "unit-refresh-secret"


@pytest.fixture()
def provider() -> JWTTokenProvider:
    return JWTTokenProvider(refresh_secret=REFRESH_SECRET, refresh_expires=timedelta(days=10))


class TestAccessTokens:
    def test_access_token_is_verifiable_by_the_extension(self, app, provider):
        with app.app_context():
            token = provider.create_access_token(
                identity=12, additional_claims={"username": "judy"}
            )
            claims = decode_token(token)
        assert claims["sub"] == "12"
        assert claims["type"] == "access"
        assert claims["username"] == "judy"

    def test_access_token_uses_the_access_secret(self, app, provider):
        with app.app_context():
            token = provider.create_access_token(identity=12)
        with pytest.raises(jwt.InvalidSignatureError):
            jwt.decode(token, REFRESH_SECRET, algorithms=["HS256"])


class TestRefreshTokens:
    def test_round_trip(self, provider):
        token = provider.create_refresh_token(identity=3)
        claims = provider.decode_refresh_token(token)
        assert claims["sub"] == "3"
        assert claims["type"] == "refresh"
        assert claims["exp"] - claims["iat"] == 10 * 24 * 3600

    def test_tokens_are_unique_within_the_same_second(self, provider):
        assert provider.create_refresh_token(identity=3) != provider.create_refresh_token(identity=3)

    def test_expired(self, provider, freeze_time):
        with freeze_time("2030-01-01 00:00:00"):
            token = provider.create_refresh_token(identity=3)
        with freeze_time("2030-01-11 00:00:01"):
            with pytest.raises(TokenVerificationError, match="Token has expired"):
                provider.decode_refresh_token(token)

    def test_wrong_secret(self, provider):
        forged = JWTTokenProvider(refresh_secret="other-secret").create_refresh_token(identity=3)
        with pytest.raises(TokenVerificationError, match="Invalid refresh token") as exc_info:
            provider.decode_refresh_token(forged)
        assert isinstance(exc_info.value.__cause__, jwt.InvalidSignatureError)

    def test_access_token_rejected_as_refresh(self, app, provider):
        with app.app_context():
            app.config["JWT_SECRET_KEY"], original = REFRESH_SECRET, app.config["JWT_SECRET_KEY"]
            try:
                access = provider.create_access_token(identity=3)
            finally:
                app.config["JWT_SECRET_KEY"] = original
        with pytest.raises(TokenVerificationError, match="Wrong token type"):
            provider.decode_refresh_token(access)

    def test_garbage(self, provider):
        with pytest.raises(TokenVerificationError):
            provider.decode_refresh_token("not.a.jwt")
