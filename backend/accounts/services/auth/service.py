# accounts/services/auth/service.py
from __future__ import annotations

import hmac
import logging
from typing import Any

from accounts.repositories.user import UserRepository
from accounts.services._shared.base import BaseService
from accounts.services._shared.errors import (
    AuthenticationError,
    NotFoundError,
    TokenIssueError,
    TokenVerificationError,
    ValidationFailedError,
)
from accounts.services._shared.ports.refresh_token_store import RefreshTokenStore
from accounts.services._shared.ports.token_provider import TokenProvider
from accounts.services.auth.dto import (
    AuthTokenConfig,
    LoginIn,
    LoginOut,
    RefreshIn,
    TokenPairOut,
    to_user_public,
)

log = logging.getLogger(__name__)

STALE_REFRESH_MESSAGE = "Refresh token is expired or used"


class AuthService(BaseService):
    """
    Authentication lifecycle service (login / logout / refresh).

    Each user owns one refresh-token slot. Login overwrites it, logout empties
    it and a refresh rotates it with an atomic compare-and-swap, so a
    refresh token is accepted at most once.
    """

    def __init__(
        self,
        *,
        token_provider: TokenProvider,
        refresh_store: RefreshTokenStore,
        token_cfg: AuthTokenConfig | None = None,
    ) -> None:
        """
        Initialize the service with its dependencies.

        :param token_provider: Adapter for signing/verifying JWTs.
        :param refresh_store: Per-user refresh-token slot.
        :param token_cfg: Lifetimes and login identifier policy.
        """
        super().__init__()
        self.tokens = token_provider
        self.refresh_store = refresh_store
        self.cfg = token_cfg or AuthTokenConfig()

    # ------------------------------------------------------------------ #
    # Token pair issuance
    # ------------------------------------------------------------------ #

    def issue_tokens(self, user_id: int, *, replaces: str | None = None) -> TokenPairOut:
        """
        Sign a new access/refresh pair and persist the refresh token.

        :param user_id: Owner of the pair.
        :param replaces: Refresh token the new one must replace. ``None``
            overwrites the slot unconditionally (login).
        :returns: The new token pair.
        :raises TokenIssueError: When loading, signing or persisting fails.
            The original exception is kept as ``__cause__``.
        :raises AuthenticationError: When ``replaces`` is no longer the
            stored token (a concurrent refresh won).
        """
        try:
            with self.ro_uow() as uow:
                repo: UserRepository = uow.users
                user = repo.get(user_id)
                if user is None:
                    raise LookupError(f"User {user_id} not found")
                claims: dict[str, Any] = {
                    "username": user.username,
                    "email": user.email,
                    "full_name": user.full_name,
                }

            access = self.tokens.create_access_token(
                identity=user_id,
                additional_claims=claims,
                expires_delta=self.cfg.access_expires,
            )
            refresh = self.tokens.create_refresh_token(
                identity=user_id,
                expires_delta=self.cfg.refresh_expires,
            )

            if replaces is None:
                self.refresh_store.store(user_id, refresh)
                swapped = True
            else:
                swapped = self.refresh_store.compare_and_swap(user_id, replaces, refresh)
        except Exception as exc:
            log.error(
                "auth.token_issue_failed",
                extra={"event": "auth.token_issue", "user_id": user_id},
                exc_info=True,
            )
            raise TokenIssueError() from exc

        if not swapped:
            log.warning(
                "auth.refresh_race_lost",
                extra={"event": "auth.refresh", "user_id": user_id},
            )
            raise AuthenticationError(STALE_REFRESH_MESSAGE)

        return TokenPairOut(access_token=access, refresh_token=refresh)

    # ------------------------------------------------------------------ #
    # Login
    # ------------------------------------------------------------------ #

    def login(self, dto: LoginIn) -> LoginOut:
        """
        Authenticate credentials and issue a fresh token pair.

        :param dto: Login input.
        :returns: Public user projection plus the token pair.
        :raises ValidationFailedError: Identifiers missing per the policy.
        :raises NotFoundError: No user matches the username or email.
        :raises AuthenticationError: The password does not match.
        """
        if self._identifiers_missing(dto):
            raise ValidationFailedError("Email or username field is missing")

        with self.ro_uow() as uow:
            repo: UserRepository = uow.users
            user = repo.find_by_login(username=dto.username, email=dto.email)
            if user is None:
                log.warning("auth.login_unknown_user", extra={"event": "auth.login"})
                raise NotFoundError("User does not exist")
            if not user.verify_password(dto.password):
                log.warning(
                    "auth.login_bad_password",
                    extra={"event": "auth.login", "user_id": user.id},
                )
                raise AuthenticationError("Invalid user credentials")
            public = to_user_public(user)

        tokens = self.issue_tokens(public.id)
        log.info("auth.login", extra={"event": "auth.login", "user_id": public.id})
        return LoginOut(user=public, tokens=tokens)

    def _identifiers_missing(self, dto: LoginIn) -> bool:
        has_username = bool(dto.username and dto.username.strip())
        has_email = bool(dto.email and dto.email.strip())
        if self.cfg.login_identifier_policy == "both":
            return not (has_username and has_email)
        return not (has_username or has_email)

    # ------------------------------------------------------------------ #
    # Logout
    # ------------------------------------------------------------------ #

    def logout(self, user_id: int) -> None:
        """Empty the user's refresh-token slot. Safe to call repeatedly."""
        self.refresh_store.clear(user_id)
        log.info("auth.logout", extra={"event": "auth.logout", "user_id": user_id})

    # ------------------------------------------------------------------ #
    # Refresh with rotation
    # ------------------------------------------------------------------ #

    def renew(self, dto: RefreshIn) -> TokenPairOut:
        """
        Rotate a refresh token and emit a new token pair.

        :raises AuthenticationError: Missing, unverifiable, unknown-owner or
            stale refresh token. The slot is left untouched.
        """
        incoming = dto.refresh_token
        if not incoming:
            raise AuthenticationError("Unauthorized request")

        try:
            payload = self.tokens.decode_refresh_token(incoming)
        except TokenVerificationError as exc:
            log.warning("auth.refresh_rejected reason=%s", exc.reason, extra={"event": "auth.refresh"})
            raise AuthenticationError(exc.reason) from exc

        user_id = self._coerce_user_id(payload.get("sub"))
        with self.ro_uow() as uow:
            repo: UserRepository = uow.users
            if repo.get(user_id) is None:
                raise AuthenticationError("Invalid refresh token")

        stored = self.refresh_store.read(user_id)
        if stored is None or not hmac.compare_digest(stored.encode(), incoming.encode()):
            log.warning(
                "auth.refresh_stale",
                extra={"event": "auth.refresh", "user_id": user_id},
            )
            raise AuthenticationError(STALE_REFRESH_MESSAGE)

        tokens = self.issue_tokens(user_id, replaces=incoming)
        log.info("auth.refresh", extra={"event": "auth.refresh", "user_id": user_id})
        return tokens

    # ------------------------------------------------------------------ #
    # Utilities
    # ------------------------------------------------------------------ #

    @staticmethod
    def _coerce_user_id(subject: Any) -> int:
        """Ensure the JWT subject can be treated as an integer user id."""
        if isinstance(subject, int) and not isinstance(subject, bool):
            return subject
        if isinstance(subject, str) and subject.isdigit():
            return int(subject)
        raise AuthenticationError("Invalid refresh token")
