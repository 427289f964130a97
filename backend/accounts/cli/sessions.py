"""Flask CLI commands for managing refresh-token sessions."""

from __future__ import annotations

import logging

import click
from flask.cli import with_appcontext

from accounts.api.deps import auth_service
from accounts.repositories.user import UserRepository
from accounts.uow import SQLAlchemyReadOnlyUnitOfWork

LOGGER = logging.getLogger(__name__)


def _resolve_user_id(ref: str) -> int | None:
    """Accept a numeric id, a username or an email."""
    with SQLAlchemyReadOnlyUnitOfWork() as uow:
        users: UserRepository = uow.users
        user = users.get(int(ref)) if ref.isdigit() else None
        if user is None:
            user = users.find_by_login(username=ref, email=ref)
        return user.id if user is not None else None


@click.group("sessions")
def sessions_cli() -> None:
    """Manage refresh-token sessions."""


@sessions_cli.command("revoke")
@click.argument("user_ref")
@with_appcontext
def revoke(user_ref: str) -> None:
    """Force USER_REF (id, username or email) to sign in again."""
    user_id = _resolve_user_id(user_ref)
    if user_id is None:
        raise click.ClickException(f"No user matches {user_ref!r}")
    auth_service().logout(user_id)
    LOGGER.info("sessions.revoked", extra={"event": "auth.logout", "user_id": user_id})
    click.echo(f"Revoked refresh token of user {user_id}.")
