"""User repository: lookups and the refresh-token slot writes."""

from __future__ import annotations

from typing import cast

from sqlalchemy import or_, select, update

from accounts.models.user import User
from accounts.repositories.base import BaseRepository


def _norm(value: str | None) -> str | None:
    """Lower-case and trim a lookup key; blank values become ``None``."""
    if value is None:
        return None
    v = value.strip().lower()
    return v or None


class UserRepository(BaseRepository[User]):
    """Persistence-only repository for :class:`User`.

    It never signs tokens: it only stores and compares the refresh-token
    string the service hands over.
    """

    model = User

    # ---------------------------- Lookup helpers ----------------------------

    def get_by_email(self, email: str) -> User | None:
        """Fetch a user by email (case-insensitive)."""
        stmt = select(User).where(User.email == _norm(email))
        return cast(User | None, self.session.execute(stmt).scalars().first())

    def get_by_username(self, username: str) -> User | None:
        """Fetch a user by username (case-insensitive)."""
        stmt = select(User).where(User.username == _norm(username))
        return cast(User | None, self.session.execute(stmt).scalars().first())

    def find_by_login(self, *, username: str | None, email: str | None) -> User | None:
        """Fetch the first user matching the username OR the email.

        :param username: Candidate username (may be ``None``).
        :type username: str | None
        :param email: Candidate email (may be ``None``).
        :type email: str | None
        :returns: Matching user or ``None`` (also when both keys are blank).
        :rtype: User | None
        """
        clauses = []
        if (u := _norm(username)) is not None:
            clauses.append(User.username == u)
        if (e := _norm(email)) is not None:
            clauses.append(User.email == e)
        if not clauses:
            return None
        stmt = select(User).where(or_(*clauses)).order_by(User.id)
        return cast(User | None, self.session.execute(stmt).scalars().first())

    def exists_by_username_or_email(self, *, username: str, email: str) -> bool:
        """Return ``True`` when either key is already taken."""
        stmt = (
            select(User.id)
            .where(or_(User.username == _norm(username), User.email == _norm(email)))
            .limit(1)
        )
        return self.session.execute(stmt).first() is not None

    # ---------------------------- Refresh-token slot ----------------------------

    def get_refresh_token(self, user_id: int) -> str | None:
        """Return the stored refresh token (``None`` when absent or no user)."""
        stmt = select(User.refresh_token).where(User.id == user_id)
        return cast(str | None, self.session.execute(stmt).scalar_one_or_none())

    def set_refresh_token(self, user_id: int, token: str | None) -> bool:
        """Overwrite the slot unconditionally (``None`` clears it).

        Writes only the slot column, skipping the model validators.

        :returns: ``True`` when a row was updated.
        :rtype: bool
        """
        stmt = update(User).where(User.id == user_id).values(refresh_token=token)
        result = self.session.execute(stmt)
        return bool(result.rowcount == 1)

    def swap_refresh_token(self, user_id: int, expected: str, new: str) -> bool:
        """Atomically replace ``expected`` with ``new``.

        A single conditional ``UPDATE`` so two concurrent rotations of the
        same token cannot both succeed.

        :returns: ``True`` when the stored value matched and was replaced.
        :rtype: bool
        """
        stmt = (
            update(User)
            .where(User.id == user_id, User.refresh_token == expected)
            .values(refresh_token=new)
        )
        result = self.session.execute(stmt)
        return bool(result.rowcount == 1)
