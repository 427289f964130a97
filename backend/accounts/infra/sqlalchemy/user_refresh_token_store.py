# accounts/infra/sqlalchemy/user_refresh_token_store.py
from __future__ import annotations

from collections.abc import Callable

from accounts.services._shared.ports import RefreshTokenStore
from accounts.uow import SQLAlchemyReadOnlyUnitOfWork, SQLAlchemyUnitOfWork, UnitOfWork


class UserRecordRefreshTokenStore(RefreshTokenStore):
    """
    Refresh-token slot kept in the ``users.refresh_token`` column.

    Each call runs in its own Unit of Work. The swap is a single conditional
    ``UPDATE ... WHERE refresh_token = :expected``, so the database decides
    which of two concurrent rotations wins.

    :param uow_factory: Builds the read-write UoW (injectable for tests).
    :param ro_uow_factory: Builds the read-only UoW used by :meth:`read`.
    """

    def __init__(
        self,
        *,
        uow_factory: Callable[[], UnitOfWork] = SQLAlchemyUnitOfWork,
        ro_uow_factory: Callable[[], UnitOfWork] = SQLAlchemyReadOnlyUnitOfWork,
    ) -> None:
        self._uow = uow_factory
        self._ro_uow = ro_uow_factory

    def read(self, user_id: int) -> str | None:
        with self._ro_uow() as uow:
            return uow.users.get_refresh_token(int(user_id))

    def store(self, user_id: int, token: str) -> None:
        with self._uow() as uow:
            if not uow.users.set_refresh_token(int(user_id), token):
                raise LookupError(f"User {user_id} not found")

    def compare_and_swap(self, user_id: int, expected: str, new: str) -> bool:
        with self._uow() as uow:
            return uow.users.swap_refresh_token(int(user_id), expected, new)

    def clear(self, user_id: int) -> None:
        with self._uow() as uow:
            uow.users.set_refresh_token(int(user_id), None)
