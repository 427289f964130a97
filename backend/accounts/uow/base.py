"""Abstract Unit of Work contract."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from accounts.repositories import UserRepository


class UnitOfWork(ABC):
    """
    Transactional boundary for one account use-case.

    Repositories exposed on the instance share one session, so every
    read and write inside the ``with`` block lands in the same transaction.
    """

    users: UserRepository

    @abstractmethod
    def __enter__(self) -> UnitOfWork: ...
    @abstractmethod
    def __exit__(self, exc_type, exc, tb) -> None: ...
    @abstractmethod
    def commit(self) -> None: ...
    @abstractmethod
    def rollback(self) -> None: ...
