from __future__ import annotations

import threading
from typing import Protocol


class RefreshTokenStore(Protocol):
    """
    Per-user slot holding the single currently valid refresh token.

    ``compare_and_swap`` MUST be atomic: of two concurrent swaps with the
    same ``expected`` value at most one returns ``True``.
    """

    def read(self, user_id: int) -> str | None:
        """Return the stored token, ``None`` when the slot is empty."""

    def store(self, user_id: int, token: str) -> None:
        """Overwrite the slot unconditionally."""

    def compare_and_swap(self, user_id: int, expected: str, new: str) -> bool:
        """Replace ``expected`` with ``new``. :returns: False if the slot held anything else."""

    def clear(self, user_id: int) -> None:
        """Empty the slot. Idempotent."""


class InMemoryRefreshTokenStore(RefreshTokenStore):
    """
    Dict-backed slot store.

    .. note::
       A single lock guards every operation, which makes the swap atomic
       across threads.
    """

    def __init__(self) -> None:
        self._slots: dict[int, str] = {}
        self._lock = threading.Lock()

    def read(self, user_id: int) -> str | None:
        with self._lock:
            return self._slots.get(int(user_id))

    def store(self, user_id: int, token: str) -> None:
        with self._lock:
            self._slots[int(user_id)] = token

    def compare_and_swap(self, user_id: int, expected: str, new: str) -> bool:
        with self._lock:
            if self._slots.get(int(user_id)) != expected:
                return False
            self._slots[int(user_id)] = new
            return True

    def clear(self, user_id: int) -> None:
        with self._lock:
            self._slots.pop(int(user_id), None)
