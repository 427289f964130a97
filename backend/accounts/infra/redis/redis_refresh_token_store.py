# comments in English; reST docstrings
from __future__ import annotations

from dataclasses import dataclass
from datetime import timedelta

import redis  # type: ignore[import-untyped]

from accounts.services._shared.ports import RefreshTokenStore


@dataclass(slots=True)
class RedisRefreshTokenStore(RefreshTokenStore):
    """
    Redis-backed refresh-token slot, one string key per user.

    :param r: A Redis client (already connected).
    :param ttl: Key lifetime; matches the refresh-token lifetime so an
        abandoned slot disappears together with its token.
    """

    r: redis.Redis
    ttl: timedelta | None = None

    @staticmethod
    def _k(user_id: int | str) -> str:
        return f"rt:slot:{user_id}"

    @staticmethod
    def _s(value: bytes | str | None) -> str | None:
        if value is None:
            return None
        return value.decode() if isinstance(value, bytes | bytearray) else str(value)

    def read(self, user_id: int) -> str | None:
        return self._s(self.r.get(self._k(user_id)))

    def store(self, user_id: int, token: str) -> None:
        self.r.set(self._k(user_id), token, ex=self.ttl)

    def compare_and_swap(self, user_id: int, expected: str, new: str) -> bool:
        """
        Replace ``expected`` with ``new`` atomically.

        Uses WATCH/MULTI/EXEC (optimistic locking). A concurrent write between
        the read and the EXEC aborts the transaction; the loop then re-reads
        and, since the slot no longer holds ``expected``, reports failure.
        """
        key = self._k(user_id)
        while True:
            try:
                with self.r.pipeline() as p:
                    p.watch(key)
                    current = self._s(p.get(key))
                    if current != expected:
                        p.unwatch()
                        return False
                    p.multi()
                    p.set(key, new, ex=self.ttl)
                    p.execute()
                    return True
            except redis.WatchError:
                # Concurrent modification detected; retry loop
                continue

    def clear(self, user_id: int) -> None:
        self.r.delete(self._k(user_id))
