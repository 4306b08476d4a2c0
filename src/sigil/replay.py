"""Opt-in replay protection for accepted handshake tokens."""

from __future__ import annotations

import threading

from .exceptions import ReplayDetectedError


class ReplayGuard:
    """Remember accepted token signatures until their validity window closes.

    Without a guard a token can be presented any number of times while it is
    unexpired. The guard is process-local; hosts running several workers need
    sticky routing or a shared implementation with the same interface.
    """

    def __init__(self) -> None:
        self._seen: dict[str, int] = {}
        self._lock = threading.Lock()

    def __len__(self) -> int:
        return len(self._seen)

    def remember(self, signature: str, *, expires_at: int, now: int) -> None:
        """Record ``signature`` or raise :class:`ReplayDetectedError` if already seen."""

        with self._lock:
            self._gc(now)
            if signature in self._seen:
                raise ReplayDetectedError("token already used")
            self._seen[signature] = expires_at

    def _gc(self, now: int) -> None:
        expired = [key for key, expires_at in self._seen.items() if expires_at < now]
        for key in expired:
            self._seen.pop(key, None)


__all__ = ["ReplayGuard"]
