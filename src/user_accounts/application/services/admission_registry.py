"""In-process reservation map gating concurrent user creation by login."""

from __future__ import annotations

import threading


class AdmissionRegistry:
    """Thread-safe presence map; at most one holder per login at a time.

    The registry is not a cache and does not replace the store's own
    uniqueness guarantees. It only covers the window between the in-process
    duplicate check and the store insert.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._reserved: set[str] = set()

    def reserve(self, login: str) -> bool:
        """Reserve `login`; return True only when this call created the reservation."""

        with self._lock:
            if login in self._reserved:
                return False
            self._reserved.add(login)
            return True

    def release(self, login: str) -> None:
        """Drop the reservation for `login`, if any."""

        with self._lock:
            self._reserved.discard(login)

    def is_reserved(self, login: str) -> bool:
        with self._lock:
            return login in self._reserved

    def __len__(self) -> int:
        with self._lock:
            return len(self._reserved)
