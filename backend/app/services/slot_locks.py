from __future__ import annotations

from collections.abc import Iterable, Iterator
from contextlib import contextmanager
from threading import Lock


class SlotWriteGuard:
    """Per ``(teacher_id, weekday)`` locks around check-then-write of slots.

    Only serialises writers inside one process.
    """

    def __init__(self) -> None:
        self._locks: dict[tuple[str, str], Lock] = {}
        self._registry_lock = Lock()

    def _lock_for(self, key: tuple[str, str]) -> Lock:
        with self._registry_lock:
            lock = self._locks.get(key)
            if lock is None:
                lock = Lock()
                self._locks[key] = lock
            return lock

    @contextmanager
    def hold(self, keys: Iterable[tuple[str, str]]) -> Iterator[None]:
        # Sorted acquisition keeps two multi-key writers from deadlocking.
        ordered = sorted({(str(teacher_id), str(getattr(weekday, "value", weekday))) for teacher_id, weekday in keys})
        locks = [self._lock_for(key) for key in ordered]
        acquired: list[Lock] = []
        try:
            for lock in locks:
                lock.acquire()
                acquired.append(lock)
            yield
        finally:
            for lock in reversed(acquired):
                lock.release()

    def discard_teacher(self, teacher_id: str) -> int:
        """Forget the locks of a deleted teacher; locks still held are kept."""
        with self._registry_lock:
            stale = [key for key, lock in self._locks.items() if key[0] == str(teacher_id) and not lock.locked()]
            for key in stale:
                del self._locks[key]
        return len(stale)

    def clear(self) -> None:
        with self._registry_lock:
            self._locks.clear()

    def __len__(self) -> int:
        with self._registry_lock:
            return len(self._locks)


_guard = SlotWriteGuard()


def get_slot_write_guard() -> SlotWriteGuard:
    return _guard


def clear_slot_write_guard() -> None:
    _guard.clear()
