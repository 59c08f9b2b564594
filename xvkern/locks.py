"""Mutual-exclusion locks that know which thread holds them."""

from __future__ import annotations

import threading


class LockError(RuntimeError):
    """A lock was acquired twice or released by a thread that does not hold it."""


class SpinLock:
    """A short-term lock; acquiring it twice from one thread is an error."""

    def __init__(self, name: str = "") -> None:
        self.name = name
        self._lock = threading.Lock()
        self._owner: int | None = None

    @property
    def locked(self) -> bool:
        return self._lock.locked()

    def acquire(self) -> None:
        """Wait for the lock and take it."""
        if self.holding():
            raise LockError(f"acquire {self.name}")
        self._lock.acquire()
        self._owner = threading.get_ident()

    def release(self) -> None:
        """Give the lock up; the calling thread must hold it."""
        if not self.holding():
            raise LockError(f"release {self.name}")
        self._owner = None
        self._lock.release()

    def holding(self) -> bool:
        """Whether the calling thread holds the lock."""
        return self._lock.locked() and self._owner == threading.get_ident()

    def __enter__(self) -> "SpinLock":
        self.acquire()
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.release()


class SleepLock:
    """A long-term lock; waiters sleep until it is released."""

    def __init__(self, name: str = "") -> None:
        self.name = name
        self._cond = threading.Condition(threading.Lock())
        self.locked = False
        self.pid = 0  # identity of the holding thread, 0 when free

    def acquire(self) -> None:
        """Sleep until the lock is free, then take it."""
        me = threading.get_ident()
        with self._cond:
            if self.locked and self.pid == me:
                raise LockError(f"acquire {self.name}: already held")
            while self.locked:
                self._cond.wait()
            self.locked = True
            self.pid = me

    def release(self) -> None:
        """Free the lock and wake every waiter."""
        with self._cond:
            self.locked = False
            self.pid = 0
            self._cond.notify_all()

    def holding(self) -> bool:
        """Whether the calling thread holds the lock."""
        with self._cond:
            return self.locked and self.pid == threading.get_ident()

    def __enter__(self) -> "SleepLock":
        self.acquire()
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.release()