"""
Purpose: Driver directory + lock manager seams used by the dispatcher.
What it does:
- DriverDirectory: the interface a driver-directory service must satisfy
  (getAvailableDrivers / get / save).
- InMemoryDriverDirectory: thread-safe in-memory implementation used by tests
  and the dispatch simulation.
- LockManager: per-key mutual exclusion with bounded waits, standing in for
  row-level locks in the surrounding service.
"""

from __future__ import annotations

import logging
import threading
from contextlib import contextmanager
from dataclasses import replace
from datetime import datetime, timedelta
from typing import Callable, Dict, Iterable, Iterator, List, Optional, Protocol

from .models import Driver, DriverStatus

logger = logging.getLogger(__name__)


class AssignmentTimeout(Exception):
    """Raised when a lock could not be acquired within the configured timeout."""
    pass


class DriverDirectory(Protocol):
    def get_available_drivers(self, freshness_window_minutes: float) -> List[Driver]:
        ...

    def get(self, driver_id: str) -> Optional[Driver]:
        ...

    def save(self, driver: Driver) -> Driver:
        ...


class InMemoryDriverDirectory:
    """
    Keeps the latest Driver snapshot per id.

    save() stores a new snapshot and bumps its version, so a reader holding an
    older snapshot can detect that someone else committed in between.
    """

    def __init__(self, drivers: Iterable[Driver] = (), clock: Callable[[], datetime] = datetime.now):
        self._drivers: Dict[str, Driver] = {}
        self._guard = threading.Lock()
        self.clock = clock
        for driver in drivers:
            self._drivers[driver.id] = driver

    def get_available_drivers(self, freshness_window_minutes: float) -> List[Driver]:
        """
        Drivers marked available whose last location ping is inside the window,
        in id order.
        """
        cutoff = self.clock() - timedelta(minutes=freshness_window_minutes)
        with self._guard:
            snapshot = list(self._drivers.values())

        available = [
            driver for driver in snapshot
            if driver.status == DriverStatus.AVAILABLE
            and driver.location_updated_at is not None
            and driver.location_updated_at >= cutoff
        ]
        return sorted(available, key=lambda driver: driver.id)

    def get(self, driver_id: str) -> Optional[Driver]:
        with self._guard:
            return self._drivers.get(driver_id)

    def save(self, driver: Driver) -> Driver:
        with self._guard:
            stored = replace(driver, version=driver.version + 1)
            self._drivers[driver.id] = stored
        logger.debug("Saved driver %s (version %s)", stored.id, stored.version)
        return stored

    def all(self) -> List[Driver]:
        with self._guard:
            return sorted(self._drivers.values(), key=lambda driver: driver.id)


class LockManager:
    """
    Named locks, one threading.Lock per key, created on first use.

    Usage:
        with lock_manager.lock(f"driver_{driver_id}", timeout=2.0):
            ...
    """

    def __init__(self, default_timeout: float = 2.0):
        self.default_timeout = default_timeout
        self._locks: Dict[str, threading.Lock] = {}
        self._guard = threading.Lock()

    def _lock_for(self, key: str) -> threading.Lock:
        with self._guard:
            lock = self._locks.get(key)
            if lock is None:
                lock = threading.Lock()
                self._locks[key] = lock
            return lock

    @contextmanager
    def lock(self, key: str, timeout: Optional[float] = None) -> Iterator[None]:
        timeout = self.default_timeout if timeout is None else timeout
        lock = self._lock_for(key)

        if not lock.acquire(timeout=timeout):
            logger.warning("Timed out after %.2fs waiting for lock %s", timeout, key)
            raise AssignmentTimeout(f"Could not acquire lock '{key}' within {timeout}s")
        try:
            yield
        finally:
            lock.release()
