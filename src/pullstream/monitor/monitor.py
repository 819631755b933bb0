"""Worker thread monitoring and load detection."""

import time
import logging
import threading
from enum import IntEnum
from typing import Dict, List, Optional
from dataclasses import dataclass, field
from abc import ABC, abstractmethod

import psutil

from pullstream.config import config

logger = logging.getLogger(__name__)


class WorkerLoadLevel(IntEnum):
    """
    Live workers as quarters of the warning threshold.

    CRITICAL means the threshold has been reached.
    """
    NONE = 0
    LOW = 1
    MEDIUM = 2
    HIGH = 3
    CRITICAL = 4

    @classmethod
    def for_workers(cls, live: int, threshold: int) -> 'WorkerLoadLevel':
        return cls(min(live * 4 // max(1, threshold), cls.CRITICAL))


@dataclass
class WorkerInfo:
    """Snapshot of live stream workers and the process hosting them."""
    live_workers: int
    by_kind: Dict[str, int]
    process_threads: int
    rss: int
    load_level: WorkerLoadLevel
    timestamp: float = field(default_factory=time.time)

    @property
    def rss_mb(self) -> float:
        return self.rss / (1024 ** 2)

    def __str__(self) -> str:
        kinds = ", ".join(f"{k}={v}" for k, v in sorted(self.by_kind.items()))
        return (f"Workers: {self.live_workers} live ({kinds or 'none'}), "
                f"process threads: {self.process_threads}, "
                f"RSS: {self.rss_mb:.1f} MB, Load: {self.load_level.name}")


class WorkerLoadHandler(ABC):
    """Abstract base class for worker load handlers."""

    @abstractmethod
    def can_handle(self, level: WorkerLoadLevel, info: WorkerInfo) -> bool:
        """Check if this handler should handle the given load level."""
        pass

    @abstractmethod
    def handle(self, level: WorkerLoadLevel, info: WorkerInfo) -> None:
        """Handle worker load."""
        pass


class WorkerMonitor:
    """Track generator and fan-out worker threads."""

    def __init__(self,
                 check_interval: float = 1.0,
                 warning_threshold: Optional[int] = None):
        """
        Initialize worker monitor.

        Args:
            check_interval: Minimum seconds between automatic load checks
            warning_threshold: Live worker count treated as full load
                (None for config.worker_warning_threshold)
        """
        self.check_interval = check_interval
        self.warning_threshold = warning_threshold
        self.handlers: List[WorkerLoadHandler] = []
        self._workers: Dict[int, str] = {}
        self._lock = threading.Lock()
        self._idle = threading.Condition(self._lock)
        self._last_check = 0.0
        self._process = psutil.Process()

    @property
    def threshold(self) -> int:
        return max(1, self.warning_threshold or config.worker_warning_threshold)

    def add_handler(self, handler: WorkerLoadHandler) -> None:
        """Add a worker load handler."""
        self.handlers.append(handler)

    def remove_handler(self, handler: WorkerLoadHandler) -> None:
        """Remove a worker load handler."""
        if handler in self.handlers:
            self.handlers.remove(handler)

    def register(self, kind: str, thread: threading.Thread) -> None:
        """Record that thread is a live worker of the given kind."""
        with self._lock:
            self._workers[id(thread)] = kind
        if self.should_check():
            self.check_worker_load()

    def unregister(self, thread: threading.Thread) -> None:
        """Record that thread has finished."""
        with self._lock:
            self._workers.pop(id(thread), None)
            if not self._workers:
                self._idle.notify_all()

    def live_workers(self, kind: Optional[str] = None) -> int:
        """Number of live workers, optionally of one kind only."""
        with self._lock:
            if kind is None:
                return len(self._workers)
            return sum(1 for k in self._workers.values() if k == kind)

    def get_worker_info(self) -> WorkerInfo:
        """Get current worker information."""
        with self._lock:
            kinds = list(self._workers.values())
        by_kind: Dict[str, int] = {}
        for kind in kinds:
            by_kind[kind] = by_kind.get(kind, 0) + 1

        return WorkerInfo(
            live_workers=len(kinds),
            by_kind=by_kind,
            process_threads=self._process.num_threads(),
            rss=self._process.memory_info().rss,
            load_level=WorkerLoadLevel.for_workers(len(kinds), self.threshold),
        )

    def check_worker_load(self) -> WorkerLoadLevel:
        """Check current worker load and notify handlers."""
        info = self.get_worker_info()

        for handler in self.handlers:
            if handler.can_handle(info.load_level, info):
                try:
                    handler.handle(info.load_level, info)
                except Exception:
                    # Log but don't crash on handler errors
                    logger.exception("Worker load handler %r failed", handler)

        self._last_check = time.time()
        return info.load_level

    def should_check(self) -> bool:
        """Check if enough time has passed for next check."""
        return time.time() - self._last_check >= self.check_interval

    def wait_for_idle(self, timeout: float = 30) -> bool:
        """
        Wait until no worker is live.

        Returns:
            True if all workers finished, False if timeout
        """
        deadline = time.time() + timeout
        with self._idle:
            while self._workers:
                remaining = deadline - time.time()
                if remaining <= 0:
                    return False
                self._idle.wait(remaining)
        return True


# Global monitor instance
monitor = WorkerMonitor()
