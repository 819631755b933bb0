"""
Configuration management for stream worker threads.
"""

import logging
from typing import Optional
from dataclasses import dataclass, field

import psutil


@dataclass
class StreamConfig:
    """Global configuration for generator and fan-out workers."""

    # Threads
    thread_name_prefix: str = "pullstream"
    daemon_workers: bool = True
    join_timeout: Optional[float] = None  # None waits until the worker exits

    # Monitoring
    monitor_workers: bool = True
    worker_warning_threshold: int = field(
        default_factory=lambda: 64 * (psutil.cpu_count() or 1))

    # Logging, applied to the "pullstream" logger when passed to set_defaults
    log_level: int = logging.WARNING

    _instance: Optional['StreamConfig'] = None

    @classmethod
    def get_instance(cls) -> 'StreamConfig':
        """Get singleton instance."""
        if cls._instance is None:
            cls._instance = cls()
        return cls._instance

    @classmethod
    def set_defaults(cls, **kwargs) -> None:
        """Set default configuration values."""
        instance = cls.get_instance()
        for key, value in kwargs.items():
            if hasattr(instance, key):
                setattr(instance, key, value)
        if "log_level" in kwargs:
            logging.getLogger("pullstream").setLevel(instance.log_level)

    def thread_name(self, kind: str, ident: int) -> str:
        """Name for a worker thread of the given kind."""
        return f"{self.thread_name_prefix}-{kind}-{ident}"


# Global configuration instance
config = StreamConfig.get_instance()
