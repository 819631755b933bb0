"""Monitoring of generator and fan-out worker threads."""

from pullstream.monitor.monitor import (
    WorkerMonitor,
    WorkerLoadLevel,
    WorkerInfo,
    WorkerLoadHandler,
    monitor,
)
from pullstream.monitor.handlers import LoggingHandler

__all__ = [
    "WorkerMonitor",
    "WorkerLoadLevel",
    "WorkerInfo",
    "WorkerLoadHandler",
    "LoggingHandler",
    "monitor",
]
