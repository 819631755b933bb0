"""Worker load handlers."""

import time
import logging
from typing import Dict, Optional

from pullstream.monitor.monitor import (
    WorkerLoadHandler,
    WorkerLoadLevel,
    WorkerInfo
)


class LoggingHandler(WorkerLoadHandler):
    """Log worker load events."""

    def __init__(self,
                 logger: Optional[logging.Logger] = None,
                 min_level: WorkerLoadLevel = WorkerLoadLevel.MEDIUM,
                 quiet_period: float = 60.0):
        self.logger = logger or logging.getLogger(__name__)
        self.min_level = min_level
        self.quiet_period = quiet_period
        self._last_log: Dict[WorkerLoadLevel, float] = {}

    def can_handle(self, level: WorkerLoadLevel, info: WorkerInfo) -> bool:
        return level >= self.min_level

    def handle(self, level: WorkerLoadLevel, info: WorkerInfo) -> None:
        # Only log a level again once the quiet period has passed
        last_time = self._last_log.get(level)
        if last_time is not None and time.time() - last_time < self.quiet_period:
            return

        self._last_log[level] = time.time()

        if level == WorkerLoadLevel.CRITICAL:
            self.logger.critical("CRITICAL worker load: %s", info)
        elif level == WorkerLoadLevel.HIGH:
            self.logger.error("HIGH worker load: %s", info)
        elif level == WorkerLoadLevel.MEDIUM:
            self.logger.warning("MEDIUM worker load: %s", info)
        else:
            self.logger.info("Worker load: %s", info)
