#!/usr/bin/env python3
"""
Tests for worker monitoring and configuration.
"""

import logging
import threading
import unittest

import psutil

from pullstream import StreamConfig
from pullstream.config import config
from pullstream.generators import new_generator
from pullstream.monitor import (
    WorkerMonitor, WorkerLoadLevel, WorkerLoadHandler, LoggingHandler, monitor
)


class RecordingHandler(WorkerLoadHandler):
    """Remembers every load level it is asked to handle."""

    def __init__(self):
        self.levels = []

    def can_handle(self, level, info):
        return True

    def handle(self, level, info):
        self.levels.append(level)


class BrokenHandler(WorkerLoadHandler):
    def can_handle(self, level, info):
        return True

    def handle(self, level, info):
        raise RuntimeError("handler bug")


class TestWorkerMonitor(unittest.TestCase):
    """Test WorkerMonitor bookkeeping."""

    def setUp(self):
        """Set up a private monitor."""
        self.monitor = WorkerMonitor(check_interval=3600, warning_threshold=4)
        self.threads = [threading.Thread(target=lambda: None) for _ in range(4)]

    def test_register_and_unregister(self):
        self.monitor.register("generator", self.threads[0])
        self.monitor.register("consumer", self.threads[1])
        self.monitor.register("consumer", self.threads[2])
        self.assertEqual(self.monitor.live_workers(), 3)
        self.assertEqual(self.monitor.live_workers("consumer"), 2)

        self.monitor.unregister(self.threads[1])
        self.monitor.unregister(self.threads[1])
        self.assertEqual(self.monitor.live_workers("consumer"), 1)

    def test_load_levels(self):
        self.assertIs(self.monitor.get_worker_info().load_level, WorkerLoadLevel.NONE)
        expected = [WorkerLoadLevel.LOW, WorkerLoadLevel.MEDIUM,
                    WorkerLoadLevel.HIGH, WorkerLoadLevel.CRITICAL]
        for thread, level in zip(self.threads, expected):
            self.monitor.register("generator", thread)
            self.assertIs(self.monitor.get_worker_info().load_level, level)
        self.assertGreater(WorkerLoadLevel.CRITICAL, WorkerLoadLevel.HIGH)

    def test_load_level_for_workers(self):
        self.assertIs(WorkerLoadLevel.for_workers(0, 64), WorkerLoadLevel.NONE)
        self.assertIs(WorkerLoadLevel.for_workers(15, 64), WorkerLoadLevel.NONE)
        self.assertIs(WorkerLoadLevel.for_workers(16, 64), WorkerLoadLevel.LOW)
        self.assertIs(WorkerLoadLevel.for_workers(48, 64), WorkerLoadLevel.HIGH)
        self.assertIs(WorkerLoadLevel.for_workers(64, 64), WorkerLoadLevel.CRITICAL)
        self.assertIs(WorkerLoadLevel.for_workers(500, 64), WorkerLoadLevel.CRITICAL)
        self.assertIs(WorkerLoadLevel.for_workers(1, 0), WorkerLoadLevel.CRITICAL)

    def test_worker_info_reports_process(self):
        self.monitor.register("generator", self.threads[0])
        info = self.monitor.get_worker_info()
        self.assertEqual(info.by_kind, {"generator": 1})
        self.assertGreaterEqual(info.process_threads, 1)
        self.assertGreater(info.rss, 0)
        self.assertIn("generator=1", str(info))

    def test_handlers_are_notified(self):
        handler = RecordingHandler()
        self.monitor.add_handler(handler)
        self.monitor.check_worker_load()
        self.assertEqual(handler.levels, [WorkerLoadLevel.NONE])
        self.monitor.remove_handler(handler)
        self.monitor.check_worker_load()
        self.assertEqual(len(handler.levels), 1)

    def test_broken_handler_is_logged(self):
        self.monitor.add_handler(BrokenHandler())
        with self.assertLogs("pullstream.monitor.monitor", level="ERROR"):
            level = self.monitor.check_worker_load()
        self.assertIs(level, WorkerLoadLevel.NONE)

    def test_logging_handler(self):
        logger = logging.getLogger("pullstream.test.load")
        handler = LoggingHandler(logger=logger, min_level=WorkerLoadLevel.LOW)
        self.monitor.add_handler(handler)
        for thread in self.threads:
            self.monitor.register("consumer", thread)
        with self.assertLogs(logger, level="CRITICAL") as logs:
            self.monitor.check_worker_load()
            # Same level again inside the quiet period is not logged
            self.monitor.check_worker_load()
        self.assertEqual(len(logs.records), 1)
        self.assertIn("CRITICAL worker load", logs.output[0])

    def test_wait_for_idle(self):
        self.assertTrue(self.monitor.wait_for_idle(timeout=0.1))
        self.monitor.register("generator", self.threads[0])
        self.assertFalse(self.monitor.wait_for_idle(timeout=0.05))
        timer = threading.Timer(0.05, self.monitor.unregister, args=(self.threads[0],))
        timer.start()
        self.assertTrue(self.monitor.wait_for_idle(timeout=5))
        timer.join()


class TestGlobalMonitor(unittest.TestCase):
    """Test that generators report to the global monitor."""

    def test_generator_registers_while_alive(self):
        StreamConfig.set_defaults(monitor_workers=True, join_timeout=10)
        before = monitor.live_workers("generator")
        threads_before = psutil.Process().num_threads()

        gen = new_generator(lambda e: e.emit(1))
        self.assertEqual(monitor.live_workers("generator"), before + 1)
        self.assertGreater(psutil.Process().num_threads(), threads_before)

        gen.close()
        self.assertEqual(monitor.live_workers("generator"), before)


class TestStreamConfig(unittest.TestCase):
    """Test configuration defaults."""

    def test_singleton(self):
        self.assertIs(StreamConfig.get_instance(), config)

    def test_set_defaults_ignores_unknown_keys(self):
        StreamConfig.set_defaults(no_such_setting=1)
        self.assertFalse(hasattr(config, "no_such_setting"))

    def test_defaults(self):
        self.assertGreaterEqual(config.worker_warning_threshold, 64)
        self.assertTrue(config.thread_name("generator", 3).endswith("-generator-3"))

    def test_log_level(self):
        try:
            StreamConfig.set_defaults(log_level=logging.DEBUG)
            self.assertEqual(logging.getLogger("pullstream").level, logging.DEBUG)
        finally:
            StreamConfig.set_defaults(log_level=logging.WARNING)

    def test_other_settings_keep_logger_level(self):
        package_logger = logging.getLogger("pullstream")
        try:
            package_logger.setLevel(logging.INFO)
            StreamConfig.set_defaults(thread_name_prefix="other")
            StreamConfig.set_defaults()
            self.assertEqual(package_logger.level, logging.INFO)
        finally:
            StreamConfig.set_defaults(thread_name_prefix="pullstream",
                                      log_level=logging.WARNING)


if __name__ == "__main__":
    unittest.main()
