"""
Fan-out of one stream to several consumers running concurrently.
"""

import itertools
import logging
import threading
from typing import List, Optional, TypeVar

from pullstream.config import config
from pullstream.monitor import monitor
from pullstream.streams.outcome import (
    OK, Outcome, Slot, Copier, assign_copier, ContractViolation
)
from pullstream.streams.stream import Stream
from pullstream.generators.channel import Handoff
from pullstream.consume.consumers import Consumer

logger = logging.getLogger(__name__)

T = TypeVar('T')

_fanout_ids = itertools.count(1)


class SplitStream(Stream[T]):
    """
    One consumer's private view of a fanned out stream.

    The consumer thread pulls through ``next``; the fan-out loop answers
    with ``deliver`` and ``await_request``. Closing the view does nothing:
    only the fan-out loop closes the upstream.
    """

    def __init__(self):
        self._slots: Handoff[Optional[Slot]] = Handoff()
        self._outcomes: Handoff[Outcome] = Handoff()
        self._done_delivered = False
        self.requested: Optional[Slot] = None
        self.active = True

    # Consumer thread side

    def _next(self, slot: Slot) -> Outcome:
        if slot is None:
            raise ContractViolation("next needs a slot")
        self._slots.send(slot)
        outcome = self._outcomes.receive()
        if outcome.done:
            self._done_delivered = True
        return outcome

    def close(self) -> Outcome:
        return OK

    def start_stream(self) -> None:
        """Wait for the fan-out loop to start this view."""
        self._outcomes.receive()

    def end_stream(self) -> None:
        """Tell the fan-out loop that the consumer will not read again."""
        if not self._done_delivered:
            self._slots.send(None)

    # Fan-out loop side

    def deliver(self, outcome: Outcome) -> None:
        """Answer the pending request with outcome."""
        self._outcomes.send(outcome)
        if outcome.done:
            self.active = False

    def await_request(self) -> None:
        """Wait until the consumer asks for another value or finishes."""
        if not self.active:
            return
        self.requested = self._slots.receive()
        if self.requested is None:
            self.active = False


def _consume(consumer: Consumer, view: SplitStream, thread_name: str,
             monitored: bool) -> None:
    try:
        view.start_stream()
        consumer.consume(view)
    except Exception:
        # Log but keep feeding the other consumers
        logger.exception("Consumer %r failed on %s", consumer, thread_name)
    finally:
        view.end_stream()
        if monitored:
            monitor.unregister(threading.current_thread())
        logger.debug("Consumer thread %s finished", thread_name)


def multi_consume(stream: Stream[T],
                  *consumers: Consumer,
                  slot: Optional[Slot] = None,
                  copier: Optional[Copier] = None) -> Outcome:
    """
    Send every value of stream to each of consumers.

    Each consumer runs on its own thread against a private view of stream.
    All active consumers see the same value in the same round. Values are
    read from stream until no consumer wants more, then stream is closed
    exactly once.

    Args:
        stream: Upstream to fan out
        consumers: Consumers receiving the values
        slot: Receives values read from stream (default a new Slot)
        copier: Copies a value into each consumer's slot (default assignment)

    Returns:
        The outcome of closing stream.
    """
    copier = copier or assign_copier
    shared = slot if slot is not None else Slot()
    fanout_id = next(_fanout_ids)

    views: List[SplitStream] = []
    threads: List[threading.Thread] = []
    monitored = config.monitor_workers
    for i, consumer in enumerate(consumers):
        view = SplitStream()
        name = config.thread_name(f"consumer{fanout_id}", i)
        thread = threading.Thread(
            target=_consume, args=(consumer, view, name, monitored),
            name=name, daemon=config.daemon_workers)
        if monitored:
            monitor.register("consumer", thread)
        thread.start()
        views.append(view)
        threads.append(thread)

    for view in views:
        view.deliver(OK)
    for view in views:
        view.await_request()

    active = [view for view in views if view.active]
    rounds = 0
    while active:
        outcome = stream.next(shared)
        for view in active:
            if outcome.ok:
                copier(shared, view.requested)
            view.deliver(outcome)
        for view in active:
            view.await_request()
        active = [view for view in active if view.active]
        rounds += 1

    result = stream.close()
    for thread in threads:
        thread.join(config.join_timeout)
    logger.debug("Fan-out %d: %d consumers, %d rounds, close %r",
                 fanout_id, len(consumers), rounds, result)
    return result
