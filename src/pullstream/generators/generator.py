"""
Streams produced by imperative routines running on a worker thread.

The routine receives an :class:`Emitter`. It writes each value into
``emitter.emit_slot()`` and calls ``emitter.yield_()``, which blocks until
the consumer asks for another value or closes the stream. Once
``emit_slot()`` returns None the stream has been closed and the routine
should return.
"""

import itertools
import logging
import threading
from abc import ABC, abstractmethod
from enum import Enum
from typing import Any, Callable, Optional, Tuple, TypeVar

from pullstream.config import config
from pullstream.monitor import monitor
from pullstream.streams.outcome import (
    OK, DONE, Outcome, Slot, finish,
    ContractViolation, ProducerNotTerminated, GeneratorAbandoned
)
from pullstream.streams.stream import Stream
from pullstream.generators.channel import Handoff

logger = logging.getLogger(__name__)

T = TypeVar('T')

# Sent in place of a slot to release a routine that ignored close
_ABANDON = object()

_generator_ids = itertools.count(1)


class Emitter(ABC):
    """Producer side handle of a generator."""

    @abstractmethod
    def emit_slot(self) -> Optional[Slot]:
        """Slot the next value goes into, or None once the stream is closed."""
        pass

    @abstractmethod
    def yield_(self, outcome: Outcome = OK) -> None:
        """
        Make the pending next call return outcome.

        Blocks until next is called again or the stream is closed.
        outcome must not be DONE; return from the routine instead.
        """
        pass

    def emit(self, value: Any) -> bool:
        """
        Emit value as the next value of the stream.

        Returns False, without emitting, if the stream has been closed.
        """
        slot = self.emit_slot()
        if slot is None:
            return False
        slot.value = value
        self.yield_(OK)
        return True


class GeneratorState(Enum):
    """
    Lifecycle of a generator.

    While running, control alternates between PRODUCING (the routine runs
    until its next yield_) and AWAITING_CONSUMER (the routine is parked in
    yield_ until the next call to next or close).
    """
    NOT_STARTED = "not_started"
    PRODUCING = "producing"
    AWAITING_CONSUMER = "awaiting_consumer"
    CLOSED = "closed"


class Generator(Stream[T], Emitter):
    """
    Stream whose values come from routine(emitter) on a dedicated thread.

    Exactly one value is in flight at a time: next hands its slot to the
    worker and waits for the worker's yield_.
    """

    def __init__(self, routine: Callable[[Emitter], Any]):
        self.routine = routine
        self._slots: Handoff[Any] = Handoff()
        self._outcomes: Handoff[Tuple[Outcome, bool]] = Handoff()
        self._slot: Optional[Slot] = None
        self._abandoned = False
        self._state = GeneratorState.NOT_STARTED
        self._thread = threading.Thread(
            target=self._run,
            name=config.thread_name("generator", next(_generator_ids)),
            daemon=config.daemon_workers,
        )
        self._monitored = config.monitor_workers
        if self._monitored:
            monitor.register("generator", self._thread)
        self._thread.start()

    @property
    def state(self) -> GeneratorState:
        return self._state

    @property
    def name(self) -> str:
        return self._thread.name

    # Consumer side

    def _next(self, slot: Slot) -> Outcome:
        if slot is None:
            raise ContractViolation("next needs a slot; use close to stop")
        self._state = GeneratorState.PRODUCING
        self._slots.send(slot)
        outcome, finished = self._outcomes.receive()
        if finished:
            self._finish()
        else:
            self._state = GeneratorState.AWAITING_CONSUMER
        return outcome

    def _close(self) -> Outcome:
        self._state = GeneratorState.PRODUCING
        self._slots.send(None)
        outcome, finished = self._outcomes.receive()
        if finished:
            self._finish()
            return OK if outcome.done else outcome
        logger.warning("Generator %s kept yielding after close; abandoning it",
                       self.name)
        self._slots.send(_ABANDON)
        self._finish()
        return Outcome.failure(ProducerNotTerminated(
            f"generator {self.name} did not return after its stream was closed"))

    def _finish(self) -> None:
        self._exhausted = True
        self._state = GeneratorState.CLOSED
        self._thread.join(config.join_timeout)

    # Producer side

    def emit_slot(self) -> Optional[Slot]:
        return self._slot

    def yield_(self, outcome: Outcome = OK) -> None:
        if outcome.done or outcome.skipped:
            raise ContractViolation(
                f"cannot yield {outcome!r}; return from the routine to end the stream")
        if self._abandoned:
            raise GeneratorAbandoned(f"generator {self.name} was abandoned")
        self._outcomes.send((outcome, False))
        slot = self._slots.receive()
        if slot is _ABANDON:
            self._abandoned = True
            raise GeneratorAbandoned(f"generator {self.name} was abandoned")
        self._slot = slot

    def _run(self) -> None:
        logger.debug("Generator %s started", self.name)
        try:
            self._slot = self._slots.receive()
            try:
                self.routine(self)
            except GeneratorAbandoned:
                logger.debug("Generator %s abandoned", self.name)
                return
            except Exception as e:
                logger.exception("Generator %s routine failed", self.name)
                final = Outcome.failure(e)
            else:
                final = DONE
            if not self._abandoned:
                self._outcomes.send((final, True))
        finally:
            if self._monitored:
                monitor.unregister(self._thread)
            logger.debug("Generator %s finished", self.name)


def new_generator(routine: Callable[[Emitter], Any]) -> Stream:
    """
    Create a stream emitting the values routine emits.

    routine(emitter) runs on its own thread. It should return when it has
    no more values, or as soon as emitter.emit_slot() returns None.
    """
    return Generator(routine)


def emit_all(source: Stream, emitter: Emitter) -> Outcome:
    """
    Emit every value of source through emitter.

    Returns OK (or source's close error) once source is exhausted. If the
    emitter's stream is closed first, closes source and returns DONE or the
    close error.
    """
    slot = emitter.emit_slot()
    while slot is not None:
        outcome = source.next(slot)
        if outcome.done:
            return source.close()
        emitter.yield_(outcome)
        slot = emitter.emit_slot()
    return finish(source.close())
