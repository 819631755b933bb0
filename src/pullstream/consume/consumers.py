"""
Consumers: the sink side of the stream contract.
"""

from abc import ABC, abstractmethod
from typing import Any, Callable, Optional, Sequence

from pullstream.streams.outcome import (
    OK, Outcome, Slot, Copier, first_failure
)
from pullstream.streams.stream import Stream
from pullstream.streams.operators import Filterer, filter_stream


class Consumer(ABC):
    """Consumes the values of a stream."""

    @abstractmethod
    def consume(self, stream: Stream) -> None:
        """Read as many values from stream as wanted."""
        pass


class FunctionConsumer(Consumer):
    """Consumer backed by a function of the stream."""

    def __init__(self, func: Callable[[Stream], Any]):
        self.func = func

    def consume(self, stream: Stream) -> None:
        self.func(stream)

    def __repr__(self) -> str:
        return f"FunctionConsumer({getattr(self.func, '__name__', self.func)!r})"


class ModifiedConsumer(Consumer):
    """Consumer that transforms its stream before passing it on."""

    def __init__(self, consumer: Consumer, func: Callable[[Stream], Stream]):
        self.consumer = consumer
        self.func = func

    def consume(self, stream: Stream) -> None:
        self.consumer.consume(self.func(stream))


def modify_consumer(consumer: Consumer,
                    func: Callable[[Stream], Stream]) -> Consumer:
    """
    Consumer applying func to its stream and handing the result to consumer.

    If consumer takes a stream of T and func turns a stream of U into a
    stream of T, the result consumes a stream of U.
    """
    return ModifiedConsumer(consumer, func)


class ErrorReportingConsumer(Consumer):
    """Consumer that remembers whether consuming failed."""

    @abstractmethod
    def error(self) -> Optional[Outcome]:
        """Error outcome of the last consume, or None."""
        pass


class ModifiedErrorConsumer(ErrorReportingConsumer):
    """ErrorReportingConsumer that transforms its stream first."""

    def __init__(self, consumer: ErrorReportingConsumer,
                 func: Callable[[Stream], Stream]):
        self.consumer = consumer
        self.func = func

    def consume(self, stream: Stream) -> None:
        self.consumer.consume(self.func(stream))

    def error(self) -> Optional[Outcome]:
        return self.consumer.error()


def modify_error_consumer(consumer: ErrorReportingConsumer,
                          func: Callable[[Stream], Stream]) -> ErrorReportingConsumer:
    """Like modify_consumer, keeping error reporting."""
    return ModifiedErrorConsumer(consumer, func)


def filter_consumer(consumer: ErrorReportingConsumer,
                    f: Filterer) -> ErrorReportingConsumer:
    """ErrorReportingConsumer that filters its stream with f first."""
    return ModifiedErrorConsumer(consumer, lambda s: filter_stream(f, s))


class CompositeConsumer(ErrorReportingConsumer):
    """Sends every value it consumes to each of several consumers."""

    def __init__(self, consumers: Sequence[ErrorReportingConsumer],
                 slot: Optional[Slot] = None,
                 copier: Optional[Copier] = None):
        self.consumers = consumers
        self.slot = slot
        self.copier = copier
        self._close_outcome: Outcome = OK

    def consume(self, stream: Stream) -> None:
        from pullstream.consume.multi import multi_consume
        self._close_outcome = multi_consume(
            stream, *self.consumers, slot=self.slot, copier=self.copier)

    def error(self) -> Optional[Outcome]:
        for consumer in self.consumers:
            outcome = consumer.error()
            if outcome is not None:
                return outcome
        if self._close_outcome.ok:
            return None
        return self._close_outcome


def compose_consumers(*consumers: ErrorReportingConsumer,
                      slot: Optional[Slot] = None,
                      copier: Optional[Copier] = None) -> ErrorReportingConsumer:
    """
    ErrorReportingConsumer fanning its stream out to consumers.

    It reports the first error any of consumers reports, otherwise the
    error from closing the stream.
    """
    return CompositeConsumer(consumers, slot=slot, copier=copier)


def first_only(stream: Stream, empty_error: BaseException, slot: Slot) -> Outcome:
    """
    Read the first value of stream into slot and close stream.

    Returns a failure carrying empty_error if stream has no values, and
    otherwise the first failure among reading and closing.
    """
    outcome = stream.next(slot)
    if outcome.done:
        outcome = Outcome.failure(empty_error)
    return first_failure(outcome, stream.close())
