"""
Pull based lazy streams.

A stream hands out its values one at a time through ``next(slot)``, which
writes the value into a caller supplied :class:`Slot` and reports an
:class:`Outcome`. Once ``next`` reports ``DONE`` it keeps doing so, and
``close`` becomes a no-op returning ``OK``.
"""

from abc import ABC, abstractmethod
from typing import (
    Any, Callable, Generic, Iterator, List, Optional, Sequence, TypeVar
)

from pullstream.streams.outcome import (
    OK, DONE, Outcome, Slot, Copier, assign_copier, finish
)

T = TypeVar('T')
U = TypeVar('U')


class Stream(ABC, Generic[T]):
    """
    Base class for streams.

    Subclasses implement ``_next`` and ``_close``; this class makes ``DONE``
    sticky and ``close`` idempotent so that they need not.
    """

    _exhausted = False
    _closed = False

    def next(self, slot: Slot) -> Outcome:
        """
        Emit the next value into slot.

        Returns OK when slot holds a new value, DONE at the end of the
        stream, or an error outcome, after which the caller should close
        the stream.
        """
        if self._exhausted:
            return DONE
        outcome = self._next(slot)
        if outcome.done:
            self._exhausted = True
        return outcome

    def close(self) -> Outcome:
        """
        Release the resources of this stream.

        Only the first call does any work; later calls, and calls after the
        stream reported DONE, return OK.
        """
        if self._closed or self._exhausted:
            self._closed = self._exhausted = True
            return OK
        self._closed = self._exhausted = True
        return self._close()

    @abstractmethod
    def _next(self, slot: Slot) -> Outcome:
        """Produce the next value."""
        pass

    def _close(self) -> Outcome:
        return OK

    @property
    def exhausted(self) -> bool:
        """True once this stream reported DONE or was closed."""
        return self._exhausted

    # Python protocols

    def __iter__(self) -> Iterator[T]:
        """
        Iterate over the remaining values.

        The stream is closed when iteration stops for any reason. An error
        outcome is raised as its underlying exception.
        """
        slot = Slot()
        try:
            while True:
                outcome = self.next(slot)
                if outcome.done:
                    return
                outcome.raise_for_error()
                yield slot.value
        finally:
            self.close()

    def __enter__(self) -> 'Stream[T]':
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()

    def collect(self) -> List[T]:
        """Collect all remaining values into a list."""
        return list(self)

    # Transformation operators

    def filter(self, f: Any) -> 'Stream[T]':
        """Keep only values f accepts. f is a Filterer or a bool predicate."""
        from pullstream.streams.operators import filter_stream, as_filterer
        return filter_stream(as_filterer(f), self)

    def map(self, f: Any, slot: Optional[Slot] = None) -> 'Stream[U]':
        """Map values with f, a Mapper or a plain value function."""
        from pullstream.streams.operators import map_stream, as_mapper
        return map_stream(as_mapper(f), self, slot if slot is not None else Slot())

    def slice(self, start: int, end: int = -1) -> 'Stream[T]':
        """Values from index start up to but not including end."""
        from pullstream.streams.operators import slice_stream
        return slice_stream(self, start, end)

    def take_while(self, f: Any) -> 'Stream[T]':
        """Values up to the first one f rejects."""
        from pullstream.streams.operators import take_while, as_filterer
        return take_while(as_filterer(f), self)

    def drop_while(self, f: Any) -> 'Stream[T]':
        """Values from the first one f rejects onward."""
        from pullstream.streams.operators import drop_while, as_filterer
        return drop_while(as_filterer(f), self)


class WrapperStream(Stream[T]):
    """
    Stream owning exactly one inner stream.

    When the inner stream runs out, the wrapper closes it straight away and
    reports a failed close through ``next`` instead of through ``close``.
    """

    def __init__(self, inner: Stream):
        self.inner = inner

    def _exhaust(self) -> Outcome:
        """Close the inner stream and mark this stream as exhausted."""
        self._exhausted = True
        return finish(self.inner.close())

    def _close(self) -> Outcome:
        return self.inner.close()


class EmptyStream(Stream[Any]):
    """Stream that emits no values."""

    def next(self, slot: Slot) -> Outcome:
        return DONE

    def close(self) -> Outcome:
        return OK

    def _next(self, slot: Slot) -> Outcome:
        return DONE

    @property
    def exhausted(self) -> bool:
        return True

    def __repr__(self) -> str:
        return "EMPTY"


EMPTY = EmptyStream()


def empty() -> Stream:
    """Return the canonical empty stream."""
    return EMPTY


class CountStream(Stream[int]):
    """Infinite stream of integers."""

    def __init__(self, start: int = 0, step: int = 1):
        self.start = start
        self.step = step

    def _next(self, slot: Slot) -> Outcome:
        slot.value = self.start
        self.start += self.step
        return OK


def count() -> Stream[int]:
    """Infinite stream 0, 1, 2, ..."""
    return CountStream(0, 1)


def count_from(start: int, step: int) -> Stream[int]:
    """Infinite stream beginning at start and increasing by step."""
    return CountStream(start, step)


class ValuesStream(Stream[T]):
    """Stream over the items of a sequence. Closing it does nothing."""

    def __init__(self, values: Sequence[T], copier: Optional[Copier] = None):
        self.values = values
        self.copier = copier or assign_copier
        self.index = 0

    def _next(self, slot: Slot) -> Outcome:
        if self.index >= len(self.values):
            return DONE
        self.copier(Slot(self.values[self.index]), slot)
        self.index += 1
        return OK


def from_values(values: Sequence[T], copier: Optional[Copier] = None) -> Stream[T]:
    """
    Convert a sequence into a stream.

    Args:
        values: Items to emit, in order
        copier: Copies an item into the caller's slot (default assignment)
    """
    return ValuesStream(values, copier)


class DeferredStream(Stream[T]):
    """Stream created on the first call to next."""

    def __init__(self, factory: Callable[[], Stream[T]]):
        self.factory = factory
        self.inner: Optional[Stream[T]] = None

    def _next(self, slot: Slot) -> Outcome:
        if self.inner is None:
            self.inner = self.factory()
        outcome = self.inner.next(slot)
        if outcome.done:
            self._exhausted = True
            return finish(self.inner.close())
        return outcome

    def _close(self) -> Outcome:
        if self.inner is None:
            return OK
        return self.inner.close()


def deferred(factory: Callable[[], Stream[T]]) -> Stream[T]:
    """
    Emit the values of the stream factory returns.

    factory is not called until the first call to next. Closing the result
    closes the created stream, or does nothing if factory was never called.
    """
    return DeferredStream(factory)


class CycleStream(Stream[T]):
    """Repeatedly creates streams and emits their values."""

    def __init__(self, factory: Callable[[], Stream[T]]):
        self.factory = factory
        self.current: Stream[T] = EMPTY

    def _next(self, slot: Slot) -> Outcome:
        outcome = self.current.next(slot)
        while outcome.done:
            self.current = self.factory()
            outcome = self.current.next(slot)
        return outcome

    def _close(self) -> Outcome:
        return self.current.close()


def cycle(factory: Callable[[], Stream[T]]) -> Stream[T]:
    """
    Emit the values of factory() over and over.

    If factory keeps returning empty streams, next never returns.
    Closing the result closes the most recently created stream.
    """
    return CycleStream(factory)
