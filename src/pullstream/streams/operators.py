"""
Filterers, mappers and the operators that combine streams into new streams.
"""

from abc import ABC, abstractmethod
from typing import Any, Callable, List, Optional, Sequence, Tuple, TypeVar

from pullstream.streams.outcome import (
    OK, DONE, SKIPPED, Outcome, Slot, finish, first_failure
)
from pullstream.streams.stream import Stream, WrapperStream, EMPTY

T = TypeVar('T')
U = TypeVar('U')


# Filterers

class Filterer(ABC):
    """Decides whether a value stays in a stream."""

    @abstractmethod
    def filter(self, slot: Slot) -> Outcome:
        """Return OK to keep the value in slot, SKIPPED to drop it."""
        pass


class FunctionFilterer(Filterer):
    """Filterer backed by a function returning an Outcome."""

    def __init__(self, func: Callable[[Slot], Outcome]):
        self.func = func

    def filter(self, slot: Slot) -> Outcome:
        return self.func(slot)


class PredicateFilterer(Filterer):
    """Filterer backed by a plain bool predicate on values."""

    def __init__(self, predicate: Callable[[Any], bool]):
        self.predicate = predicate

    def filter(self, slot: Slot) -> Outcome:
        return OK if self.predicate(slot.value) else SKIPPED


class AllFilterer(Filterer):
    """Accepts a value only if every filterer accepts it."""

    def __init__(self, filterers: Sequence[Filterer]):
        self.filterers = tuple(filterers)

    def filter(self, slot: Slot) -> Outcome:
        for f in self.filterers:
            outcome = f.filter(slot)
            if not outcome.ok:
                return outcome
        return OK

    def __repr__(self) -> str:
        return f"AllFilterer({list(self.filterers)!r})"


class AnyFilterer(Filterer):
    """Accepts a value if at least one filterer accepts it."""

    def __init__(self, filterers: Sequence[Filterer]):
        self.filterers = tuple(filterers)

    def filter(self, slot: Slot) -> Outcome:
        for f in self.filterers:
            outcome = f.filter(slot)
            if not outcome.skipped:
                return outcome
        return SKIPPED

    def __repr__(self) -> str:
        return f"AnyFilterer({list(self.filterers)!r})"


# All of nothing keeps everything; any of nothing keeps nothing.
ALWAYS = AllFilterer(())
NEVER = AnyFilterer(())


def _flatten_filterers(kind: type, fs: Sequence[Filterer]) -> List[Filterer]:
    result: List[Filterer] = []
    for f in fs:
        if isinstance(f, kind):
            result.extend(f.filterers)
        else:
            result.append(f)
    return result


def all_of(*fs: Filterer) -> Filterer:
    """
    Filterer returning OK only if all of fs return OK.

    Otherwise it returns the first outcome that is not OK. Nested all_of
    filterers are flattened into one list.
    """
    if not fs:
        return ALWAYS
    if len(fs) == 1:
        return fs[0]
    return AllFilterer(_flatten_filterers(AllFilterer, fs))


def any_of(*fs: Filterer) -> Filterer:
    """
    Filterer returning SKIPPED only if all of fs return SKIPPED.

    Otherwise it returns the first outcome that is not SKIPPED. Nested
    any_of filterers are flattened into one list.
    """
    if not fs:
        return NEVER
    if len(fs) == 1:
        return fs[0]
    return AnyFilterer(_flatten_filterers(AnyFilterer, fs))


def new_filterer(func: Callable[[Slot], Outcome]) -> Filterer:
    """Create a Filterer from a function of a slot returning an Outcome."""
    return FunctionFilterer(func)


def predicate(func: Callable[[Any], bool]) -> Filterer:
    """Create a Filterer from a bool predicate on values."""
    return PredicateFilterer(func)


def as_filterer(f: Any) -> Filterer:
    if isinstance(f, Filterer):
        return f
    if callable(f):
        return predicate(f)
    raise TypeError(f"expected a Filterer or a predicate, got {f!r}")


# Mappers

class Mapper(ABC):
    """Maps a value of one type to a value of another."""

    @abstractmethod
    def map(self, src: Slot, dest: Slot) -> Outcome:
        """Store the mapping of src in dest. SKIPPED leaves dest alone."""
        pass


class FunctionMapper(Mapper):
    """Mapper backed by a function of (src, dest) returning an Outcome."""

    def __init__(self, func: Callable[[Slot, Slot], Outcome]):
        self.func = func

    def map(self, src: Slot, dest: Slot) -> Outcome:
        return self.func(src, dest)


class ValueMapper(Mapper):
    """Mapper backed by a plain function on values."""

    def __init__(self, func: Callable[[Any], Any]):
        self.func = func

    def map(self, src: Slot, dest: Slot) -> Outcome:
        dest.value = self.func(src.value)
        return OK


class NilMapper(Mapper):
    """Maps nothing."""

    def map(self, src: Slot, dest: Slot) -> Outcome:
        return SKIPPED


NIL_MAPPER = NilMapper()

# (mapper, factory of the slot receiving its output); last factory is None
CompositePiece = Tuple[Mapper, Optional[Callable[[], Slot]]]
# (mapper, slot receiving its output); last slot is None
FastPiece = Tuple[Mapper, Optional[Slot]]


class CompositeMapper(Mapper):
    """
    Mappers chained together, e.g. f(g(x)).

    Every call to map creates fresh intermediate slots from the factories,
    so a CompositeMapper can be shared between threads whenever its pieces
    can. A CompositeMapper without pieces maps nothing.
    """

    def __init__(self, pieces: Sequence[CompositePiece] = ()):
        self._pieces = tuple(pieces)

    @property
    def pieces(self) -> Tuple[CompositePiece, ...]:
        if not self._pieces:
            return ((NIL_MAPPER, None),)
        return self._pieces

    def map(self, src: Slot, dest: Slot) -> Outcome:
        return self.fast().map(src, dest)

    def fast(self) -> 'FastCompositeMapper':
        """A quicker version of this mapper for use by one thread at a time."""
        return FastCompositeMapper(
            [(m, factory() if factory is not None else None)
             for m, factory in self.pieces])

    def __len__(self) -> int:
        return len(self.pieces)


class FastCompositeMapper(Mapper):
    """
    Mappers chained together through fixed intermediate slots.

    Not safe for concurrent use since the intermediate slots are shared
    between calls.
    """

    def __init__(self, pieces: Sequence[FastPiece]):
        self.pieces = tuple(pieces)

    def map(self, src: Slot, dest: Slot) -> Outcome:
        current = src
        last = len(self.pieces) - 1
        for i, (mapper, scratch) in enumerate(self.pieces):
            target = dest if i == last else scratch
            outcome = mapper.map(current, target)
            if not outcome.ok:
                return outcome
            current = target
        return OK

    def __len__(self) -> int:
        return len(self.pieces)


def _fixed(slot: Optional[Slot]) -> Optional[Callable[[], Slot]]:
    if slot is None:
        return None
    return lambda: slot


def _composite_pieces(m: Mapper) -> List[CompositePiece]:
    if isinstance(m, CompositeMapper):
        return list(m.pieces)
    if isinstance(m, FastCompositeMapper):
        return [(mapper, _fixed(slot)) for mapper, slot in m.pieces]
    return [(m, None)]


def _fast_pieces(m: Mapper) -> List[FastPiece]:
    if isinstance(m, CompositeMapper):
        return list(m.fast().pieces)
    if isinstance(m, FastCompositeMapper):
        return list(m.pieces)
    return [(m, None)]


def compose(f: Mapper, g: Mapper,
            factory: Callable[[], Slot] = Slot) -> CompositeMapper:
    """
    Compose two mappers into one, f(g(x)).

    factory creates the slot receiving the intermediate result of g; it is
    called on every call to map.
    """
    pieces = _composite_pieces(g)
    pieces[-1] = (pieces[-1][0], factory)
    pieces.extend(_composite_pieces(f))
    return CompositeMapper(pieces)


def fast_compose(f: Mapper, g: Mapper, slot: Slot) -> FastCompositeMapper:
    """
    Like compose but the intermediate result of g always goes to slot.

    The result cannot be used by several threads at once.
    """
    pieces = _fast_pieces(g)
    pieces[-1] = (pieces[-1][0], slot)
    pieces.extend(_fast_pieces(f))
    return FastCompositeMapper(pieces)


def new_mapper(func: Callable[[Slot, Slot], Outcome]) -> Mapper:
    """Create a Mapper from a function of (src, dest) returning an Outcome."""
    return FunctionMapper(func)


def mapping(func: Callable[[Any], Any]) -> Mapper:
    """Create a Mapper from a plain function on values."""
    return ValueMapper(func)


def as_mapper(f: Any) -> Mapper:
    if isinstance(f, Mapper):
        return f
    if callable(f):
        return mapping(f)
    raise TypeError(f"expected a Mapper or a function, got {f!r}")


# Streams

class FilterStream(WrapperStream[T]):
    """Values of the inner stream that the filterer accepts."""

    def __init__(self, filterer: Filterer, inner: Stream[T]):
        super().__init__(inner)
        self.filterer = filterer

    def _next(self, slot: Slot) -> Outcome:
        while True:
            outcome = self.inner.next(slot)
            if outcome.done:
                return self._exhaust()
            if not outcome.ok:
                return outcome
            outcome = self.filterer.filter(slot)
            if not outcome.skipped:
                return outcome


class MapStream(WrapperStream[U]):
    """Values of the inner stream passed through a mapper."""

    def __init__(self, mapper: Mapper, inner: Stream, slot: Slot):
        super().__init__(inner)
        self.mapper = mapper
        self.slot = slot

    def _next(self, slot: Slot) -> Outcome:
        while True:
            outcome = self.inner.next(self.slot)
            if outcome.done:
                return self._exhaust()
            if not outcome.ok:
                return outcome
            outcome = self.mapper.map(self.slot, slot)
            if not outcome.skipped:
                return outcome


class SliceStream(WrapperStream[T]):
    """Values of the inner stream from index start to end."""

    def __init__(self, inner: Stream[T], start: int, end: int):
        super().__init__(inner)
        self.start = start
        self.end = end
        self.index = 0

    def _next(self, slot: Slot) -> Outcome:
        if 0 <= self.end <= self.start:
            return self._exhaust()
        while self.end < 0 or self.index < self.end:
            outcome = self.inner.next(slot)
            if outcome.done:
                return self._exhaust()
            if not outcome.ok:
                return outcome
            self.index += 1
            if self.index > self.start:
                return OK
        return self._exhaust()


class TakeWhileStream(WrapperStream[T]):
    """Values of the inner stream up to the first one the filterer skips."""

    def __init__(self, filterer: Filterer, inner: Stream[T]):
        super().__init__(inner)
        self.filterer = filterer

    def _next(self, slot: Slot) -> Outcome:
        outcome = self.inner.next(slot)
        if outcome.done:
            return self._exhaust()
        if not outcome.ok:
            return outcome
        outcome = self.filterer.filter(slot)
        if not outcome.skipped:
            return outcome
        return self._exhaust()


class DropWhileStream(WrapperStream[T]):
    """Values of the inner stream from the first one the filterer skips."""

    def __init__(self, filterer: Filterer, inner: Stream[T]):
        super().__init__(inner)
        self.filterer = filterer
        self.dropping = True

    def _next(self, slot: Slot) -> Outcome:
        outcome = self.inner.next(slot)
        while self.dropping and outcome.ok:
            verdict = self.filterer.filter(slot)
            if verdict.skipped:
                self.dropping = False
                return OK
            if not verdict.ok:
                return verdict
            outcome = self.inner.next(slot)
        if outcome.done:
            return self._exhaust()
        return outcome


class ConcatStream(Stream[T]):
    """Values of each stream in turn."""

    def __init__(self, streams: Sequence[Stream[T]]):
        self.streams = streams
        self.index = 0

    def _next(self, slot: Slot) -> Outcome:
        while self.index < len(self.streams):
            outcome = self.streams[self.index].next(slot)
            if not outcome.done:
                return outcome
            self.index += 1
        return DONE

    def _close(self) -> Outcome:
        result = OK
        for s in self.streams:
            result = first_failure(result, s.close())
        return result


class FlattenStream(Stream[T]):
    """Values of each stream emitted by a stream of streams."""

    def __init__(self, outer: Stream[Stream[T]]):
        self.outer = outer
        self.current: Stream[T] = EMPTY
        self._holder = Slot()

    def _next(self, slot: Slot) -> Outcome:
        outcome = self.current.next(slot)
        while outcome.done:
            pulled = self.outer.next(self._holder)
            if pulled.done:
                self._exhausted = True
                return finish(self.outer.close())
            if not pulled.ok:
                return pulled
            self.current = self._holder.value
            outcome = self.current.next(slot)
        return outcome

    def _close(self) -> Outcome:
        result = self.current.close()
        return first_failure(result, self.outer.close())


def filter_stream(f: Filterer, s: Stream[T]) -> Stream[T]:
    """
    Stream of the values of s that f accepts.

    Errors other than SKIPPED from f are reported through next. Filtering
    a filtered stream combines both filterers with all_of instead of
    stacking a second wrapper. Closing the result closes s.
    """
    if isinstance(s, FilterStream):
        return FilterStream(all_of(s.filterer, f), s.inner)
    return FilterStream(f, s)


def map_stream(f: Mapper, s: Stream[T], slot: Slot) -> Stream[U]:
    """
    Stream of f applied to each value of s.

    slot receives the values read from s. Values f maps to SKIPPED are
    left out. Mapping a mapped stream fuses both mappers into one
    FastCompositeMapper. Closing the result closes s.
    """
    if isinstance(s, MapStream):
        return MapStream(fast_compose(f, s.mapper, slot), s.inner, s.slot)
    if isinstance(f, CompositeMapper):
        return MapStream(f.fast(), s, slot)
    return MapStream(f, s, slot)


def slice_stream(s: Stream[T], start: int, end: int) -> Stream[T]:
    """
    Values of s from index start up to but not including index end.

    A negative end means to the end of s. When the window ends before s
    does, s is closed and any close error comes out of next.
    """
    return SliceStream(s, start, end)


def concat(*streams: Stream[T]) -> Stream[T]:
    """
    Concatenate streams.

    Closing the result closes every stream. With no streams this is EMPTY;
    with one it is that stream.
    """
    if not streams:
        return EMPTY
    if len(streams) == 1:
        return streams[0]
    return ConcatStream(streams)


def flatten(s: Stream[Stream[T]]) -> Stream[T]:
    """
    Turn a stream of streams into a stream of their values.

    Closing the result closes s and the last stream it emitted.
    """
    return FlattenStream(s)


def take_while(f: Filterer, s: Stream[T]) -> Stream[T]:
    """Values of s until f returns SKIPPED, at which point s is closed."""
    return TakeWhileStream(f, s)


def drop_while(f: Filterer, s: Stream[T]) -> Stream[T]:
    """Values of s starting with the first one for which f returns SKIPPED."""
    return DropWhileStream(f, s)
