"""
Outcomes, slots and errors shared by every stream.
"""

from enum import Enum
from dataclasses import dataclass
from typing import Any, Callable, Generic, Optional, TypeVar

T = TypeVar('T')


class StreamError(Exception):
    """Base class for errors raised by the stream machinery itself."""


class ContractViolation(StreamError):
    """A caller broke the stream, emitter or consumer contract."""


class ProducerNotTerminated(StreamError):
    """A generator routine kept yielding after its stream was closed."""


class GeneratorAbandoned(StreamError):
    """Raised inside a generator routine whose stream gave up on it."""


class OutcomeKind(Enum):
    """Kinds of outcome reported by next, close, filter and map."""
    OK = "ok"
    DONE = "done"
    SKIPPED = "skipped"
    ERROR = "error"


@dataclass(frozen=True)
class Outcome:
    """Result of a stream operation."""
    kind: OutcomeKind
    error: Optional[BaseException] = None

    @classmethod
    def failure(cls, error: BaseException) -> 'Outcome':
        """Create an error outcome carrying error."""
        if error is None:
            raise ValueError("failure outcome needs an error")
        return cls(OutcomeKind.ERROR, error)

    @property
    def ok(self) -> bool:
        return self.kind is OutcomeKind.OK

    @property
    def done(self) -> bool:
        return self.kind is OutcomeKind.DONE

    @property
    def skipped(self) -> bool:
        return self.kind is OutcomeKind.SKIPPED

    @property
    def failed(self) -> bool:
        return self.kind is OutcomeKind.ERROR

    def raise_for_error(self) -> None:
        """Raise the carried error if this is an error outcome."""
        if self.failed:
            raise self.error

    def __repr__(self) -> str:
        if self.failed:
            return f"Outcome.failure({self.error!r})"
        return f"Outcome.{self.kind.name}"


OK = Outcome(OutcomeKind.OK)
DONE = Outcome(OutcomeKind.DONE)
SKIPPED = Outcome(OutcomeKind.SKIPPED)


def finish(outcome: Outcome) -> Outcome:
    """Turn a close outcome into what next should report: OK becomes DONE."""
    if outcome.ok:
        return DONE
    return outcome


def first_failure(current: Outcome, outcome: Outcome) -> Outcome:
    """Keep the first non-OK outcome of a series of closes."""
    if current.ok:
        return outcome
    return current


class Slot(Generic[T]):
    """Caller supplied storage that streams write their values into."""

    __slots__ = ("value",)

    def __init__(self, value: Any = None):
        self.value = value

    def __repr__(self) -> str:
        return f"Slot({self.value!r})"


Copier = Callable[[Slot, Slot], None]


def assign_copier(src: Slot, dest: Slot) -> None:
    """Default copier: plain assignment."""
    dest.value = src.value
