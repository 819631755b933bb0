"""Pull based streams and the operators that compose them."""

from pullstream.streams.outcome import (
    Outcome,
    OutcomeKind,
    OK,
    DONE,
    SKIPPED,
    Slot,
    Copier,
    assign_copier,
    finish,
    StreamError,
    ContractViolation,
    ProducerNotTerminated,
    GeneratorAbandoned,
)
from pullstream.streams.stream import (
    Stream,
    WrapperStream,
    EMPTY,
    empty,
    count,
    count_from,
    from_values,
    deferred,
    cycle,
)
from pullstream.streams.operators import (
    Filterer,
    Mapper,
    CompositeMapper,
    FastCompositeMapper,
    FilterStream,
    MapStream,
    ALWAYS,
    NEVER,
    all_of,
    any_of,
    new_filterer,
    predicate,
    new_mapper,
    mapping,
    compose,
    fast_compose,
    filter_stream,
    map_stream,
    slice_stream,
    concat,
    flatten,
    take_while,
    drop_while,
)

__all__ = [
    "Outcome",
    "OutcomeKind",
    "OK",
    "DONE",
    "SKIPPED",
    "Slot",
    "Copier",
    "assign_copier",
    "finish",
    "StreamError",
    "ContractViolation",
    "ProducerNotTerminated",
    "GeneratorAbandoned",
    "Stream",
    "WrapperStream",
    "EMPTY",
    "empty",
    "count",
    "count_from",
    "from_values",
    "deferred",
    "cycle",
    "Filterer",
    "Mapper",
    "CompositeMapper",
    "FastCompositeMapper",
    "FilterStream",
    "MapStream",
    "ALWAYS",
    "NEVER",
    "all_of",
    "any_of",
    "new_filterer",
    "predicate",
    "new_mapper",
    "mapping",
    "compose",
    "fast_compose",
    "filter_stream",
    "map_stream",
    "slice_stream",
    "concat",
    "flatten",
    "take_while",
    "drop_while",
]
