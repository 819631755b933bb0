"""
pullstream: pull based lazy streams.

Streams are composed with filter, map, slice, concat, flatten, take_while
and drop_while. Imperative producer routines become streams through
generators, and one stream can be fanned out to several consumers running
concurrently with multi_consume.
"""

from pullstream.config import StreamConfig
from pullstream.streams import (
    Stream,
    Slot,
    Outcome,
    OK,
    DONE,
    SKIPPED,
    EMPTY,
    count,
    count_from,
    from_values,
    deferred,
    cycle,
    filter_stream,
    map_stream,
    slice_stream,
    concat,
    flatten,
    take_while,
    drop_while,
    all_of,
    any_of,
    compose,
    fast_compose,
    new_filterer,
    new_mapper,
    predicate,
    mapping,
)
from pullstream.generators import Emitter, new_generator, emit_all
from pullstream.consume import Consumer, multi_consume
from pullstream.monitor import WorkerMonitor, monitor

__version__ = "0.1.0"
__license__ = "BSD-3-Clause"

__all__ = [
    "StreamConfig",
    "Stream",
    "Slot",
    "Outcome",
    "OK",
    "DONE",
    "SKIPPED",
    "EMPTY",
    "count",
    "count_from",
    "from_values",
    "deferred",
    "cycle",
    "filter_stream",
    "map_stream",
    "slice_stream",
    "concat",
    "flatten",
    "take_while",
    "drop_while",
    "all_of",
    "any_of",
    "compose",
    "fast_compose",
    "new_filterer",
    "new_mapper",
    "predicate",
    "mapping",
    "Emitter",
    "new_generator",
    "emit_all",
    "Consumer",
    "multi_consume",
    "WorkerMonitor",
    "monitor",
]

# Configure default settings
StreamConfig.set_defaults()
