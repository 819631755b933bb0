"""Generators: streams driven by routines on worker threads."""

from pullstream.generators.channel import Handoff
from pullstream.generators.generator import (
    Emitter,
    Generator,
    GeneratorState,
    new_generator,
    emit_all,
)

__all__ = [
    "Handoff",
    "Emitter",
    "Generator",
    "GeneratorState",
    "new_generator",
    "emit_all",
]
