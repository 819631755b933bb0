"""Consumers and the fan-out engine."""

from pullstream.consume.consumers import (
    Consumer,
    FunctionConsumer,
    ErrorReportingConsumer,
    modify_consumer,
    modify_error_consumer,
    filter_consumer,
    compose_consumers,
    first_only,
)
from pullstream.consume.multi import SplitStream, multi_consume

__all__ = [
    "Consumer",
    "FunctionConsumer",
    "ErrorReportingConsumer",
    "modify_consumer",
    "modify_error_consumer",
    "filter_consumer",
    "compose_consumers",
    "first_only",
    "SplitStream",
    "multi_consume",
]
