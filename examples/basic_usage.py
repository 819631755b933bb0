#!/usr/bin/env python3
"""
Basic usage examples for pullstream.
"""

import logging
from typing import List

from pullstream import (
    Slot,
    OK,
    count,
    from_values,
    new_generator,
    emit_all,
    filter_stream,
    new_filterer,
    multi_consume,
    StreamConfig,
)
from pullstream.consume import FunctionConsumer
from pullstream.monitor import monitor, LoggingHandler


def power(items: List[int]):
    """Stream of every subset of items, built recursively from generators."""
    def routine(emitter):
        if not items:
            slot = emitter.emit_slot()
            if slot is not None:
                slot.value = []
                emitter.yield_()
            return
        if not emit_all(power(items[:-1]), emitter).ok:
            return
        last = items[-1]

        def add_last(slot):
            slot.value = slot.value + [last]
            return OK

        emit_all(filter_stream(new_filterer(add_last), power(items[:-1])), emitter)

    return new_generator(routine)


def all_digits():
    """Stream of the digits of 0123456789101112..."""
    def routine(emitter):
        number = 0
        while True:
            for ch in str(number):
                if not emitter.emit(ch):
                    return
            number += 1

    return new_generator(routine)


def example_power_set():
    """Example: slice into a power set far too large to build."""
    print("\n=== Power Set Example ===")
    subsets = power(list(range(20))).slice(1000, 1010)
    for subset in subsets:
        print(subset)


def example_digit_puzzle(position: int = 287):
    """Example: find the nth digit of 123456789101112..."""
    print("\n=== Digit Puzzle Example ===")
    with all_digits().slice(position, -1) as digits:
        slot = Slot()
        digits.next(slot)
    print(f"Digit {position}: {slot.value}")


def example_fan_out():
    """Example: feed one stream to two consumers at once."""
    print("\n=== Fan-Out Example ===")
    evens, odds = [], []

    def collect_evens(stream):
        evens.extend(stream.filter(lambda x: x % 2 == 0))

    def first_odds(stream):
        odds.extend(stream.filter(lambda x: x % 2 == 1).slice(0, 3))

    outcome = multi_consume(count().slice(0, 20),
                            FunctionConsumer(collect_evens),
                            FunctionConsumer(first_odds))
    print(f"Evens: {evens}")
    print(f"First odds: {odds}")
    print(f"Upstream closed with {outcome!r}")


def example_monitoring():
    """Example: watch live worker threads."""
    print("\n=== Worker Monitoring Example ===")
    monitor.add_handler(LoggingHandler())
    digits = all_digits()
    print(monitor.get_worker_info())
    digits.close()
    print(monitor.get_worker_info())
    print(from_values(["done"]).collect())


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO)
    StreamConfig.set_defaults(log_level=logging.INFO)

    example_power_set()
    example_digit_puzzle()
    example_fan_out()
    example_monitoring()
