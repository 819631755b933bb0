"""
Rendezvous channel used to hand values between a stream and its worker.
"""

import threading
from typing import Any, Generic, TypeVar

T = TypeVar('T')


class Handoff(Generic[T]):
    """
    Unbuffered single slot channel.

    ``send`` blocks until a receiver has taken the item and ``receive``
    blocks until an item is sent, so the two sides meet at every transfer.
    """

    def __init__(self):
        self._cond = threading.Condition()
        self._item: Any = None
        self._full = False
        self._sent = 0
        self._received = 0

    def send(self, item: T) -> None:
        with self._cond:
            while self._full:
                self._cond.wait()
            self._item = item
            self._full = True
            self._sent += 1
            ticket = self._sent
            self._cond.notify_all()
            while self._received < ticket:
                self._cond.wait()

    def receive(self) -> T:
        with self._cond:
            while not self._full:
                self._cond.wait()
            item = self._item
            self._item = None
            self._full = False
            self._received += 1
            self._cond.notify_all()
            return item
