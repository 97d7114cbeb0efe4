"""
Minimal signal used to announce selection changes to other UI regions
"""

import logging
from typing import Callable, List

logger = logging.getLogger(__name__)

Listener = Callable[[], None]

class Signal:
    def __init__(self, name: str):
        self.name = name
        self._listeners: List[Listener] = []

    def connect(self, listener: Listener) -> Listener:
        """Register a listener; returns it so this can be used as a decorator"""
        if listener not in self._listeners:
            self._listeners.append(listener)
        return listener

    def disconnect(self, listener: Listener) -> None:
        if listener in self._listeners:
            self._listeners.remove(listener)

    def emit(self) -> None:
        logger.debug(f"Emitting {self.name} to {len(self._listeners)} listener(s)")
        for listener in list(self._listeners):
            listener()
