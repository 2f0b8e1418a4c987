"""
Layer identifier generation.

Every id-minting operation in the tree editor takes an optional ``id_factory``:
a zero-argument callable returning a fresh string id. Production code uses the
UUID-based default; tests and scripted edits inject a SequentialIdGenerator.
"""

import itertools
import logging
import threading
import uuid as uuid_module
from typing import Callable

IdFactory = Callable[[], str]


def generate_layer_id() -> str:
    """Mint a new globally unique layer id

    Returns:
        Random UUID4 string
    """
    return str(uuid_module.uuid4())


class SequentialIdGenerator:
    """Deterministic id factory producing "<prefix>-1", "<prefix>-2", ...

    Instances are callables, so one can be passed anywhere an id_factory
    is accepted.
    """

    def __init__(self, prefix: str = 'layer', start: int = 1):
        self._logger = logging.getLogger('IdGenerator')
        self._prefix = prefix
        self._counter = itertools.count(start)
        self._lock = threading.Lock()

    def __call__(self) -> str:
        with self._lock:
            value = next(self._counter)
        layer_id = f"{self._prefix}-{value}"
        self._logger.debug(f"Minted id: {layer_id}")
        return layer_id

    def __repr__(self):
        return f"SequentialIdGenerator(prefix='{self._prefix}')"


def resolve_id_factory(id_factory: IdFactory = None) -> IdFactory:
    """Return the given factory, or the UUID-based default when None"""
    return id_factory if id_factory is not None else generate_layer_id
