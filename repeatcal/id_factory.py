"""Identifier generation for occurrences and recurrence groups.

Expansion needs fresh identifiers for every occurrence and one per group.
The generator is passed in by the caller so tests can use deterministic ids.
"""

from __future__ import annotations

import itertools
import logging
import threading
import uuid
from typing import Protocol

logger = logging.getLogger(__name__)


class IdFactory(Protocol):
    """Protocol for identifier generator callables."""

    def __call__(self) -> str:
        """Return a new identifier, unique for the lifetime of the factory.

        Returns:
            Identifier string
        """
        ...


def uuid_id_factory() -> str:
    """Return a random UUID4 string."""
    return str(uuid.uuid4())


class SequentialIdFactory:
    """Deterministic ``<prefix>-<n>`` identifiers, counting from ``start``.

    Safe to share between threads.
    """

    def __init__(self, prefix: str = "evt", start: int = 1):
        self.prefix = prefix
        self._counter = itertools.count(start)
        self._lock = threading.Lock()

    def __call__(self) -> str:
        with self._lock:
            value = next(self._counter)
        return f"{self.prefix}-{value}"

    def __repr__(self) -> str:
        return f"SequentialIdFactory(prefix={self.prefix!r})"


def build_id_factory(strategy: str, prefix: str = "evt") -> IdFactory:
    """Create the id factory named by a configuration strategy.

    Args:
        strategy: ``"uuid"`` or ``"sequential"`` (case-insensitive)
        prefix: Prefix used by the sequential strategy

    Returns:
        An IdFactory callable

    Raises:
        ValueError: If the strategy is unknown
    """
    normalized = strategy.strip().lower()
    if normalized == "uuid":
        return uuid_id_factory
    if normalized == "sequential":
        logger.debug("Using sequential id factory with prefix %r", prefix)
        return SequentialIdFactory(prefix=prefix)
    raise ValueError(f"Unknown id strategy: {strategy!r}")
