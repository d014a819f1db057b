"""
Multi-provider selection.

Enables failover or load balancing across several backends. The chain
only selects; it never retries on its own. Callers observe a failure and
call ``advance()`` to move a Failover/ModelRouted chain to the next
backend.
"""

import logging
import threading
from enum import Enum
from typing import Iterable, Optional, Tuple

from agent_core.exceptions import ProviderNotAvailableError
from .base import BaseProvider

logger = logging.getLogger("ProviderChain")


class ProviderStrategy(str, Enum):
    SINGLE = "single"
    FAILOVER = "failover"
    ROUND_ROBIN = "round_robin"
    MODEL_ROUTED = "model_routed"


class ProviderChain:
    """
    Ordered providers plus one shared cursor.

    The cursor is the only shared mutable state. Every change to it is a
    fetch-and-increment under a lock, so concurrent RoundRobin callers
    never land on the same index.
    """

    def __init__(
        self,
        providers: Iterable[BaseProvider],
        strategy: ProviderStrategy = ProviderStrategy.SINGLE,
    ):
        self._providers: Tuple[BaseProvider, ...] = tuple(providers)
        self._strategy = ProviderStrategy(strategy)
        self._cursor = 0
        self._lock = threading.Lock()

    @property
    def strategy(self) -> ProviderStrategy:
        return self._strategy

    @property
    def providers(self) -> Tuple[BaseProvider, ...]:
        return self._providers

    def __len__(self) -> int:
        return len(self._providers)

    def _fetch_add(self) -> int:
        with self._lock:
            value = self._cursor
            self._cursor += 1
            return value

    def _load(self) -> int:
        with self._lock:
            return self._cursor

    def next_provider(self) -> Optional[BaseProvider]:
        """
        Select a provider according to the strategy.

        Returns:
            Optional[BaseProvider]: None when the chain is empty.
        """
        if not self._providers:
            return None

        if self._strategy == ProviderStrategy.SINGLE:
            return self._providers[0]

        if self._strategy == ProviderStrategy.ROUND_ROBIN:
            index = self._fetch_add() % len(self._providers)
        else:
            # Failover / ModelRouted: stay put until advance() is called.
            index = self._load() % len(self._providers)

        return self._providers[index]

    def require_provider(self) -> BaseProvider:
        provider = self.next_provider()
        if provider is None:
            raise ProviderNotAvailableError("No provider available: chain is empty")
        return provider

    def advance(self) -> None:
        """Move the next selection to the following provider."""
        previous = self._fetch_add()
        if self._providers:
            logger.info(
                "Provider chain advanced: %d -> %d",
                previous % len(self._providers),
                (previous + 1) % len(self._providers),
            )
