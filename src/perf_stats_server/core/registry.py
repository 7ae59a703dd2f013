"""Chart-data provider registry.

Providers are registered lazily, once per metric key. The registry may be
shared by several caches, so it guards check-then-register with its own lock.
"""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass
from enum import Enum
from typing import Protocol

from .models import RESPONSE_CODE_KEY_MARKER

logger = logging.getLogger(__name__)


class MetricKind(str, Enum):
    """Kind of chart a provider feeds."""

    PERFORMANCE = "performance"
    RESPONSE_CODE = "response_code"


@dataclass(frozen=True, slots=True)
class MetricProvider:
    """Registered chart-data provider."""

    key: str
    kind: MetricKind


def kind_for_key(key: str) -> MetricKind:
    """Route a metric key to its provider kind."""
    if RESPONSE_CODE_KEY_MARKER in key:
        return MetricKind.RESPONSE_CODE
    return MetricKind.PERFORMANCE


class MetricRegistry(Protocol):
    """Registry interface used by the build cache."""

    def get(self, key: str) -> MetricProvider | None:
        ...

    def register_or_find(self, key: str) -> MetricProvider:
        """Return the provider for key, registering it if absent."""
        ...


class InMemoryMetricRegistry:
    """Process-local provider registry."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._providers: dict[str, MetricProvider] = {}

    def get(self, key: str) -> MetricProvider | None:
        return self._providers.get(key)

    def register_or_find(self, key: str) -> MetricProvider:
        if not key:
            raise ValueError("metric key must not be empty")
        with self._lock:
            provider = self._providers.get(key)
            if provider is None:
                provider = MetricProvider(key=key, kind=kind_for_key(key))
                self._providers[key] = provider
                logger.debug("Registered %s provider %r", provider.kind.value, key)
            return provider

    def keys(self) -> list[str]:
        """Snapshot of registered keys, sorted."""
        with self._lock:
            return sorted(self._providers)

    def __len__(self) -> int:
        return len(self._providers)

    def __contains__(self, key: object) -> bool:
        return key in self._providers
