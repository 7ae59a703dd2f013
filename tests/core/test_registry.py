from __future__ import annotations

import threading
from concurrent.futures import ThreadPoolExecutor

import pytest

from perf_stats_server.core.registry import InMemoryMetricRegistry, MetricKind, kind_for_key


def test_kind_routed_by_key() -> None:
    assert kind_for_key("PerformanceTest_A") is MetricKind.PERFORMANCE
    assert kind_for_key("ResponseCode_PerformanceTest_A") is MetricKind.RESPONSE_CODE


def test_register_or_find_is_idempotent() -> None:
    registry = InMemoryMetricRegistry()
    first = registry.register_or_find("PerformanceTest_A")
    second = registry.register_or_find("PerformanceTest_A")
    assert first is second
    assert len(registry) == 1
    assert registry.get("PerformanceTest_A") is first
    assert registry.get("missing") is None
    assert "PerformanceTest_A" in registry


def test_register_rejects_empty_key() -> None:
    with pytest.raises(ValueError):
        InMemoryMetricRegistry().register_or_find("")


def test_concurrent_registration_registers_once() -> None:
    registry = InMemoryMetricRegistry()
    barrier = threading.Barrier(8)

    def register() -> object:
        barrier.wait()
        return registry.register_or_find("ResponseCode_PerformanceTest_A")

    with ThreadPoolExecutor(max_workers=8) as pool:
        providers = list(pool.map(lambda _: register(), range(8)))

    assert len({id(p) for p in providers}) == 1
    assert registry.keys() == ["ResponseCode_PerformanceTest_A"]
