"""Unit tests for repeatcal.id_factory."""

import threading
import uuid

import pytest

from repeatcal.id_factory import SequentialIdFactory, build_id_factory, uuid_id_factory

pytestmark = pytest.mark.unit


def test_uuid_factory_returns_distinct_uuid_strings():
    first, second = uuid_id_factory(), uuid_id_factory()

    assert first != second
    assert uuid.UUID(first).version == 4


def test_sequential_factory_counts_from_start():
    factory = SequentialIdFactory(prefix="occ", start=5)

    assert [factory() for _ in range(3)] == ["occ-5", "occ-6", "occ-7"]


def test_sequential_factory_is_thread_safe():
    factory = SequentialIdFactory()
    results: list[str] = []
    lock = threading.Lock()

    def worker():
        ids = [factory() for _ in range(200)]
        with lock:
            results.extend(ids)

    threads = [threading.Thread(target=worker) for _ in range(8)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    assert len(results) == 1600
    assert len(set(results)) == 1600


@pytest.mark.parametrize("strategy", ["uuid", "UUID", " uuid "])
def test_build_uuid_strategy(strategy):
    assert build_id_factory(strategy) is uuid_id_factory


def test_build_sequential_strategy_uses_prefix():
    factory = build_id_factory("sequential", prefix="cal")

    assert factory() == "cal-1"


def test_build_unknown_strategy_raises():
    with pytest.raises(ValueError, match="Unknown id strategy"):
        build_id_factory("snowflake")
