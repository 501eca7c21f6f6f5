#!/usr/bin/env python3
"""
Tests for the in-memory schema cache: TTL expiry, lazy eviction and
concurrent access.
"""

import threading
from concurrent.futures import ThreadPoolExecutor

import pytest

from datasf_mcp.correction import SchemaCache, DatasetSchema, ColumnInfo


class FakeClock:
    def __init__(self, now: float = 1000.0):
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float):
        self.now += seconds


def make_schema(name: str = "Police Incidents", fields=("incident_id", "category")) -> DatasetSchema:
    return DatasetSchema(
        columns=[ColumnInfo(name=f.replace("_", " ").title(), field_name=f, data_type="text") for f in fields],
        dataset_name=name,
        row_count=42,
    )


def test_get_returns_stored_schema():
    cache = SchemaCache(clock=FakeClock())
    schema = make_schema()

    cache.set("wg3w-h783", schema)

    assert cache.get("wg3w-h783") == schema
    assert cache.has("wg3w-h783")


def test_missing_entry_is_absent():
    cache = SchemaCache(clock=FakeClock())

    assert cache.get("abcd-1234") is None
    assert not cache.has("abcd-1234")


def test_default_ttl_is_five_minutes():
    assert SchemaCache().ttl_seconds == 300


def test_entry_expires_after_ttl_and_is_evicted():
    clock = FakeClock()
    cache = SchemaCache(ttl_seconds=300, clock=clock)
    cache.set("wg3w-h783", make_schema())

    clock.advance(300.5)

    assert cache.get("wg3w-h783") is None
    assert not cache.has("wg3w-h783")
    assert len(cache) == 0


def test_entry_is_valid_exactly_at_ttl():
    clock = FakeClock()
    cache = SchemaCache(ttl_seconds=60, clock=clock)
    cache.set("wg3w-h783", make_schema())

    clock.advance(60)

    assert cache.has("wg3w-h783")


def test_has_evicts_expired_entry():
    clock = FakeClock()
    cache = SchemaCache(ttl_seconds=10, clock=clock)
    cache.set("wg3w-h783", make_schema())
    assert len(cache) == 1

    clock.advance(11)

    assert not cache.has("wg3w-h783")
    assert len(cache) == 0


def test_set_refreshes_timestamp():
    clock = FakeClock()
    cache = SchemaCache(ttl_seconds=10, clock=clock)
    cache.set("wg3w-h783", make_schema("old"))

    clock.advance(8)
    cache.set("wg3w-h783", make_schema("new"))
    clock.advance(8)

    assert cache.get("wg3w-h783").dataset_name == "new"


def test_clear_removes_everything():
    cache = SchemaCache(clock=FakeClock())
    cache.set("aaaa-1111", make_schema())
    cache.set("bbbb-2222", make_schema())

    cache.clear()

    assert len(cache) == 0
    assert cache.get("aaaa-1111") is None


def test_negative_ttl_rejected():
    with pytest.raises(ValueError):
        SchemaCache(ttl_seconds=-1)


def test_cached_schema_is_immutable():
    cache = SchemaCache(clock=FakeClock())
    cache.set("wg3w-h783", make_schema())

    schema = cache.get("wg3w-h783")

    assert isinstance(schema.columns, tuple)
    with pytest.raises(AttributeError):
        schema.dataset_name = "changed"


def test_concurrent_reads_and_writes_never_see_partial_schemas():
    cache = SchemaCache()
    schemas = {f"ds{i:02d}-0000": make_schema(f"dataset {i}", fields=(f"f{i}_a", f"f{i}_b")) for i in range(20)}
    errors = []
    barrier = threading.Barrier(8)

    def worker(offset: int):
        barrier.wait()
        for round_number in range(200):
            dataset_id = list(schemas)[(offset + round_number) % len(schemas)]
            if round_number % 3 == 0:
                cache.set(dataset_id, schemas[dataset_id])
            found = cache.get(dataset_id)
            if found is not None and found != schemas[dataset_id]:
                errors.append((dataset_id, found))
            if round_number % 50 == 0:
                cache.has(dataset_id)

    with ThreadPoolExecutor(max_workers=8) as pool:
        list(pool.map(worker, range(8)))

    assert errors == []
    assert len(cache) == len(schemas)
