"""Tests for core.status_store — file-backed status records."""

import json
import os

import pytest

from core.status_store import StatusStore


class FakeClock:
    def __init__(self, now=1000.0):
        self.now = now

    def __call__(self):
        return self.now


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def store(tmp_path, clock):
    return StatusStore(str(tmp_path), ttl=60, max_log_lines=3, clock=clock)


def test_init_creates_queued_record(store, tmp_path):
    record = store.init("job1")
    assert record["phase"] == "queued"
    assert record["logs"] == []
    assert record["expires_at"] == 1060.0
    assert json.loads((tmp_path / "job1.json").read_text())["id"] == "job1"


def test_set_phase_and_complete(store):
    store.init("job1")
    store.set_phase("job1", "generating")
    assert store.get("job1")["phase"] == "generating"
    store.complete("job1", "/out/site")
    record = store.get("job1")
    assert record["phase"] == "ready"
    assert record["result_location"] == "/out/site"
    assert record["error"] is None


def test_fail_records_error(store):
    store.init("job1")
    store.fail("job1", RuntimeError("boom"))
    record = store.get("job1")
    assert record["phase"] == "failed"
    assert record["error"] == "boom"
    store.fail("job1", "Generation cancelled by user", phase="cancelled")
    assert store.get("job1")["phase"] == "cancelled"


def test_unknown_phase_rejected(store):
    store.init("job1")
    with pytest.raises(ValueError):
        store.set_phase("job1", "sleeping")


@pytest.mark.parametrize("bad_id", ["", "../etc/passwd", "a/b", "x" * 65])
def test_invalid_request_id_rejected(store, bad_id):
    with pytest.raises(ValueError):
        store.init(bad_id)


def test_log_ring_keeps_latest_lines(store):
    store.init("job1")
    for i in range(5):
        store.append_log("job1", f"  line {i}  ")
    store.append_log("job1", "   ")
    assert store.get("job1")["logs"] == ["line 2", "line 3", "line 4"]


def test_update_refreshes_expiry(store, clock):
    store.init("job1")
    clock.now += 50
    store.append_log("job1", "still working")
    clock.now += 50
    assert store.get("job1") is not None


def test_expired_record_reads_as_missing(store, clock):
    store.init("job1")
    clock.now += 61
    assert store.get("job1") is None


def test_missing_record(store):
    assert store.get("nope") is None


def test_cleanup_removes_expired_and_skips_malformed(store, clock, tmp_path):
    store.init("old")
    clock.now += 30
    store.init("fresh")
    (tmp_path / "broken.json").write_text("{ not json")
    (tmp_path / "notes.txt").write_text("ignored")
    clock.now += 40

    assert store.cleanup() == 1
    remaining = sorted(os.listdir(tmp_path))
    assert remaining == ["broken.json", "fresh.json", "notes.txt"]


def test_malformed_record_reads_as_missing(store, tmp_path):
    (tmp_path / "job1.json").write_text("{ not json")
    assert store.get("job1") is None


def test_writes_leave_no_temp_files(store, tmp_path):
    store.init("job1")
    for i in range(3):
        store.append_log("job1", f"line {i}")
    assert os.listdir(tmp_path) == ["job1.json"]
