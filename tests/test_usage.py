import json
from datetime import datetime, timedelta, timezone

import pytest

from launchdeck.usage import UsageStore, decayed_weight


class FakeClock:
    def __init__(self, start):
        self.now = start

    def __call__(self):
        return self.now

    def advance(self, **kw):
        self.now += timedelta(**kw)


@pytest.fixture
def clock():
    return FakeClock(datetime(2026, 1, 1, 12, 0, tzinfo=timezone.utc))


def test_missing_file_gives_empty_store(tmp_path):
    store = UsageStore.load(tmp_path / "nope" / "usage.json")

    assert len(store) == 0
    assert store.weight("anything") == 0.0


def test_corrupt_file_gives_empty_store(tmp_path):
    path = tmp_path / "usage.json"
    path.write_text("{not json", encoding="utf-8")

    store = UsageStore.load(path)

    assert len(store) == 0
    assert store.persistent


def test_record_launch_persists_and_reloads(tmp_path, clock):
    path = tmp_path / "usage.json"
    store = UsageStore(path, clock=clock)

    store.record_launch("org.example.Firefox")
    store.record_launch("org.example.Firefox")

    data = json.loads(path.read_text(encoding="utf-8"))
    assert data["version"] == 1
    assert data["records"]["org.example.Firefox"]["weight"] == pytest.approx(2.0)

    reloaded = UsageStore.load(path, clock=clock)
    assert reloaded.weight("org.example.Firefox") == pytest.approx(2.0)
    assert reloaded.get("org.example.Firefox").last_used == clock.now


def test_weight_decays_with_half_life(tmp_path, clock):
    store = UsageStore(tmp_path / "usage.json", clock=clock, half_life_days=30)
    store.record_launch("a", flush=False)

    clock.advance(days=30)
    record = store.record_launch("a", flush=False)

    assert record.weight == pytest.approx(1.5)


def test_decayed_weight_ignores_unknown_last_use(clock):
    assert decayed_weight(4.0, None, clock.now) == 4.0
    assert decayed_weight(4.0, clock.now - timedelta(days=60), clock.now, 30) == pytest.approx(1.0)


def test_stale_records_are_pruned_on_load(tmp_path, clock):
    path = tmp_path / "usage.json"
    old = (clock.now - timedelta(days=120)).isoformat()
    recent = (clock.now - timedelta(days=2)).isoformat()
    path.write_text(json.dumps({
        "version": 1,
        "records": {
            "old": {"weight": 3.0, "last_used": old},
            "recent": {"weight": 2.0, "last_used": recent},
            "junk": "not a record",
        },
    }), encoding="utf-8")

    store = UsageStore.load(path, clock=clock, retention_days=90)

    assert store.snapshot() == {"recent": 2.0}


def test_unwritable_location_degrades_to_session_only(tmp_path, clock):
    blocker = tmp_path / "blocker"
    blocker.write_text("a file, not a folder")
    store = UsageStore(blocker / "usage.json", clock=clock)

    record = store.record_launch("a")

    assert record.weight == pytest.approx(1.0)
    assert store.weight("a") == pytest.approx(1.0)
    assert not store.persistent
    assert store.flush() is False


def test_store_without_path_is_session_only(clock):
    store = UsageStore(None, clock=clock)
    store.record_launch("a")

    assert store.weight("a") == 1.0
    assert store.flush() is False
