"""
Tests for Candidate mapping and the Snapshot Store.
"""
import threading
from datetime import datetime, timedelta, timezone

import pytest

from mintwatch.monitor.snapshot import SnapshotStore
from mintwatch.protocol.types.candidate import (
    Snapshot, candidate_from_api, shorten, status_label
)
from mintwatch.protocol.types.common import CandidateStatus, MalformedAmount

from helpers import KEY_A, KEY_B, KEY_C, make_entry


def snapshot_of(*entries, generation=1):
    now = datetime.now(timezone.utc)
    return Snapshot(candidates=tuple(candidate_from_api(e, now) for e in entries), generation=generation)


# ═══════════════════════════════════════════════════════════════════
# CANDIDATE MAPPING
# ═══════════════════════════════════════════════════════════════════

def test_candidate_from_api_maps_fields():
    entry = make_entry(
        KEY_A,
        status=2,
        total_stake="2500000000000000000",
        reward="500000000000000000",
        absent_times=3,
        stakes=[{"owner": "Mx" + "22" * 20, "coin": "MNT",
                 "value": "1000000000000000000", "bip_value": "2000000000000000000"}],
    )
    c = candidate_from_api(entry, datetime(2018, 10, 1))

    assert c.pub_key == KEY_A
    assert c.status == CandidateStatus.VALIDATOR
    assert c.is_validator
    assert c.total_stake == "2500000000000000000"
    assert c.total_stake_display == 2.5
    assert c.commission == 10
    assert c.created_at_block == 12
    assert c.accumulated_reward_display == 0.5
    assert c.absent_times == 3
    assert len(c.stakes) == 1
    assert c.stakes[0].coin == "MNT"
    assert c.stakes[0].value_display == 1.0
    assert c.stakes[0].bip_value_display == 2.0
    assert c.updated_at == datetime(2018, 10, 1)


def test_candidate_from_api_empty_stake_is_zero():
    c = candidate_from_api(make_entry(KEY_A, total_stake=""), datetime.now(timezone.utc))
    assert c.total_stake_display == 0.0


def test_candidate_from_api_bad_amount():
    with pytest.raises(MalformedAmount):
        candidate_from_api(make_entry(KEY_A, total_stake="lots"), datetime.now(timezone.utc))


def test_candidate_from_api_missing_candidate():
    with pytest.raises(KeyError):
        candidate_from_api({"accumulated_reward": "0"}, datetime.now(timezone.utc))


@pytest.mark.parametrize("entry", [
    {"candidate": None},
    {"candidate": "Mp00"},
    "not an entry",
    None,
])
def test_candidate_from_api_wrong_shape(entry):
    with pytest.raises(TypeError):
        candidate_from_api(entry, datetime.now(timezone.utc))


@pytest.mark.parametrize("stakes", [[None], ["stake"], "stakes"])
def test_candidate_from_api_wrong_stake_shape(stakes):
    with pytest.raises(TypeError):
        candidate_from_api(make_entry(KEY_A, stakes=stakes), datetime.now(timezone.utc))


def test_candidate_is_frozen():
    c = candidate_from_api(make_entry(KEY_A), datetime.now(timezone.utc))
    with pytest.raises(Exception):
        c.status = CandidateStatus.CANDIDATE


def test_candidate_equality_ignores_refresh_time():
    first = candidate_from_api(make_entry(KEY_A), datetime.now(timezone.utc))
    later = candidate_from_api(make_entry(KEY_A), datetime.now(timezone.utc) + timedelta(minutes=1))
    assert first == later
    assert hash(first) == hash(later)

    demoted = candidate_from_api(make_entry(KEY_A, status=1), datetime.now(timezone.utc))
    assert first != demoted


def test_display_helpers():
    assert status_label(2) == "Validator"
    assert status_label(CandidateStatus.CANDIDATE) == "Candidate"
    assert shorten(KEY_A) == "Mpaaaa...aaaa"
    assert shorten("short") == "short"


# ═══════════════════════════════════════════════════════════════════
# SNAPSHOT STORE
# ═══════════════════════════════════════════════════════════════════

def test_empty_store():
    store = SnapshotStore()
    assert len(store.current) == 0
    assert store.find_by_public_key(KEY_A) is None
    assert store.search("aa") == []
    assert store.is_validator(KEY_A) is False


def test_find_by_public_key_after_replace():
    store = SnapshotStore()
    store.replace(snapshot_of(make_entry(KEY_A), make_entry(KEY_B)))

    found = store.find_by_public_key(KEY_B)
    assert found is not None
    assert found.pub_key == KEY_B
    assert store.find_by_public_key(KEY_C) is None


def test_replace_forgets_previous_snapshot():
    store = SnapshotStore()
    store.replace(snapshot_of(make_entry(KEY_A), generation=1))
    store.replace(snapshot_of(make_entry(KEY_B), generation=2))

    assert store.find_by_public_key(KEY_A) is None
    assert store.find_by_public_key(KEY_B) is not None
    assert store.current.generation == 2


def test_find_is_exact_match():
    store = SnapshotStore()
    store.replace(snapshot_of(make_entry(KEY_A)))
    assert store.find_by_public_key(KEY_A.upper()) is None
    assert store.find_by_public_key(KEY_A[:-2]) is None


def test_is_validator():
    store = SnapshotStore()
    store.replace(snapshot_of(make_entry(KEY_A, status=2), make_entry(KEY_B, status=1)))

    assert store.is_validator(KEY_A) is True
    assert store.is_validator(KEY_B) is False   # known, only a candidate
    assert store.is_validator(KEY_C) is False   # absent


def test_search_case_insensitive_substring():
    key = "XYZABCDEF"
    store = SnapshotStore()
    store.replace(snapshot_of(make_entry(key)))

    assert [c.pub_key for c in store.search("abc")] == [key]
    assert store.search("zzz") == []


def test_search_keeps_snapshot_order():
    store = SnapshotStore()
    store.replace(snapshot_of(make_entry(KEY_B), make_entry(KEY_C), make_entry(KEY_A)))

    # Every key starts with "Mp"
    assert [c.pub_key for c in store.search("mp")] == [KEY_B, KEY_C, KEY_A]
    assert [c.pub_key for c in store.search("ABCDEF")] == [KEY_C]


def test_search_result_is_materialized():
    store = SnapshotStore()
    store.replace(snapshot_of(make_entry(KEY_A)))
    result = store.search("aa")
    store.replace(snapshot_of(make_entry(KEY_B)))

    assert isinstance(result, list)
    assert [c.pub_key for c in result] == [KEY_A]


def test_reset_empties_store():
    store = SnapshotStore()
    store.replace(snapshot_of(make_entry(KEY_A), generation=4))
    store.reset()

    assert len(store.current) == 0
    assert store.current.generation == 5


def test_readers_never_see_mixed_snapshots():
    """Each reader sees either all-A or all-B keys, never a mix."""
    store = SnapshotStore()
    snap_a = snapshot_of(*[make_entry("Mp" + f"{i:02x}" * 32) for i in range(0, 50)], generation=1)
    snap_b = snapshot_of(*[make_entry("Mp" + f"{i:02x}" * 32) for i in range(100, 150)], generation=2)
    keys_a = {c.pub_key for c in snap_a.candidates}
    keys_b = {c.pub_key for c in snap_b.candidates}
    store.replace(snap_a)

    errors = []
    stop = threading.Event()

    def reader():
        while not stop.is_set():
            keys = {c.pub_key for c in store.search("mp")}
            if keys != keys_a and keys != keys_b:
                errors.append(keys)

    threads = [threading.Thread(target=reader) for _ in range(4)]
    for t in threads:
        t.start()
    for i in range(200):
        store.replace(snap_b if i % 2 else snap_a)
    stop.set()
    for t in threads:
        t.join()

    assert errors == []


def test_default_timestamps_are_utc_aware():
    assert Snapshot().taken_at.tzinfo is timezone.utc
    store = SnapshotStore()
    store.reset()
    assert store.current.taken_at.tzinfo is timezone.utc
