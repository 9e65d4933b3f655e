"""
Tests for the node client and the Validator Poller (primary/secondary fallback).
"""
from unittest.mock import Mock

import pytest
import requests

from mintwatch.monitor.poller import ValidatorPoller
from mintwatch.monitor.snapshot import SnapshotStore
from mintwatch.protocol.types.common import (
    CandidateStatus, MalformedResponse, NodeUnavailable, PollUnreachable
)
from mintwatch.rpc.client import NodeClient

from helpers import KEY_A, KEY_B, broken_response, json_response, make_entry

PRIMARY = "http://primary:8841"
SECONDARY = "http://secondary:8841"


def validators_body(*entries, code=0):
    return {"code": code, "result": list(entries)}


def client_with(body_or_response):
    session = Mock(spec=requests.Session)
    if isinstance(body_or_response, Exception):
        session.get.side_effect = body_or_response
    elif isinstance(body_or_response, dict):
        session.get.return_value = json_response(body_or_response)
    else:
        session.get.return_value = body_or_response
    return session


# ═══════════════════════════════════════════════════════════════════
# NODE CLIENT
# ═══════════════════════════════════════════════════════════════════

def test_client_get_validators(session):
    session.get.return_value = json_response(validators_body(make_entry(KEY_A)))
    client = NodeClient(PRIMARY + "/", timeout=3, session=session)

    result = client.get_validators()

    assert result[0]["candidate"]["pub_key"] == KEY_A
    session.get.assert_called_once_with(f"{PRIMARY}/api/validators", timeout=3)


def test_client_network_error(dead_session):
    client = NodeClient(PRIMARY, session=dead_session)
    with pytest.raises(NodeUnavailable):
        client.get_validators()


def test_client_non_json(session):
    session.get.return_value = broken_response()
    client = NodeClient(PRIMARY, session=session)
    with pytest.raises(MalformedResponse):
        client.get_validators()


def test_client_nonzero_code(session):
    session.get.return_value = json_response({"code": 1, "log": "not ready"})
    client = NodeClient(PRIMARY, session=session)
    with pytest.raises(NodeUnavailable):
        client.get_validators()


def test_client_transaction_count(session):
    session.get.return_value = json_response({"code": 0, "result": {"count": 5}})
    client = NodeClient(PRIMARY, session=session)

    assert client.get_transaction_count("Mx" + "01" * 20) == 5
    session.get.assert_called_once_with(f"{PRIMARY}/api/transactionCount/Mx{'01' * 20}", timeout=10.0)


def test_client_send_transaction(session):
    session.post.return_value = json_response({"code": 0, "result": {"hash": "Mtabc"}})
    client = NodeClient(PRIMARY, session=session)

    assert client.send_transaction("f8a0")["result"]["hash"] == "Mtabc"
    session.post.assert_called_once_with(
        f"{PRIMARY}/api/sendTransaction", json={"transaction": "f8a0"}, timeout=10.0
    )


# ═══════════════════════════════════════════════════════════════════
# POLLER
# ═══════════════════════════════════════════════════════════════════

def make_poller(primary_session, secondary_session=None, store=None):
    store = store or SnapshotStore()
    secondary = NodeClient(SECONDARY, session=secondary_session) if secondary_session else None
    return ValidatorPoller(store, NodeClient(PRIMARY, session=primary_session), secondary), store


def test_poll_from_primary():
    primary = client_with(validators_body(make_entry(KEY_A, status=2), make_entry(KEY_B, status=1)))
    secondary = client_with(validators_body())
    poller, store = make_poller(primary, secondary)

    snapshot = poller.poll()

    assert [c.pub_key for c in snapshot.candidates] == [KEY_A, KEY_B]
    assert snapshot.candidates[1].status == CandidateStatus.CANDIDATE
    assert snapshot.candidates[0].total_stake_display == 1.0
    secondary.get.assert_not_called()
    # poll() alone does not touch the store
    assert len(store.current) == 0


def test_poll_falls_back_to_secondary_on_network_error():
    primary = client_with(requests.ConnectionError("down"))
    secondary = client_with(validators_body(make_entry(KEY_B)))
    poller, _ = make_poller(primary, secondary)

    snapshot = poller.poll()

    assert [c.pub_key for c in snapshot.candidates] == [KEY_B]
    primary.get.assert_called_once()
    secondary.get.assert_called_once_with(f"{SECONDARY}/api/validators", timeout=10.0)


def test_poll_falls_back_on_malformed_json():
    primary = client_with(broken_response())
    secondary = client_with(validators_body(make_entry(KEY_A)))
    poller, _ = make_poller(primary, secondary)

    assert len(poller.poll()) == 1


def test_poll_falls_back_on_malformed_entry():
    primary = client_with(validators_body(make_entry(KEY_A, total_stake="garbage")))
    secondary = client_with(validators_body(make_entry(KEY_A)))
    poller, _ = make_poller(primary, secondary)

    assert poller.poll().candidates[0].total_stake_display == 1.0


def test_poll_both_unreachable():
    primary = client_with(requests.ConnectionError("down"))
    secondary = client_with(requests.Timeout("slow"))
    poller, _ = make_poller(primary, secondary)

    with pytest.raises(PollUnreachable):
        poller.poll()
    # Exactly one retry against the secondary
    assert primary.get.call_count == 1
    assert secondary.get.call_count == 1


def test_poll_unreachable_without_secondary():
    poller, _ = make_poller(client_with(requests.ConnectionError("down")))
    with pytest.raises(PollUnreachable):
        poller.poll()


def test_refresh_replaces_snapshot():
    primary = client_with(validators_body(make_entry(KEY_A)))
    poller, store = make_poller(primary)

    snapshot = poller.refresh()

    assert store.current is snapshot
    assert store.is_validator(KEY_A)


def test_failed_refresh_keeps_old_snapshot():
    primary = Mock(spec=requests.Session)
    primary.get.side_effect = [
        json_response(validators_body(make_entry(KEY_A))),
        requests.ConnectionError("down"),
    ]
    secondary = client_with(requests.ConnectionError("down too"))
    poller, store = make_poller(primary, secondary)

    first = poller.refresh()
    with pytest.raises(PollUnreachable):
        poller.refresh()

    assert store.current is first
    assert store.is_validator(KEY_A)


def test_generations_increase():
    primary = client_with(validators_body(make_entry(KEY_A)))
    poller, store = make_poller(primary)

    g1 = poller.refresh().generation
    g2 = poller.refresh().generation
    assert g2 == g1 + 1


def test_identical_polls_give_equal_snapshots():
    body = validators_body(
        make_entry(KEY_A, status=2, stakes=[{"owner": "Mx" + "22" * 20, "coin": "MNT",
                                             "value": "5", "bip_value": "5"}]),
        make_entry(KEY_B, status=1),
    )
    poller, _ = make_poller(client_with(body))

    first = poller.poll()
    second = poller.poll()

    assert list(first.candidates) == list(second.candidates)


@pytest.mark.parametrize("bad_entry", [
    {"candidate": None},
    make_entry(KEY_A, stakes=[None]),
    make_entry(KEY_A, total_stake="1" + "0" * 400),
    "garbage",
])
def test_poll_falls_back_on_wrongly_shaped_entry(bad_entry):
    primary = client_with(validators_body(bad_entry))
    secondary = client_with(validators_body(make_entry(KEY_B)))
    poller, _ = make_poller(primary, secondary)

    assert [c.pub_key for c in poller.poll().candidates] == [KEY_B]


def test_wrongly_shaped_entries_on_both_nodes_are_unreachable():
    primary = client_with(validators_body({"candidate": None}))
    secondary = client_with(validators_body(make_entry(KEY_A, stakes=[None])))
    poller, store = make_poller(primary, secondary)
    before = store.current

    with pytest.raises(PollUnreachable):
        poller.refresh()
    assert store.current is before


def test_generation_moves_past_reset():
    poller, store = make_poller(client_with(validators_body(make_entry(KEY_A))))

    poller.refresh()
    store.reset()
    reset_generation = store.current.generation

    assert poller.refresh().generation == reset_generation + 1
