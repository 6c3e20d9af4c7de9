"""
Tests for the StateStore update rules.
"""

from host.modules.relay.state_store import StateSnapshot, StateStore


def test_initial_state_is_empty():
    store = StateStore()

    assert store.snapshot() == StateSnapshot()
    assert store.snapshot().is_empty()


def test_set_styles_merges_without_pruning():
    store = StateStore()

    store.apply("SET_STYLES", {"styles": {5: "A"}})
    store.apply("SET_STYLES", {"styles": {7: "B"}})

    assert store.snapshot().styles == {5: "A", 7: "B"}


def test_set_styles_overwrites_existing_keys():
    store = StateStore()
    store.apply("SET_STYLES", {"styles": {5: "A", 6: "C"}})

    store.apply("SET_STYLES", {"styles": {5: "A2"}})

    assert store.snapshot().styles == {5: "A2", 6: "C"}


def test_set_document_replaces_both_maps(sample_document):
    store = StateStore()
    store.apply("SET_DOCUMENT", sample_document)
    store.apply("SET_STYLES", {"styles": {"9": "stale"}})

    store.apply("SET_DOCUMENT", {"nodes": {1: "X"}, "styles": {}})

    snapshot = store.snapshot()
    assert snapshot.nodes == {1: "X"}
    assert snapshot.styles == {}


def test_set_document_missing_maps_become_empty(sample_document):
    store = StateStore()
    store.apply("SET_DOCUMENT", sample_document)

    assert store.apply("SET_DOCUMENT", {}) is True

    assert store.snapshot().nodes == {}
    assert store.snapshot().styles == {}


def test_set_inspection_root_uses_node_id():
    store = StateStore()

    store.apply("SET_INSPECTION_ROOT", {"nodeId": 7})

    assert store.snapshot().inspection_root == 7


def test_set_inspection_root_accepts_legacy_key():
    store = StateStore()

    store.apply("SET_INSPECTION_ROOT", {"inspectionRoot": 12})

    assert store.snapshot().inspection_root == 12


def test_pass_through_kinds_do_not_mutate(sample_document):
    store = StateStore()
    store.apply("SET_DOCUMENT", sample_document)
    before = store.snapshot()

    assert store.apply("TARGET_CONNECTED", None) is False
    assert store.apply("ERROR", {"message": "oops"}) is False
    assert store.apply("SOME_FUTURE_EVENT", {"styles": {"1": "nope"}}) is False

    assert store.snapshot() == before


def test_malformed_payload_is_ignored(caplog):
    store = StateStore()

    assert store.apply("SET_STYLES", ["not", "a", "map"]) is False
    assert store.apply("SET_DOCUMENT", None) is False
    assert store.apply("SET_DOCUMENT", {"nodes": [1, 2], "styles": {"1": "s"}}) is True

    assert store.snapshot().nodes == {}
    assert store.snapshot().styles == {"1": "s"}
    assert "non-object payload" in caplog.text


def test_snapshot_is_isolated_from_later_updates():
    store = StateStore()
    store.apply("SET_STYLES", {"styles": {"1": "a"}})
    snapshot = store.snapshot()

    store.apply("SET_STYLES", {"styles": {"2": "b"}})

    assert snapshot.styles == {"1": "a"}


def test_reset_restores_initial_state(sample_document):
    store = StateStore()
    store.apply("SET_DOCUMENT", sample_document)
    store.apply("SET_INSPECTION_ROOT", {"nodeId": 2})

    store.reset()

    assert store.snapshot() == StateSnapshot()


def test_snapshot_payloads():
    snapshot = StateSnapshot(inspection_root=3, nodes={"3": "n"}, styles={"3": "s"})

    assert snapshot.to_document_payload() == {"styles": {"3": "s"}, "nodes": {"3": "n"}}
    assert snapshot.to_inspection_root_payload() == {"nodeId": 3}
    assert not snapshot.is_empty()
