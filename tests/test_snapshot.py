"""Tests for snapshot persistence"""

import json
import os
from unittest.mock import patch

import pytest

from beads_server.models import BeadDraft, BeadType, Status
from beads_server.storage.bead_store import BeadStore
from beads_server.storage.errors import PersistError, SnapshotError
from beads_server.storage.snapshot import load_snapshot, save_snapshot

from conftest import bead_record, write_snapshot


def test_missing_file_is_empty(tmp_path):
    assert load_snapshot(tmp_path / "nope.json") == []


def test_empty_file_is_empty(data_file):
    data_file.write_text("")
    assert load_snapshot(data_file) == []


def test_malformed_file_raises(data_file):
    data_file.write_text("{not json")
    with pytest.raises(SnapshotError):
        load_snapshot(data_file)


def test_unknown_status_rejected(data_file):
    write_snapshot(data_file, [bead_record("bd-aaaa", status="blocked")])
    with pytest.raises(SnapshotError):
        load_snapshot(data_file)


def test_legacy_values_migrate(data_file):
    write_snapshot(data_file, [
        bead_record("bd-aaaa", type="epic"),
        bead_record("bd-bbbb", status="resolved"),
        bead_record("bd-cccc", status="wontfix"),
    ])
    beads = {b.id: b for b in load_snapshot(data_file)}
    assert beads["bd-aaaa"].type == BeadType.TASK
    assert beads["bd-bbbb"].status == Status.CLOSED
    assert beads["bd-cccc"].status == Status.CLOSED


def test_round_trip(store, data_file):
    epic = store.create(BeadDraft(title="Epic", tags=["a", "b"]))
    child = store.create_with_parent(BeadDraft(title="Child", priority="high"), epic.id)
    other = store.create(BeadDraft(title="Other", blocked_by=[child.id]))
    store.add_comment(other.id, "alice", "hello")

    reloaded = BeadStore.load(data_file)
    assert {b.id: b for b in reloaded.all()} == {b.id: b for b in store.all()}


def test_unknown_fields_survive_save(data_file):
    write_snapshot(data_file, [bead_record("bd-aaaa", estimate=5)])
    store = BeadStore.load(data_file)
    store.add_comment("bd-aaaa", "bob", "touch")

    document = json.loads(data_file.read_text())
    assert document["beads"][0]["estimate"] == 5


def test_save_writes_indented_document(store, data_file):
    store.create(BeadDraft(title="One"))
    raw = data_file.read_text()
    assert raw.startswith('{\n  "beads": [')
    assert raw.endswith("\n")


def test_failed_replace_keeps_previous_file(store, data_file):
    store.create(BeadDraft(title="One"))
    before = data_file.read_text()

    with patch("beads_server.storage.snapshot.os.replace", side_effect=OSError("disk full")):
        with pytest.raises(PersistError):
            save_snapshot(data_file, [])

    assert data_file.read_text() == before
    leftovers = [name for name in os.listdir(data_file.parent) if name.endswith(".tmp")]
    assert leftovers == []
