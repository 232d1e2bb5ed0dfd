"""Tests for epics: parent/child moves and derived status"""

import pytest

from beads_server.models import Bead, BeadDraft, BeadUpdate, Status
from beads_server.storage.bead_store import BeadStore
from beads_server.storage.errors import ConflictError, InvalidError, NotFoundError
from beads_server.storage.graph import derive_epic_status


def beads_with(*statuses):
    return [Bead(title=str(i), status=s) for i, s in enumerate(statuses)]


class TestDeriveStatus:
    @pytest.mark.parametrize("statuses,expected", [
        ((Status.CLOSED, Status.DELETED), Status.CLOSED),
        ((Status.CLOSED, Status.IN_PROGRESS, Status.OPEN), Status.IN_PROGRESS),
        ((Status.CLOSED, Status.OPEN, Status.NOT_READY), Status.OPEN),
        ((Status.NOT_READY, Status.NOT_READY), Status.NOT_READY),
        ((Status.DELETED, Status.NOT_READY), Status.NOT_READY),
    ])
    def test_derivation(self, statuses, expected):
        assert derive_epic_status(beads_with(*statuses)) == expected


class TestEpicLifecycle:
    def test_epic_scenario(self, store, make_bead):
        epic = make_bead("E")
        c1 = make_bead("C1", parent=epic)
        c2 = make_bead("C2", parent=epic)

        detail = store.detail(epic.id)
        assert detail.is_epic
        assert detail.status == Status.OPEN
        assert detail.progress.total == 2
        assert detail.progress.open == 2

        store.update(c1.id, BeadUpdate(status=Status.CLOSED))
        assert store.get(epic.id).status == Status.OPEN

        store.update(c2.id, BeadUpdate(status=Status.CLOSED))
        assert store.get(epic.id).status == Status.CLOSED

        assert store.delete(epic.id).bead.status == Status.DELETED
        with pytest.raises(ConflictError):
            store.update(epic.id, BeadUpdate(status=Status.OPEN))

    def test_new_child_reopens_closed_epic(self, store, make_bead):
        epic = make_bead("E")
        child = make_bead("C", parent=epic)
        store.update(child.id, BeadUpdate(status=Status.CLOSED))
        assert store.get(epic.id).status == Status.CLOSED

        make_bead("New", parent=epic)
        assert store.get(epic.id).status == Status.OPEN

    def test_all_children_deleted_closes_epic(self, store, make_bead):
        epic = make_bead("E")
        child = make_bead("C", parent=epic)
        store.delete(child.id)
        assert store.get(epic.id).status == Status.CLOSED
        store.delete(epic.id)

    def test_delete_epic_with_live_child_conflicts(self, store, make_bead):
        epic = make_bead("E")
        make_bead("C", parent=epic)
        with pytest.raises(ConflictError):
            store.delete(epic.id)

    def test_child_detail_has_parent_title(self, store, make_bead):
        epic = make_bead("Big epic")
        child = make_bead("C", parent=epic)
        assert store.detail(child.id).parent_title == "Big epic"
        assert store.children_of(epic.id) == [store.get(child.id)]
        assert store.is_epic(epic.id)
        assert not store.is_epic(child.id)


class TestCreateWithParent:
    def test_missing_parent(self, store):
        with pytest.raises(NotFoundError):
            store.create_with_parent(BeadDraft(title="C"), "bd-nope")

    def test_deleted_parent(self, store, make_bead):
        parent = make_bead("P")
        store.delete(parent.id)
        with pytest.raises(InvalidError):
            make_bead("C", parent=parent)

    def test_nesting_conflicts(self, store, make_bead):
        epic = make_bead("E")
        child = make_bead("C", parent=epic)
        with pytest.raises(ConflictError):
            make_bead("Grandchild", parent=child)
        assert len(store) == 2


class TestMoves:
    def test_move_into_and_out(self, store, make_bead):
        epic = make_bead("E")
        bead = make_bead("B")

        moved = store.move_into(bead.id, epic.id)
        assert moved.parent_id == epic.id
        assert store.is_epic(epic.id)

        store.update(bead.id, BeadUpdate(status=Status.CLOSED))
        assert store.get(epic.id).status == Status.CLOSED

        out = store.move_out(bead.id)
        assert out.parent_id == ""
        assert not store.is_epic(epic.id)
        assert store.get(epic.id).status == Status.OPEN

    def test_move_between_epics_recomputes_both(self, store, make_bead):
        first, second = make_bead("E1"), make_bead("E2")
        make_bead("Stays", parent=first, status="not_ready")
        mover = make_bead("Mover", parent=first)
        store.claim(mover.id, "alice")
        assert store.get(first.id).status == Status.IN_PROGRESS

        store.move_into(mover.id, second.id)
        assert store.get(first.id).status == Status.NOT_READY
        assert store.get(second.id).status == Status.IN_PROGRESS

    def test_move_into_self_invalid(self, store, make_bead):
        bead = make_bead()
        with pytest.raises(InvalidError):
            store.move_into(bead.id, bead.id)

    def test_move_out_without_parent_invalid(self, store, make_bead):
        bead = make_bead()
        with pytest.raises(InvalidError):
            store.move_out(bead.id)

    def test_move_epic_conflicts(self, store, make_bead):
        epic, target = make_bead("E"), make_bead("T")
        make_bead("C", parent=epic)
        with pytest.raises(ConflictError):
            store.move_into(epic.id, target.id)

    def test_move_into_child_conflicts(self, store, make_bead):
        epic = make_bead("E")
        child = make_bead("C", parent=epic)
        bead = make_bead("B")
        with pytest.raises(ConflictError):
            store.move_into(bead.id, child.id)

    def test_move_into_same_parent_conflicts(self, store, make_bead):
        epic = make_bead("E")
        child = make_bead("C", parent=epic)
        with pytest.raises(ConflictError):
            store.move_into(child.id, epic.id)

    def test_move_into_linked_conflicts(self, store, make_bead):
        epic, bead = make_bead("E"), make_bead("B")
        store.link(bead.id, epic.id)
        with pytest.raises(ConflictError):
            store.move_into(bead.id, epic.id)

    def test_move_into_chain_linked_conflicts(self, store, make_bead):
        epic, middle, bead = make_bead("E"), make_bead("M"), make_bead("B")
        store.link(bead.id, middle.id)
        store.link(middle.id, epic.id)
        with pytest.raises(ConflictError):
            store.move_into(bead.id, epic.id)
        with pytest.raises(ConflictError):
            store.move_into(epic.id, bead.id)
        assert store.get(bead.id).parent_id == ""

    def test_update_with_move(self, store, make_bead):
        epic, bead = make_bead("E"), make_bead("B")
        result = store.update(bead.id, BeadUpdate(title="Moved"), parent_id=epic.id)
        assert result.bead.parent_id == epic.id
        assert result.bead.title == "Moved"
        assert store.is_epic(epic.id)

        result = store.update(bead.id, BeadUpdate(), parent_id="")
        assert result.bead.parent_id == ""
        assert not store.is_epic(epic.id)

    def test_failed_update_undoes_move(self, store, make_bead, data_file):
        epic, bead = make_bead("E"), make_bead("B")
        with pytest.raises(InvalidError):
            store.update(bead.id, BeadUpdate(title=""), parent_id=epic.id)
        assert store.get(bead.id).parent_id == ""
        assert not store.is_epic(epic.id)
        assert BeadStore.load(data_file).get(bead.id).parent_id == ""

    def test_move_into_deleted_invalid(self, store, make_bead):
        target, bead = make_bead("T"), make_bead("B")
        store.delete(target.id)
        with pytest.raises(InvalidError):
            store.move_into(bead.id, target.id)


def test_recompute_parent_status(store, make_bead):
    epic = make_bead("E")
    child = make_bead("C", parent=epic)
    assert store.recompute_parent_status(child.id).id == epic.id
    assert store.recompute_parent_status(epic.id).id == epic.id
