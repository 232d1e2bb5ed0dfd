"""Parent/child (epic) operations and derived epic status"""

import logging
from typing import List

from ..models import Bead, BeadDraft, Status
from .errors import ConflictError, InvalidError
from .graph import children_of, derive_epic_status, has_children, linked_either_way, require

logger = logging.getLogger(__name__)


class EpicOps:
    """Epic operations of BeadStore.

    An epic is any bead with at least one child; nesting is one level deep.
    The stored status of an epic is always the value derived from its
    children and is recomputed inside whichever transaction changed them.
    """

    def is_epic(self, bead_id: str) -> bool:
        with self._reading() as beads:
            return has_children(beads, bead_id)

    def children_of(self, parent_id: str) -> List[Bead]:
        with self._reading() as beads:
            return children_of(beads, parent_id)

    def _recompute_epic(self, tx, epic_id: str):
        """Store the derived status of ``epic_id``; a bead left without children reverts to open"""
        epic = tx.beads.get(epic_id)
        if epic is None or epic.status == Status.DELETED:
            return
        children = children_of(tx.beads, epic_id)
        status = derive_epic_status(children) if children else Status.OPEN
        if epic.status != status:
            logger.debug("Epic %s status %s -> %s", epic_id, epic.status.value, status.value)
            tx.put(epic.touched(status=status))

    def recompute_parent_status(self, child_id: str) -> Bead:
        """Recompute the parent epic of ``child_id``; returns the parent, or the bead itself if it has none"""
        with self._transaction() as tx:
            child = require(tx.beads, child_id)
            if not child.parent_id or child.parent_id not in tx.beads:
                return child
            self._recompute_epic(tx, child.parent_id)
            return tx.beads[child.parent_id]

    @staticmethod
    def _check_parent(beads, parent_id: str) -> Bead:
        parent = require(beads, parent_id, label="parent bead")
        if parent.status == Status.DELETED:
            raise InvalidError(f"cannot add child to deleted bead {parent_id}")
        if parent.parent_id:
            raise ConflictError("cannot nest epics; target is already a child of another bead")
        return parent

    def create_with_parent(self, draft: BeadDraft, parent_id: str) -> Bead:
        """Create a bead as a child of ``parent_id``"""
        with self._transaction() as tx:
            self._check_parent(tx.beads, parent_id)
            bead = self._insert(tx, draft, parent_id=parent_id)
            self._recompute_epic(tx, parent_id)
        return bead

    def move_into(self, bead_id: str, target_id: str) -> Bead:
        """Make ``bead_id`` a child of ``target_id``"""
        with self._transaction() as tx:
            return self._move_into(tx, bead_id, target_id)

    def _move_into(self, tx, bead_id: str, target_id: str) -> Bead:
        if bead_id == target_id:
            raise InvalidError("cannot move a bead into itself")
        bead = require(tx.beads, bead_id)
        target = require(tx.beads, target_id)
        if target.status == Status.DELETED:
            raise InvalidError(f"cannot move into deleted bead {target_id}")
        if has_children(tx.beads, bead_id):
            raise ConflictError("cannot nest epics; bead already has children")
        if target.parent_id:
            raise ConflictError("cannot nest epics; target is already a child of another bead")
        if bead.parent_id == target_id:
            raise ConflictError("bead is already a child of this epic")
        if linked_either_way(tx.beads, bead_id, target_id):
            raise ConflictError(
                "cannot move into an epic that blocks or is blocked by this bead; this creates a deadlock"
            )

        moved = tx.put(bead.touched(parent_id=target_id))
        self._recompute_epic(tx, target_id)
        if bead.parent_id:
            self._recompute_epic(tx, bead.parent_id)
        return moved

    def move_out(self, bead_id: str) -> Bead:
        """Detach ``bead_id`` from its parent epic"""
        with self._transaction() as tx:
            return self._move_out(tx, bead_id)

    def _move_out(self, tx, bead_id: str) -> Bead:
        bead = require(tx.beads, bead_id)
        if not bead.parent_id:
            raise InvalidError(f"bead {bead_id} has no parent")
        moved = tx.put(bead.touched(parent_id=""))
        self._recompute_epic(tx, bead.parent_id)
        return moved
