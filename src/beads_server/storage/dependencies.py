"""Blocker graph operations: link, unlink, deps and unblock computation"""

from ..models import Bead, DepsResult, Status
from .errors import ConflictError, InvalidError
from .graph import (
    BeadMap,
    compute_unblocked,
    dependents_of,
    links_parent_and_child,
    require,
    would_create_cycle,
)


class DependencyOps:
    """Blocker graph operations of BeadStore"""

    @staticmethod
    def _check_link_target(beads: BeadMap, bead_id: str, blocker_id: str) -> Bead:
        """Validate the far end of a new blocked_by edge"""
        if bead_id == blocker_id:
            raise InvalidError("cannot link bead to itself")
        blocker = require(beads, blocker_id)
        if blocker.status == Status.DELETED:
            raise InvalidError(f"cannot link to deleted bead {blocker_id}")
        return blocker

    @staticmethod
    def _check_link_shape(beads: BeadMap, bead_id: str, blocker_id: str):
        """Reject an edge that deadlocks a parent and child or closes a cycle"""
        if links_parent_and_child(beads, bead_id, blocker_id):
            raise ConflictError(
                "cannot add dependency between an epic and its own children; this creates a deadlock"
            )
        if would_create_cycle(beads, bead_id, blocker_id):
            raise InvalidError(
                f"circular dependency: {blocker_id} is already blocked by {bead_id} (directly or transitively)"
            )

    def link(self, bead_id: str, blocker_id: str) -> Bead:
        """Add ``blocker_id`` to the bead's blocked_by list"""
        if bead_id == blocker_id:
            raise InvalidError("cannot link bead to itself")

        with self._transaction() as tx:
            bead = require(tx.beads, bead_id)
            self._check_link_target(tx.beads, bead_id, blocker_id)
            if blocker_id in bead.blocked_by:
                raise InvalidError(f"bead {bead_id} already blocked by {blocker_id}")
            self._check_link_shape(tx.beads, bead_id, blocker_id)
            return tx.put(bead.touched(blocked_by=[*bead.blocked_by, blocker_id]))

    def unlink(self, bead_id: str, blocker_id: str) -> Bead:
        """Remove ``blocker_id`` from the bead's blocked_by list"""
        with self._transaction() as tx:
            bead = require(tx.beads, bead_id)
            if blocker_id not in bead.blocked_by:
                raise InvalidError(f"bead {bead_id} is not blocked by {blocker_id}")
            remaining = [i for i in bead.blocked_by if i != blocker_id]
            return tx.put(bead.touched(blocked_by=remaining))

    def deps(self, bead_id: str) -> DepsResult:
        """Active blockers, resolved blockers, and the beads this one blocks"""
        with self._reading() as beads:
            bead = require(beads, bead_id)
            active, resolved = [], []
            for blocker_id in bead.blocked_by:
                blocker = beads.get(blocker_id)
                if blocker is None:
                    continue
                if blocker.status.is_active_blocker:
                    active.append(blocker)
                else:
                    resolved.append(blocker)
            return DepsResult(
                active_blockers=active,
                resolved_blockers=resolved,
                blocks=dependents_of(beads, bead_id),
            )

    def unblocked_by(self, bead_id: str):
        """Beads whose only remaining active blocker was ``bead_id``"""
        with self._reading() as beads:
            return compute_unblocked(beads, bead_id)
