"""Unit-aware garbage collection of old terminal beads"""

import logging
from datetime import datetime, timezone
from typing import Dict, List, Set

from ..models import Bead

logger = logging.getLogger(__name__)


class CleanupOps:
    """Cleanup operation of BeadStore"""

    @staticmethod
    def _removable_ids(beads: Dict[str, Bead], cutoff: datetime) -> Set[str]:
        units: Dict[str, List[Bead]] = {}
        for bead in beads.values():
            if bead.parent_id and bead.parent_id in beads:
                units.setdefault(bead.parent_id, []).append(bead)

        removable: Set[str] = set()
        for bead in beads.values():
            if bead.id in units:
                # an epic goes together with all of its children or not at all
                members = [bead, *units[bead.id]]
                if all(m.status.is_terminal for m in members) and max(m.updated_at for m in members) < cutoff:
                    removable.update(m.id for m in members)
            elif bead.parent_id in beads:
                continue
            elif bead.status.is_terminal and bead.updated_at < cutoff:
                removable.add(bead.id)
        return removable

    def clean(self, cutoff: datetime) -> int:
        """Hard-remove terminal beads last updated before ``cutoff``.

        Standalone beads (orphaned children included) go individually; an
        epic and its children go as one unit once every member is terminal
        and the newest member is older than the cutoff. References to removed
        beads are dropped from the remaining beads' blocked_by lists.
        Returns the number of beads removed.
        """
        if cutoff.tzinfo is None:
            cutoff = cutoff.replace(tzinfo=timezone.utc)

        with self._transaction() as tx:
            removable = self._removable_ids(tx.beads, cutoff)
            for bead_id in removable:
                tx.remove(bead_id)
            for bead in list(tx.beads.values()):
                if any(blocker_id in removable for blocker_id in bead.blocked_by):
                    kept = [i for i in bead.blocked_by if i not in removable]
                    tx.put(bead.model_copy(update={"blocked_by": kept}))

        logger.info("Clean removed %d beads older than %s", len(removable), cutoff.isoformat())
        return len(removable)
