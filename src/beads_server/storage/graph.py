"""Pure helpers over a bead map: relationships, derived status, ordering.

Every function here takes the id -> bead mapping explicitly and never
locks; callers hold the store lock for as long as they use the results.
"""

import math
from collections import deque
from typing import Iterable, List, Mapping, Optional, Sequence, Set

from ..models import Bead, Status
from .errors import NotFoundError

BeadMap = Mapping[str, Bead]


def require(beads: BeadMap, bead_id: str, label: str = "bead") -> Bead:
    bead = beads.get(bead_id)
    if bead is None:
        raise NotFoundError(f"{label} {bead_id} not found")
    return bead


def children_of(beads: BeadMap, parent_id: str) -> List[Bead]:
    """All beads whose parent_id is ``parent_id``, deleted ones included"""
    if not parent_id:
        return []
    return [b for b in beads.values() if b.parent_id == parent_id]


def has_children(beads: BeadMap, bead_id: str) -> bool:
    return any(b.parent_id == bead_id for b in beads.values())


def derive_epic_status(children: Sequence[Bead]) -> Status:
    """Status of an epic as a function of its children's statuses"""
    statuses = {child.status for child in children}
    if not statuses or statuses <= {Status.CLOSED, Status.DELETED}:
        return Status.CLOSED
    if Status.IN_PROGRESS in statuses:
        return Status.IN_PROGRESS
    if Status.OPEN in statuses:
        return Status.OPEN
    # only not_ready left among the live children
    return Status.NOT_READY


def active_blockers(beads: BeadMap, bead: Bead) -> List[Bead]:
    return [
        beads[blocker_id]
        for blocker_id in bead.blocked_by
        if blocker_id in beads and beads[blocker_id].status.is_active_blocker
    ]


def has_active_blocker(beads: BeadMap, bead: Bead) -> bool:
    """True if the bead or its parent epic has an active blocker"""
    if active_blockers(beads, bead):
        return True
    parent = beads.get(bead.parent_id) if bead.parent_id else None
    return parent is not None and bool(active_blockers(beads, parent))


def dependents_of(beads: BeadMap, bead_id: str) -> List[Bead]:
    """Non-deleted beads listing ``bead_id`` in their blocked_by"""
    return [
        b
        for b in beads.values()
        if b.status != Status.DELETED and bead_id in b.blocked_by
    ]


def compute_unblocked(beads: BeadMap, bead_id: str) -> List[Bead]:
    """Beads blocked by ``bead_id`` that no longer have any active blocker"""
    unblocked = [b for b in dependents_of(beads, bead_id) if not active_blockers(beads, b)]
    return sort_beads(unblocked)


def reachable_from(beads: BeadMap, start_ids: Iterable[str]) -> Set[str]:
    """Ids reachable by following blocked_by edges, starting ids included"""
    visited: Set[str] = set()
    queue = deque(start_ids)
    while queue:
        current_id = queue.popleft()
        if current_id in visited:
            continue
        visited.add(current_id)
        bead = beads.get(current_id)
        if bead is not None:
            queue.extend(i for i in bead.blocked_by if i not in visited)
    return visited


def reaching(beads: BeadMap, target_id: str) -> Set[str]:
    """Ids from which ``target_id`` is reachable, ``target_id`` included"""
    dependents = {}
    for bead in beads.values():
        for blocker_id in bead.blocked_by:
            dependents.setdefault(blocker_id, []).append(bead.id)

    visited: Set[str] = set()
    queue = deque([target_id])
    while queue:
        current_id = queue.popleft()
        if current_id in visited:
            continue
        visited.add(current_id)
        queue.extend(i for i in dependents.get(current_id, ()) if i not in visited)
    return visited


def would_create_cycle(beads: BeadMap, bead_id: str, blocker_id: str) -> bool:
    """Whether adding bead_id -> blocker_id closes a cycle"""
    return bead_id in reachable_from(beads, [blocker_id])


def links_parent_and_child(beads: BeadMap, bead_id: str, blocker_id: str) -> bool:
    """Whether the edge bead_id -> blocker_id puts a parent and its child on one blocker chain.

    Every path through the edge runs from a bead upstream of ``bead_id`` to
    a bead downstream of ``blocker_id``; the edge is rejected when any such
    pair is a parent and its child, in either role.
    """
    upstream = reaching(beads, bead_id)
    downstream = reachable_from(beads, [blocker_id])
    for up_id in upstream:
        up = beads.get(up_id)
        if up is not None and up.parent_id and up.parent_id in downstream:
            return True
    for down_id in downstream:
        down = beads.get(down_id)
        if down is not None and down.parent_id and down.parent_id in upstream:
            return True
    return False


def linked_either_way(beads: BeadMap, a_id: str, b_id: str) -> bool:
    """Whether a blocker chain connects the two beads in either direction"""
    return b_id in reachable_from(beads, [a_id]) or a_id in reachable_from(beads, [b_id])


def sort_key(bead):
    """Priority rank ascending, then newest first"""
    return (bead.priority.rank, -bead.created_at.timestamp())


def sort_beads(beads: Iterable[Bead]) -> List[Bead]:
    return sorted(beads, key=sort_key)


def normalize_paging(page: Optional[int], per_page: Optional[int]):
    page = page if page and page >= 1 else 1
    per_page = per_page if per_page and per_page >= 1 else 100
    return page, per_page


def paginate(items: Sequence, page: int, per_page: int) -> list:
    start = min((page - 1) * per_page, len(items))
    return list(items[start:start + per_page])


def total_pages(total: int, per_page: int) -> int:
    return max(1, math.ceil(total / per_page))


def dedupe(values: Iterable[str]) -> List[str]:
    """Drop duplicates and empty strings, keeping first occurrence order"""
    seen: Set[str] = set()
    result = []
    for value in values:
        if value and value not in seen:
            seen.add(value)
            result.append(value)
    return result


def epic_ids(beads: BeadMap) -> Set[str]:
    """Ids of every bead that currently has at least one child"""
    return {b.parent_id for b in beads.values() if b.parent_id}
