"""Read-side views produced by the store for list, search, deps and detail"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel

from .base import BeadType, Priority, Status
from .bead import Bead


class BeadSummary(BaseModel):
    """Key fields returned by list and search"""

    id: str
    title: str
    status: Status
    priority: Priority
    type: BeadType
    assignee: str
    updated_at: datetime
    is_epic: Optional[bool] = None
    children: Optional[List["BeadSummary"]] = None
    parent_id: Optional[str] = None
    parent_title: Optional[str] = None

    @classmethod
    def from_bead(cls, bead: Bead) -> "BeadSummary":
        return cls(
            id=bead.id,
            title=bead.title,
            status=bead.status,
            priority=bead.priority,
            type=bead.type,
            assignee=bead.assignee,
            updated_at=bead.updated_at,
        )


class ListResult(BaseModel):
    """A page of summaries"""

    beads: List[BeadSummary]
    page: int
    per_page: int
    total: int
    total_pages: int


class DepsResult(BaseModel):
    """Dependency information for one bead"""

    active_blockers: List[Bead]
    resolved_blockers: List[Bead]
    blocks: List[Bead]


class Progress(BaseModel):
    """Per-status child counts of an epic"""

    total: int = 0
    open: int = 0
    in_progress: int = 0
    closed: int = 0
    deleted: int = 0
    not_ready: int = 0


class ChildSummary(BaseModel):
    id: str
    title: str
    status: Status
    priority: Priority
    type: BeadType
    assignee: str


class BeadDetail(Bead):
    """A bead enriched with its epic progress or its parent's title"""

    is_epic: Optional[bool] = None
    progress: Optional[Progress] = None
    children: Optional[List[ChildSummary]] = None
    parent_title: Optional[str] = None


@dataclass
class ChangeResult:
    """Outcome of a status-changing mutation.

    ``unblocked`` lists the beads whose last active blocker was the changed
    bead; it is empty unless the new status is terminal.
    """

    bead: Bead
    unblocked: List[Bead] = field(default_factory=list)
