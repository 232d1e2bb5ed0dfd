"""Input descriptors accepted by the store"""

from dataclasses import dataclass, field
from typing import List, Optional

from .base import BeadType, Priority, Status


@dataclass
class BeadDraft:
    """Template for a new bead; the id is assigned by the store"""

    title: str
    description: str = ""
    status: Status = Status.OPEN
    priority: Priority = Priority.MEDIUM
    type: BeadType = BeadType.TASK
    tags: List[str] = field(default_factory=list)
    blocked_by: List[str] = field(default_factory=list)
    assignee: str = ""


@dataclass
class BeadUpdate:
    """Partial update. ``None`` leaves a field unchanged.

    ``add_tags``/``remove_tags`` are applied after ``tags`` against the
    stored tag set.
    """

    title: Optional[str] = None
    description: Optional[str] = None
    status: Optional[Status] = None
    priority: Optional[Priority] = None
    type: Optional[BeadType] = None
    tags: Optional[List[str]] = None
    add_tags: Optional[List[str]] = None
    remove_tags: Optional[List[str]] = None
    blocked_by: Optional[List[str]] = None
    assignee: Optional[str] = None

    def is_empty(self) -> bool:
        return all(value is None for value in vars(self).values())


@dataclass
class ListFilters:
    """Filtering criteria for listing beads"""

    statuses: List[Status] = field(default_factory=list)
    priority: Optional[Priority] = None
    type: Optional[BeadType] = None
    tags: List[str] = field(default_factory=list)
    assignee: Optional[str] = None
    all: bool = False
    ready: bool = False
    page: int = 1
    per_page: int = 100
