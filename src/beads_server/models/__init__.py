"""Beads models package"""

from .base import (
    ACTIVE_STATUSES,
    ID_PREFIX,
    TERMINAL_STATUSES,
    BeadType,
    Priority,
    Status,
)
from .bead import Bead, Comment, utc_now
from .inputs import BeadDraft, BeadUpdate, ListFilters
from .views import (
    BeadDetail,
    BeadSummary,
    ChangeResult,
    ChildSummary,
    DepsResult,
    ListResult,
    Progress,
)

__all__ = [
    "ACTIVE_STATUSES",
    "ID_PREFIX",
    "TERMINAL_STATUSES",
    "BeadType",
    "Priority",
    "Status",
    "Bead",
    "Comment",
    "utc_now",
    "BeadDraft",
    "BeadUpdate",
    "ListFilters",
    "BeadDetail",
    "BeadSummary",
    "ChangeResult",
    "ChildSummary",
    "DepsResult",
    "ListResult",
    "Progress",
]
