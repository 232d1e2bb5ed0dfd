"""Base enumerations and constants shared by the bead models"""

import enum

ID_PREFIX = "bd-"


class Status(str, enum.Enum):
    """Bead status enumeration"""
    OPEN = "open"
    NOT_READY = "not_ready"
    IN_PROGRESS = "in_progress"
    CLOSED = "closed"
    DELETED = "deleted"

    @property
    def is_terminal(self) -> bool:
        return self in TERMINAL_STATUSES

    @property
    def is_active_blocker(self) -> bool:
        """Whether a bead in this status still blocks its dependents"""
        return self in ACTIVE_STATUSES


class Priority(str, enum.Enum):
    """Priority enumeration, most urgent first"""
    CRITICAL = "critical"
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"
    NONE = "none"

    @property
    def rank(self) -> int:
        """Sort rank (0 = most urgent)"""
        return _PRIORITY_RANKS[self]


class BeadType(str, enum.Enum):
    """Bead type enumeration"""
    BUG = "bug"
    FEATURE = "feature"
    TASK = "task"
    CHORE = "chore"


TERMINAL_STATUSES = frozenset({Status.CLOSED, Status.DELETED})
ACTIVE_STATUSES = frozenset({Status.OPEN, Status.IN_PROGRESS, Status.NOT_READY})
CREATE_STATUSES = frozenset({Status.OPEN, Status.NOT_READY})
DEFAULT_LIST_STATUSES = frozenset({Status.OPEN, Status.IN_PROGRESS, Status.NOT_READY})

_PRIORITY_RANKS = {priority: rank for rank, priority in enumerate(Priority)}
