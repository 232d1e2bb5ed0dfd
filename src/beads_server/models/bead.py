"""Bead and comment models"""

from datetime import datetime, timezone
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from .base import BeadType, Priority, Status


def utc_now(after: Optional[datetime] = None) -> datetime:
    """Current UTC time, never earlier than ``after``"""
    now = datetime.now(timezone.utc)
    if after is not None and after > now:
        return after
    return now


def as_utc(value: datetime) -> datetime:
    """Treat naive timestamps as UTC"""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


class Comment(BaseModel):
    """A comment appended to a bead"""

    model_config = ConfigDict(frozen=True, extra="allow")

    author: str
    text: str
    created_at: datetime = Field(default_factory=utc_now)

    @field_validator("created_at")
    @classmethod
    def timestamps_in_utc(cls, value):
        return as_utc(value)


class Bead(BaseModel):
    """A tracked unit of work.

    Instances are immutable; the store replaces a bead with an updated copy
    (``model_copy(update=...)``) on every mutation, so a reference handed out
    by a read never changes underneath the caller. Attributes the model does
    not know about are kept and written back when the snapshot is saved.
    """

    model_config = ConfigDict(frozen=True, extra="allow")

    id: str = ""
    title: str
    description: str = ""
    status: Status = Status.OPEN
    priority: Priority = Priority.MEDIUM
    type: BeadType = BeadType.TASK
    tags: List[str] = Field(default_factory=list)
    blocked_by: List[str] = Field(default_factory=list)
    assignee: str = ""
    parent_id: str = ""
    comments: List[Comment] = Field(default_factory=list)
    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now)

    @field_validator("created_at", "updated_at")
    @classmethod
    def timestamps_in_utc(cls, value):
        return as_utc(value)

    def __repr__(self):
        return f"<Bead(id='{self.id}', title='{self.title[:50]}', status='{self.status.value}')>"

    def touched(self, **changes) -> "Bead":
        """Copy of this bead with ``changes`` applied and updated_at advanced"""
        changes["updated_at"] = utc_now(after=self.updated_at)
        return self.model_copy(update=changes)

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization"""
        return self.model_dump(mode="json")
