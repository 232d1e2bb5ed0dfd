"""Pydantic schemas for API requests and responses"""

from typing import List, Optional

from pydantic import BaseModel, Field

from ..models import Bead, BeadDraft, BeadType, BeadUpdate, Priority, Status


class BeadCreate(BaseModel):
    """Schema for creating a bead"""
    title: str = Field(..., description="Bead title")
    description: str = Field("", description="Free-form description (markdown)")
    status: Status = Field(Status.OPEN, description="Initial status: open or not_ready")
    priority: Priority = Field(Priority.MEDIUM, description="Priority")
    type: BeadType = Field(BeadType.TASK, description="Bead type")
    tags: List[str] = Field(default_factory=list)
    blocked_by: List[str] = Field(default_factory=list, description="IDs or prefixes of blocking beads")
    assignee: str = Field("", description="Assignee")
    parent_id: str = Field("", description="Parent epic ID or prefix")

    def to_draft(self, blocked_by: List[str]) -> BeadDraft:
        return BeadDraft(
            title=self.title,
            description=self.description,
            status=self.status,
            priority=self.priority,
            type=self.type,
            tags=list(self.tags),
            blocked_by=blocked_by,
            assignee=self.assignee,
        )


class BeadPatch(BaseModel):
    """Schema for updating a bead; only fields present in the body change"""
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
    parent_id: Optional[str] = Field(None, description="Empty string moves out of the epic, an ID moves into it")

    @property
    def moves(self) -> bool:
        return self.parent_id is not None

    def to_update(self, blocked_by: Optional[List[str]]) -> BeadUpdate:
        return BeadUpdate(
            title=self.title,
            description=self.description,
            status=self.status,
            priority=self.priority,
            type=self.type,
            tags=self.tags,
            add_tags=self.add_tags,
            remove_tags=self.remove_tags,
            blocked_by=blocked_by,
            assignee=self.assignee,
        )


class ClaimRequest(BaseModel):
    user: str = ""


class CommentCreate(BaseModel):
    """Schema for adding a comment"""
    author: str = ""
    text: str = ""


class LinkRequest(BaseModel):
    blocked_by: str = Field("", description="ID or prefix of the blocking bead")


class CleanRequest(BaseModel):
    days: Optional[float] = Field(None, description="Remove terminal beads untouched for this many days (default 5)")


class CleanResponse(BaseModel):
    removed: int


class BeadChangeResponse(Bead):
    """A bead plus the beads its change unblocked, when there are any"""
    unblocked: Optional[List[Bead]] = None


class HealthResponse(BaseModel):
    status: str


class VersionResponse(BaseModel):
    version: str
