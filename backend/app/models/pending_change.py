"""Pending editor change model for the owner approval workflow."""

from datetime import datetime
from enum import Enum

from sqlmodel import Field, SQLModel


class ContentType(str, Enum):
    """Canonical content a pending change targets."""

    CHAPTER = "chapter"
    PROJECT_CONTENT = "project_content"
    OUTLINE = "outline"


class ChangeStatus(str, Enum):
    """Pending change review states."""

    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"
    NEEDS_REVISION = "needs_revision"


class PendingChangeBase(SQLModel):
    """Base pending change fields."""

    content_type: ContentType
    chapter_id: int | None = Field(default=None, foreign_key="project_chapters.id")
    original_content: str = Field(default="")
    proposed_content: str = Field(default="")
    change_description: str | None = Field(default=None)
    editor_notes: str | None = Field(default=None)
    content_title: str | None = Field(default=None)


class PendingChange(PendingChangeBase, table=True):
    """Proposed edit awaiting owner review."""

    __tablename__ = "pending_editor_changes"

    id: int | None = Field(default=None, primary_key=True)
    project_id: int = Field(foreign_key="projects.id", index=True)
    editor_id: int = Field(foreign_key="users.id", index=True)
    status: ChangeStatus = Field(default=ChangeStatus.PENDING, index=True)
    # Bumped on every status write; not checked (last write wins)
    version: int = Field(default=1)
    created_at: datetime = Field(default_factory=datetime.utcnow)
    updated_at: datetime = Field(default_factory=datetime.utcnow)


class PendingChangeRead(PendingChangeBase):
    """Schema for reading a raw pending change row."""

    id: int
    project_id: int
    editor_id: int
    status: ChangeStatus
    version: int
    created_at: datetime
    updated_at: datetime
