"""Editor change submission schemas."""

from pydantic import model_validator

from app.models import ApprovalDecisionRead, ContentType, PendingChangeRead
from app.schemas.approvals import CamelModel


class EditorChangeCreate(CamelModel):
    """Proposed edit submitted by a collaborating editor."""

    content_type: ContentType = ContentType.CHAPTER
    chapter_id: int | None = None
    original_content: str
    proposed_content: str
    change_description: str | None = None
    editor_notes: str | None = None
    content_title: str | None = None

    @model_validator(mode="after")
    def check_chapter_target(self) -> "EditorChangeCreate":
        """A chapter id is required for chapter changes and forbidden otherwise."""
        if self.content_type == ContentType.CHAPTER and self.chapter_id is None:
            raise ValueError("chapterId is required for chapter changes")
        if self.content_type != ContentType.CHAPTER and self.chapter_id is not None:
            raise ValueError("chapterId is only allowed for chapter changes")
        return self


class EditorChangeSubmitted(CamelModel):
    """Response after an editor change was queued for review."""

    success: bool = True
    pending_change_id: int
    version_id: int | None = None
    message: str = "Changes submitted for owner approval"
    status: str


class EditorChangeWithDecisions(PendingChangeRead):
    """A pending change together with its decision history."""

    decisions: list[ApprovalDecisionRead] = []


class EditorChangeList(CamelModel):
    """Changes submitted by the calling editor."""

    success: bool = True
    pending_changes: list[EditorChangeWithDecisions]
