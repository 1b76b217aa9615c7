"""Approval request/response schemas."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from app.models import PendingChangeRead


class CamelModel(BaseModel):
    """Model exchanged with the web client in camelCase."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class DecisionRequest(CamelModel):
    """Owner decision on a pending change.

    Fields are optional here so that missing values are reported by the
    approval service as a 400 with a readable message.
    """

    pending_change_id: int | None = None
    decision: str | None = None
    feedback_notes: str | None = None
    suggested_changes: str | None = None


class DecisionResponse(CamelModel):
    """Outcome of a recorded decision."""

    success: bool = True
    decision_id: int
    decision: str
    message: str
    changes_applied: bool


class ChangeAuthor(BaseModel):
    """Author shown next to a change."""

    id: int
    display_name: str


class ChangeSummary(BaseModel):
    """Normalized entry of the unified change history."""

    id: int
    type: str  # "editor_change" or "workflow_submission"
    title: str
    author: ChangeAuthor | None = None
    status: str
    created_at: datetime
    updated_at: datetime
    description: str | None = None
    content: str | None = None

    # editor_change
    content_type: str | None = None
    chapter_id: int | None = None
    original_content: str | None = None
    proposed_content: str | None = None
    editor_notes: str | None = None
    version: int | None = None

    # workflow_submission
    submission_type: str | None = None
    review_notes: str | None = None
    auto_applied: bool | None = None
    decision_id: int | None = None


class ChangeListResponse(BaseModel):
    """Unified change list plus the raw pending change rows."""

    model_config = ConfigDict(populate_by_name=True)

    success: bool = True
    items: list[ChangeSummary]
    pending_changes: list[PendingChangeRead] = Field(alias="pendingChanges")
