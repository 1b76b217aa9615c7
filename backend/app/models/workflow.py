"""Workflow submission model, merged into the change history."""

from datetime import datetime

from sqlmodel import Field, SQLModel


class WorkflowSubmission(SQLModel, table=True):
    """Broader tracking record of submitted and auto-applied work."""

    __tablename__ = "workflow_submissions"

    id: int | None = Field(default=None, primary_key=True)
    project_id: int = Field(foreign_key="projects.id", index=True)
    submitter_id: int = Field(foreign_key="users.id")
    submission_type: str  # e.g., "editor_change"
    title: str
    content: str | None = Field(default=None)
    status: str = Field(default="pending")
    review_notes: str | None = Field(default=None)
    submission_metadata: str | None = Field(default=None)  # JSON string
    created_at: datetime = Field(default_factory=datetime.utcnow)
    updated_at: datetime = Field(default_factory=datetime.utcnow)
