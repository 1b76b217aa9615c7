"""Project activity model for the audit trail."""

from datetime import datetime

from sqlmodel import Field, SQLModel


class ProjectActivity(SQLModel, table=True):
    """Append-only project activity entry."""

    __tablename__ = "project_activity"

    id: int | None = Field(default=None, primary_key=True)
    project_id: int = Field(foreign_key="projects.id", index=True)
    user_id: int = Field(foreign_key="users.id", index=True)
    activity_type: str = Field(index=True)  # e.g., editor_change_approve
    description: str
    activity_metadata: str | None = Field(default=None)  # JSON string
    created_at: datetime = Field(default_factory=datetime.utcnow, index=True)


class ProjectActivityRead(SQLModel):
    """Schema for reading activity entries."""

    id: int
    project_id: int
    user_id: int
    activity_type: str
    description: str
    activity_metadata: str | None
    created_at: datetime
