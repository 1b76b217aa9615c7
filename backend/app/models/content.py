"""Canonical story content: project body, its version history, chapters."""

from datetime import datetime

from sqlalchemy import JSON, Column
from sqlmodel import Field, SQLModel


class ProjectContent(SQLModel, table=True):
    """Current body text of a project, one row per project."""

    __tablename__ = "project_contents"

    id: int | None = Field(default=None, primary_key=True)
    project_id: int = Field(foreign_key="projects.id", unique=True, index=True)
    filename: str
    content: str = Field(default="")
    word_count: int = Field(default=0)
    character_count: int = Field(default=0)
    updated_by: int | None = Field(default=None, foreign_key="users.id")
    updated_at: datetime = Field(default_factory=datetime.utcnow)


class ProjectContentVersion(SQLModel, table=True):
    """Snapshot of a project body, past or pending review."""

    __tablename__ = "project_content_versions"

    id: int | None = Field(default=None, primary_key=True)
    project_id: int = Field(foreign_key="projects.id", index=True)
    version_number: int
    content: str
    word_count: int = Field(default=0)
    character_count: int = Field(default=0)
    change_summary: str | None = Field(default=None)
    tags: list[str] = Field(default_factory=list, sa_column=Column(JSON))
    changes_made: str | None = Field(default=None)  # JSON string
    user_id: int | None = Field(default=None, foreign_key="users.id")
    created_at: datetime = Field(default_factory=datetime.utcnow)


class ProjectChapterBase(SQLModel):
    """Base chapter fields."""

    chapter_number: int
    title: str
    content: str = Field(default="")


class ProjectChapter(ProjectChapterBase, table=True):
    """Chapter of a project."""

    __tablename__ = "project_chapters"

    id: int | None = Field(default=None, primary_key=True)
    project_id: int = Field(foreign_key="projects.id", index=True)
    word_count: int = Field(default=0)
    created_at: datetime = Field(default_factory=datetime.utcnow)
    updated_at: datetime = Field(default_factory=datetime.utcnow)


class ProjectChapterCreate(ProjectChapterBase):
    """Schema for creating a chapter."""


class ProjectChapterRead(ProjectChapterBase):
    """Schema for reading a chapter."""

    id: int
    project_id: int
    word_count: int
    created_at: datetime
    updated_at: datetime
