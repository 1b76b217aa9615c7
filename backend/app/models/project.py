"""Project and collaborator models."""

from datetime import datetime
from enum import Enum

from sqlalchemy import JSON, Column, UniqueConstraint
from sqlmodel import Field, SQLModel


class CollaboratorStatus(str, Enum):
    """Collaboration grant states."""

    PENDING = "pending"
    ACTIVE = "active"
    REVOKED = "revoked"


class ProjectBase(SQLModel):
    """Base project fields."""

    title: str = Field(index=True)
    synopsis: str | None = Field(default=None)


class Project(ProjectBase, table=True):
    """Project database model."""

    __tablename__ = "projects"

    id: int | None = Field(default=None, primary_key=True)
    owner_id: int = Field(foreign_key="users.id", index=True)
    created_at: datetime = Field(default_factory=datetime.utcnow)
    updated_at: datetime = Field(default_factory=datetime.utcnow)


class ProjectCreate(SQLModel):
    """Schema for creating a project."""

    title: str
    synopsis: str | None = None


class ProjectRead(ProjectBase):
    """Schema for reading a project."""

    id: int
    owner_id: int
    created_at: datetime
    updated_at: datetime


class ProjectCollaborator(SQLModel, table=True):
    """Collaboration grant of a user on a project."""

    __tablename__ = "project_collaborators"
    __table_args__ = (UniqueConstraint("project_id", "user_id"),)

    id: int | None = Field(default=None, primary_key=True)
    project_id: int = Field(foreign_key="projects.id", index=True)
    user_id: int = Field(foreign_key="users.id", index=True)
    role: str = Field(default="editor")
    secondary_roles: list[str] = Field(default_factory=list, sa_column=Column(JSON))
    status: CollaboratorStatus = Field(default=CollaboratorStatus.ACTIVE)
    created_at: datetime = Field(default_factory=datetime.utcnow)

    def has_role(self, role: str) -> bool:
        """Whether the grant carries ``role`` as primary or secondary role."""
        return self.role == role or role in (self.secondary_roles or [])


class CollaboratorCreate(SQLModel):
    """Schema for adding a collaborator."""

    user_id: int
    role: str = "editor"
    secondary_roles: list[str] = []


class CollaboratorRead(SQLModel):
    """Schema for reading a collaborator."""

    id: int
    project_id: int
    user_id: int
    role: str
    secondary_roles: list[str]
    status: CollaboratorStatus
    created_at: datetime
