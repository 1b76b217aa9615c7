"""User model for authentication."""

from datetime import datetime

from sqlmodel import Field, SQLModel


class UserBase(SQLModel):
    """Base user fields."""

    email: str = Field(unique=True, index=True)
    display_name: str | None = Field(default=None)
    is_active: bool = Field(default=True)


class User(UserBase, table=True):
    """User database model."""

    __tablename__ = "users"

    id: int | None = Field(default=None, primary_key=True)
    hashed_password: str
    created_at: datetime = Field(default_factory=datetime.utcnow)
    last_login: datetime | None = Field(default=None)


class UserCreate(SQLModel):
    """Schema for creating a user."""

    email: str
    password: str
    display_name: str | None = None


class UserRead(UserBase):
    """Schema for reading a user."""

    id: int
    created_at: datetime
    last_login: datetime | None
