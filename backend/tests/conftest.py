"""Pytest configuration and fixtures."""

from datetime import datetime, timedelta
from typing import AsyncGenerator

import pytest_asyncio
from httpx import AsyncClient, ASGITransport
from sqlalchemy.ext.asyncio import create_async_engine, AsyncSession
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool
from sqlmodel import SQLModel

from app.main import app
from app.core.database import get_session
from app.core.rate_limit import limiter
from app.core.security import get_password_hash
from app.models import (
    ChangeStatus,
    CollaboratorStatus,
    ContentType,
    PendingChange,
    Project,
    ProjectChapter,
    ProjectCollaborator,
    User,
)


# Test database URL (in-memory SQLite)
TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"


@pytest_asyncio.fixture(scope="function")
async def test_engine():
    """Create test database engine."""
    engine = create_async_engine(
        TEST_DATABASE_URL,
        echo=False,
        future=True,
        poolclass=StaticPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest_asyncio.fixture(scope="function")
async def test_session(test_engine) -> AsyncGenerator[AsyncSession, None]:
    """Create test database session."""
    async_session = sessionmaker(
        test_engine, class_=AsyncSession, expire_on_commit=False
    )
    async with async_session() as session:
        yield session


@pytest_asyncio.fixture(scope="function")
async def client(test_session) -> AsyncGenerator[AsyncClient, None]:
    """Create test HTTP client with overridden dependencies."""

    async def override_get_session():
        yield test_session

    app.dependency_overrides[get_session] = override_get_session
    limiter.reset()

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()


@pytest_asyncio.fixture(scope="function")
async def server_error_client(test_session) -> AsyncGenerator[AsyncClient, None]:
    """Client that receives 500 responses instead of the app's exception."""

    async def override_get_session():
        yield test_session

    app.dependency_overrides[get_session] = override_get_session
    limiter.reset()

    transport = ASGITransport(app=app, raise_app_exceptions=False)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()


async def _create_user(session, email: str, password: str, display_name: str) -> User:
    user = User(
        email=email,
        hashed_password=get_password_hash(password),
        display_name=display_name,
    )
    session.add(user)
    await session.commit()
    await session.refresh(user)
    return user


@pytest_asyncio.fixture(scope="function")
async def owner_user(test_session) -> User:
    """Create the project owner."""
    return await _create_user(test_session, "owner@example.com", "owner123", "Olive Owner")


@pytest_asyncio.fixture(scope="function")
async def editor_user(test_session) -> User:
    """Create a collaborating editor."""
    return await _create_user(test_session, "editor@example.com", "editor123", "Eddie Editor")


@pytest_asyncio.fixture(scope="function")
async def outsider_user(test_session) -> User:
    """Create a user with no relationship to the project."""
    return await _create_user(test_session, "outsider@example.com", "outsider123", "Otto Outsider")


async def _login(client, email: str, password: str) -> str:
    response = await client.post(
        "/api/v1/auth/login",
        json={"email": email, "password": password},
    )
    return response.json()["access_token"]


@pytest_asyncio.fixture(scope="function")
async def owner_token(client, owner_user) -> str:
    """Get owner authentication token."""
    return await _login(client, "owner@example.com", "owner123")


@pytest_asyncio.fixture(scope="function")
async def editor_token(client, editor_user) -> str:
    """Get editor authentication token."""
    return await _login(client, "editor@example.com", "editor123")


@pytest_asyncio.fixture(scope="function")
async def outsider_token(client, outsider_user) -> str:
    """Get outsider authentication token."""
    return await _login(client, "outsider@example.com", "outsider123")


@pytest_asyncio.fixture(scope="function")
async def project(test_session, owner_user) -> Project:
    """Create a project owned by the owner user."""
    project = Project(
        title="The Long Night",
        synopsis="An old synopsis.",
        owner_id=owner_user.id,
    )
    test_session.add(project)
    await test_session.commit()
    await test_session.refresh(project)
    return project


@pytest_asyncio.fixture(scope="function")
async def chapter(test_session, project) -> ProjectChapter:
    """Create the first chapter of the project."""
    chapter = ProjectChapter(
        project_id=project.id,
        chapter_number=1,
        title="Dusk",
        content="It was getting dark.",
        word_count=4,
    )
    test_session.add(chapter)
    await test_session.commit()
    await test_session.refresh(chapter)
    return chapter


@pytest_asyncio.fixture(scope="function")
async def editor_collaborator(test_session, project, editor_user) -> ProjectCollaborator:
    """Make the editor an active collaborator with the editor role."""
    collaborator = ProjectCollaborator(
        project_id=project.id,
        user_id=editor_user.id,
        role="editor",
        status=CollaboratorStatus.ACTIVE,
    )
    test_session.add(collaborator)
    await test_session.commit()
    await test_session.refresh(collaborator)
    return collaborator


@pytest_asyncio.fixture(scope="function")
async def make_change(test_session, project, editor_user):
    """Factory creating pending changes for the project."""

    async def _make(
        content_type: ContentType = ContentType.OUTLINE,
        proposed_content: str = "A new synopsis.",
        original_content: str = "An old synopsis.",
        chapter_id: int | None = None,
        content_title: str | None = None,
        created_at: datetime | None = None,
        status: ChangeStatus = ChangeStatus.PENDING,
    ) -> PendingChange:
        created_at = created_at or datetime.utcnow() - timedelta(hours=1)
        change = PendingChange(
            project_id=project.id,
            editor_id=editor_user.id,
            content_type=content_type,
            chapter_id=chapter_id,
            original_content=original_content,
            proposed_content=proposed_content,
            content_title=content_title,
            status=status,
            created_at=created_at,
            updated_at=created_at,
        )
        test_session.add(change)
        await test_session.commit()
        await test_session.refresh(change)
        return change

    return _make


def auth_headers(token: str) -> dict:
    """Create authorization headers."""
    return {"Authorization": f"Bearer {token}"}
