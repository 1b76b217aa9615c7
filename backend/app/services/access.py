"""Project lookup and membership checks shared by the workflow services."""

from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from app.core.exceptions import AccessDeniedError, ProjectNotFoundError
from app.models import CollaboratorStatus, Project, ProjectCollaborator


async def get_project(session: AsyncSession, project_id: int) -> Project:
    """Get a project or raise ProjectNotFoundError."""
    result = await session.execute(select(Project).where(Project.id == project_id))
    project = result.scalar_one_or_none()
    if project is None:
        raise ProjectNotFoundError("Project not found")
    return project


async def get_active_collaborator(
    session: AsyncSession, project_id: int, user_id: int
) -> ProjectCollaborator | None:
    """Get the user's accepted, non-revoked collaboration grant, if any."""
    result = await session.execute(
        select(ProjectCollaborator).where(
            ProjectCollaborator.project_id == project_id,
            ProjectCollaborator.user_id == user_id,
            ProjectCollaborator.status == CollaboratorStatus.ACTIVE,
        )
    )
    return result.scalar_one_or_none()


async def require_member(session: AsyncSession, project: Project, user_id: int) -> bool:
    """Check the user is the owner or an active collaborator.

    Returns:
        True for the owner, False for a collaborator

    Raises:
        AccessDeniedError: If the user is neither
    """
    if project.owner_id == user_id:
        return True
    if await get_active_collaborator(session, project.id, user_id) is None:
        raise AccessDeniedError("Access denied")
    return False
