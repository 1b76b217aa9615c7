"""Project management endpoints."""

import logging

from fastapi import APIRouter, Query, status
from sqlalchemy import or_
from sqlmodel import select

from app.core.deps import CurrentUser, DbSession
from app.core.exceptions import AccessDeniedError, NotFoundError, ValidationError
from app.models import (
    CollaboratorCreate,
    CollaboratorRead,
    CollaboratorStatus,
    Project,
    ProjectActivity,
    ProjectActivityRead,
    ProjectChapter,
    ProjectChapterCreate,
    ProjectChapterRead,
    ProjectCollaborator,
    ProjectCreate,
    ProjectRead,
    User,
)
from app.services.access import get_project, require_member
from app.services.activity import ActivityLogger
from app.services.content_applier import count_words

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/projects")


async def get_owned_project(project_id: int, session, current_user) -> Project:
    """Get a project the caller owns."""
    project = await get_project(session, project_id)
    if project.owner_id != current_user.id:
        raise AccessDeniedError("Only the project owner can do this")
    return project


@router.post("", response_model=ProjectRead, status_code=status.HTTP_201_CREATED)
async def create_project(
    project_data: ProjectCreate,
    current_user: CurrentUser,
    session: DbSession,
) -> Project:
    """Create a project owned by the caller."""
    project = Project(
        title=project_data.title,
        synopsis=project_data.synopsis,
        owner_id=current_user.id,
    )
    session.add(project)
    await session.commit()
    await session.refresh(project)

    activity = ActivityLogger(session)
    await activity.log(
        project_id=project.id,
        user_id=current_user.id,
        activity_type="project_created",
        description=f"Created project: {project.title}",
    )

    return project


@router.get("", response_model=list[ProjectRead])
async def list_projects(
    current_user: CurrentUser,
    session: DbSession,
    skip: int = Query(0, ge=0),
    limit: int = Query(50, ge=1, le=100),
) -> list[Project]:
    """List projects the caller owns or actively collaborates on."""
    collaborating = select(ProjectCollaborator.project_id).where(
        ProjectCollaborator.user_id == current_user.id,
        ProjectCollaborator.status == CollaboratorStatus.ACTIVE,
    )
    result = await session.execute(
        select(Project)
        .where(or_(Project.owner_id == current_user.id, Project.id.in_(collaborating)))
        .order_by(Project.updated_at.desc())
        .offset(skip)
        .limit(limit)
    )
    return list(result.scalars().all())


@router.get("/{project_id}", response_model=ProjectRead)
async def get_project_detail(
    project_id: int,
    current_user: CurrentUser,
    session: DbSession,
) -> Project:
    """Get a project (owner or active collaborator)."""
    project = await get_project(session, project_id)
    await require_member(session, project, current_user.id)
    return project


@router.post(
    "/{project_id}/chapters",
    response_model=ProjectChapterRead,
    status_code=status.HTTP_201_CREATED,
)
async def create_chapter(
    project_id: int,
    chapter_data: ProjectChapterCreate,
    current_user: CurrentUser,
    session: DbSession,
) -> ProjectChapter:
    """Add a chapter to a project (owner only)."""
    await get_owned_project(project_id, session, current_user)

    chapter = ProjectChapter(
        project_id=project_id,
        chapter_number=chapter_data.chapter_number,
        title=chapter_data.title,
        content=chapter_data.content,
        word_count=count_words(chapter_data.content),
    )
    session.add(chapter)
    await session.commit()
    await session.refresh(chapter)
    return chapter


@router.get("/{project_id}/chapters", response_model=list[ProjectChapterRead])
async def list_chapters(
    project_id: int,
    current_user: CurrentUser,
    session: DbSession,
) -> list[ProjectChapter]:
    """List chapters in reading order."""
    project = await get_project(session, project_id)
    await require_member(session, project, current_user.id)

    result = await session.execute(
        select(ProjectChapter)
        .where(ProjectChapter.project_id == project_id)
        .order_by(ProjectChapter.chapter_number)
    )
    return list(result.scalars().all())


@router.post(
    "/{project_id}/collaborators",
    response_model=CollaboratorRead,
    status_code=status.HTTP_201_CREATED,
)
async def add_collaborator(
    project_id: int,
    collaborator_data: CollaboratorCreate,
    current_user: CurrentUser,
    session: DbSession,
) -> ProjectCollaborator:
    """Grant a user active collaboration on a project (owner only)."""
    await get_owned_project(project_id, session, current_user)

    if collaborator_data.user_id == current_user.id:
        raise ValidationError("The owner cannot be a collaborator")

    result = await session.execute(select(User).where(User.id == collaborator_data.user_id))
    if not result.scalar_one_or_none():
        raise NotFoundError("User not found")

    result = await session.execute(
        select(ProjectCollaborator).where(
            ProjectCollaborator.project_id == project_id,
            ProjectCollaborator.user_id == collaborator_data.user_id,
        )
    )
    collaborator = result.scalar_one_or_none()
    if collaborator is None:
        collaborator = ProjectCollaborator(project_id=project_id, user_id=collaborator_data.user_id)

    collaborator.role = collaborator_data.role
    collaborator.secondary_roles = list(collaborator_data.secondary_roles)
    collaborator.status = CollaboratorStatus.ACTIVE
    session.add(collaborator)
    await session.commit()
    await session.refresh(collaborator)
    return collaborator


@router.get("/{project_id}/activity", response_model=list[ProjectActivityRead])
async def list_activity(
    project_id: int,
    current_user: CurrentUser,
    session: DbSession,
    skip: int = Query(0, ge=0),
    limit: int = Query(50, ge=1, le=200),
) -> list[ProjectActivity]:
    """Project activity feed, newest first."""
    project = await get_project(session, project_id)
    await require_member(session, project, current_user.id)

    activity = ActivityLogger(session)
    return await activity.list_for_project(project_id, skip=skip, limit=limit)
