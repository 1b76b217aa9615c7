"""Submission of editor changes for owner review."""

import json
import logging
from dataclasses import dataclass
from datetime import datetime

from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from app.core.exceptions import AccessDeniedError, ValidationError
from app.models import (
    ApprovalDecision,
    ContentType,
    PendingChange,
    ProjectChapter,
    ProjectContentVersion,
)
from app.schemas.editor_changes import EditorChangeCreate
from app.services.access import get_active_collaborator, get_project
from app.services.activity import ActivityLogger
from app.services.change_store import ChangeStore, DecisionRecorder
from app.services.content_applier import count_words, next_version_number

logger = logging.getLogger(__name__)

EDITOR_ROLE = "editor"
PENDING_REVIEW_TAG = "Pending Review"


@dataclass
class SubmittedChange:
    """A queued change and the pending body version recorded with it."""

    change: PendingChange
    version_id: int | None = None


class EditorChangeService:
    """Lets collaborating editors queue changes and follow their review."""

    def __init__(self, session: AsyncSession):
        self.session = session
        self.changes = ChangeStore(session)
        self.decisions = DecisionRecorder(session)
        self.activity = ActivityLogger(session)

    async def submit(
        self, project_id: int, editor_id: int, data: EditorChangeCreate
    ) -> SubmittedChange:
        """Queue a proposed edit for the project owner.

        Project body changes also get a version tagged "Pending Review" in
        the body history. That version and the activity entry are best
        effort.

        Raises:
            ProjectNotFoundError: If the project does not exist
            AccessDeniedError: If the caller is not an active editor on the project
            ValidationError: If the target chapter is not part of the project
        """
        await get_project(self.session, project_id)

        collaborator = await get_active_collaborator(self.session, project_id, editor_id)
        if collaborator is None:
            raise AccessDeniedError("User is not a collaborator on this project")
        if not collaborator.has_role(EDITOR_ROLE):
            raise AccessDeniedError("User does not have editor permissions")

        if data.content_type == ContentType.CHAPTER:
            result = await self.session.execute(
                select(ProjectChapter).where(
                    ProjectChapter.id == data.chapter_id,
                    ProjectChapter.project_id == project_id,
                )
            )
            if result.scalar_one_or_none() is None:
                raise ValidationError("Chapter not found in this project")

        change = await self.changes.create(
            project_id=project_id,
            editor_id=editor_id,
            content_type=data.content_type,
            chapter_id=data.chapter_id,
            original_content=data.original_content,
            proposed_content=data.proposed_content,
            change_description=data.change_description,
            editor_notes=data.editor_notes,
            content_title=data.content_title,
        )
        change_id = change.id

        version_id = None
        if data.content_type == ContentType.PROJECT_CONTENT:
            try:
                version_id = await self._record_pending_version(change, editor_id)
            except Exception as e:
                await self.session.rollback()
                await self.session.refresh(change)
                logger.warning(f"Failed to create pending version for change {change_id}: {e}")

        try:
            await self.activity.log_submission(
                project_id=project_id,
                user_id=editor_id,
                content_type=data.content_type.value,
                content_title=data.content_title,
                pending_change_id=change_id,
            )
        except Exception as e:
            await self.session.rollback()
            await self.session.refresh(change)
            logger.warning(f"Failed to log activity for pending change {change_id}: {e}")

        return SubmittedChange(change=change, version_id=version_id)

    async def _record_pending_version(self, change: PendingChange, editor_id: int) -> int:
        proposed = change.proposed_content
        version = ProjectContentVersion(
            project_id=change.project_id,
            version_number=await next_version_number(self.session, change.project_id),
            content=proposed,
            word_count=count_words(proposed),
            character_count=len(proposed),
            change_summary=change.change_description or "Editor changes pending approval",
            tags=[PENDING_REVIEW_TAG],
            changes_made=json.dumps(
                {
                    "pending_change_id": change.id,
                    "submitted_for_approval": True,
                    "submitted_at": datetime.utcnow().isoformat(),
                    "status": "pending_approval",
                }
            ),
            user_id=editor_id,
        )
        self.session.add(version)
        await self.session.commit()
        await self.session.refresh(version)
        logger.info(
            f"Created version {version.version_number} pending review for change {change.id}"
        )
        return version.id

    async def list_own(
        self, project_id: int, editor_id: int
    ) -> list[tuple[PendingChange, list[ApprovalDecision]]]:
        """The caller's changes on a project with their decision history."""
        await get_project(self.session, project_id)
        changes = await self.changes.list_for_editor(project_id, editor_id)
        return [(change, await self.decisions.list_for_change(change.id)) for change in changes]
