"""Writes approved editor changes into canonical project content."""

import json
import logging
import re
from datetime import datetime

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import func, select

from app.core.exceptions import ContentApplyError, UnsupportedContentTypeError
from app.models import (
    ChangeStatus,
    ContentType,
    PendingChange,
    Project,
    ProjectChapter,
    ProjectContent,
    ProjectContentVersion,
    WorkflowSubmission,
)

logger = logging.getLogger(__name__)


def count_words(text: str | None) -> int:
    """Count whitespace-delimited words; empty text has no words."""
    if not text:
        return 0
    return len(text.split())


def content_filename(project_title: str) -> str:
    """Filename of a project's body text, derived from its title."""
    stem = re.sub(r"\s+", "_", project_title.strip().lower())
    return f"{stem}.txt"


async def next_version_number(session: AsyncSession, project_id: int) -> int:
    """Version number following the latest stored project body version."""
    result = await session.execute(
        select(func.max(ProjectContentVersion.version_number)).where(
            ProjectContentVersion.project_id == project_id
        )
    )
    return (result.scalar_one_or_none() or 0) + 1


class ContentApplier:
    """Service applying approved proposed content to its target."""

    def __init__(self, session: AsyncSession):
        self.session = session
        self._handlers = {
            ContentType.PROJECT_CONTENT: self._apply_project_content,
            ContentType.CHAPTER: self._apply_chapter,
            ContentType.OUTLINE: self._apply_outline,
        }

    async def apply(
        self,
        change: PendingChange,
        project: Project,
        decision_id: int,
        user_id: int,
    ) -> bool:
        """Apply a pending change's proposed content.

        The target write and the auto-applied workflow submission are
        committed together.

        Args:
            change: Approved pending change
            project: Project the change belongs to
            decision_id: Decision that triggered the application
            user_id: Owner applying the change

        Returns:
            True if content was written, False if the content type has no
            handler

        Raises:
            ContentApplyError: If the target is missing or the write failed
        """
        change_id = change.id
        try:
            handler = self._resolve_handler(change.content_type)
        except UnsupportedContentTypeError as e:
            logger.warning(f"Skipping content application for pending change {change_id}: {e}")
            return False

        try:
            await handler(change, project, user_id)
            self.session.add(self._auto_applied_submission(change, decision_id, user_id))
            await self.session.commit()
        except (SQLAlchemyError, ContentApplyError) as e:
            await self.session.rollback()
            if isinstance(e, ContentApplyError):
                raise
            raise ContentApplyError(
                f"Failed to apply pending change {change_id}", details=str(e)
            ) from e

        return True

    def _resolve_handler(self, content_type):
        try:
            return self._handlers[ContentType(content_type)]
        except (ValueError, KeyError):
            raise UnsupportedContentTypeError(
                f"Unsupported content type: {content_type!r}"
            ) from None

    async def _apply_project_content(
        self, change: PendingChange, project: Project, user_id: int
    ) -> None:
        """Upsert the project body, keeping the previous body as a version."""
        body = change.proposed_content
        result = await self.session.execute(
            select(ProjectContent).where(ProjectContent.project_id == project.id)
        )
        existing = result.scalar_one_or_none()

        if existing:
            self.session.add(
                ProjectContentVersion(
                    project_id=project.id,
                    version_number=await next_version_number(self.session, project.id),
                    content=existing.content,
                    word_count=existing.word_count,
                    character_count=existing.character_count,
                    change_summary=change.change_description or "Approved editor changes",
                    user_id=existing.updated_by,
                )
            )
            content = existing
        else:
            content = ProjectContent(project_id=project.id, filename=content_filename(project.title))

        content.content = body
        content.word_count = count_words(body)
        content.character_count = len(body)
        content.updated_by = user_id
        content.updated_at = datetime.utcnow()
        self.session.add(content)

    async def _apply_chapter(self, change: PendingChange, project: Project, user_id: int) -> None:
        """Replace a chapter's text and recompute its word count."""
        if change.chapter_id is None:
            raise ContentApplyError(f"Pending change {change.id} has no chapter_id")

        result = await self.session.execute(
            select(ProjectChapter).where(
                ProjectChapter.id == change.chapter_id,
                ProjectChapter.project_id == project.id,
            )
        )
        chapter = result.scalar_one_or_none()
        if chapter is None:
            raise ContentApplyError(
                f"Chapter {change.chapter_id} not found in project {project.id}"
            )

        chapter.content = change.proposed_content
        chapter.word_count = count_words(change.proposed_content)
        chapter.updated_at = datetime.utcnow()
        self.session.add(chapter)

    async def _apply_outline(self, change: PendingChange, project: Project, user_id: int) -> None:
        """Replace the project synopsis."""
        project.synopsis = change.proposed_content
        project.updated_at = datetime.utcnow()
        self.session.add(project)

    def _auto_applied_submission(
        self, change: PendingChange, decision_id: int, user_id: int
    ) -> WorkflowSubmission:
        content_type = ContentType(change.content_type).value
        return WorkflowSubmission(
            project_id=change.project_id,
            submitter_id=change.editor_id,
            submission_type="editor_change",
            title=change.content_title or f"{content_type.replace('_', ' ').title()} changes",
            content=change.proposed_content,
            status=ChangeStatus.APPROVED.value,
            submission_metadata=json.dumps(
                {
                    "auto_applied": True,
                    "decision_id": decision_id,
                    "pending_change_id": change.id,
                    "content_type": content_type,
                    "applied_by": user_id,
                }
            ),
        )
