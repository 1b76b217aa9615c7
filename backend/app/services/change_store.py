"""Persistence wrappers for pending changes and owner decisions.

These are the only components that read or write the pending change and
decision tables; authorization is enforced by the services calling them.
"""

import json
import logging
from datetime import datetime

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from app.core.exceptions import PersistenceError
from app.models import (
    ApprovalDecision,
    ChangeStatus,
    ContentType,
    DecisionType,
    PendingChange,
)

logger = logging.getLogger(__name__)


class ChangeStore:
    """Read and write access to pending editor changes."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def get_for_project(self, change_id: int, project_id: int) -> PendingChange | None:
        """Get a pending change only if it belongs to the project."""
        result = await self.session.execute(
            select(PendingChange).where(
                PendingChange.id == change_id,
                PendingChange.project_id == project_id,
            )
        )
        return result.scalar_one_or_none()

    async def list_for_project(self, project_id: int) -> list[PendingChange]:
        """All changes of a project in every status, newest first."""
        result = await self.session.execute(
            select(PendingChange)
            .where(PendingChange.project_id == project_id)
            .order_by(PendingChange.created_at.desc())
        )
        return list(result.scalars().all())

    async def list_for_editor(self, project_id: int, editor_id: int) -> list[PendingChange]:
        """Changes one editor submitted to a project, newest first."""
        result = await self.session.execute(
            select(PendingChange)
            .where(
                PendingChange.project_id == project_id,
                PendingChange.editor_id == editor_id,
            )
            .order_by(PendingChange.created_at.desc())
        )
        return list(result.scalars().all())

    async def create(
        self,
        project_id: int,
        editor_id: int,
        content_type: ContentType,
        original_content: str,
        proposed_content: str,
        chapter_id: int | None = None,
        change_description: str | None = None,
        editor_notes: str | None = None,
        content_title: str | None = None,
    ) -> PendingChange:
        """Queue a proposed edit in the pending state."""
        change = PendingChange(
            project_id=project_id,
            editor_id=editor_id,
            content_type=content_type,
            chapter_id=chapter_id,
            original_content=original_content,
            proposed_content=proposed_content,
            change_description=change_description,
            editor_notes=editor_notes,
            content_title=content_title,
            status=ChangeStatus.PENDING,
        )
        return await self._save(change, "create pending change")

    async def set_status(self, change: PendingChange, status: ChangeStatus) -> PendingChange:
        """Overwrite the latest status of a change.

        There is no compare-and-swap on ``version``: concurrent decisions
        both succeed and the later write wins.
        """
        change.status = status
        change.version += 1
        change.updated_at = datetime.utcnow()
        return await self._save(change, "update pending change status")

    async def _save(self, change: PendingChange, operation: str) -> PendingChange:
        try:
            self.session.add(change)
            await self.session.commit()
            await self.session.refresh(change)
        except SQLAlchemyError as e:
            await self.session.rollback()
            logger.exception(f"Failed to {operation}")
            raise PersistenceError(f"Failed to {operation}", details=str(e)) from e
        return change


class DecisionRecorder:
    """Append-only store of owner decisions."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def record(
        self,
        change: PendingChange,
        owner_id: int,
        decision: DecisionType,
        feedback_notes: str | None = None,
        suggested_changes: str | None = None,
        project_title: str | None = None,
    ) -> ApprovalDecision:
        """Persist a decision with the context it was taken in.

        Args:
            change: Pending change being decided
            owner_id: Project owner taking the decision
            decision: Decision taken
            feedback_notes: Optional feedback for the editor
            suggested_changes: Optional replacement text suggested by the owner
            project_title: Title of the project at decision time

        Returns:
            Created ApprovalDecision

        Raises:
            PersistenceError: If the decision could not be written
        """
        change_id = change.id
        metadata = {
            "decided_at": datetime.utcnow().isoformat(),
            "project_title": project_title,
            "content_type": _enum_value(change.content_type),
            "previous_status": _enum_value(change.status),
        }
        entry = ApprovalDecision(
            pending_change_id=change_id,
            owner_id=owner_id,
            decision=decision,
            feedback_notes=feedback_notes or None,
            suggested_changes=suggested_changes or None,
            decision_metadata=json.dumps(metadata),
        )
        try:
            self.session.add(entry)
            await self.session.commit()
            await self.session.refresh(entry)
        except SQLAlchemyError as e:
            await self.session.rollback()
            logger.exception(f"Failed to record decision for pending change {change_id}")
            raise PersistenceError("Failed to process approval decision", details=str(e)) from e
        return entry

    async def list_for_change(self, change_id: int) -> list[ApprovalDecision]:
        """Decision history of a change, newest first."""
        result = await self.session.execute(
            select(ApprovalDecision)
            .where(ApprovalDecision.pending_change_id == change_id)
            .order_by(ApprovalDecision.created_at.desc(), ApprovalDecision.id.desc())
        )
        return list(result.scalars().all())


def _enum_value(value) -> str:
    return value.value if hasattr(value, "value") else str(value)
