"""Project activity logging service."""

import json
from datetime import datetime
from typing import Any

from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from app.models import DecisionType, ProjectActivity


def describe_decision(decision: DecisionType, label: str) -> str:
    """Human readable description of a decision, e.g. "Approve editor changes for: Ch. 1"."""
    verb = decision.value.replace("_", " ").capitalize()
    return f"{verb} editor changes for: {label}"


class ActivityLogger:
    """Service for appending project activity entries."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def log(
        self,
        project_id: int,
        user_id: int,
        activity_type: str,
        description: str,
        metadata: Any = None,
    ) -> ProjectActivity:
        """Append an activity entry.

        Args:
            project_id: Project the activity belongs to
            user_id: ID of user performing the action
            activity_type: Activity type (e.g., editor_change_approve)
            description: Human readable description
            metadata: Extra context (will be JSON serialized)

        Returns:
            Created ProjectActivity entry
        """
        entry = ProjectActivity(
            project_id=project_id,
            user_id=user_id,
            activity_type=activity_type,
            description=description,
            activity_metadata=json.dumps(metadata) if metadata is not None else None,
            created_at=datetime.utcnow(),
        )
        self.session.add(entry)
        await self.session.commit()
        await self.session.refresh(entry)
        return entry

    async def log_decision(
        self,
        project_id: int,
        user_id: int,
        decision: DecisionType,
        label: str,
        pending_change_id: int,
        decision_id: int,
        changes_applied: bool,
    ) -> ProjectActivity:
        """Log an owner decision on a pending change."""
        return await self.log(
            project_id=project_id,
            user_id=user_id,
            activity_type=f"editor_change_{decision.value}",
            description=describe_decision(decision, label),
            metadata={
                "pending_change_id": pending_change_id,
                "decision_id": decision_id,
                "changes_applied": changes_applied,
            },
        )

    async def log_submission(
        self,
        project_id: int,
        user_id: int,
        content_type: str,
        content_title: str | None,
        pending_change_id: int,
    ) -> ProjectActivity:
        """Log an editor submitting changes for review."""
        return await self.log(
            project_id=project_id,
            user_id=user_id,
            activity_type="editor_change_submitted",
            description=f"Submitted {content_type} changes for approval: {content_title or 'Untitled'}",
            metadata={"pending_change_id": pending_change_id},
        )

    async def list_for_project(
        self, project_id: int, skip: int = 0, limit: int = 50
    ) -> list[ProjectActivity]:
        """Activity feed of a project, newest first."""
        result = await self.session.execute(
            select(ProjectActivity)
            .where(ProjectActivity.project_id == project_id)
            .order_by(ProjectActivity.created_at.desc(), ProjectActivity.id.desc())
            .offset(skip)
            .limit(limit)
        )
        return list(result.scalars().all())
