"""Owner approval endpoints for editor changes."""

import logging

from fastapi import APIRouter, Request
from sqlalchemy.exc import SQLAlchemyError

from app.core.config import get_settings
from app.core.deps import CurrentUser, DbSession
from app.core.exceptions import (
    AccessDeniedError,
    NotFoundError,
    PersistenceError,
    ProjectNotFoundError,
)
from app.core.rate_limit import limiter
from app.models import PendingChangeRead
from app.schemas.approvals import ChangeListResponse, DecisionRequest, DecisionResponse
from app.services.approval import ApprovalService

logger = logging.getLogger(__name__)

settings = get_settings()

router = APIRouter(prefix="/projects/{project_id}/approvals")


@router.get("", response_model=ChangeListResponse)
async def list_changes(
    project_id: int,
    current_user: CurrentUser,
    session: DbSession,
) -> ChangeListResponse:
    """List all editor changes and workflow submissions of a project."""
    service = ApprovalService(session)
    try:
        listing = await service.list_changes(project_id, current_user.id)
    except SQLAlchemyError as e:
        logger.exception(f"Failed to list changes for project {project_id}")
        raise PersistenceError("Failed to fetch pending changes", details=str(e)) from e

    return ChangeListResponse(
        items=listing.items,
        pending_changes=[PendingChangeRead.model_validate(c) for c in listing.pending_changes],
    )


@router.post("", response_model=DecisionResponse)
@limiter.limit(settings.decision_rate_limit)
async def submit_decision(
    request: Request,
    project_id: int,
    body: DecisionRequest,
    current_user: CurrentUser,
    session: DbSession,
) -> DecisionResponse:
    """Approve, reject or request revision of a pending change (owner only)."""
    service = ApprovalService(session)
    try:
        outcome = await service.decide(
            project_id=project_id,
            decider_id=current_user.id,
            pending_change_id=body.pending_change_id,
            decision=body.decision,
            feedback_notes=body.feedback_notes,
            suggested_changes=body.suggested_changes,
        )
    except (ProjectNotFoundError, AccessDeniedError) as e:
        # Same answer for missing and not-owned projects
        logger.info(f"Decision on project {project_id} refused: {type(e).__name__}")
        raise NotFoundError("Project not found or access denied") from e
    except SQLAlchemyError as e:
        logger.exception(f"Approval decision failed for project {project_id}")
        raise PersistenceError("Failed to process approval decision", details=str(e)) from e

    return DecisionResponse(
        decision_id=outcome.decision_id,
        decision=outcome.decision.value,
        message=outcome.message,
        changes_applied=outcome.changes_applied,
    )
