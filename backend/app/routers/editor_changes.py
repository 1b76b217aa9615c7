"""Editor-side endpoints for submitting changes for approval."""

from fastapi import APIRouter, status

from app.core.deps import CurrentUser, DbSession
from app.models import ApprovalDecisionRead, PendingChangeRead
from app.schemas.editor_changes import (
    EditorChangeCreate,
    EditorChangeList,
    EditorChangeSubmitted,
    EditorChangeWithDecisions,
)
from app.services.editor_changes import EditorChangeService

router = APIRouter(prefix="/projects/{project_id}/editor-changes")


@router.post("", response_model=EditorChangeSubmitted, status_code=status.HTTP_201_CREATED)
async def submit_editor_change(
    project_id: int,
    change_data: EditorChangeCreate,
    current_user: CurrentUser,
    session: DbSession,
) -> EditorChangeSubmitted:
    """Submit a proposed edit for owner approval (active editors only)."""
    service = EditorChangeService(session)
    submitted = await service.submit(project_id, current_user.id, change_data)
    return EditorChangeSubmitted(
        pending_change_id=submitted.change.id,
        version_id=submitted.version_id,
        status=submitted.change.status.value,
    )


@router.get("", response_model=EditorChangeList)
async def list_my_editor_changes(
    project_id: int,
    current_user: CurrentUser,
    session: DbSession,
) -> EditorChangeList:
    """List the caller's changes on a project with their decisions."""
    service = EditorChangeService(session)
    entries = await service.list_own(project_id, current_user.id)
    return EditorChangeList(
        pending_changes=[
            EditorChangeWithDecisions(
                **PendingChangeRead.model_validate(change).model_dump(),
                decisions=[ApprovalDecisionRead.model_validate(d) for d in decisions],
            )
            for change, decisions in entries
        ]
    )
