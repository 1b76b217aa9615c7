"""Owner approval workflow for editor changes.

A decision runs as a sequence of committed steps rather than one
transaction:

1. record_decision  - insert the ApprovalDecision (fatal on failure)
2. update_status    - move the PendingChange to its new status (fatal)
3. apply_content    - approve only; failure leaves changes_applied False
4. log_activity     - best effort; failure is logged and ignored

A failure after step 1 leaves the decision recorded with the later
effects missing. Each partial state is logged with the step it stopped at.
"""

import json
import logging
from dataclasses import dataclass
from enum import Enum

from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from app.core.exceptions import (
    AccessDeniedError,
    PendingChangeNotFoundError,
    PersistenceError,
    ValidationError,
)
from app.models import (
    ChangeStatus,
    ContentType,
    DecisionType,
    PendingChange,
    User,
    WorkflowSubmission,
)
from app.schemas.approvals import ChangeAuthor, ChangeSummary
from app.services.access import get_project, require_member
from app.services.activity import ActivityLogger
from app.services.change_store import ChangeStore, DecisionRecorder
from app.services.content_applier import ContentApplier

logger = logging.getLogger(__name__)


class DecisionStep(str, Enum):
    """Steps of the decision sequence."""

    RECORD_DECISION = "record_decision"
    UPDATE_STATUS = "update_status"
    APPLY_CONTENT = "apply_content"
    LOG_ACTIVITY = "log_activity"
    COMPLETED = "completed"


@dataclass
class DecisionOutcome:
    """Result of a submitted decision."""

    decision_id: int
    decision: DecisionType
    status: ChangeStatus
    changes_applied: bool
    message: str


@dataclass
class ChangeListing:
    """Unified change history of a project."""

    items: list[ChangeSummary]
    pending_changes: list[PendingChange]


def decision_message(decision: DecisionType, changes_applied: bool) -> str:
    """User facing message for a recorded decision."""
    if decision == DecisionType.APPROVE:
        if changes_applied:
            return "Editor changes approved and applied"
        return "Editor changes approved, but the content could not be applied"
    if decision == DecisionType.REJECT:
        return "Editor changes rejected"
    return "Editor changes marked for revision"


def parse_decision(value: str | None) -> DecisionType:
    """Parse a raw decision value or raise ValidationError."""
    try:
        return DecisionType(value)
    except ValueError:
        raise ValidationError(
            "Valid decision is required (approve, reject, request_revision)"
        ) from None


class ApprovalService:
    """Reads the change history and processes owner decisions."""

    def __init__(self, session: AsyncSession):
        self.session = session
        self.changes = ChangeStore(session)
        self.decisions = DecisionRecorder(session)
        self.applier = ContentApplier(session)
        self.activity = ActivityLogger(session)

    async def list_changes(self, project_id: int, user_id: int) -> ChangeListing:
        """List every change of a project for its owner or collaborators.

        Raises:
            ProjectNotFoundError: If the project does not exist
            AccessDeniedError: If the user is neither owner nor active collaborator
        """
        project = await get_project(self.session, project_id)
        await require_member(self.session, project, user_id)

        pending = await self.changes.list_for_project(project_id)
        result = await self.session.execute(
            select(WorkflowSubmission)
            .where(WorkflowSubmission.project_id == project_id)
            .order_by(WorkflowSubmission.created_at.desc())
        )
        submissions = list(result.scalars().all())

        authors = await self._load_authors(
            {c.editor_id for c in pending} | {s.submitter_id for s in submissions}
        )
        items = [_summarize_change(c, authors.get(c.editor_id)) for c in pending]
        items += [_summarize_submission(s, authors.get(s.submitter_id)) for s in submissions]
        # sorted() is stable, so ties keep the order above
        items = sorted(items, key=lambda item: item.created_at, reverse=True)

        return ChangeListing(items=items, pending_changes=pending)

    async def decide(
        self,
        project_id: int,
        decider_id: int,
        pending_change_id: int | None,
        decision: str | None,
        feedback_notes: str | None = None,
        suggested_changes: str | None = None,
    ) -> DecisionOutcome:
        """Record an owner decision and carry out its effects.

        Resubmitting the same decision records another ApprovalDecision and
        re-applies the content.

        Raises:
            ValidationError: Missing pending change id or invalid decision
            ProjectNotFoundError: Project does not exist
            AccessDeniedError: Decider does not own the project
            PendingChangeNotFoundError: Change missing or in another project
            PersistenceError: Decision or status could not be written
        """
        if not pending_change_id:
            raise ValidationError("Pending change ID is required")
        decision_type = parse_decision(decision)

        project = await get_project(self.session, project_id)
        if project.owner_id != decider_id:
            logger.warning(
                f"User {decider_id} attempted to decide on project {project_id} "
                f"owned by {project.owner_id}"
            )
            raise AccessDeniedError("Only the project owner can decide on editor changes")

        change = await self.changes.get_for_project(pending_change_id, project_id)
        if change is None:
            raise PendingChangeNotFoundError("Pending change not found")

        label = change.content_title or ContentType(change.content_type).value
        new_status = decision_type.resulting_status

        step = DecisionStep.RECORD_DECISION
        record = await self.decisions.record(
            change,
            owner_id=decider_id,
            decision=decision_type,
            feedback_notes=feedback_notes,
            suggested_changes=suggested_changes,
            project_title=project.title,
        )
        decision_id = record.id
        logger.info(
            f"Recorded decision {decision_id} ({decision_type.value}) "
            f"for pending change {pending_change_id}"
        )

        step = DecisionStep.UPDATE_STATUS
        try:
            await self.changes.set_status(change, new_status)
        except PersistenceError:
            logger.error(
                f"Decision {decision_id} recorded but pending change {pending_change_id} "
                f"status was not updated (stopped at {step.value})"
            )
            raise

        changes_applied = False
        if decision_type == DecisionType.APPROVE:
            step = DecisionStep.APPLY_CONTENT
            try:
                changes_applied = await self.applier.apply(
                    change, project, decision_id=decision_id, user_id=decider_id
                )
            except Exception:
                await self.session.rollback()
                logger.exception(
                    f"Decision {decision_id} approved but content of pending change "
                    f"{pending_change_id} was not applied (failed at {step.value})"
                )

        step = DecisionStep.LOG_ACTIVITY
        try:
            await self.activity.log_decision(
                project_id=project_id,
                user_id=decider_id,
                decision=decision_type,
                label=label,
                pending_change_id=pending_change_id,
                decision_id=decision_id,
                changes_applied=changes_applied,
            )
        except Exception as e:
            await self.session.rollback()
            logger.warning(f"Failed to log activity for decision {decision_id}: {e}")

        step = DecisionStep.COMPLETED
        logger.info(
            f"Decision {decision_id} {step.value}: status={new_status.value} "
            f"changes_applied={changes_applied}"
        )
        return DecisionOutcome(
            decision_id=decision_id,
            decision=decision_type,
            status=new_status,
            changes_applied=changes_applied,
            message=decision_message(decision_type, changes_applied),
        )

    async def _load_authors(self, user_ids: set[int]) -> dict[int, ChangeAuthor]:
        if not user_ids:
            return {}
        result = await self.session.execute(select(User).where(User.id.in_(user_ids)))
        return {
            user.id: ChangeAuthor(id=user.id, display_name=user.display_name or user.email)
            for user in result.scalars().all()
        }


def _summarize_change(change: PendingChange, author: ChangeAuthor | None) -> ChangeSummary:
    content_type = ContentType(change.content_type).value
    return ChangeSummary(
        id=change.id,
        type="editor_change",
        title=change.content_title or f"{content_type.replace('_', ' ').title()} changes",
        author=author,
        status=ChangeStatus(change.status).value,
        created_at=change.created_at,
        updated_at=change.updated_at,
        description=change.change_description,
        content=change.proposed_content,
        content_type=content_type,
        chapter_id=change.chapter_id,
        original_content=change.original_content,
        proposed_content=change.proposed_content,
        editor_notes=change.editor_notes,
        version=change.version,
    )


def _summarize_submission(
    submission: WorkflowSubmission, author: ChangeAuthor | None
) -> ChangeSummary:
    metadata = json.loads(submission.submission_metadata) if submission.submission_metadata else {}
    return ChangeSummary(
        id=submission.id,
        type="workflow_submission",
        title=submission.title,
        author=author,
        status=submission.status,
        created_at=submission.created_at,
        updated_at=submission.updated_at,
        description=submission.review_notes,
        content=submission.content,
        content_type=metadata.get("content_type"),
        submission_type=submission.submission_type,
        review_notes=submission.review_notes,
        auto_applied=metadata.get("auto_applied", False),
        decision_id=metadata.get("decision_id"),
    )
