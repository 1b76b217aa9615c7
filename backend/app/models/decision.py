"""Owner decisions recorded against pending changes."""

from datetime import datetime
from enum import Enum

from sqlmodel import Field, SQLModel

from app.models.pending_change import ChangeStatus


class DecisionType(str, Enum):
    """Decisions an owner can take on a pending change."""

    APPROVE = "approve"
    REJECT = "reject"
    REQUEST_REVISION = "request_revision"

    @property
    def resulting_status(self) -> ChangeStatus:
        """Status the pending change moves to under this decision."""
        return _DECISION_STATUS[self]


_DECISION_STATUS = {
    DecisionType.APPROVE: ChangeStatus.APPROVED,
    DecisionType.REJECT: ChangeStatus.REJECTED,
    DecisionType.REQUEST_REVISION: ChangeStatus.NEEDS_REVISION,
}


class ApprovalDecision(SQLModel, table=True):
    """Immutable decision record; many per pending change."""

    __tablename__ = "editor_approval_decisions"

    id: int | None = Field(default=None, primary_key=True)
    pending_change_id: int = Field(foreign_key="pending_editor_changes.id", index=True)
    owner_id: int = Field(foreign_key="users.id", index=True)
    decision: DecisionType
    feedback_notes: str | None = Field(default=None)
    suggested_changes: str | None = Field(default=None)
    decision_metadata: str | None = Field(default=None)  # JSON string
    created_at: datetime = Field(default_factory=datetime.utcnow)


class ApprovalDecisionRead(SQLModel):
    """Schema for reading a decision."""

    id: int
    pending_change_id: int
    owner_id: int
    decision: DecisionType
    feedback_notes: str | None
    suggested_changes: str | None
    decision_metadata: str | None
    created_at: datetime
