"""SQLModel database models."""

from app.models.user import User, UserCreate, UserRead
from app.models.project import (
    Project,
    ProjectCreate,
    ProjectRead,
    ProjectCollaborator,
    CollaboratorStatus,
    CollaboratorCreate,
    CollaboratorRead,
)
from app.models.content import (
    ProjectContent,
    ProjectContentVersion,
    ProjectChapter,
    ProjectChapterCreate,
    ProjectChapterRead,
)
from app.models.pending_change import (
    PendingChange,
    PendingChangeRead,
    ContentType,
    ChangeStatus,
)
from app.models.decision import ApprovalDecision, ApprovalDecisionRead, DecisionType
from app.models.activity import ProjectActivity, ProjectActivityRead
from app.models.workflow import WorkflowSubmission

__all__ = [
    # User
    "User",
    "UserCreate",
    "UserRead",
    # Project
    "Project",
    "ProjectCreate",
    "ProjectRead",
    "ProjectCollaborator",
    "CollaboratorStatus",
    "CollaboratorCreate",
    "CollaboratorRead",
    # Content
    "ProjectContent",
    "ProjectContentVersion",
    "ProjectChapter",
    "ProjectChapterCreate",
    "ProjectChapterRead",
    # Pending changes
    "PendingChange",
    "PendingChangeRead",
    "ContentType",
    "ChangeStatus",
    # Decisions
    "ApprovalDecision",
    "ApprovalDecisionRead",
    "DecisionType",
    # Activity
    "ProjectActivity",
    "ProjectActivityRead",
    # Workflow
    "WorkflowSubmission",
]
