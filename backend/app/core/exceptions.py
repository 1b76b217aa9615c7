"""Domain exceptions for the approval workflow."""


class ApprovalError(Exception):
    """Base class for approval workflow errors."""

    status_code = 500

    def __init__(self, message: str, details: str | None = None):
        super().__init__(message)
        self.message = message
        self.details = details


class ValidationError(ApprovalError):
    """Malformed or missing request fields."""

    status_code = 400


class AuthenticationError(ApprovalError):
    """No resolvable caller identity."""

    status_code = 401


class AccessDeniedError(ApprovalError):
    """Caller lacks the required relationship to the project."""

    status_code = 403


class NotFoundError(ApprovalError):
    """Referenced record does not exist."""

    status_code = 404


class ProjectNotFoundError(NotFoundError):
    """Project does not exist."""


class PendingChangeNotFoundError(NotFoundError):
    """Pending change does not exist or belongs to another project."""


class PersistenceError(ApprovalError):
    """A write that the request depends on failed."""

    status_code = 500


class ContentApplyError(ApprovalError):
    """Approved content could not be written to its target."""


class UnsupportedContentTypeError(ContentApplyError):
    """The content applier has no handler for a content type."""
