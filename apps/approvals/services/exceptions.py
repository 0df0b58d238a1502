"""
Domain exceptions for the approvals app.

Views translate these into HTTP responses.
"""


class ApprovalsServiceError(Exception):
    """Base exception for approval workflow errors."""
    pass


class SessionNotClosedError(ApprovalsServiceError):
    """Raised when an edit is proposed for a live session."""
    pass


class PendingApprovalsExistError(ApprovalsServiceError):
    """Raised when a session already has an edit awaiting approval."""
    pass


class ApprovalNotFoundError(ApprovalsServiceError):
    """Raised when an approval request does not exist."""
    pass


class NotApproverError(ApprovalsServiceError):
    """Raised when someone other than the addressed member resolves a request."""
    pass


class ApprovalAlreadyResolvedError(ApprovalsServiceError):
    """Raised when resolving a request that is no longer pending."""
    pass


class NotNoticeOwnerError(ApprovalsServiceError):
    """Raised when dismissing a rejection notice addressed to someone else."""
    pass
