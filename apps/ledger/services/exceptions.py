"""
Domain exceptions for the ledger app.

Views translate these into HTTP responses.
"""


class LedgerServiceError(Exception):
    """Base exception for ledger service errors."""
    pass


class SessionNotFoundError(LedgerServiceError):
    """Raised when a session does not exist."""
    pass


class NotGroupMemberError(LedgerServiceError):
    """Raised when a user acts on a group they do not belong to."""
    pass


class InvalidEntriesError(LedgerServiceError):
    """Raised when entry input is malformed (empty, duplicates, outsiders)."""
    pass


class UnbalancedSessionError(LedgerServiceError):
    """Raised when session entries do not sum to zero."""

    def __init__(self, message, total=None):
        super().__init__(message)
        self.total = total


class SessionNotLiveError(LedgerServiceError):
    """Raised when a live-only operation targets a closed session."""
    pass


class InvalidPaymentError(LedgerServiceError):
    """Raised when a direct payment is malformed."""
    pass
