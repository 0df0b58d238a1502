"""
Domain-specific exceptions for groups app.

These exceptions represent business rule violations and should be
caught in views and converted to appropriate HTTP responses.
"""


class GroupsServiceError(Exception):
    """Base exception for all groups service errors."""
    pass


class GroupNotFoundError(GroupsServiceError):
    """Raised when a group does not exist or is inaccessible."""
    pass


class InvalidPinError(GroupsServiceError):
    """Raised when no group has the given join pin."""
    pass


class AlreadyMemberError(GroupsServiceError):
    """Raised when a user tries to join a group they're already in."""
    pass


class NotMemberError(GroupsServiceError):
    """Raised when a user tries to perform an action requiring membership."""
    pass


class OwnerCannotLeaveError(GroupsServiceError):
    """Raised when a group owner tries to leave their group."""
    pass


class InsufficientPermissionsError(GroupsServiceError):
    """Raised when a user lacks required permissions for an action."""
    pass


class InviteNotFoundError(GroupsServiceError):
    """Raised when an invite token does not exist."""
    pass


class InviteExpiredError(GroupsServiceError):
    """Raised when an invite is past its expiry."""
    pass


class InviteAlreadyAcceptedError(GroupsServiceError):
    """Raised when an invite was already used."""
    pass


class InviteEmailMismatchError(GroupsServiceError):
    """Raised when an invite is accepted by a different email."""
    pass
