"""Domain-specific exceptions for accounts services."""

from enum import Enum

from rest_framework.exceptions import APIException


class ConflictKind(str, Enum):
    """Unique column that rejected a directory insert."""

    EMAIL = 'email'
    USERNAME = 'username'


class AccountsServiceError(Exception):
    """Base exception for accounts services."""
    pass


class UserRegistrationError(AccountsServiceError):
    """Raised when user registration fails."""

    def __init__(self, message, conflict=None):
        super().__init__(message)
        self.conflict = conflict


class ProfileCreationError(AccountsServiceError, APIException):
    """
    Raised when the identity bridge cannot create a directory record.

    Also an APIException, so views that resolve the caller's profile
    outside a try block still answer 400 with an ``error`` body.
    """
    status_code = 400
    default_code = 'profile_creation_failed'

    def __init__(self, message):
        APIException.__init__(self, {'error': message})
        self.message = message

    def __str__(self):
        return self.message


class InvalidCredentialsError(AccountsServiceError):
    """Raised when authentication credentials are invalid."""
    pass


class InactiveAccountError(AccountsServiceError):
    """Raised when account is deactivated."""
    pass
