"""Services for accounts business logic."""

from .exceptions import (
    ConflictKind,
    AccountsServiceError,
    UserRegistrationError,
    ProfileCreationError,
    InvalidCredentialsError,
    InactiveAccountError,
)
from .user_registration import register_user, delete_auth_user
from .user_authentication import LoginResult, authenticate_user
from .identity_bridge import get_or_create_profile

__all__ = [
    # Exceptions
    'ConflictKind',
    'AccountsServiceError',
    'UserRegistrationError',
    'ProfileCreationError',
    'InvalidCredentialsError',
    'InactiveAccountError',
    # Services
    'register_user',
    'delete_auth_user',
    'LoginResult',
    'authenticate_user',
    'get_or_create_profile',
]
