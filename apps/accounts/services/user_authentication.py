"""Login: credential check plus directory record resolution."""

import logging
from dataclasses import dataclass

from django.db import transaction
from django.utils import timezone

from apps.accounts.models import User, Profile

from .exceptions import InvalidCredentialsError, InactiveAccountError
from .identity_bridge import get_or_create_profile

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class LoginResult:
    user: User
    profile: Profile


@transaction.atomic
def authenticate_user(*, email: str, password: str) -> LoginResult:
    """
    Check credentials and return the principal with its profile.

    The principal row is locked while ``last_login`` is stamped. A
    principal logging in for the first time gets its profile created
    here, so every later request finds it linked.

    Raises:
        InvalidCredentialsError: Unknown email or wrong password
        InactiveAccountError: Principal is deactivated
        ProfileCreationError: No profile could be created
    """
    user = (
        User.objects
        .select_for_update()
        .filter(email=User.objects.normalize_email(email))
        .first()
    )

    if user is None or not user.check_password(password):
        logger.info("Failed login for %s", email)
        raise InvalidCredentialsError("Invalid email or password")

    if not user.is_active:
        raise InactiveAccountError("Account is deactivated")

    user.last_login = timezone.now()
    user.save(update_fields=['last_login'])

    return LoginResult(user=user, profile=get_or_create_profile(user=user))
