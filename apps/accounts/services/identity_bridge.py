"""
Identity bridge.

Maps an authenticated principal to its directory record (``Profile``),
creating the record the first time a principal is seen.
"""

import logging
import time

from django.db import transaction, IntegrityError

from apps.accounts.models import User, Profile

from .exceptions import ProfileCreationError

logger = logging.getLogger(__name__)


def _base_username(email: str) -> str:
    local_part = email.split('@')[0]
    return local_part or f'user_{int(time.time() * 1000)}'


def get_or_create_profile(*, user: User, max_attempts: int = 5) -> Profile:
    """
    Return the principal's profile, creating it on first sight.

    The username is derived from the email's local part; on a username
    collision ``_1``, ``_2``... is appended. When another request inserted
    the same email first, the row it created is returned instead.

    Args:
        user: Authenticated principal
        max_attempts: Usernames tried before giving up

    Returns:
        Profile linked to the principal

    Raises:
        ProfileCreationError: If no free username was found
    """
    profile = Profile.objects.filter(user=user).first()
    if profile is not None:
        return profile

    profile = Profile.objects.filter(email=user.email).first()
    if profile is not None:
        if profile.user_id is None:
            profile.user = user
            profile.save(update_fields=['user'])
        return profile

    base = _base_username(user.email)

    for attempt in range(max_attempts):
        username = base if attempt == 0 else f'{base}_{attempt}'

        try:
            with transaction.atomic():
                profile = Profile.objects.create(
                    email=user.email,
                    username=username,
                    user=user
                )
        except IntegrityError:
            # Lost a race against a concurrent first request for this email
            existing = Profile.objects.filter(email=user.email).first()
            if existing is not None:
                return existing

            if Profile.objects.filter(username=username).exists():
                continue

            raise ProfileCreationError(f"Could not create profile for {user.email}")

        logger.info("Created profile %s for %s", profile.id, user.email)
        return profile

    raise ProfileCreationError(
        f"No free username for {user.email} after {max_attempts} attempts"
    )
