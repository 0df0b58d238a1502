"""
User registration service.

Signup is a two-step saga: the auth principal is issued first, then the
directory record is inserted. When the second step fails, the principal is
deleted again so no orphaned login survives.
"""

import logging
from typing import Optional
from uuid import UUID

from django.db import transaction, IntegrityError

from apps.accounts.models import User, Profile

from .exceptions import ConflictKind, UserRegistrationError

logger = logging.getLogger(__name__)


def _detect_conflict(*, email: str, username: str) -> Optional[ConflictKind]:
    """Find which unique directory column already holds the value."""
    if Profile.objects.filter(email=email).exists():
        return ConflictKind.EMAIL
    if Profile.objects.filter(username=username).exists():
        return ConflictKind.USERNAME
    return None


def delete_auth_user(*, user_id: UUID) -> bool:
    """
    Delete an auth principal outright.

    Safe to call repeatedly; the directory record (if any) is kept and
    unlinked.

    Returns:
        True if a principal was deleted, False if it was already gone
    """
    deleted, _ = User.objects.filter(id=user_id).delete()
    if deleted:
        logger.info("Deleted auth principal %s", user_id)
    return bool(deleted)


def register_user(
    *,
    email: str,
    password: str,
    username: str = '',
    display_name: str = ''
) -> Profile:
    """
    Register a new principal and its directory record.

    Args:
        email: User's email address
        password: User's password (will be hashed)
        username: Directory username, defaults to the email's local part
        display_name: Optional display name

    Returns:
        Profile linked to the new User; an orphaned record with the same
        email is reused and keeps its username

    Raises:
        UserRegistrationError: If either step fails; ``conflict`` names the
            unique field that was taken, when that is the cause
    """
    email = User.objects.normalize_email(email)
    username = username or email.split('@')[0]

    try:
        with transaction.atomic():
            user = User.objects.create_user(
                email=email,
                password=password,
                display_name=display_name
            )
    except IntegrityError:
        raise UserRegistrationError(
            "An account with this email already exists",
            conflict=ConflictKind.EMAIL
        )

    try:
        with transaction.atomic():
            # A record unlinked by delete_auth_user is claimed with its history
            profile = (
                Profile.objects
                .select_for_update()
                .filter(email=email, user__isnull=True)
                .first()
            )
            if profile is not None:
                profile.user = user
                profile.save(update_fields=['user'])
                logger.info("Relinked orphaned profile %s to %s", profile.id, email)
            else:
                profile = Profile.objects.create(
                    email=email,
                    username=username,
                    user=user
                )
    except IntegrityError as e:
        logger.warning("Directory insert failed for %s, rolling back principal", email)
        delete_auth_user(user_id=user.id)

        conflict = _detect_conflict(email=email, username=username)
        if conflict is ConflictKind.USERNAME:
            message = "This username is already taken"
        elif conflict is ConflictKind.EMAIL:
            message = "An account with this email already exists"
        else:
            message = "Registration failed"
        raise UserRegistrationError(message, conflict=conflict) from e

    logger.info("Registered %s as profile %s", email, profile.id)
    return profile
