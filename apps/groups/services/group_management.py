"""
Group management service.

Handles group creation and lookup with proper transaction safety.
"""

import logging
from typing import Optional
from uuid import UUID

from django.conf import settings
from django.db import transaction, IntegrityError
from django.db.models import Prefetch

from apps.accounts.models import Profile
from apps.groups.models import Group, GroupMembership, GroupRole, generate_join_pin

from .exceptions import (
    GroupNotFoundError,
    InsufficientPermissionsError,
)

logger = logging.getLogger(__name__)


def create_group(
    *,
    name: str,
    creator: Profile,
    max_retries: Optional[int] = None
) -> Group:
    """
    Create a new group and add the creator as owner.

    This is a multi-step operation wrapped in a transaction:
    1. Generate a 6-digit join pin
    2. Create the group
    3. Create owner membership

    Args:
        name: Group name
        creator: Profile who will own the group
        max_retries: Maximum attempts to find a free pin
            (defaults to GROUP_PIN_MAX_RETRIES)

    Returns:
        Created Group instance

    Raises:
        RuntimeError: If cannot generate unique pin after retries
    """
    if max_retries is None:
        max_retries = settings.GROUP_PIN_MAX_RETRIES

    # Retry logic outside transaction to handle pin collisions
    for attempt in range(max_retries):
        join_pin = generate_join_pin()

        try:
            with transaction.atomic():
                group = Group.objects.create(
                    name=name,
                    created_by=creator,
                    join_pin=join_pin
                )

                GroupMembership.objects.create(
                    profile=creator,
                    group=group,
                    role=GroupRole.OWNER
                )

                logger.info("Group %s created by profile %s", group.id, creator.id)
                return group

        except IntegrityError:
            logger.warning("Join pin collision on attempt %d", attempt + 1)
            if attempt == max_retries - 1:
                raise RuntimeError(
                    f"Failed to generate unique join pin after {max_retries} attempts"
                )
            continue

    raise RuntimeError("Unexpected error in group creation")


def get_group_by_id(*, group_id: UUID) -> Group:
    """
    Get a group by ID with its memberships prefetched.

    Raises:
        GroupNotFoundError: If group doesn't exist
    """
    try:
        return (
            Group.objects
            .select_related('created_by')
            .prefetch_related(
                Prefetch(
                    'memberships',
                    queryset=GroupMembership.objects.select_related('profile')
                )
            )
            .get(id=group_id)
        )
    except Group.DoesNotExist:
        raise GroupNotFoundError(f"Group with ID {group_id} not found")


@transaction.atomic
def regenerate_pin(
    *,
    group_id: UUID,
    profile: Profile,
    max_retries: Optional[int] = None
) -> str:
    """
    Give the group a fresh join pin (owner only).

    Raises:
        GroupNotFoundError: If group doesn't exist
        InsufficientPermissionsError: If profile is not the owner
        RuntimeError: If cannot generate unique pin after retries
    """
    if max_retries is None:
        max_retries = settings.GROUP_PIN_MAX_RETRIES

    try:
        group = Group.objects.select_for_update().get(id=group_id)
    except Group.DoesNotExist:
        raise GroupNotFoundError(f"Group with ID {group_id} not found")

    if not group.is_owner(profile):
        raise InsufficientPermissionsError("Only the group owner can regenerate the join pin")

    for attempt in range(max_retries):
        new_pin = generate_join_pin()

        try:
            with transaction.atomic():
                group.join_pin = new_pin
                group.save(update_fields=['join_pin', 'updated_at'])
            return new_pin
        except IntegrityError:
            if attempt == max_retries - 1:
                raise RuntimeError(
                    f"Failed to generate unique join pin after {max_retries} attempts"
                )
            continue

    raise RuntimeError("Unexpected error in join pin generation")
