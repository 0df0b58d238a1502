"""
Membership management service.

Handles group membership operations with concurrency protection.
"""

import logging
from uuid import UUID

from django.db import transaction, IntegrityError
from django.db.models import QuerySet

from apps.accounts.models import Profile
from apps.groups.models import Group, GroupMembership, GroupRole

from .exceptions import (
    GroupNotFoundError,
    InvalidPinError,
    AlreadyMemberError,
    NotMemberError,
    OwnerCannotLeaveError,
)

logger = logging.getLogger(__name__)


def add_member(*, group: Group, profile: Profile) -> GroupMembership:
    """
    Insert a plain membership row.

    Raises:
        AlreadyMemberError: If the profile is already in the group
    """
    if group.has_member(profile):
        raise AlreadyMemberError(f"User is already a member of {group.name}")

    try:
        with transaction.atomic():
            membership = GroupMembership.objects.create(
                profile=profile,
                group=group,
                role=GroupRole.MEMBER
            )
    except IntegrityError:
        # Database constraint caught duplicate membership
        raise AlreadyMemberError(f"User is already a member of {group.name}")

    logger.info("Profile %s joined group %s", profile.id, group.id)
    return membership


@transaction.atomic
def join_group_by_pin(*, pin: str, profile: Profile) -> GroupMembership:
    """
    Join a group using its 6-digit join pin.

    Args:
        pin: Join pin of the group
        profile: Profile joining the group

    Returns:
        Created GroupMembership instance

    Raises:
        InvalidPinError: If no group has this pin
        AlreadyMemberError: If profile is already a member
    """
    try:
        group = Group.objects.select_for_update().get(join_pin=pin)
    except Group.DoesNotExist:
        raise InvalidPinError("Invalid join pin")

    return add_member(group=group, profile=profile)


@transaction.atomic
def leave_group(*, group_id: UUID, profile: Profile) -> None:
    """
    Leave a group.

    Raises:
        GroupNotFoundError: If group doesn't exist
        NotMemberError: If profile is not a member
        OwnerCannotLeaveError: If profile is the owner
    """
    try:
        group = Group.objects.get(id=group_id)
    except Group.DoesNotExist:
        raise GroupNotFoundError(f"Group with ID {group_id} not found")

    try:
        membership = (
            GroupMembership.objects
            .select_for_update()
            .get(profile=profile, group=group)
        )
    except GroupMembership.DoesNotExist:
        raise NotMemberError(f"User is not a member of {group.name}")

    if membership.role == GroupRole.OWNER:
        raise OwnerCannotLeaveError("Group owner cannot leave the group")

    membership.delete()


def get_member_group(*, group_id: UUID, profile: Profile) -> Group:
    """
    Fetch a group the profile belongs to.

    Raises:
        GroupNotFoundError: If group doesn't exist
        NotMemberError: If profile is not a member
    """
    try:
        group = Group.objects.get(id=group_id)
    except Group.DoesNotExist:
        raise GroupNotFoundError(f"Group with ID {group_id} not found")

    if not group.has_member(profile):
        raise NotMemberError(f"User is not a member of {group.name}")

    return group


def get_group_members(*, group_id: UUID) -> QuerySet[GroupMembership]:
    """
    Get all members of a group, owner first.

    Raises:
        GroupNotFoundError: If group doesn't exist
    """
    if not Group.objects.filter(id=group_id).exists():
        raise GroupNotFoundError(f"Group with ID {group_id} not found")

    return (
        GroupMembership.objects
        .filter(group_id=group_id)
        .select_related('profile')
        .order_by('-role', 'joined_at')
    )
