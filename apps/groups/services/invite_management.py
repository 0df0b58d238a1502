"""
Invite management service.

Email invitations carry a random token; the invited person accepts by
presenting it while signed in with the invited address.
"""

import logging
from datetime import timedelta
from typing import Optional
from uuid import UUID

from django.conf import settings
from django.db import transaction
from django.utils import timezone

from apps.accounts.models import Profile
from apps.groups.models import Group, GroupMembership, Invite

from .exceptions import (
    GroupNotFoundError,
    NotMemberError,
    InviteNotFoundError,
    InviteExpiredError,
    InviteAlreadyAcceptedError,
    InviteEmailMismatchError,
)
from .membership_management import add_member

logger = logging.getLogger(__name__)


def create_invite(
    *,
    group_id: UUID,
    email: str,
    invited_by: Profile,
    expires_in: Optional[timedelta] = None
) -> Invite:
    """
    Invite an email address to a group (members only).

    Args:
        group_id: UUID of the group
        email: Address being invited
        invited_by: Member sending the invite
        expires_in: Lifetime of the invite (defaults to INVITE_EXPIRY_DAYS)

    Raises:
        GroupNotFoundError: If group doesn't exist
        NotMemberError: If invited_by is not a member
    """
    try:
        group = Group.objects.get(id=group_id)
    except Group.DoesNotExist:
        raise GroupNotFoundError(f"Group with ID {group_id} not found")

    if not group.has_member(invited_by):
        raise NotMemberError(f"User is not a member of {group.name}")

    if expires_in is None:
        expires_in = timedelta(days=settings.INVITE_EXPIRY_DAYS)

    invite = Invite.objects.create(
        group=group,
        email=email,
        invited_by=invited_by,
        expires_at=timezone.now() + expires_in
    )
    logger.info("Invite %s created for group %s", invite.id, group.id)
    return invite


@transaction.atomic
def accept_invite(*, token: str, profile: Profile) -> GroupMembership:
    """
    Accept an invite and join its group.

    Raises:
        InviteNotFoundError: If the token is unknown
        InviteExpiredError: If the invite has expired
        InviteAlreadyAcceptedError: If the invite was already used
        InviteEmailMismatchError: If the profile's email differs
        AlreadyMemberError: If the profile is already in the group
    """
    try:
        invite = (
            Invite.objects
            .select_for_update()
            .select_related('group')
            .get(token=token)
        )
    except Invite.DoesNotExist:
        raise InviteNotFoundError("Invite not found")

    if invite.expires_at and invite.expires_at < timezone.now():
        raise InviteExpiredError("This invite has expired")

    if invite.accepted_at:
        raise InviteAlreadyAcceptedError("This invite has already been accepted")

    if profile.email.lower() != invite.email.lower():
        raise InviteEmailMismatchError(
            f"This invite was sent to {invite.email}, but you're signed in as {profile.email}"
        )

    membership = add_member(group=invite.group, profile=profile)

    invite.accepted_at = timezone.now()
    invite.save(update_fields=['accepted_at'])

    return membership
