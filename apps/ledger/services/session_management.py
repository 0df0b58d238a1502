"""
Session management service.

Creates closed sessions from a complete set of entries and provides the
entry-level writes other services build on.
"""

import logging
from decimal import Decimal
from typing import Dict, Iterable, Optional, Tuple
from uuid import UUID

from django.db import transaction
from django.db.models import QuerySet

from apps.accounts.models import Profile
from apps.groups.models import Group, GroupMembership
from apps.ledger.amounts import quantize, is_zero_sum
from apps.ledger.models import Session, LedgerEntry

from .exceptions import (
    SessionNotFoundError,
    NotGroupMemberError,
    InvalidEntriesError,
    UnbalancedSessionError,
)

logger = logging.getLogger(__name__)


def get_group_for_member(*, group_id: UUID, profile: Profile) -> Group:
    """
    Raises:
        NotGroupMemberError: If the group is missing or profile is not in it
    """
    group = Group.objects.filter(id=group_id).first()
    if group is None or not group.has_member(profile):
        raise NotGroupMemberError("You must be a member of this group")
    return group


def validate_entries(
    *,
    group: Group,
    entries: Iterable[Tuple[int, Decimal]]
) -> Dict[int, Decimal]:
    """
    Normalize ``(profile_id, amount)`` pairs into a mapping.

    Raises:
        InvalidEntriesError: On an empty list, a repeated user, or a user
            outside the group
    """
    amounts = {}
    for profile_id, amount in entries:
        if profile_id in amounts:
            raise InvalidEntriesError(f"Duplicate entry for user {profile_id}")
        amounts[profile_id] = quantize(amount)

    if not amounts:
        raise InvalidEntriesError("At least one entry is required")

    member_ids = set(
        GroupMembership.objects
        .filter(group=group, profile_id__in=amounts.keys())
        .values_list('profile_id', flat=True)
    )
    outsiders = sorted(set(amounts) - member_ids)
    if outsiders:
        raise InvalidEntriesError(
            f"Users {outsiders} are not members of {group.name}"
        )

    return amounts


@transaction.atomic
def create_session(
    *,
    group_id: UUID,
    creator: Profile,
    entries: Iterable[Tuple[int, Decimal]],
    description: str = '',
    is_payment: bool = False
) -> Session:
    """
    Create a closed session with one entry per member.

    Args:
        group_id: UUID of the parent group
        creator: Member recording the session
        entries: ``(profile_id, amount)`` pairs; amounts must net to zero
        description: Session description
        is_payment: Tag the session as a direct payment

    Returns:
        Created Session instance

    Raises:
        NotGroupMemberError: If creator is not a member
        InvalidEntriesError: If entries are malformed
        UnbalancedSessionError: If amounts do not sum to zero
    """
    group = get_group_for_member(group_id=group_id, profile=creator)
    amounts = validate_entries(group=group, entries=entries)

    if not is_zero_sum(amounts.values()):
        total = sum(amounts.values(), Decimal('0.00'))
        raise UnbalancedSessionError(
            f"Session entries must sum to zero (total is {total})",
            total=total
        )

    session = Session.objects.create(
        group=group,
        description=description,
        is_live=False,
        is_payment=is_payment,
        created_by=creator
    )
    LedgerEntry.objects.bulk_create([
        LedgerEntry(session=session, profile_id=profile_id, amount=amount)
        for profile_id, amount in amounts.items()
    ])

    logger.info("Session %s created in group %s with %d entries", session.id, group.id, len(amounts))
    return session


def get_session(*, session_id: int, profile: Profile, for_update: bool = False) -> Session:
    """
    Fetch a session the profile can see.

    Raises:
        SessionNotFoundError: If session doesn't exist
        NotGroupMemberError: If profile is not in the session's group
    """
    queryset = Session.objects.select_related('group')
    if for_update:
        queryset = queryset.select_for_update(of=('self',))

    try:
        session = queryset.get(id=session_id)
    except Session.DoesNotExist:
        raise SessionNotFoundError(f"Session {session_id} not found")

    if not session.group.has_member(profile):
        raise NotGroupMemberError("You must be a member of this group")

    return session


def list_group_sessions(*, group_id: UUID, profile: Profile) -> QuerySet[Session]:
    """All sessions of a group, newest first."""
    group = get_group_for_member(group_id=group_id, profile=profile)
    return (
        Session.objects
        .filter(group=group)
        .prefetch_related('entries__profile')
    )


def current_amounts(session: Session) -> Dict[int, Decimal]:
    """Map of profile id to entry amount for the session."""
    return dict(session.entries.values_list('profile_id', 'amount'))


def apply_entry_amount(
    *,
    session: Session,
    profile_id: int,
    amount: Decimal,
    description: Optional[str] = None
) -> Optional[LedgerEntry]:
    """
    Set one member's amount: insert, update, or delete when zero.

    Returns:
        The entry, or None when it was removed / never created
    """
    amount = quantize(amount)
    entry = LedgerEntry.objects.filter(session=session, profile_id=profile_id).first()

    if amount == 0:
        if entry is not None:
            entry.delete()
        return None

    if entry is None:
        return LedgerEntry.objects.create(
            session=session,
            profile_id=profile_id,
            amount=amount,
            description=description or ''
        )

    entry.amount = amount
    update_fields = ['amount', 'updated_at']
    if description is not None:
        entry.description = description
        update_fields.append('description')
    entry.save(update_fields=update_fields)
    return entry
