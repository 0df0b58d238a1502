"""
Live session service.

A live session is open: any member sets or removes their own single entry
without approval. Closing requires the entries to net to zero.
"""

import logging
from decimal import Decimal
from typing import Optional
from uuid import UUID

from django.db import transaction

from apps.accounts.models import Profile
from apps.ledger.amounts import is_zero_sum
from apps.ledger.models import Session, LedgerEntry

from .exceptions import SessionNotLiveError, UnbalancedSessionError
from .session_management import get_group_for_member, get_session, apply_entry_amount

logger = logging.getLogger(__name__)


def create_live_session(
    *,
    group_id: UUID,
    creator: Profile,
    description: str = ''
) -> Session:
    """
    Open a live session with no entries.

    Raises:
        NotGroupMemberError: If creator is not a member
    """
    group = get_group_for_member(group_id=group_id, profile=creator)
    session = Session.objects.create(
        group=group,
        description=description,
        is_live=True,
        created_by=creator
    )
    logger.info("Live session %s opened in group %s", session.id, group.id)
    return session


@transaction.atomic
def set_live_entry(
    *,
    session_id: int,
    profile: Profile,
    amount: Decimal,
    description: str = ''
) -> Optional[LedgerEntry]:
    """
    Add or update the caller's own entry on a live session.

    Raises:
        SessionNotFoundError: If session doesn't exist
        NotGroupMemberError: If profile is not in the group
        SessionNotLiveError: If the session is closed
    """
    session = get_session(session_id=session_id, profile=profile, for_update=True)
    if not session.is_live:
        raise SessionNotLiveError("Closed sessions can only be changed through an approved edit")

    return apply_entry_amount(
        session=session,
        profile_id=profile.id,
        amount=amount,
        description=description
    )


@transaction.atomic
def remove_live_entry(*, session_id: int, profile: Profile) -> None:
    """
    Delete the caller's own entry on a live session.

    Raises:
        SessionNotLiveError: If the session is closed
    """
    session = get_session(session_id=session_id, profile=profile, for_update=True)
    if not session.is_live:
        raise SessionNotLiveError("Closed sessions can only be changed through an approved edit")

    LedgerEntry.objects.filter(session=session, profile=profile).delete()


@transaction.atomic
def close_live_session(*, session_id: int, profile: Profile) -> Session:
    """
    Close a live session once its entries net to zero.

    Raises:
        SessionNotLiveError: If the session is already closed
        UnbalancedSessionError: If the entries do not sum to zero
    """
    session = get_session(session_id=session_id, profile=profile, for_update=True)
    if not session.is_live:
        raise SessionNotLiveError("Session is already closed")

    amounts = list(session.entries.values_list('amount', flat=True))
    if not is_zero_sum(amounts):
        total = sum(amounts, Decimal('0.00'))
        raise UnbalancedSessionError(
            f"Cannot close session: entries sum to {total}, not zero",
            total=total
        )

    session.is_live = False
    session.save(update_fields=['is_live'])
    logger.info("Live session %s closed by profile %s", session.id, profile.id)
    return session
