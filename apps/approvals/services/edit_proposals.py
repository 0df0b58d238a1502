"""
Edit proposal service.

Turns a proposed set of entries for a closed session into either an
immediate ledger update (only the editor is affected) or an approval batch
that waits for every other affected member.
"""

import logging
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Dict, Iterable, List, Optional, Tuple

from django.db import transaction

from apps.accounts.models import Profile
from apps.ledger.amounts import amounts_equal, quantize
from apps.ledger.services import (
    get_session,
    validate_entries,
    current_amounts,
    apply_entry_amount,
)
from apps.approvals.models import ApprovalRequest, ApprovalStatus

from .exceptions import SessionNotClosedError, PendingApprovalsExistError

logger = logging.getLogger(__name__)

ZERO = Decimal('0.00')


@dataclass(frozen=True)
class EntryDelta:
    """A member's amount before and after a proposed edit."""
    profile_id: int
    old: Decimal
    new: Decimal


@dataclass
class ProposalResult:
    """
    Outcome of a proposal.

    ``applied`` is True when the ledger was updated on the spot;
    otherwise ``requests`` holds the new approval batch.
    """
    applied: bool
    requests: List[ApprovalRequest] = field(default_factory=list)


def diff_entries(
    current: Dict[int, Decimal],
    proposed: Dict[int, Decimal],
    skip: Iterable[int] = ()
) -> List[EntryDelta]:
    """
    Members whose amount changes beyond the ledger tolerance.

    A member missing from ``proposed`` is removed (new amount 0); one missing
    from ``current`` is added (old amount 0). Ids in ``skip`` are ignored.
    """
    skip = set(skip)
    deltas = []
    profile_ids = list(current) + [pid for pid in proposed if pid not in current]

    for profile_id in profile_ids:
        if profile_id in skip:
            continue
        old = quantize(current.get(profile_id, ZERO))
        new = quantize(proposed.get(profile_id, ZERO))
        if not amounts_equal(old, new):
            deltas.append(EntryDelta(profile_id=profile_id, old=old, new=new))

    return deltas


def infer_editor_delta(
    editor_id: int,
    current: Dict[int, Decimal],
    others: List[EntryDelta]
) -> Optional[EntryDelta]:
    """
    Editor's change implied by the other members' changes.

    The editor absorbs the net change of everyone else so the session stays
    balanced. Their starting point is their recorded entry, or the negated
    sum of the others' old amounts when they have none.
    """
    if not others:
        return None

    if editor_id in current:
        old = quantize(current[editor_id])
    else:
        old = -sum((d.old for d in others), ZERO)

    shift = sum((d.new - d.old for d in others), ZERO)
    new = old - shift

    if amounts_equal(old, new):
        return None
    return EntryDelta(profile_id=editor_id, old=old, new=new)


@transaction.atomic
def propose_edit(
    *,
    session_id: int,
    editor: Profile,
    entries: Iterable[Tuple[int, Decimal]],
    description: Optional[str] = None
) -> ProposalResult:
    """
    Propose a new set of entries for a closed session.

    Args:
        session_id: Session to edit
        editor: Member proposing the change
        entries: Complete ``(profile_id, amount)`` set after the edit; an
            editor listed unchanged or left out has their amount inferred
        description: New session description, saved immediately when given

    Returns:
        ProposalResult

    Raises:
        SessionNotFoundError: If session doesn't exist
        NotGroupMemberError: If editor is not in the group
        SessionNotClosedError: If the session is live
        PendingApprovalsExistError: If an earlier edit is still awaiting approval
        InvalidEntriesError: On duplicate or non-member users
    """
    # Row lock serializes concurrent proposals for the same session
    session = get_session(session_id=session_id, profile=editor, for_update=True)

    if session.is_live:
        raise SessionNotClosedError("Live sessions are edited directly, not through approvals")

    if ApprovalRequest.objects.filter(session=session).pending().exists():
        raise PendingApprovalsExistError("Pending approvals exist for this session")

    proposed = validate_entries(group=session.group, entries=entries)
    current = current_amounts(session)

    others = diff_entries(current, proposed, skip=(editor.id,))
    editor_delta = None
    if editor.id in proposed:
        editor_delta = next(
            (d for d in diff_entries(current, proposed) if d.profile_id == editor.id),
            None
        )
    if editor_delta is None:
        # Listed unchanged or left out: editor absorbs the others' net change
        editor_delta = infer_editor_delta(editor.id, current, others)

    if description is not None and description != session.description:
        session.description = description
        session.save(update_fields=['description'])

    if not others:
        if editor_delta is not None:
            apply_entry_amount(
                session=session,
                profile_id=editor.id,
                amount=editor_delta.new
            )
        logger.info("Edit of session %s by profile %s applied directly", session.id, editor.id)
        return ProposalResult(applied=True)

    requests = [
        ApprovalRequest(
            session=session,
            editor=editor,
            approver_id=delta.profile_id,
            old_amount=delta.old,
            new_amount=delta.new,
            status=ApprovalStatus.PENDING
        )
        for delta in others
    ]
    if editor_delta is not None:
        requests.append(ApprovalRequest(
            session=session,
            editor=editor,
            approver=editor,
            old_amount=editor_delta.old,
            new_amount=editor_delta.new,
            status=ApprovalStatus.APPROVED
        ))

    created = ApprovalRequest.objects.bulk_create(requests)
    logger.info(
        "Edit of session %s by profile %s awaits %d approval(s)",
        session.id, editor.id, len(others)
    )
    return ProposalResult(applied=False, requests=created)
