"""
Approval resolution service.

Approving the last pending request applies the whole batch to the ledger.
A single rejection cancels the batch and leaves a notice for the editor.
"""

import logging

from django.db import transaction
from django.utils import timezone

from apps.accounts.models import Profile
from apps.ledger.models import Session
from apps.ledger.services import apply_entry_amount, SessionNotFoundError
from apps.approvals.models import ApprovalRequest, ApprovalStatus

from .exceptions import (
    ApprovalNotFoundError,
    NotApproverError,
    ApprovalAlreadyResolvedError,
    NotNoticeOwnerError,
)

logger = logging.getLogger(__name__)


def _lock_session(session_id: int) -> Session:
    try:
        return Session.objects.select_for_update().get(id=session_id)
    except Session.DoesNotExist:
        raise SessionNotFoundError(f"Session {session_id} not found")


def _get_pending_request(*, request_id: int, session: Session, approver: Profile) -> ApprovalRequest:
    try:
        request = ApprovalRequest.objects.select_related('editor').get(
            id=request_id,
            session=session
        )
    except ApprovalRequest.DoesNotExist:
        raise ApprovalNotFoundError(f"Approval request {request_id} not found")

    if request.approver_id != approver.id:
        raise NotApproverError("This approval request is addressed to another member")

    if request.status != ApprovalStatus.PENDING:
        raise ApprovalAlreadyResolvedError(
            f"Approval request is already {request.get_status_display().lower()}"
        )

    return request


@transaction.atomic
def approve_request(*, request_id: int, session_id: int, approver: Profile) -> bool:
    """
    Approve a pending request; apply the batch when it was the last one.

    Args:
        request_id: ID of the approval request
        session_id: Session the request belongs to
        approver: Member the request is addressed to

    Returns:
        True when the batch was applied to the ledger

    Raises:
        SessionNotFoundError: If session doesn't exist
        ApprovalNotFoundError: If the request is not part of the session
        NotApproverError: If approver is not the addressed member
        ApprovalAlreadyResolvedError: If the request is not pending
    """
    session = _lock_session(session_id)
    request = _get_pending_request(request_id=request_id, session=session, approver=approver)

    request.status = ApprovalStatus.APPROVED
    request.save(update_fields=['status', 'updated_at'])

    batch = ApprovalRequest.objects.filter(session=session).batch()
    if batch.pending().exists():
        return False

    for approved in batch.filter(status=ApprovalStatus.APPROVED):
        apply_entry_amount(
            session=session,
            profile_id=approved.approver_id,
            amount=approved.new_amount
        )

    deleted, _ = batch.delete()
    logger.info(
        "Edit of session %s by profile %s applied after approval (%d request(s) consumed)",
        session.id, request.editor_id, deleted
    )
    return True


@transaction.atomic
def reject_request(*, request_id: int, session_id: int, approver: Profile) -> ApprovalRequest:
    """
    Veto a pending request, cancelling the whole batch.

    The editor gets one undismissed rejection notice per session; a second
    veto while one is outstanding reuses it.

    Returns:
        The editor's rejection notice

    Raises:
        SessionNotFoundError: If session doesn't exist
        ApprovalNotFoundError: If the request is not part of the session
        NotApproverError: If approver is not the addressed member
        ApprovalAlreadyResolvedError: If the request is not pending
    """
    session = _lock_session(session_id)
    request = _get_pending_request(request_id=request_id, session=session, approver=approver)
    editor = request.editor

    ApprovalRequest.objects.filter(session=session).batch().delete()

    notice = (
        ApprovalRequest.objects
        .filter(session=session, editor=editor)
        .rejection_notices()
        .first()
    )
    if notice is None:
        notice = ApprovalRequest.objects.create(
            session=session,
            editor=editor,
            approver=editor,
            old_amount=0,
            new_amount=0,
            status=ApprovalStatus.REJECTED,
            rejected_by=approver
        )

    logger.info(
        "Edit of session %s by profile %s rejected by profile %s",
        session.id, editor.id, approver.id
    )
    return notice


def dismiss_rejection(*, request_id: int, viewer: Profile) -> ApprovalRequest:
    """
    Mark a rejection notice as seen.

    Raises:
        ApprovalNotFoundError: If no rejection notice has this id
        NotNoticeOwnerError: If the notice belongs to another member
    """
    try:
        notice = ApprovalRequest.objects.get(id=request_id, status=ApprovalStatus.REJECTED)
    except ApprovalRequest.DoesNotExist:
        raise ApprovalNotFoundError(f"Rejection notice {request_id} not found")

    if notice.editor_id != viewer.id:
        raise NotNoticeOwnerError("Only the editor can dismiss this notice")

    if notice.dismissed_at is None:
        notice.dismissed_at = timezone.now()
        notice.save(update_fields=['dismissed_at', 'updated_at'])

    return notice
