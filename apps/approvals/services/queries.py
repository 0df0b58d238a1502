"""Read-side helpers for approval requests."""

from django.db.models import QuerySet

from apps.accounts.models import Profile
from apps.ledger.services import get_session
from apps.approvals.models import ApprovalRequest


def list_pending_for_approver(*, profile: Profile) -> QuerySet[ApprovalRequest]:
    """Requests waiting on this member's decision."""
    return (
        ApprovalRequest.objects
        .filter(approver=profile)
        .pending()
        .select_related('session', 'editor', 'approver')
    )


def list_session_batch(*, session_id: int, profile: Profile) -> QuerySet[ApprovalRequest]:
    """
    Current edit batch of a session, the editor's own change included.

    Raises:
        SessionNotFoundError: If session doesn't exist
        NotGroupMemberError: If profile is not in the group
    """
    session = get_session(session_id=session_id, profile=profile)
    return (
        ApprovalRequest.objects
        .filter(session=session)
        .batch()
        .select_related('session', 'editor', 'approver')
    )


def list_rejection_notices(*, profile: Profile) -> QuerySet[ApprovalRequest]:
    return (
        ApprovalRequest.objects
        .filter(editor=profile)
        .rejection_notices()
        .select_related('session', 'editor', 'approver', 'rejected_by')
    )
