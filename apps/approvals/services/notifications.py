"""
Notification banner.

Summarizes what needs the viewer's attention: edits waiting on their
approval and their own edits that were rejected.
"""

from dataclasses import dataclass, asdict
from typing import Optional

from apps.accounts.models import Profile
from apps.approvals.models import ApprovalRequest

MIXED = 'mixed'
APPROVAL_REQUIRED = 'approval_required'
EDIT_REJECTED = 'edit_rejected'


@dataclass(frozen=True)
class Banner:
    visible: bool
    kind: Optional[str]
    message: str
    pending_count: int
    rejected_count: int

    def as_dict(self):
        return asdict(self)


def get_notification_banner(*, profile: Profile) -> Banner:
    pending = ApprovalRequest.objects.filter(approver=profile).pending().count()
    rejected = ApprovalRequest.objects.filter(editor=profile).rejection_notices().count()

    if pending and rejected:
        kind = MIXED
        message = "You have edits to review and an edit of yours was rejected"
    elif pending:
        kind = APPROVAL_REQUIRED
        message = f"You must review {pending} edit(s)"
    elif rejected:
        kind = EDIT_REJECTED
        message = "Your edit was rejected"
    else:
        kind = None
        message = ''

    return Banner(
        visible=kind is not None,
        kind=kind,
        message=message,
        pending_count=pending,
        rejected_count=rejected
    )
