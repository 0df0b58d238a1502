"""
Approvals app services layer.

Edits to closed sessions go through an approval batch: every affected
member must approve, and any one of them can veto.
"""

from .exceptions import (
    ApprovalsServiceError,
    SessionNotClosedError,
    PendingApprovalsExistError,
    ApprovalNotFoundError,
    NotApproverError,
    ApprovalAlreadyResolvedError,
    NotNoticeOwnerError,
)

from .edit_proposals import (
    EntryDelta,
    ProposalResult,
    diff_entries,
    infer_editor_delta,
    propose_edit,
)

from .approval_resolution import (
    approve_request,
    reject_request,
    dismiss_rejection,
)

from .queries import (
    list_pending_for_approver,
    list_session_batch,
    list_rejection_notices,
)

from .notifications import (
    Banner,
    get_notification_banner,
)


__all__ = [
    # Exceptions
    'ApprovalsServiceError',
    'SessionNotClosedError',
    'PendingApprovalsExistError',
    'ApprovalNotFoundError',
    'NotApproverError',
    'ApprovalAlreadyResolvedError',
    'NotNoticeOwnerError',

    # Proposals
    'EntryDelta',
    'ProposalResult',
    'diff_entries',
    'infer_editor_delta',
    'propose_edit',

    # Resolution
    'approve_request',
    'reject_request',
    'dismiss_rejection',

    # Queries
    'list_pending_for_approver',
    'list_session_batch',
    'list_rejection_notices',

    # Notifications
    'Banner',
    'get_notification_banner',
]
