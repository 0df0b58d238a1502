from django.db import models


class ApprovalStatus(models.TextChoices):
    PENDING = 'pending', 'Pending'
    APPROVED = 'approved', 'Approved'
    REJECTED = 'rejected', 'Rejected'


class ApprovalRequestQuerySet(models.QuerySet):

    def batch(self):
        """Rows of an edit batch: pending and approved requests."""
        return self.filter(status__in=[ApprovalStatus.PENDING, ApprovalStatus.APPROVED])

    def pending(self):
        return self.filter(status=ApprovalStatus.PENDING)

    def rejection_notices(self):
        """Undismissed rejection notices."""
        return self.filter(status=ApprovalStatus.REJECTED, dismissed_at__isnull=True)


class ApprovalRequest(models.Model):
    """
    One member's sign-off on a proposed edit to a closed session.

    A proposal creates a batch: a pending request per affected member plus an
    already approved request carrying the editor's own change. A rejected row
    addressed to the editor is a standalone notice, cleared by dismissal.
    """

    session = models.ForeignKey(
        'ledger.Session',
        on_delete=models.CASCADE,
        related_name='approval_requests'
    )
    editor = models.ForeignKey(
        'accounts.Profile',
        on_delete=models.CASCADE,
        related_name='proposed_edits'
    )
    approver = models.ForeignKey(
        'accounts.Profile',
        on_delete=models.CASCADE,
        related_name='approval_requests'
    )
    old_amount = models.DecimalField(max_digits=12, decimal_places=2, default=0)
    new_amount = models.DecimalField(max_digits=12, decimal_places=2, default=0)
    status = models.CharField(
        max_length=20,
        choices=ApprovalStatus.choices,
        default=ApprovalStatus.PENDING
    )

    # Notices only: who vetoed the edit
    rejected_by = models.ForeignKey(
        'accounts.Profile',
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='vetoed_edits'
    )
    dismissed_at = models.DateTimeField(null=True, blank=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    objects = ApprovalRequestQuerySet.as_manager()

    class Meta:
        db_table = 'approval_requests'
        indexes = [
            models.Index(fields=['session', 'status'], name='approvals_session_idx'),
            models.Index(fields=['approver', 'status'], name='approvals_approver_idx'),
            models.Index(fields=['editor', 'status'], name='approvals_editor_idx'),
        ]
        ordering = ['created_at', 'id']

    def __str__(self):
        return f"{self.get_status_display()} edit of session {self.session_id} for {self.approver_id}"

    @property
    def is_notice(self):
        return self.status == ApprovalStatus.REJECTED
