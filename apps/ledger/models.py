from decimal import Decimal

from django.db import models
from django.db.models import Sum


class Session(models.Model):
    """Shared expense event inside a group; member entries net to zero."""

    group = models.ForeignKey(
        'groups.Group',
        on_delete=models.CASCADE,
        related_name='sessions'
    )
    description = models.CharField(max_length=255, blank=True)

    # Live sessions accept uncoordinated edits of each member's own entry
    is_live = models.BooleanField(default=False)
    is_payment = models.BooleanField(default=False)

    created_by = models.ForeignKey(
        'accounts.Profile',
        on_delete=models.SET_NULL,
        null=True,
        related_name='created_sessions'
    )
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = 'sessions'
        indexes = [
            models.Index(fields=['group', 'created_at'], name='sessions_group_idx'),
        ]
        ordering = ['-created_at', '-id']

    def __str__(self):
        return self.description or f"Session {self.pk}"

    def total(self):
        """Sum of all entry amounts."""
        return self.entries.aggregate(total=Sum('amount'))['total'] or Decimal('0.00')


class LedgerEntry(models.Model):
    """One member's signed contribution to a session."""

    session = models.ForeignKey(
        Session,
        on_delete=models.CASCADE,
        related_name='entries'
    )
    profile = models.ForeignKey(
        'accounts.Profile',
        on_delete=models.CASCADE,
        related_name='ledger_entries'
    )
    amount = models.DecimalField(max_digits=12, decimal_places=2)
    description = models.CharField(max_length=255, blank=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'ledger_entries'
        unique_together = [['session', 'profile']]
        indexes = [
            models.Index(fields=['profile', 'session'], name='entries_profile_idx'),
        ]
        ordering = ['created_at', 'id']

    def __str__(self):
        return f"{self.profile.username}: {self.amount}"
