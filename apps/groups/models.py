# ==========================================
# apps/groups/models.py
# ==========================================

from django.db import models
import uuid
import secrets


def generate_join_pin():
    """Random 6-digit join pin."""
    return f'{secrets.randbelow(10 ** 6):06d}'


class GroupRole(models.TextChoices):
    OWNER = 'owner', 'Owner'
    MEMBER = 'member', 'Member'


class Group(models.Model):
    """Expense-sharing group."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    name = models.CharField(max_length=200)
    join_pin = models.CharField(max_length=6, unique=True, editable=False)
    created_by = models.ForeignKey(
        'accounts.Profile',
        on_delete=models.CASCADE,
        related_name='created_groups'
    )
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'groups'
        indexes = [
            models.Index(fields=['created_by', 'created_at'], name='groups_creator_idx'),
        ]
        ordering = ['-created_at']

    def __str__(self):
        return self.name

    def has_member(self, profile):
        return self.memberships.filter(profile=profile).exists()

    def get_role(self, profile):
        try:
            return self.memberships.get(profile=profile).role
        except GroupMembership.DoesNotExist:
            return None

    def is_owner(self, profile):
        return self.get_role(profile) == GroupRole.OWNER


class GroupMembership(models.Model):
    """Profile membership in a group with role."""

    group = models.ForeignKey(Group, on_delete=models.CASCADE, related_name='memberships')
    profile = models.ForeignKey(
        'accounts.Profile',
        on_delete=models.CASCADE,
        related_name='memberships'
    )
    role = models.CharField(max_length=20, choices=GroupRole.choices, default=GroupRole.MEMBER)
    joined_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = 'group_memberships'
        unique_together = [['group', 'profile']]
        ordering = ['joined_at']

    def __str__(self):
        return f"{self.profile.username} in {self.group.name} ({self.role})"


class Invite(models.Model):
    """Email invitation to a group, accepted through its token."""

    group = models.ForeignKey(Group, on_delete=models.CASCADE, related_name='invites')
    email = models.EmailField(max_length=255)
    token = models.CharField(max_length=64, unique=True, editable=False)
    invited_by = models.ForeignKey(
        'accounts.Profile',
        on_delete=models.SET_NULL,
        null=True,
        related_name='sent_invites'
    )
    expires_at = models.DateTimeField(null=True, blank=True)
    accepted_at = models.DateTimeField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = 'group_invites'
        ordering = ['-created_at']

    def __str__(self):
        return f"Invite {self.email} to {self.group.name}"

    def save(self, *args, **kwargs):
        if not self.token:
            self.token = secrets.token_urlsafe(32)
        super().save(*args, **kwargs)
