"""
Balance service.

A member's balance in a group is the sum of their entries across every
session of the group: positive means the group owes them, negative means
they owe.
"""

from decimal import Decimal
from typing import List, Dict, Any
from uuid import UUID

from django.db.models import Sum, Q, Value, DecimalField
from django.db.models.functions import Coalesce

from apps.accounts.models import Profile
from apps.groups.models import GroupMembership
from apps.ledger.models import LedgerEntry

from .session_management import get_group_for_member


def compute_balance(*, group_id: UUID, profile: Profile) -> Decimal:
    """
    Sum of the profile's entry amounts across the group's sessions.

    Raises:
        NotGroupMemberError: If profile is not in the group
    """
    group = get_group_for_member(group_id=group_id, profile=profile)
    total = (
        LedgerEntry.objects
        .filter(session__group=group, profile=profile)
        .aggregate(total=Sum('amount'))['total']
    )
    return total or Decimal('0.00')


def group_balances(*, group_id: UUID, profile: Profile) -> List[Dict[str, Any]]:
    """
    Balance of every member of the group, in join order.

    Raises:
        NotGroupMemberError: If profile is not in the group
    """
    group = get_group_for_member(group_id=group_id, profile=profile)

    memberships = (
        GroupMembership.objects
        .filter(group=group)
        .select_related('profile')
        .annotate(
            balance=Coalesce(
                Sum(
                    'profile__ledger_entries__amount',
                    filter=Q(profile__ledger_entries__session__group=group)
                ),
                Value(Decimal('0.00')),
                output_field=DecimalField(max_digits=12, decimal_places=2)
            )
        )
        .order_by('joined_at')
    )

    return [
        {'profile': m.profile, 'balance': m.balance}
        for m in memberships
    ]
