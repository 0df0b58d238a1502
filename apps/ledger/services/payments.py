"""Direct payment service."""

from decimal import Decimal
from uuid import UUID

from apps.accounts.models import Profile
from apps.ledger.models import Session

from .exceptions import InvalidPaymentError
from .session_management import create_session


def record_payment(
    *,
    group_id: UUID,
    payer: Profile,
    payee_id: int,
    amount: Decimal,
    description: str = ''
) -> Session:
    """
    Record a two-party transfer as a closed, payment-tagged session.

    The payer's entry is ``-amount`` and the payee's ``+amount``.

    Raises:
        InvalidPaymentError: If amount is not positive or payer pays themselves
        NotGroupMemberError: If payer is not in the group
        InvalidEntriesError: If the payee is not in the group
    """
    if amount <= 0:
        raise InvalidPaymentError("Payment amount must be positive")

    if payee_id == payer.id:
        raise InvalidPaymentError("You cannot pay yourself")

    return create_session(
        group_id=group_id,
        creator=payer,
        entries=[(payer.id, -amount), (payee_id, amount)],
        description=description or 'Payment',
        is_payment=True
    )
