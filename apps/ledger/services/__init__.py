"""
Ledger app services layer.

Sessions, their entries, direct payments and balances.
"""

from .exceptions import (
    LedgerServiceError,
    SessionNotFoundError,
    NotGroupMemberError,
    InvalidEntriesError,
    UnbalancedSessionError,
    SessionNotLiveError,
    InvalidPaymentError,
)

from .session_management import (
    get_group_for_member,
    validate_entries,
    create_session,
    get_session,
    list_group_sessions,
    current_amounts,
    apply_entry_amount,
)

from .live_sessions import (
    create_live_session,
    set_live_entry,
    remove_live_entry,
    close_live_session,
)

from .payments import record_payment

from .balances import (
    compute_balance,
    group_balances,
)


__all__ = [
    # Exceptions
    'LedgerServiceError',
    'SessionNotFoundError',
    'NotGroupMemberError',
    'InvalidEntriesError',
    'UnbalancedSessionError',
    'SessionNotLiveError',
    'InvalidPaymentError',

    # Sessions
    'get_group_for_member',
    'validate_entries',
    'create_session',
    'get_session',
    'list_group_sessions',
    'current_amounts',
    'apply_entry_amount',

    # Live sessions
    'create_live_session',
    'set_live_entry',
    'remove_live_entry',
    'close_live_session',

    # Payments
    'record_payment',

    # Balances
    'compute_balance',
    'group_balances',
]
