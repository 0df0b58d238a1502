"""
Groups app services layer.

Services contain business logic and orchestrate operations across models.
All state-changing operations use transactions and concurrency protection.
"""

from .exceptions import (
    GroupsServiceError,
    GroupNotFoundError,
    InvalidPinError,
    AlreadyMemberError,
    NotMemberError,
    OwnerCannotLeaveError,
    InsufficientPermissionsError,
    InviteNotFoundError,
    InviteExpiredError,
    InviteAlreadyAcceptedError,
    InviteEmailMismatchError,
)

from .group_management import (
    create_group,
    get_group_by_id,
    regenerate_pin,
)

from .membership_management import (
    add_member,
    join_group_by_pin,
    leave_group,
    get_member_group,
    get_group_members,
)

from .invite_management import (
    create_invite,
    accept_invite,
)


__all__ = [
    # Exceptions
    'GroupsServiceError',
    'GroupNotFoundError',
    'InvalidPinError',
    'AlreadyMemberError',
    'NotMemberError',
    'OwnerCannotLeaveError',
    'InsufficientPermissionsError',
    'InviteNotFoundError',
    'InviteExpiredError',
    'InviteAlreadyAcceptedError',
    'InviteEmailMismatchError',

    # Group Management
    'create_group',
    'get_group_by_id',
    'regenerate_pin',

    # Membership Management
    'add_member',
    'join_group_by_pin',
    'leave_group',
    'get_member_group',
    'get_group_members',

    # Invite Management
    'create_invite',
    'accept_invite',
]
