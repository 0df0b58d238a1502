from rest_framework import permissions

from apps.accounts.services import get_or_create_profile


class IsGroupMember(permissions.BasePermission):
    """
    Permission: User must be a member of the group.
    """

    def has_object_permission(self, request, view, obj):
        # obj is a Group instance
        return obj.has_member(get_or_create_profile(user=request.user))


class IsGroupOwner(permissions.BasePermission):
    """
    Permission: User must be the group owner.
    """

    message = 'Only the group owner can do this.'

    def has_object_permission(self, request, view, obj):
        # obj is a Group instance
        return obj.is_owner(get_or_create_profile(user=request.user))
