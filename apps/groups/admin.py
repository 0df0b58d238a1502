# ==========================================
# apps/groups/admin.py
# ==========================================

from django.contrib import admin
from apps.groups.models import Group, GroupMembership, Invite


class GroupMembershipInline(admin.TabularInline):
    """Inline admin for group memberships."""
    model = GroupMembership
    extra = 0
    fields = ['profile', 'role', 'joined_at']
    readonly_fields = ['joined_at']


@admin.register(Group)
class GroupAdmin(admin.ModelAdmin):
    """Admin interface for Groups."""

    list_display = [
        'name',
        'created_by',
        'member_count',
        'join_pin',
        'created_at'
    ]
    list_filter = ['created_at']
    search_fields = ['name', 'created_by__username', 'join_pin']
    readonly_fields = ['join_pin', 'created_at', 'updated_at']
    inlines = [GroupMembershipInline]
    date_hierarchy = 'created_at'
    ordering = ['-created_at']

    def member_count(self, obj):
        """Show number of members."""
        return obj.memberships.count()
    member_count.short_description = 'Members'


@admin.register(GroupMembership)
class GroupMembershipAdmin(admin.ModelAdmin):
    """Admin interface for Group Memberships."""

    list_display = ['profile', 'group', 'role', 'joined_at']
    list_filter = ['role', 'joined_at']
    search_fields = ['profile__username', 'group__name']
    readonly_fields = ['joined_at']
    ordering = ['-joined_at']

    def get_queryset(self, request):
        """Optimize query."""
        qs = super().get_queryset(request)
        return qs.select_related('profile', 'group')


@admin.register(Invite)
class InviteAdmin(admin.ModelAdmin):
    """Admin interface for email invites."""

    list_display = ['email', 'group', 'invited_by', 'expires_at', 'accepted_at']
    list_filter = ['accepted_at', 'created_at']
    search_fields = ['email', 'group__name']
    readonly_fields = ['token', 'created_at']
