# ==========================================
# apps/accounts/admin.py
# ==========================================

from django.contrib import admin
from django.contrib.auth.admin import UserAdmin as BaseUserAdmin
from .models import User, Profile


class ProfileInline(admin.StackedInline):
    """Directory record linked to the principal."""
    model = Profile
    extra = 0
    fields = ['email', 'username', 'created_at']
    readonly_fields = ['created_at']


@admin.register(User)
class UserAdmin(BaseUserAdmin):
    """Admin interface for auth principals."""

    list_display = [
        'email',
        'display_name',
        'is_active',
        'is_staff',
        'created_at',
        'last_login',
    ]

    list_filter = [
        'is_active',
        'is_staff',
        'is_superuser',
        'created_at',
    ]

    search_fields = [
        'email',
        'display_name',
    ]

    ordering = ['-created_at']
    date_hierarchy = 'created_at'

    # Remove username field references from BaseUserAdmin
    fieldsets = (
        ('Basic Information', {
            'fields': ('email', 'display_name', 'password')
        }),
        ('Permissions', {
            'fields': ('is_active', 'is_staff', 'is_superuser', 'groups', 'user_permissions'),
        }),
        ('Timestamps', {
            'fields': ('created_at', 'last_login'),
            'classes': ('collapse',),
        }),
    )

    add_fieldsets = (
        ('Create User', {
            'classes': ('wide',),
            'fields': ('email', 'display_name', 'password1', 'password2'),
        }),
    )

    readonly_fields = ['created_at', 'last_login']
    filter_horizontal = ['groups', 'user_permissions']
    inlines = [ProfileInline]

    actions = ['activate_users', 'deactivate_users']

    @admin.action(description='Activate selected users')
    def activate_users(self, request, queryset):
        """Activate selected users."""
        count = queryset.update(is_active=True)
        self.message_user(request, f'Activated {count} user(s).')

    @admin.action(description='Deactivate selected users')
    def deactivate_users(self, request, queryset):
        """Deactivate selected users (excludes superusers)."""
        safe_queryset = queryset.filter(is_superuser=False)
        count = safe_queryset.update(is_active=False)
        skipped = queryset.count() - count
        msg = f'Deactivated {count} user(s).'
        if skipped:
            msg += f' Skipped {skipped} superuser(s).'
        self.message_user(request, msg)


@admin.register(Profile)
class ProfileAdmin(admin.ModelAdmin):
    """Admin interface for directory profiles."""

    list_display = ['id', 'username', 'email', 'user', 'created_at']
    search_fields = ['username', 'email']
    readonly_fields = ['created_at']
    ordering = ['id']

    def get_queryset(self, request):
        """Optimize query."""
        qs = super().get_queryset(request)
        return qs.select_related('user')
