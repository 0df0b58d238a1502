from django.contrib import admin
from apps.ledger.models import Session, LedgerEntry


class LedgerEntryInline(admin.TabularInline):
    model = LedgerEntry
    extra = 0
    fields = ['profile', 'amount', 'description', 'updated_at']
    readonly_fields = ['updated_at']


@admin.register(Session)
class SessionAdmin(admin.ModelAdmin):
    """Admin interface for Sessions."""

    list_display = ['__str__', 'group', 'is_live', 'is_payment', 'created_by', 'created_at']
    list_filter = ['is_live', 'is_payment', 'created_at']
    search_fields = ['description', 'group__name']
    readonly_fields = ['created_at']
    inlines = [LedgerEntryInline]
    date_hierarchy = 'created_at'

    def get_queryset(self, request):
        qs = super().get_queryset(request)
        return qs.select_related('group', 'created_by')


@admin.register(LedgerEntry)
class LedgerEntryAdmin(admin.ModelAdmin):
    list_display = ['profile', 'session', 'amount', 'updated_at']
    search_fields = ['profile__username', 'session__description']
    readonly_fields = ['created_at', 'updated_at']
