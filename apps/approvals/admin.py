from django.contrib import admin
from apps.approvals.models import ApprovalRequest


@admin.register(ApprovalRequest)
class ApprovalRequestAdmin(admin.ModelAdmin):
    """Admin interface for approval requests and rejection notices."""

    list_display = ['session', 'editor', 'approver', 'old_amount', 'new_amount', 'status', 'dismissed_at']
    list_filter = ['status', 'created_at']
    search_fields = ['editor__username', 'approver__username', 'session__description']
    readonly_fields = ['created_at', 'updated_at']

    def get_queryset(self, request):
        qs = super().get_queryset(request)
        return qs.select_related('session', 'editor', 'approver')
