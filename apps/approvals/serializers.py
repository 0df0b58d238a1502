from rest_framework import serializers

from apps.groups.serializers import ProfileMinimalSerializer
from apps.ledger.serializers import EntryInputSerializer
from .models import ApprovalRequest


class ApprovalRequestSerializer(serializers.ModelSerializer):
    """Approval request or rejection notice."""

    editor = ProfileMinimalSerializer(read_only=True)
    approver = ProfileMinimalSerializer(read_only=True)
    rejected_by = ProfileMinimalSerializer(read_only=True)
    session_description = serializers.CharField(source='session.description', read_only=True)

    class Meta:
        model = ApprovalRequest
        fields = [
            'id',
            'session',
            'session_description',
            'editor',
            'approver',
            'old_amount',
            'new_amount',
            'status',
            'rejected_by',
            'dismissed_at',
            'created_at',
        ]
        read_only_fields = fields


class ProposeEditSerializer(serializers.Serializer):
    """New entries for a closed session; the editor may be omitted."""

    entries = EntryInputSerializer(many=True)
    description = serializers.CharField(max_length=255, required=False, allow_blank=True)


class ResolveRequestSerializer(serializers.Serializer):
    session = serializers.IntegerField()


class BannerSerializer(serializers.Serializer):
    visible = serializers.BooleanField()
    kind = serializers.CharField(allow_null=True)
    message = serializers.CharField(allow_blank=True)
    pending_count = serializers.IntegerField()
    rejected_count = serializers.IntegerField()
