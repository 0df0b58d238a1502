from decimal import Decimal

from rest_framework import serializers

from apps.groups.serializers import ProfileMinimalSerializer
from .models import Session, LedgerEntry


class LedgerEntrySerializer(serializers.ModelSerializer):
    profile = ProfileMinimalSerializer(read_only=True)

    class Meta:
        model = LedgerEntry
        fields = ['id', 'profile', 'amount', 'description', 'created_at', 'updated_at']
        read_only_fields = fields


class SessionSerializer(serializers.ModelSerializer):
    """Session with its entries."""

    entries = LedgerEntrySerializer(many=True, read_only=True)
    created_by = ProfileMinimalSerializer(read_only=True)
    total = serializers.SerializerMethodField()

    class Meta:
        model = Session
        fields = [
            'id',
            'group',
            'description',
            'is_live',
            'is_payment',
            'created_by',
            'entries',
            'total',
            'created_at',
        ]
        read_only_fields = fields

    def get_total(self, obj):
        return str(sum((e.amount for e in obj.entries.all()), Decimal('0.00')))


class EntryInputSerializer(serializers.Serializer):
    user_id = serializers.IntegerField()
    amount = serializers.DecimalField(max_digits=12, decimal_places=2)


class SessionCreateSerializer(serializers.Serializer):
    """Input for a closed session with a full set of entries."""

    group = serializers.UUIDField()
    description = serializers.CharField(max_length=255, required=False, allow_blank=True, default='')
    entries = EntryInputSerializer(many=True)

    def validate_entries(self, value):
        if not value:
            raise serializers.ValidationError("At least one entry is required.")
        return value


class LiveSessionCreateSerializer(serializers.Serializer):
    group = serializers.UUIDField()
    description = serializers.CharField(max_length=255, required=False, allow_blank=True, default='')


class LiveEntrySerializer(serializers.Serializer):
    amount = serializers.DecimalField(max_digits=12, decimal_places=2)
    description = serializers.CharField(max_length=255, required=False, allow_blank=True, default='')


class PaymentCreateSerializer(serializers.Serializer):
    """Direct payment from the caller to another member."""

    group = serializers.UUIDField()
    payee_id = serializers.IntegerField()
    amount = serializers.DecimalField(max_digits=12, decimal_places=2, min_value=Decimal('0.01'))
    description = serializers.CharField(max_length=255, required=False, allow_blank=True, default='')


class MemberBalanceSerializer(serializers.Serializer):
    profile = ProfileMinimalSerializer(read_only=True)
    balance = serializers.DecimalField(max_digits=12, decimal_places=2, read_only=True)
