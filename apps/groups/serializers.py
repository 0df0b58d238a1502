from rest_framework import serializers
from .models import Group, GroupMembership, Invite
from apps.accounts.models import Profile


class ProfileMinimalSerializer(serializers.ModelSerializer):
    """Minimal profile info for nested serialization."""

    class Meta:
        model = Profile
        fields = ['id', 'username', 'email']
        read_only_fields = fields


class GroupSerializer(serializers.ModelSerializer):
    """Main serializer for groups."""

    created_by = ProfileMinimalSerializer(read_only=True)
    member_count = serializers.SerializerMethodField()
    user_role = serializers.SerializerMethodField()

    class Meta:
        model = Group
        fields = [
            'id',
            'name',
            'join_pin',
            'created_by',
            'member_count',
            'user_role',
            'created_at',
            'updated_at',
        ]
        read_only_fields = fields

    def get_member_count(self, obj):
        """Get number of members in the group."""
        return obj.memberships.count()

    def get_user_role(self, obj):
        """Get current user's role in the group."""
        profile = self.context.get('profile')
        if profile is not None:
            return obj.get_role(profile)
        return None


class GroupCreateSerializer(serializers.Serializer):
    """Serializer for creating groups."""

    name = serializers.CharField(max_length=200)


class GroupListSerializer(serializers.ModelSerializer):
    """Lightweight serializer for list views."""

    member_count = serializers.SerializerMethodField()

    class Meta:
        model = Group
        fields = ['id', 'name', 'member_count', 'created_at']
        read_only_fields = fields

    def get_member_count(self, obj):
        return obj.memberships.count()


class GroupMemberSerializer(serializers.ModelSerializer):
    """Detailed member information."""

    profile = ProfileMinimalSerializer(read_only=True)

    class Meta:
        model = GroupMembership
        fields = ['id', 'group', 'profile', 'role', 'joined_at']
        read_only_fields = fields


class JoinGroupSerializer(serializers.Serializer):
    """Serializer for joining a group with its pin."""

    pin = serializers.RegexField(r'^\d{6}$', required=True)


class InviteCreateSerializer(serializers.Serializer):
    """Serializer for inviting an email address."""

    email = serializers.EmailField(required=True)


class InviteSerializer(serializers.ModelSerializer):
    """Invite as shown to the member who sent it."""

    invited_by = ProfileMinimalSerializer(read_only=True)

    class Meta:
        model = Invite
        fields = [
            'id',
            'group',
            'email',
            'token',
            'invited_by',
            'expires_at',
            'accepted_at',
            'created_at',
        ]
        read_only_fields = fields
