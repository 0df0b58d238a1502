from rest_framework import serializers
from django.contrib.auth.password_validation import validate_password
from .models import User, Profile


class UserSerializer(serializers.ModelSerializer):
    """Basic user serializer for the authenticated principal."""

    class Meta:
        model = User
        fields = [
            'id',
            'email',
            'display_name',
            'created_at',
            'last_login',
        ]
        read_only_fields = ['id', 'email', 'created_at', 'last_login']


class ProfileSerializer(serializers.ModelSerializer):
    """Directory record with the numeric user id."""

    class Meta:
        model = Profile
        fields = ['id', 'email', 'username', 'created_at']
        read_only_fields = fields


class UserRegistrationSerializer(serializers.Serializer):
    """Serializer for user registration."""

    email = serializers.EmailField(required=True)
    username = serializers.CharField(max_length=150, required=False, allow_blank=True)
    display_name = serializers.CharField(max_length=100, required=False, allow_blank=True)
    password = serializers.CharField(
        write_only=True,
        required=True,
        validators=[validate_password],
        style={'input_type': 'password'}
    )
    password_confirm = serializers.CharField(
        write_only=True,
        required=True,
        style={'input_type': 'password'}
    )

    def validate(self, attrs):
        """Validate password confirmation."""
        if attrs['password'] != attrs['password_confirm']:
            raise serializers.ValidationError({
                'password_confirm': 'Passwords do not match'
            })
        return attrs


class UserLoginSerializer(serializers.Serializer):
    """Serializer for user login."""

    email = serializers.EmailField(required=True)
    password = serializers.CharField(
        required=True,
        write_only=True,
        style={'input_type': 'password'}
    )
