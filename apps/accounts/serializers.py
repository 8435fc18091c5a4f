from rest_framework import serializers
from .models import User


class UserSerializer(serializers.ModelSerializer):
    """Staff profile as returned by the auth endpoints."""

    class Meta:
        model = User
        fields = [
            'id',
            'email',
            'name',
            'role',
            'is_active',
            'created_at',
            'last_login',
        ]
        read_only_fields = fields


class UserDisplaySerializer(serializers.ModelSerializer):
    """Minimal user info joined onto orders."""

    class Meta:
        model = User
        fields = ['id', 'name', 'email']


class UserLoginSerializer(serializers.Serializer):
    """Serializer for staff login."""

    email = serializers.EmailField(required=True)
    password = serializers.CharField(
        required=True,
        write_only=True,
        style={'input_type': 'password'}
    )
