import bleach
from rest_framework import serializers


class LoginSerializer(serializers.Serializer):
    username = serializers.CharField(error_messages={'blank': 'Username is required', 'required': 'Username is required'})
    password = serializers.CharField(trim_whitespace=False,
                                     error_messages={'blank': 'Password is required', 'required': 'Password is required'})

    def validate_username(self, v):
        v = bleach.clean((v or '').strip(), strip=True)
        if not v:
            raise serializers.ValidationError('Username is required')
        return v


class LogoutSerializer(serializers.Serializer):
    refresh = serializers.CharField(required=False, allow_blank=True)
