from rest_framework import serializers

from apps.utils import validators
from .models import User


class RegisterSerializer(serializers.Serializer):
    cpf = serializers.CharField(max_length=14)
    password = serializers.CharField(min_length=6, write_only=True, trim_whitespace=False)

    def validate_cpf(self, value):
        return validators.validate_cpf(value)


class LoginSerializer(serializers.Serializer):
    cpf = serializers.CharField(max_length=14)
    password = serializers.CharField(write_only=True, trim_whitespace=False)


class RefreshTokenSerializer(serializers.Serializer):
    access_token = serializers.CharField()
    refresh_token = serializers.CharField()


class ResetPasswordSerializer(serializers.Serializer):
    cpf = serializers.CharField(max_length=14)
    new_password = serializers.CharField(min_length=6, write_only=True, trim_whitespace=False)

    def validate_cpf(self, value):
        return validators.normalize_cpf(value)


class UserSerializer(serializers.ModelSerializer):
    class Meta:
        model = User
        fields = ['id', 'cpf']


class TokenSerializer(serializers.Serializer):
    access_token = serializers.CharField()
    expiration = serializers.DateTimeField()
    refresh_token = serializers.CharField()
    user = UserSerializer()
