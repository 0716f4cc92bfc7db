# apps/accounts/serializers.py
from rest_framework import serializers

from .models import StaffAccount, SuperAdminAccount
from .services import CredentialService


class StaffAccountSerializer(serializers.ModelSerializer):
    fullName = serializers.CharField(source='full_name', read_only=True)
    createdAt = serializers.DateTimeField(source='created_at', read_only=True)

    class Meta:
        model = StaffAccount
        fields = ('id', 'fullName', 'email', 'phone', 'nationality', 'role', 'status', 'createdAt')
        read_only_fields = fields


class RegisterSerializer(serializers.Serializer):
    """Parses the register form; the credential service enforces the rules."""
    fullName = serializers.CharField(required=False, allow_blank=True, trim_whitespace=True)
    phone = serializers.CharField(required=False, allow_blank=True)
    nationality = serializers.CharField(required=False, allow_blank=True)
    email = serializers.EmailField(required=False, allow_blank=True)
    password = serializers.CharField(required=False, allow_blank=True, write_only=True, trim_whitespace=False)
    confirmPassword = serializers.CharField(required=False, allow_blank=True, write_only=True, trim_whitespace=False)

    def create(self, validated_data):
        return CredentialService.register(
            full_name=validated_data.get('fullName'),
            phone=validated_data.get('phone'),
            nationality=validated_data.get('nationality'),
            email=validated_data.get('email'),
            password=validated_data.get('password'),
            confirm_password=validated_data.get('confirmPassword'),
        )


class LoginSerializer(serializers.Serializer):
    email = serializers.CharField(required=False, allow_blank=True)
    password = serializers.CharField(required=False, allow_blank=True, trim_whitespace=False)


class SuperAdminSerializer(serializers.ModelSerializer):
    class Meta:
        model = SuperAdminAccount
        fields = ('id', 'name', 'email', 'role', 'status', 'created_at')
        read_only_fields = fields


class SuperAdminCreateSerializer(serializers.Serializer):
    name = serializers.CharField(required=False, allow_blank=True)
    email = serializers.EmailField(required=False, allow_blank=True)
    password = serializers.CharField(required=False, allow_blank=True, write_only=True, trim_whitespace=False)

    def create(self, validated_data):
        return CredentialService.create_super_admin(
            name=validated_data.get('name'),
            email=validated_data.get('email'),
            password=validated_data.get('password'),
        )


class HandlerSerializer(serializers.ModelSerializer):
    """Staff account as offered in the handler dropdowns"""
    name = serializers.CharField(source='full_name', read_only=True)

    class Meta:
        model = StaffAccount
        fields = ('id', 'name', 'email', 'role')
        read_only_fields = fields


class ForgotPasswordSerializer(serializers.Serializer):
    email = serializers.CharField(required=False, allow_blank=True)


class ResetPasswordSerializer(serializers.Serializer):
    email = serializers.CharField(required=False, allow_blank=True)
    otp = serializers.CharField(required=False, allow_blank=True)
    newPassword = serializers.CharField(required=False, allow_blank=True, write_only=True, trim_whitespace=False)
