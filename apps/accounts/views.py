# apps/accounts/views.py
"""
Authentication endpoints: register, login, token verification, password
reset, super-admin bootstrap and the handler list used by application forms.
"""
from rest_framework import status
from rest_framework.decorators import api_view, authentication_classes, permission_classes
from rest_framework.exceptions import NotAuthenticated
from rest_framework.permissions import AllowAny
from rest_framework.response import Response

from apps.core.permissions import IsAuthenticatedAccount
from .models import SuperAdminAccount
from .serializers import (
    ForgotPasswordSerializer,
    HandlerSerializer,
    LoginSerializer,
    RegisterSerializer,
    ResetPasswordSerializer,
    StaffAccountSerializer,
    SuperAdminCreateSerializer,
    SuperAdminSerializer,
)
from .services import CredentialService, PasswordResetService


@api_view(['POST'])
@authentication_classes([])
@permission_classes([AllowAny])
def register(request):
    """
    Register a staff account.

    Request body:
        {"fullName", "phone", "nationality", "email", "password", "confirmPassword"}
    """
    serializer = RegisterSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)
    account = serializer.save()
    return Response(
        {
            'success': True,
            'message': 'Account created successfully! Please log in.',
            'user': StaffAccountSerializer(account).data,
        },
        status=status.HTTP_201_CREATED,
    )


@api_view(['POST'])
@authentication_classes([])
@permission_classes([AllowAny])
def login(request):
    """
    Log in with email/password against staff, client and super-admin accounts.
    Returns a bearer token valid for 7 days.
    """
    serializer = LoginSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)
    result = CredentialService.login(
        serializer.validated_data.get('email'),
        serializer.validated_data.get('password'),
    )
    return Response({
        'success': True,
        'message': 'Login successful',
        'user': result.user_payload,
        'token': result.token,
    })


@api_view(['GET'])
@permission_classes([IsAuthenticatedAccount])
def verify_token(request):
    """Checks the bearer token; 401 when missing, invalid or expired."""
    identity = request.user
    return Response({
        'success': True,
        'user': {'id': identity.account_id, 'email': identity.email, 'role': identity.role},
    })


@api_view(['POST'])
@permission_classes([AllowAny])
def create_super_admin(request):
    """
    Create a super-admin account.
    The first super-admin can be created anonymously; afterwards only
    super-admins may add more.
    """
    if SuperAdminAccount.objects.exists():
        if not (request.user and request.user.is_authenticated):
            raise NotAuthenticated('Unauthorized: Login First')
        CredentialService.authorize_superadmin(request.user)

    serializer = SuperAdminCreateSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)
    account = serializer.save()
    return Response(
        {
            'success': True,
            'message': 'Super Admin account created successfully! Please log in.',
            'user': SuperAdminSerializer(account).data,
        },
        status=status.HTTP_201_CREATED,
    )


@api_view(['GET'])
@permission_classes([IsAuthenticatedAccount])
def list_admins(request):
    """Staff accounts selectable as application handlers"""
    handlers = CredentialService.list_handlers()
    return Response({'success': True, 'admins': HandlerSerializer(handlers, many=True).data})


@api_view(['POST'])
@authentication_classes([])
@permission_classes([AllowAny])
def forgot_password(request):
    """
    Mail a one-time password reset code.

    Request body:
        {"email"}
    """
    serializer = ForgotPasswordSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)
    PasswordResetService.request_code(serializer.validated_data.get('email'))
    return Response({'success': True, 'message': 'OTP sent successfully. Please check your email.'})


@api_view(['POST'])
@authentication_classes([])
@permission_classes([AllowAny])
def reset_password(request):
    """
    Set a new password with the mailed code.

    Request body:
        {"email", "otp", "newPassword"}
    """
    serializer = ResetPasswordSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)
    PasswordResetService.reset_password(
        serializer.validated_data.get('email'),
        serializer.validated_data.get('otp'),
        serializer.validated_data.get('newPassword'),
    )
    return Response({'success': True, 'message': 'Password reset successfully'})
