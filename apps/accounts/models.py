# apps/accounts/models.py
"""
Staff and super-admin account stores, plus the password reset codes

Client accounts live in ``apps.clients.models.Client``; the credential
service scans the three stores in a fixed order (staff, client, super-admin).
"""
import uuid
from datetime import timedelta

from django.conf import settings
from django.contrib.auth.models import AbstractUser, BaseUserManager
from django.db import models
from django.utils import timezone

from apps.core.models import AccountModel, AccountStatus


class StaffAccountManager(BaseUserManager):
    """Manager for email-identified staff accounts"""

    def _create_user(self, email, password, **extra_fields):
        if not email:
            raise ValueError("The email must be set")
        email = self.normalize_email(email).lower()
        user = self.model(email=email, **extra_fields)
        user.set_password(password)
        user.save(using=self._db)
        return user

    def create_user(self, email, password=None, **extra_fields):
        extra_fields.setdefault('is_staff', False)
        extra_fields.setdefault('is_superuser', False)
        return self._create_user(email, password, **extra_fields)

    def create_superuser(self, email, password=None, **extra_fields):
        extra_fields.setdefault('is_staff', True)
        extra_fields.setdefault('is_superuser', True)
        return self._create_user(email, password, **extra_fields)


class StaffAccount(AbstractUser):
    ROLE_ADMIN = 'admin'
    ROLE_MANAGER = 'manager'
    ROLE_CHOICES = [
        (ROLE_ADMIN, 'Admin'),
        (ROLE_MANAGER, 'Manager'),
    ]

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    username = None
    email = models.EmailField('email address', unique=True)
    full_name = models.CharField(max_length=255)
    phone = models.CharField(max_length=30, blank=True)
    nationality = models.CharField(max_length=100, blank=True)
    role = models.CharField(max_length=20, choices=ROLE_CHOICES, default=ROLE_ADMIN)
    status = models.CharField(max_length=10, choices=AccountStatus.choices, default=AccountStatus.ACTIVE)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    USERNAME_FIELD = 'email'
    REQUIRED_FIELDS = ['full_name']

    objects = StaffAccountManager()

    class Meta:
        ordering = ['full_name']
        verbose_name = 'staff account'

    def __str__(self):
        return self.full_name or self.email

    def save(self, *args, **kwargs):
        if self.email:
            self.email = self.email.strip().lower()
        super().save(*args, **kwargs)


class SuperAdminAccount(AccountModel):
    ROLE_SUPERADMIN = 'superadmin'

    name = models.CharField(max_length=255)
    role = models.CharField(max_length=20, default=ROLE_SUPERADMIN, editable=False)

    class Meta:
        ordering = ['-created_at']
        verbose_name = 'super admin account'

    def __str__(self):
        return self.name or self.email

    def save(self, *args, **kwargs):
        self.role = self.ROLE_SUPERADMIN
        super().save(*args, **kwargs)


class PasswordResetCode(models.Model):
    """
    One-time code mailed by ``forgotPassword``. Only the hash is stored;
    the code is bound to the store the email resolved to when it was issued.
    """
    email = models.EmailField()
    account_kind = models.CharField(max_length=20)
    code = models.CharField(max_length=128)
    attempts = models.PositiveSmallIntegerField(default=0)
    created_at = models.DateTimeField(auto_now_add=True)
    expires_at = models.DateTimeField()
    used = models.BooleanField(default=False)
    used_at = models.DateTimeField(null=True, blank=True)

    class Meta:
        ordering = ['-created_at']
        indexes = [models.Index(fields=['email', 'used'], name='accounts_reset_email_used_idx')]

    def __str__(self):
        return f"{self.email} ({self.account_kind})"

    def save(self, *args, **kwargs):
        if not self.expires_at:
            self.expires_at = timezone.now() + timedelta(minutes=settings.PASSWORD_RESET_CODE_MINUTES)
        super().save(*args, **kwargs)

    def is_expired(self):
        return timezone.now() > self.expires_at

    def is_valid(self):
        return not self.used and not self.is_expired() and self.attempts < settings.PASSWORD_RESET_MAX_ATTEMPTS

    def mark_as_used(self):
        self.used = True
        self.used_at = timezone.now()
        self.save(update_fields=['used', 'used_at'])
