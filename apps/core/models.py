# apps/core/models.py
"""
Abstract base models for common patterns.
Use these as base classes to ensure consistency across models.
"""
import uuid

from django.db import models


class TimeStampedModel(models.Model):
    """
    Abstract model providing automatic timestamp fields.
    Inherit from this for models that need created/updated tracking.
    """
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        abstract = True
        ordering = ['-created_at']


class AccountStatus(models.TextChoices):
    ACTIVE = 'active', 'Active'
    INACTIVE = 'inactive', 'Inactive'


class AccountModel(TimeStampedModel):
    """
    Abstract base for the non-Django-user account stores (clients, super-admins).
    UUID keys keep account ids unique across all three stores.
    """
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    email = models.EmailField(unique=True)
    password = models.CharField(max_length=128)
    status = models.CharField(
        max_length=10,
        choices=AccountStatus.choices,
        default=AccountStatus.ACTIVE,
    )

    class Meta:
        abstract = True

    def set_password(self, raw_password):
        from django.contrib.auth.hashers import make_password
        self.password = make_password(raw_password)

    def check_password(self, raw_password):
        from django.contrib.auth.hashers import check_password
        return check_password(raw_password, self.password)

    def save(self, *args, **kwargs):
        if self.email:
            self.email = self.email.strip().lower()
        super().save(*args, **kwargs)
