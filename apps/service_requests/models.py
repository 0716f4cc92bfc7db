# apps/service_requests/models.py
"""
Service requests: a client (or staff on their behalf) asks for one of the
agency's services; staff approve or reject it.
"""
from django.db import models

from apps.core.models import TimeStampedModel


class ServiceRequestStatus(models.TextChoices):
    PENDING = 'pending', 'Pending'
    APPROVED = 'approved', 'Approved'
    REJECTED = 'rejected', 'Rejected'


class ServiceRequest(TimeStampedModel):
    super_admin = models.ForeignKey(
        'accounts.SuperAdminAccount',
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='service_requests',
    )
    # set when a client submits from the portal
    client = models.ForeignKey(
        'clients.Client',
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='service_requests',
    )
    client_name = models.CharField(max_length=255)
    phone_number = models.CharField(max_length=30)
    service_name = models.CharField(max_length=255)
    message = models.TextField()
    status = models.CharField(
        max_length=10,
        choices=ServiceRequestStatus.choices,
        default=ServiceRequestStatus.PENDING,
        db_index=True,
    )

    class Meta:
        ordering = ['-created_at']

    def __str__(self):
        return f"{self.service_name} for {self.client_name} ({self.status})"
