# apps/clients/models.py
"""
Client records. A client is also an account: it can log in to the client
portal with its email and password.
"""
from django.db import models
from django.utils import timezone

from apps.core.models import AccountModel


class ClientCategory(models.TextChoices):
    VISIT_VISA = 'Visit Visa Applicant', 'Visit Visa Applicant'
    JAPAN_VISIT_VISA = 'Japan Visit Visa Applicant', 'Japan Visit Visa Applicant'
    DOCUMENT_TRANSLATION = 'Document Translation', 'Document Translation'
    STUDENT_VISA = 'Student Visa Applicant', 'Student Visa Applicant'
    EPASSPORT = 'Epassport Applicant', 'Epassport Applicant'
    JAPAN_VISA = 'Japan Visa', 'Japan Visa'
    GRAPHIC_DESIGN = 'Graphic Design & Printing', 'Graphic Design & Printing'
    WEB_DESIGN = 'Web Design & Seo', 'Web Design & Seo'
    BIRTH_REGISTRATION = 'Birth Registration', 'Birth Registration'
    DOCUMENTATION_SUPPORT = 'Documentation Support', 'Documentation Support'
    OTHER = 'Other', 'Other'


CONTACT_MODES = ['Direct Call', 'Viber', 'WhatsApp', 'Facebook Messenger']


class Client(AccountModel):
    ROLE_CLIENT = 'client'

    name = models.CharField(max_length=255)
    category = models.CharField(max_length=50, choices=ClientCategory.choices, db_index=True)
    phone = models.CharField(max_length=30, blank=True)
    nationality = models.CharField(max_length=100, blank=True)

    # Japanese address, filled from the postal code lookup
    postal_code = models.CharField(max_length=10, blank=True)
    prefecture = models.CharField(max_length=100, blank=True)
    city = models.CharField(max_length=100, blank=True)
    street = models.CharField(max_length=255, blank=True)
    building = models.CharField(max_length=255, blank=True)

    mode_of_contact = models.JSONField(default=list, blank=True)  # e.g. ["Viber", "WhatsApp"]
    social_media = models.JSONField(default=dict, blank=True)  # e.g. {"facebook": "https://..."}
    timeline = models.JSONField(default=list, blank=True)
    date_joined = models.DateField(default=timezone.localdate)
    profile_photo = models.FileField(upload_to='clients/profile-photos/', blank=True, null=True)
    role = models.CharField(max_length=20, default=ROLE_CLIENT)

    class Meta:
        ordering = ['-created_at']
        indexes = [
            models.Index(fields=['status', 'category'], name='client_status_category_idx'),
        ]

    def __str__(self):
        return self.name

    @property
    def profile_photo_url(self):
        if not self.profile_photo:
            return None
        return self.profile_photo.url
