# apps/applications/models.py
"""
Service applications: visa, ePassport and graphic design jobs.

Every type shares the payment block. ``total``, ``due_amount`` and
``payment_status`` are derived from the fee, paid and discount columns on
every save and are never taken from input.
"""
from decimal import Decimal

from django.core.validators import MinValueValidator
from django.db import models
from django.utils import timezone

from apps.core.models import TimeStampedModel
from .payments import (
    PAYMENT_STATUS_DUE,
    PAYMENT_STATUS_PAID,
    compute_due_amount,
    derive_payment_status,
)


def money_field(**kwargs):
    kwargs.setdefault('default', Decimal('0.00'))
    return models.DecimalField(max_digits=12, decimal_places=2, **kwargs)


def fee_field():
    return money_field(validators=[MinValueValidator(Decimal('0.00'))])


class PaymentStatus(models.TextChoices):
    DUE = PAYMENT_STATUS_DUE, 'Due'
    PAID = PAYMENT_STATUS_PAID, 'Paid'


class TodoPriority(models.TextChoices):
    LOW = 'Low', 'Low'
    MEDIUM = 'Medium', 'Medium'
    HIGH = 'High', 'High'


class ProcessStatus(models.TextChoices):
    PROCESSING = 'Processing', 'Processing'
    WAITING_FOR_PAYMENT = 'Waiting for Payment', 'Waiting for Payment'
    COMPLETED = 'Completed', 'Completed'
    CANCELLED = 'Cancelled', 'Cancelled'


class ServiceApplication(TimeStampedModel):
    """
    Abstract base for all application types.

    Handlers are stored as a {"id", "name"} snapshot taken when the
    application is written; renaming a staff account later does not
    rewrite history.
    """
    # Fee columns summed into the due amount
    fee_fields = ()
    # Handler snapshot columns
    handler_fields = ('handled_by',)

    client = models.ForeignKey(
        'clients.Client',
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='%(class)ss',
    )
    client_name = models.CharField(max_length=255, blank=True)
    handled_by = models.JSONField(default=dict, blank=True)
    deadline = models.DateField(null=True, blank=True, db_index=True)

    paid_amount = fee_field()
    discount = fee_field()
    total = money_field()
    due_amount = money_field()
    payment_status = models.CharField(
        max_length=10,
        choices=PaymentStatus.choices,
        default=PaymentStatus.DUE,
        db_index=True,
    )

    notes = models.TextField(blank=True)
    todos = models.JSONField(default=list, blank=True)
    submission_date = models.DateTimeField(default=timezone.now, editable=False)

    class Meta:
        abstract = True
        ordering = ['-created_at']

    def __str__(self):
        return f"{self.__class__.__name__} #{self.pk} - {self.client_name}"

    @property
    def fees(self):
        return [getattr(self, field) for field in self.fee_fields]

    @property
    def handler_name(self):
        return (self.handled_by or {}).get('name', '')

    def recalculate_payment(self):
        """Derive total, due amount and payment status. Does NOT save."""
        due = compute_due_amount(self.fees, self.paid_amount, self.discount)
        self.total = due
        self.due_amount = due
        self.payment_status = derive_payment_status(due)

    def save(self, *args, **kwargs):
        self.recalculate_payment()
        update_fields = kwargs.get('update_fields')
        if update_fields is not None:
            kwargs['update_fields'] = set(update_fields) | {'total', 'due_amount', 'payment_status'}
        super().save(*args, **kwargs)


class VisaApplication(ServiceApplication):
    TYPE_VISITOR = 'Visitor Visa'
    TYPE_STUDENT = 'Student Visa'
    TYPE_CHOICES = [
        (TYPE_VISITOR, 'Visitor Visa'),
        (TYPE_STUDENT, 'Student Visa'),
    ]

    DOCUMENT_STATUS_CHOICES = [
        ('Not Yet', 'Not Yet'),
        ('Few Received', 'Few Received'),
        ('Fully Received', 'Fully Received'),
    ]

    TRANSLATION_STATUS_CHOICES = [
        ('Under Process', 'Under Process'),
        ('Completed', 'Completed'),
    ]

    fee_fields = ('visa_application_fee', 'translation_fee')
    handler_fields = ('handled_by', 'translation_handler')

    application_type = models.CharField(max_length=20, choices=TYPE_CHOICES, default=TYPE_VISITOR)
    country = models.CharField(max_length=100)
    document_status = models.CharField(max_length=20, choices=DOCUMENT_STATUS_CHOICES, default='Not Yet')
    documents_to_translate = models.PositiveIntegerField(default=0)
    translation_status = models.CharField(
        max_length=20, choices=TRANSLATION_STATUS_CHOICES, default='Under Process'
    )
    visa_status = models.CharField(
        max_length=30, choices=ProcessStatus.choices, default=ProcessStatus.PROCESSING
    )
    translation_handler = models.JSONField(default=dict, blank=True)

    visa_application_fee = fee_field()
    translation_fee = fee_field()

    class Meta(ServiceApplication.Meta):
        verbose_name = 'visa application'


class EpassportApplication(ServiceApplication):
    CONTACT_CHANNEL_CHOICES = [
        ('Viber', 'Viber'),
        ('Facebook', 'Facebook'),
        ('WhatsApp', 'WhatsApp'),
        ('Friend', 'Friend'),
        ('Office Visit', 'Office Visit'),
    ]

    APPLICATION_TYPE_CHOICES = [
        ('Newborn Child', 'Newborn Child'),
        ('Passport Renewal', 'Passport Renewal'),
        ('Lost Passport', 'Lost Passport'),
        ('Damaged Passport', 'Damaged Passport'),
        ('Travel Document', 'Travel Document'),
        ('Birth Registration', 'Birth Registration'),
    ]

    PAYMENT_METHOD_CHOICES = [
        ('Bank Furicomy', 'Bank Furicomy'),
        ('Counter Cash', 'Counter Cash'),
        ('Credit Card', 'Credit Card'),
        ('Paypay', 'Paypay'),
        ('Line Pay', 'Line Pay'),
    ]

    DATA_SENT_CHOICES = [
        ('Not Sent', 'Not Sent'),
        ('Sent', 'Sent'),
    ]

    fee_fields = ('amount',)

    mobile_no = models.CharField(max_length=30, blank=True)
    contact_channel = models.CharField(max_length=20, choices=CONTACT_CHANNEL_CHOICES, blank=True)
    application_type = models.CharField(max_length=30, choices=APPLICATION_TYPE_CHOICES)
    ghumti_service = models.BooleanField(default=False)
    prefecture = models.CharField(max_length=100, blank=True)
    payment_method = models.CharField(max_length=20, choices=PAYMENT_METHOD_CHOICES, blank=True)
    application_status = models.CharField(
        max_length=30, choices=ProcessStatus.choices, default=ProcessStatus.PROCESSING
    )
    data_sent_status = models.CharField(max_length=10, choices=DATA_SENT_CHOICES, default='Not Sent')
    date = models.DateField(default=timezone.localdate)

    amount = fee_field()

    class Meta(ServiceApplication.Meta):
        verbose_name = 'ePassport application'


class GraphicDesignJob(ServiceApplication):
    STATUS_IN_PROGRESS = 'In Progress'
    STATUS_COMPLETED = 'Completed'
    STATUS_CANCELLED = 'Cancelled'
    STATUS_CHOICES = [
        (STATUS_IN_PROGRESS, 'In Progress'),
        (STATUS_COMPLETED, 'Completed'),
        (STATUS_CANCELLED, 'Cancelled'),
    ]

    fee_fields = ('amount',)

    business_name = models.CharField(max_length=255)
    mobile_no = models.CharField(max_length=30, blank=True)
    landline_no = models.CharField(max_length=30, blank=True)
    address = models.CharField(max_length=255, blank=True)
    design_type = models.CharField(max_length=100)
    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default=STATUS_IN_PROGRESS)

    amount = fee_field()

    class Meta(ServiceApplication.Meta):
        verbose_name = 'graphic design job'
