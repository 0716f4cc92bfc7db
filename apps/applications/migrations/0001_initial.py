from decimal import Decimal

import django.core.validators
import django.db.models.deletion
import django.utils.timezone
from django.db import migrations, models


PAYMENT_STATUS_CHOICES = [('Due', 'Due'), ('Paid', 'Paid')]
PROCESS_STATUS_CHOICES = [
    ('Processing', 'Processing'),
    ('Waiting for Payment', 'Waiting for Payment'),
    ('Completed', 'Completed'),
    ('Cancelled', 'Cancelled'),
]


def money(**kwargs):
    return models.DecimalField(decimal_places=2, default=Decimal('0.00'), max_digits=12, **kwargs)


def fee():
    return money(validators=[django.core.validators.MinValueValidator(Decimal('0.00'))])


def common_fields(related_name):
    return [
        ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
        ('created_at', models.DateTimeField(auto_now_add=True)),
        ('updated_at', models.DateTimeField(auto_now=True)),
        ('client_name', models.CharField(blank=True, max_length=255)),
        ('handled_by', models.JSONField(blank=True, default=dict)),
        ('deadline', models.DateField(blank=True, db_index=True, null=True)),
        ('paid_amount', fee()),
        ('discount', fee()),
        ('total', money()),
        ('due_amount', money()),
        ('payment_status', models.CharField(choices=PAYMENT_STATUS_CHOICES, db_index=True, default='Due', max_length=10)),
        ('notes', models.TextField(blank=True)),
        ('todos', models.JSONField(blank=True, default=list)),
        ('submission_date', models.DateTimeField(default=django.utils.timezone.now, editable=False)),
        ('client', models.ForeignKey(
            blank=True,
            null=True,
            on_delete=django.db.models.deletion.SET_NULL,
            related_name=related_name,
            to='clients.client',
        )),
    ]


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ('clients', '0001_initial'),
    ]

    operations = [
        migrations.CreateModel(
            name='VisaApplication',
            fields=common_fields('visaapplications') + [
                ('application_type', models.CharField(
                    choices=[('Visitor Visa', 'Visitor Visa'), ('Student Visa', 'Student Visa')],
                    default='Visitor Visa',
                    max_length=20,
                )),
                ('country', models.CharField(max_length=100)),
                ('document_status', models.CharField(
                    choices=[('Not Yet', 'Not Yet'), ('Few Received', 'Few Received'), ('Fully Received', 'Fully Received')],
                    default='Not Yet',
                    max_length=20,
                )),
                ('documents_to_translate', models.PositiveIntegerField(default=0)),
                ('translation_status', models.CharField(
                    choices=[('Under Process', 'Under Process'), ('Completed', 'Completed')],
                    default='Under Process',
                    max_length=20,
                )),
                ('visa_status', models.CharField(choices=PROCESS_STATUS_CHOICES, default='Processing', max_length=30)),
                ('translation_handler', models.JSONField(blank=True, default=dict)),
                ('visa_application_fee', fee()),
                ('translation_fee', fee()),
            ],
            options={
                'verbose_name': 'visa application',
                'ordering': ['-created_at'],
                'abstract': False,
            },
        ),
        migrations.CreateModel(
            name='EpassportApplication',
            fields=common_fields('epassportapplications') + [
                ('mobile_no', models.CharField(blank=True, max_length=30)),
                ('contact_channel', models.CharField(
                    blank=True,
                    choices=[
                        ('Viber', 'Viber'),
                        ('Facebook', 'Facebook'),
                        ('WhatsApp', 'WhatsApp'),
                        ('Friend', 'Friend'),
                        ('Office Visit', 'Office Visit'),
                    ],
                    max_length=20,
                )),
                ('application_type', models.CharField(
                    choices=[
                        ('Newborn Child', 'Newborn Child'),
                        ('Passport Renewal', 'Passport Renewal'),
                        ('Lost Passport', 'Lost Passport'),
                        ('Damaged Passport', 'Damaged Passport'),
                        ('Travel Document', 'Travel Document'),
                        ('Birth Registration', 'Birth Registration'),
                    ],
                    max_length=30,
                )),
                ('ghumti_service', models.BooleanField(default=False)),
                ('prefecture', models.CharField(blank=True, max_length=100)),
                ('payment_method', models.CharField(
                    blank=True,
                    choices=[
                        ('Bank Furicomy', 'Bank Furicomy'),
                        ('Counter Cash', 'Counter Cash'),
                        ('Credit Card', 'Credit Card'),
                        ('Paypay', 'Paypay'),
                        ('Line Pay', 'Line Pay'),
                    ],
                    max_length=20,
                )),
                ('application_status', models.CharField(choices=PROCESS_STATUS_CHOICES, default='Processing', max_length=30)),
                ('data_sent_status', models.CharField(
                    choices=[('Not Sent', 'Not Sent'), ('Sent', 'Sent')],
                    default='Not Sent',
                    max_length=10,
                )),
                ('date', models.DateField(default=django.utils.timezone.localdate)),
                ('amount', fee()),
            ],
            options={
                'verbose_name': 'ePassport application',
                'ordering': ['-created_at'],
                'abstract': False,
            },
        ),
        migrations.CreateModel(
            name='GraphicDesignJob',
            fields=common_fields('graphicdesignjobs') + [
                ('business_name', models.CharField(max_length=255)),
                ('mobile_no', models.CharField(blank=True, max_length=30)),
                ('landline_no', models.CharField(blank=True, max_length=30)),
                ('address', models.CharField(blank=True, max_length=255)),
                ('design_type', models.CharField(max_length=100)),
                ('status', models.CharField(
                    choices=[('In Progress', 'In Progress'), ('Completed', 'Completed'), ('Cancelled', 'Cancelled')],
                    default='In Progress',
                    max_length=20,
                )),
                ('amount', fee()),
            ],
            options={
                'verbose_name': 'graphic design job',
                'ordering': ['-created_at'],
                'abstract': False,
            },
        ),
    ]
