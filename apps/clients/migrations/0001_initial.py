import uuid

import django.utils.timezone
from django.db import migrations, models


CATEGORY_CHOICES = [
    ('Visit Visa Applicant', 'Visit Visa Applicant'),
    ('Japan Visit Visa Applicant', 'Japan Visit Visa Applicant'),
    ('Document Translation', 'Document Translation'),
    ('Student Visa Applicant', 'Student Visa Applicant'),
    ('Epassport Applicant', 'Epassport Applicant'),
    ('Japan Visa', 'Japan Visa'),
    ('Graphic Design & Printing', 'Graphic Design & Printing'),
    ('Web Design & Seo', 'Web Design & Seo'),
    ('Birth Registration', 'Birth Registration'),
    ('Documentation Support', 'Documentation Support'),
    ('Other', 'Other'),
]


class Migration(migrations.Migration):

    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name='Client',
            fields=[
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('email', models.EmailField(max_length=254, unique=True)),
                ('password', models.CharField(max_length=128)),
                ('status', models.CharField(choices=[('active', 'Active'), ('inactive', 'Inactive')], default='active', max_length=10)),
                ('name', models.CharField(max_length=255)),
                ('category', models.CharField(choices=CATEGORY_CHOICES, db_index=True, max_length=50)),
                ('phone', models.CharField(blank=True, max_length=30)),
                ('nationality', models.CharField(blank=True, max_length=100)),
                ('postal_code', models.CharField(blank=True, max_length=10)),
                ('prefecture', models.CharField(blank=True, max_length=100)),
                ('city', models.CharField(blank=True, max_length=100)),
                ('street', models.CharField(blank=True, max_length=255)),
                ('building', models.CharField(blank=True, max_length=255)),
                ('mode_of_contact', models.JSONField(blank=True, default=list)),
                ('social_media', models.JSONField(blank=True, default=dict)),
                ('timeline', models.JSONField(blank=True, default=list)),
                ('date_joined', models.DateField(default=django.utils.timezone.localdate)),
                ('profile_photo', models.FileField(blank=True, null=True, upload_to='clients/profile-photos/')),
                ('role', models.CharField(default='client', max_length=20)),
            ],
            options={
                'ordering': ['-created_at'],
                'indexes': [models.Index(fields=['status', 'category'], name='client_status_category_idx')],
            },
        ),
    ]
