# apps/clients/serializers.py
import json

from rest_framework import serializers

from .models import CONTACT_MODES, Client, ClientCategory
from .services import REQUIRED_ADDRESS_FIELDS, ClientIntakeService, address_errors


class ContactModesField(serializers.ListField):
    """
    Accepts a list or, from multipart forms, a JSON encoded list
    (``modeOfContact='["Viber", "WhatsApp"]'``).
    """
    child = serializers.ChoiceField(choices=CONTACT_MODES)

    def to_internal_value(self, data):
        if isinstance(data, str):
            data = [data]
        if isinstance(data, (list, tuple)) and len(data) == 1 and isinstance(data[0], str) \
                and data[0].strip().startswith('['):
            try:
                data = json.loads(data[0])
            except ValueError:
                self.fail('not_a_list', input_type='string')
        return super().to_internal_value(data)


class ClientSerializer(serializers.ModelSerializer):
    category = serializers.ChoiceField(choices=ClientCategory.choices)
    email = serializers.EmailField()
    password = serializers.CharField(write_only=True, required=False, allow_blank=True, trim_whitespace=False)
    phone = serializers.CharField(required=False, allow_blank=True)
    nationality = serializers.CharField(required=False, allow_blank=True)
    postalCode = serializers.CharField(source='postal_code', required=False, allow_blank=True)
    prefecture = serializers.CharField(required=False, allow_blank=True)
    city = serializers.CharField(required=False, allow_blank=True)
    street = serializers.CharField(required=False, allow_blank=True)
    building = serializers.CharField(required=False, allow_blank=True)
    modeOfContact = ContactModesField(source='mode_of_contact', required=False)
    socialMedia = serializers.JSONField(source='social_media', required=False)
    timeline = serializers.JSONField(required=False)
    dateJoined = serializers.DateField(source='date_joined', required=False)
    profilePhoto = serializers.FileField(source='profile_photo', write_only=True, required=False, allow_null=True)
    profilePhotoUrl = serializers.SerializerMethodField()
    createdAt = serializers.DateTimeField(source='created_at', read_only=True)
    updatedAt = serializers.DateTimeField(source='updated_at', read_only=True)

    class Meta:
        model = Client
        fields = [
            'id', 'name', 'category', 'status', 'email', 'password', 'role',
            'phone', 'nationality',
            'postalCode', 'prefecture', 'city', 'street', 'building',
            'modeOfContact', 'socialMedia', 'timeline', 'dateJoined',
            'profilePhoto', 'profilePhotoUrl', 'createdAt', 'updatedAt',
        ]
        read_only_fields = ['id', 'role', 'createdAt', 'updatedAt']

    def get_profilePhotoUrl(self, obj):
        url = obj.profile_photo_url
        request = self.context.get('request')
        if url and request is not None:
            return request.build_absolute_uri(url)
        return url

    def to_internal_value(self, data):
        """Collect field errors and category-dependent address errors together."""
        errors = {}
        validated = None
        try:
            validated = super().to_internal_value(data)
        except serializers.ValidationError as exc:
            errors.update(exc.detail)

        category = data.get('category', getattr(self.instance, 'category', None))
        values = {
            field: data.get(field, getattr(self.instance, field, ''))
            for field in REQUIRED_ADDRESS_FIELDS
        }
        for field, messages in address_errors(category, values).items():
            errors.setdefault(field, messages)

        if errors:
            raise serializers.ValidationError(errors)
        return validated

    def create(self, validated_data):
        return ClientIntakeService.create_client(validated_data)

    def update(self, instance, validated_data):
        return ClientIntakeService.update_client(instance, validated_data)


class ClientSummarySerializer(serializers.ModelSerializer):
    """Compact client representation embedded in applications"""

    class Meta:
        model = Client
        fields = ['id', 'name', 'email', 'phone', 'category']
        read_only_fields = fields
