# apps/service_requests/serializers.py
from rest_framework import serializers

from .models import ServiceRequest
from .services import ServiceRequestService


class ServiceRequestSerializer(serializers.ModelSerializer):
    """Input fields are parsed leniently; the service reports every missing one."""
    clientName = serializers.CharField(source='client_name', required=False, allow_blank=True)
    phoneNumber = serializers.CharField(source='phone_number', required=False, allow_blank=True)
    serviceName = serializers.CharField(source='service_name', required=False, allow_blank=True)
    message = serializers.CharField(required=False, allow_blank=True)
    status = serializers.CharField(read_only=True)
    clientId = serializers.UUIDField(source='client_id', read_only=True)
    superAdminId = serializers.UUIDField(source='super_admin_id', read_only=True)
    createdAt = serializers.DateTimeField(source='created_at', read_only=True)
    updatedAt = serializers.DateTimeField(source='updated_at', read_only=True)

    class Meta:
        model = ServiceRequest
        fields = [
            'id', 'clientName', 'phoneNumber', 'serviceName', 'message', 'status',
            'clientId', 'superAdminId', 'createdAt', 'updatedAt',
        ]

    def create(self, validated_data):
        request = self.context.get('request')
        return ServiceRequestService.create_request(validated_data, getattr(request, 'user', None))


class ServiceRequestStatusSerializer(serializers.Serializer):
    status = serializers.CharField(required=False, allow_blank=True)
