from django.contrib import admin

from .models import ServiceRequest


@admin.register(ServiceRequest)
class ServiceRequestAdmin(admin.ModelAdmin):
    list_display = ['service_name', 'client_name', 'phone_number', 'status', 'created_at']
    list_filter = ['status']
    search_fields = ['client_name', 'phone_number', 'service_name']
    raw_id_fields = ['client', 'super_admin']
