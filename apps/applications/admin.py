from django.contrib import admin

from .models import EpassportApplication, GraphicDesignJob, VisaApplication

PAYMENT_READONLY = ['total', 'due_amount', 'payment_status', 'submission_date']


@admin.register(VisaApplication)
class VisaApplicationAdmin(admin.ModelAdmin):
    list_display = ['id', 'client_name', 'country', 'application_type', 'visa_status', 'due_amount', 'payment_status']
    list_filter = ['application_type', 'visa_status', 'payment_status']
    search_fields = ['client_name', 'country']
    readonly_fields = PAYMENT_READONLY


@admin.register(EpassportApplication)
class EpassportApplicationAdmin(admin.ModelAdmin):
    list_display = ['id', 'client_name', 'application_type', 'application_status', 'due_amount', 'payment_status']
    list_filter = ['application_type', 'application_status', 'payment_status']
    search_fields = ['client_name', 'mobile_no']
    readonly_fields = PAYMENT_READONLY


@admin.register(GraphicDesignJob)
class GraphicDesignJobAdmin(admin.ModelAdmin):
    list_display = ['id', 'business_name', 'client_name', 'design_type', 'status', 'due_amount', 'payment_status']
    list_filter = ['status', 'payment_status']
    search_fields = ['business_name', 'client_name']
    readonly_fields = PAYMENT_READONLY
