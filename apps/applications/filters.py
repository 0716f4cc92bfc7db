from django_filters import rest_framework as filters

from .models import EpassportApplication, GraphicDesignJob, PaymentStatus, VisaApplication


class ApplicationFilter(filters.FilterSet):
    """Filters shared by every application type, with JSONField support for handlers"""
    paymentStatus = filters.ChoiceFilter(field_name='payment_status', choices=PaymentStatus.choices)
    client = filters.UUIDFilter(field_name='client_id')
    handledBy = filters.CharFilter(field_name='handled_by__name', lookup_expr='iexact')
    deadlineBefore = filters.DateFilter(field_name='deadline', lookup_expr='lte')
    deadlineAfter = filters.DateFilter(field_name='deadline', lookup_expr='gte')


class VisaApplicationFilter(ApplicationFilter):
    translationHandler = filters.CharFilter(field_name='translation_handler__name', lookup_expr='iexact')

    class Meta:
        model = VisaApplication
        fields = ['application_type', 'visa_status', 'country']


class EpassportApplicationFilter(ApplicationFilter):
    class Meta:
        model = EpassportApplication
        fields = ['application_type', 'application_status', 'data_sent_status']


class GraphicDesignJobFilter(ApplicationFilter):
    class Meta:
        model = GraphicDesignJob
        fields = ['status', 'design_type']
