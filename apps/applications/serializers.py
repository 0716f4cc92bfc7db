import uuid
from decimal import Decimal

from rest_framework import serializers

from .models import (
    EpassportApplication,
    GraphicDesignJob,
    ProcessStatus,
    TodoPriority,
    VisaApplication,
)
from .services import ApplicationService


def money(**kwargs):
    kwargs.setdefault('required', False)
    return serializers.DecimalField(max_digits=12, decimal_places=2, min_value=Decimal('0'), **kwargs)


class HandlerField(serializers.Field):
    """
    Write: id of a staff account. Read: the handler name stored in the
    snapshot taken when the application was written.
    """
    default_error_messages = {
        'invalid': 'Invalid handler selected',
    }

    def to_internal_value(self, data):
        if isinstance(data, dict):
            data = data.get('id')
        if data in (None, ''):
            return None
        if not isinstance(data, (str, int, uuid.UUID)):
            self.fail('invalid')
        return str(data)

    def to_representation(self, value):
        return (value or {}).get('name', '')


class TodoSerializer(serializers.Serializer):
    id = serializers.CharField(required=False)
    task = serializers.CharField(max_length=500)
    completed = serializers.BooleanField(default=False)
    priority = serializers.ChoiceField(choices=TodoPriority.choices, default=TodoPriority.MEDIUM)
    dueDate = serializers.DateField(required=False, allow_null=True)

    def to_internal_value(self, data):
        todo = dict(super().to_internal_value(data))
        todo.setdefault('id', uuid.uuid4().hex)
        todo['priority'] = str(todo['priority'])
        if todo.get('dueDate'):
            todo['dueDate'] = todo['dueDate'].isoformat()
        return todo


class PaymentSerializer(serializers.Serializer):
    """
    Payment block shared by every application type. Subclasses add the
    fee fields; ``total`` and ``dueAmount`` are always derived.
    """
    paidAmount = money(source='paid_amount')
    discount = money()
    total = money(read_only=True)
    dueAmount = money(source='due_amount', read_only=True)


class VisaPaymentSerializer(PaymentSerializer):
    visaApplicationFee = money(source='visa_application_fee')
    translationFee = money(source='translation_fee')


class AmountPaymentSerializer(PaymentSerializer):
    amount = money()


class ApplicationSerializer(serializers.ModelSerializer):
    """
    Fields common to every application type. ``clientId`` and handler ids
    are resolved by :class:`ApplicationService` on create and update.
    """
    clientId = serializers.CharField(source='client_id', required=False, allow_blank=True, allow_null=True)
    clientName = serializers.CharField(source='client_name', read_only=True)
    handledBy = HandlerField(source='handled_by', required=False, allow_null=True)
    handledById = serializers.SerializerMethodField()
    deadline = serializers.DateField(required=False, allow_null=True)
    paymentStatus = serializers.CharField(source='payment_status', read_only=True)
    notes = serializers.CharField(required=False, allow_blank=True)
    todos = TodoSerializer(many=True, required=False)
    submissionDate = serializers.DateTimeField(source='submission_date', read_only=True)
    createdAt = serializers.DateTimeField(source='created_at', read_only=True)
    updatedAt = serializers.DateTimeField(source='updated_at', read_only=True)

    common_fields = [
        'id', 'clientId', 'clientName', 'handledBy', 'handledById', 'deadline',
        'payment', 'paymentStatus', 'notes', 'todos',
        'submissionDate', 'createdAt', 'updatedAt',
    ]

    def get_handledById(self, obj):
        return (obj.handled_by or {}).get('id')

    def create(self, validated_data):
        return ApplicationService.create_application(self.Meta.model, validated_data)

    def update(self, instance, validated_data):
        return ApplicationService.apply_update(instance, validated_data)


class VisaApplicationSerializer(ApplicationSerializer):
    applicationType = serializers.ChoiceField(
        source='application_type', choices=VisaApplication.TYPE_CHOICES, required=False
    )
    country = serializers.CharField(max_length=100)
    documentStatus = serializers.ChoiceField(
        source='document_status', choices=VisaApplication.DOCUMENT_STATUS_CHOICES, required=False
    )
    documentsToTranslate = serializers.IntegerField(source='documents_to_translate', min_value=0, required=False)
    translationStatus = serializers.ChoiceField(
        source='translation_status', choices=VisaApplication.TRANSLATION_STATUS_CHOICES, required=False
    )
    visaStatus = serializers.ChoiceField(source='visa_status', choices=ProcessStatus.choices, required=False)
    translationHandler = HandlerField(source='translation_handler', required=False, allow_null=True)
    translationHandlerId = serializers.SerializerMethodField()
    payment = VisaPaymentSerializer(source='*', required=False)

    class Meta:
        model = VisaApplication
        fields = ApplicationSerializer.common_fields + [
            'applicationType', 'country', 'documentStatus', 'documentsToTranslate',
            'translationStatus', 'visaStatus', 'translationHandler', 'translationHandlerId',
        ]

    def get_translationHandlerId(self, obj):
        return (obj.translation_handler or {}).get('id')


class EpassportApplicationSerializer(ApplicationSerializer):
    mobileNo = serializers.CharField(source='mobile_no', required=False, allow_blank=True)
    contactChannel = serializers.ChoiceField(
        source='contact_channel', choices=EpassportApplication.CONTACT_CHANNEL_CHOICES,
        required=False, allow_blank=True
    )
    applicationType = serializers.ChoiceField(
        source='application_type', choices=EpassportApplication.APPLICATION_TYPE_CHOICES
    )
    ghumtiService = serializers.BooleanField(source='ghumti_service', required=False)
    prefecture = serializers.CharField(required=False, allow_blank=True)
    paymentMethod = serializers.ChoiceField(
        source='payment_method', choices=EpassportApplication.PAYMENT_METHOD_CHOICES,
        required=False, allow_blank=True
    )
    applicationStatus = serializers.ChoiceField(
        source='application_status', choices=ProcessStatus.choices, required=False
    )
    dataSentStatus = serializers.ChoiceField(
        source='data_sent_status', choices=EpassportApplication.DATA_SENT_CHOICES, required=False
    )
    date = serializers.DateField(required=False)
    payment = AmountPaymentSerializer(source='*', required=False)

    class Meta:
        model = EpassportApplication
        fields = ApplicationSerializer.common_fields + [
            'mobileNo', 'contactChannel', 'applicationType', 'ghumtiService', 'prefecture',
            'paymentMethod', 'applicationStatus', 'dataSentStatus', 'date',
        ]


class GraphicDesignJobSerializer(ApplicationSerializer):
    businessName = serializers.CharField(source='business_name', max_length=255)
    mobileNo = serializers.CharField(source='mobile_no', required=False, allow_blank=True)
    landlineNo = serializers.CharField(source='landline_no', required=False, allow_blank=True)
    address = serializers.CharField(required=False, allow_blank=True)
    designType = serializers.CharField(source='design_type', max_length=100)
    status = serializers.ChoiceField(choices=GraphicDesignJob.STATUS_CHOICES, required=False)
    payment = AmountPaymentSerializer(source='*', required=False)

    class Meta:
        model = GraphicDesignJob
        fields = ApplicationSerializer.common_fields + [
            'businessName', 'mobileNo', 'landlineNo', 'address', 'designType', 'status',
        ]


class ClientApplicationsSerializer(serializers.Serializer):
    """Applications of one client grouped by type, with the balance."""
    totalDue = serializers.DecimalField(max_digits=14, decimal_places=2)
    totalPaid = serializers.DecimalField(max_digits=14, decimal_places=2)
    applications = serializers.SerializerMethodField()

    def get_applications(self, summary):
        applications = summary['applications']
        return {
            'visa': VisaApplicationSerializer(applications['visa'], many=True).data,
            'epassport': EpassportApplicationSerializer(applications['epassport'], many=True).data,
            'graphicDesign': GraphicDesignJobSerializer(applications['graphicDesign'], many=True).data,
        }
