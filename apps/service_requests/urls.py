from django.urls import path

from .views import ServiceRequestViewSet

urlpatterns = [
    path(
        'createServiceRequest',
        ServiceRequestViewSet.as_view({'post': 'create'}),
        name='service-request-create',
    ),
    path(
        'getAllServiceRequests',
        ServiceRequestViewSet.as_view({'get': 'list'}),
        name='service-request-list',
    ),
    path(
        'getServiceRequest/<int:pk>',
        ServiceRequestViewSet.as_view({'get': 'retrieve'}),
        name='service-request-detail',
    ),
    path(
        'updateServiceRequestStatus/<int:pk>',
        ServiceRequestViewSet.as_view({'put': 'update', 'patch': 'partial_update'}),
        name='service-request-update',
    ),
    path(
        'deleteServiceRequest/<int:pk>',
        ServiceRequestViewSet.as_view({'delete': 'destroy'}),
        name='service-request-delete',
    ),
]
