from django.urls import path

from .views import ClientViewSet

client_create = ClientViewSet.as_view({'post': 'create'})
client_list = ClientViewSet.as_view({'get': 'list'})
client_detail = ClientViewSet.as_view({'get': 'retrieve'})
client_update = ClientViewSet.as_view({'put': 'update', 'patch': 'partial_update'})
client_delete = ClientViewSet.as_view({'delete': 'destroy'})
client_lookup_address = ClientViewSet.as_view({'get': 'lookup_address'})
client_applications = ClientViewSet.as_view({'get': 'applications'})

urlpatterns = [
    path('createClient', client_create, name='client-create'),
    path('getClient', client_list, name='client-list'),
    path('getClient/<uuid:pk>', client_detail, name='client-detail'),
    path('updateClient/<uuid:pk>', client_update, name='client-update'),
    path('deleteClient/<uuid:pk>', client_delete, name='client-delete'),
    path('lookupAddress', client_lookup_address, name='client-lookup-address'),
    path('<uuid:pk>/applications', client_applications, name='client-applications'),
]
