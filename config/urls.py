"""
URL configuration.
All API routes live under /api/v1/.
"""
from django.conf import settings
from django.conf.urls.static import static
from django.contrib import admin
from django.urls import path, include, re_path
from rest_framework import permissions
from drf_yasg.views import get_schema_view
from drf_yasg import openapi

schema_view = get_schema_view(openapi.Info(
        title="Agency Back-Office API",
        default_version='v1',
        description="Clients, visa / ePassport / design-job applications and payments",
    ),
    public=True,
    permission_classes=(permissions.AllowAny,),
    authentication_classes=(),
)

urlpatterns = [
    # Swagger documentation
    re_path(r'^swagger(?P<format>\.json|\.yaml)$',
            schema_view.without_ui(cache_timeout=0),
            name='schema-json'),
    re_path(r'^swagger/$',
            schema_view.with_ui('swagger', cache_timeout=0),
            name='schema-swagger-ui'),
    re_path(r'^redoc/$',
            schema_view.with_ui('redoc', cache_timeout=0),
            name='schema-redoc'),

    # Admin
    path('admin/', admin.site.urls),

    # API endpoints
    path('api/v1/', include('apps.accounts.urls')),
    path('api/v1/client/', include('apps.clients.urls')),
    path('api/v1/', include('apps.applications.urls')),
    path('api/v1/serviceRequest/', include('apps.service_requests.urls')),
] + static(settings.MEDIA_URL, document_root=settings.MEDIA_ROOT)
