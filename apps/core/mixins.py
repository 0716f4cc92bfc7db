# apps/core/mixins.py
"""
Reusable mixins for ViewSets to reduce code duplication.
These mixins provide common functionality across different ViewSets.
"""
from rest_framework import filters
from rest_framework.response import Response
from django_filters.rest_framework import DjangoFilterBackend


class StandardFilterMixin:
    """
    Provides standard filtering, searching, and ordering configuration.
    Apply this to ViewSets that need these features.
    """
    filter_backends = [DjangoFilterBackend, filters.SearchFilter, filters.OrderingFilter]


class TimestampOrderingMixin:
    """
    Provides default ordering by creation date (newest first).
    """
    ordering_fields = ['created_at', 'updated_at']
    ordering = ['-created_at']


class AdminWritePermissionMixin:
    """
    Provides permission logic where:
    - List/Retrieve: Any authenticated account
    - Write operations: Admin or super-admin
    - Delete: overridable through ``destroy_permission_classes``
    """
    destroy_permission_classes = None

    def get_permissions(self):
        from apps.core.permissions import IsAdmin, IsAuthenticatedAccount

        if self.action in ['list', 'retrieve']:
            return [IsAuthenticatedAccount()]
        if self.action == 'destroy' and self.destroy_permission_classes:
            return [permission() for permission in self.destroy_permission_classes]
        return [IsAdmin()]


class EnvelopeResponseMixin:
    """
    Wraps list responses as {success, <collection_key>: [...]} and keeps
    pagination metadata when the caller asked for a page.
    """
    collection_key = 'results'

    def list(self, request, *args, **kwargs):
        queryset = self.filter_queryset(self.get_queryset())

        page = self.paginate_queryset(queryset)
        if page is not None:
            serializer = self.get_serializer(page, many=True)
            response = self.get_paginated_response(serializer.data)
            response.data = {
                'success': True,
                'count': response.data['count'],
                'next': response.data['next'],
                'previous': response.data['previous'],
                self.collection_key: response.data['results'],
            }
            return response

        serializer = self.get_serializer(queryset, many=True)
        return Response({'success': True, self.collection_key: serializer.data})
