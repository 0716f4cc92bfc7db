# apps/core/pagination.py
from rest_framework.pagination import PageNumberPagination


class StaticPagination(PageNumberPagination):
    page_size = 10  # Default page size
    page_size_query_param = 'page_size'  # Allows client to override via `?page_size=xxx`
    max_page_size = 100  # Maximum limit for page_size
    page_query_param = 'page'


class OptionalPagination(StaticPagination):
    """
    Paginates only when the client sends ?page or ?page_size.
    The SPA loads full lists for its dropdowns and tables.
    """
    def paginate_queryset(self, queryset, request, view=None):
        if (
            self.page_query_param not in request.query_params
            and self.page_size_query_param not in request.query_params
        ):
            return None
        return super().paginate_queryset(queryset, request, view)
