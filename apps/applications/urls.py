from django.urls import path

from .views import EpassportApplicationViewSet, GraphicDesignJobViewSet, VisaApplicationViewSet


def application_routes(viewset, prefix, name, basename):
    """create/getAll/get/update/delete routes in the agency's naming scheme"""
    return [
        path(f'{prefix}/create{name}', viewset.as_view({'post': 'create'}), name=f'{basename}-create'),
        path(f'{prefix}/getAll{name}', viewset.as_view({'get': 'list'}), name=f'{basename}-list'),
        path(f'{prefix}/get{name}/<int:pk>', viewset.as_view({'get': 'retrieve'}), name=f'{basename}-detail'),
        path(
            f'{prefix}/update{name}/<int:pk>',
            viewset.as_view({'put': 'update', 'patch': 'partial_update'}),
            name=f'{basename}-update',
        ),
        path(f'{prefix}/delete{name}/<int:pk>', viewset.as_view({'delete': 'destroy'}), name=f'{basename}-delete'),
    ]


urlpatterns = [
    *application_routes(VisaApplicationViewSet, 'visaApplication', 'VisaApplication', 'visa'),
    *application_routes(EpassportApplicationViewSet, 'ePassport', 'Epassport', 'epassport'),
    *application_routes(GraphicDesignJobViewSet, 'graphicDesign', 'GraphicDesign', 'graphic-design'),
]
