# services/portal-service/src/apps/api/urls.py
"""
Portal Function URL Configuration
"""

from django.urls import path

from .functions import FUNCTION_REGISTRY
from .views import UnknownFunctionView

app_name = 'api'

urlpatterns = [
    path(f'{name}/', view.as_view(), name=name)
    for name, view in FUNCTION_REGISTRY.items()
] + [
    path('<str:name>/', UnknownFunctionView.as_view(), name='unknown_function'),
]
