"""URL routing for recurring booking groups."""

from __future__ import annotations

from django.urls import include, path  # type: ignore
from rest_framework.routers import SimpleRouter  # type: ignore

from .views import RecurringGroupViewSet

router = SimpleRouter()
router.register(r"", RecurringGroupViewSet, basename="recurring-group")

urlpatterns = [
    path("", include(router.urls)),
]
