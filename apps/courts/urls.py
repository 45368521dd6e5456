"""URL routing for the court catalog."""

from __future__ import annotations

from django.urls import include, path  # type: ignore
from rest_framework.routers import SimpleRouter  # type: ignore

from .views import BlockedDateViewSet, CourtViewSet, TimeSlotViewSet

router = SimpleRouter()
router.register(r"time-slots", TimeSlotViewSet, basename="time-slot")
router.register(r"blocked-dates", BlockedDateViewSet, basename="blocked-date")
router.register(r"", CourtViewSet, basename="court")

urlpatterns = [
    path("", include(router.urls)),
]
