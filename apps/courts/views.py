"""Read-only API over the court catalog and blocked dates."""

from __future__ import annotations

from rest_framework import permissions, viewsets  # type: ignore
from rest_framework.decorators import action  # type: ignore
from rest_framework.response import Response  # type: ignore

from .models import BlockedDate, Court, TimeSlot
from .serializers import BlockedDateSerializer, CourtSerializer, DateQuerySerializer, TimeSlotSerializer
from .services import is_date_blocked


class CourtViewSet(viewsets.ReadOnlyModelViewSet):
    queryset = Court.objects.all()
    serializer_class = CourtSerializer
    permission_classes = [permissions.AllowAny]
    filterset_fields = ["status", "court_type"]
    pagination_class = None


class TimeSlotViewSet(viewsets.ReadOnlyModelViewSet):
    queryset = TimeSlot.objects.filter(status=TimeSlot.Status.ACTIVE)
    serializer_class = TimeSlotSerializer
    permission_classes = [permissions.AllowAny]
    filterset_fields = ["day_type", "is_peak"]
    pagination_class = None


class BlockedDateViewSet(viewsets.ReadOnlyModelViewSet):
    queryset = BlockedDate.objects.all()
    serializer_class = BlockedDateSerializer
    permission_classes = [permissions.AllowAny]
    pagination_class = None

    @action(detail=False, methods=["get"], url_path="check")
    def check(self, request):  # type: ignore
        """Answer whether a single date is closed for booking."""

        query = DateQuerySerializer(data=request.query_params)
        query.is_valid(raise_exception=True)
        block = is_date_blocked(query.validated_data["date"])
        return Response(
            {"date": block.date, "is_blocked": block.is_blocked, "reason": block.reason}
        )
