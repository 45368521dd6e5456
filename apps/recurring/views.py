"""API views for recurring booking groups. Front desk only."""

from __future__ import annotations

from rest_framework import mixins, permissions, status, viewsets  # type: ignore
from rest_framework.decorators import action  # type: ignore
from rest_framework.response import Response  # type: ignore

from apps.bookings.serializers import BookingSerializer, CancelSerializer
from shared.application.message_bus import message_bus

from .application.command_handlers import CancelRecurringGroupCommand
from .models import RecurringBookingGroup
from .serializers import (
    BulkPaymentSerializer,
    RecurringGroupCreateSerializer,
    RecurringGroupSerializer,
    RecurringPatternSerializer,
)


class RecurringGroupViewSet(
    mixins.ListModelMixin,
    mixins.RetrieveModelMixin,
    viewsets.GenericViewSet,
):
    queryset = RecurringBookingGroup.objects.select_related("court", "time_slot").all()
    serializer_class = RecurringGroupSerializer
    permission_classes = [permissions.IsAdminUser]
    filterset_fields = ["status", "court", "payment_mode"]
    search_fields = ["customer_name", "customer_phone", "group_code"]
    ordering_fields = ["created_at", "start_date"]

    def _respond(self, group: RecurringBookingGroup, status_code=status.HTTP_200_OK, **extra) -> Response:
        payload = RecurringGroupSerializer(group, context=self.get_serializer_context()).data
        payload.update(extra)
        return Response(payload, status=status_code)

    def create(self, request, *args, **kwargs):  # type: ignore
        serializer = RecurringGroupCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        group = message_bus.handle_command(serializer.to_command(request.user))
        return self._respond(group, status.HTTP_201_CREATED)

    @action(detail=False, methods=["post"])
    def preview(self, request):  # type: ignore
        serializer = RecurringPatternSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        return Response(message_bus.handle_command(serializer.to_command()))

    @action(detail=True, methods=["get"])
    def bookings(self, request, pk=None):  # type: ignore
        group: RecurringBookingGroup = self.get_object()  # type: ignore
        children = group.bookings.select_related("court", "time_slot").order_by("recurring_sequence")
        return Response(BookingSerializer(children, many=True).data)

    @action(detail=True, methods=["post"])
    def cancel(self, request, pk=None):  # type: ignore
        group: RecurringBookingGroup = self.get_object()  # type: ignore
        serializer = CancelSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        group = message_bus.handle_command(
            CancelRecurringGroupCommand(group_id=group.pk, reason=serializer.validated_data["reason"])
        )
        return self._respond(group, cancelled_count=group.cancelled_bookings)

    @action(detail=True, methods=["post"])
    def payment(self, request, pk=None):  # type: ignore
        group: RecurringBookingGroup = self.get_object()  # type: ignore
        serializer = BulkPaymentSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        return self._respond(message_bus.handle_command(serializer.to_command(group.pk)))
