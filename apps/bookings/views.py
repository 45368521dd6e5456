"""API views for the booking domain."""

from __future__ import annotations

from rest_framework import mixins, permissions, status, viewsets  # type: ignore
from rest_framework.decorators import action  # type: ignore
from rest_framework.response import Response  # type: ignore

from apps.courts.serializers import CourtSerializer
from apps.courts.services import get_time_slot
from shared.application.message_bus import message_bus

from .application.command_handlers import (
    CancelBookingCommand,
    CheckInBookingCommand,
    CheckOutBookingCommand,
)
from .domain.pricing import calculate_price, price_table
from .filters import BookingFilterSet
from .models import Booking
from .schedule import aggregate_availability, available_courts, build_schedule
from .serializers import (
    AvailabilityQuerySerializer,
    AvailableCourtsQuerySerializer,
    BookingCreateSerializer,
    BookingRescheduleSerializer,
    BookingSerializer,
    CancelSerializer,
    PaymentSerializer,
    PriceQuerySerializer,
    ScheduleQuerySerializer,
)
from .services import check_availability


class BookingViewSet(
    mixins.ListModelMixin,
    mixins.RetrieveModelMixin,
    viewsets.GenericViewSet,
):
    """Front-desk and customer access to court bookings."""

    queryset = Booking.objects.select_related("court", "time_slot").all()
    serializer_class = BookingSerializer
    permission_classes = [permissions.IsAuthenticated]
    filterset_class = BookingFilterSet
    search_fields = ["booking_code", "customer_name", "customer_phone"]
    ordering_fields = ["date", "created_at", "court__number"]

    def get_queryset(self):  # type: ignore
        user = self.request.user
        qs = super().get_queryset()
        if getattr(user, "is_staff", False):
            return qs
        return qs.filter(created_by=user)

    def _respond(self, booking: Booking, status_code=status.HTTP_200_OK) -> Response:
        return Response(BookingSerializer(booking, context=self.get_serializer_context()).data, status=status_code)

    def create(self, request, *args, **kwargs):  # type: ignore
        serializer = BookingCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        booking = message_bus.handle_command(serializer.to_command(request.user))
        return self._respond(booking, status.HTTP_201_CREATED)

    def partial_update(self, request, pk=None):  # type: ignore
        booking: Booking = self.get_object()  # type: ignore
        serializer = BookingRescheduleSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        booking = message_bus.handle_command(serializer.to_command(booking.pk))
        return self._respond(booking)

    @action(detail=True, methods=["post"])
    def cancel(self, request, pk=None):  # type: ignore
        booking: Booking = self.get_object()  # type: ignore
        serializer = CancelSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        booking = message_bus.handle_command(
            CancelBookingCommand(booking_id=booking.pk, reason=serializer.validated_data["reason"])
        )
        return self._respond(booking)

    @action(detail=True, methods=["post"], url_path="check-in", permission_classes=[permissions.IsAdminUser])
    def check_in(self, request, pk=None):  # type: ignore
        booking: Booking = self.get_object()  # type: ignore
        return self._respond(message_bus.handle_command(CheckInBookingCommand(booking_id=booking.pk)))

    @action(detail=True, methods=["post"], url_path="check-out", permission_classes=[permissions.IsAdminUser])
    def check_out(self, request, pk=None):  # type: ignore
        booking: Booking = self.get_object()  # type: ignore
        return self._respond(message_bus.handle_command(CheckOutBookingCommand(booking_id=booking.pk)))

    @action(detail=True, methods=["post"], permission_classes=[permissions.IsAdminUser])
    def payment(self, request, pk=None):  # type: ignore
        booking: Booking = self.get_object()  # type: ignore
        serializer = PaymentSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        return self._respond(message_bus.handle_command(serializer.to_command(booking.pk)))

    @action(detail=False, methods=["post"], url_path="check-availability")
    def check_availability(self, request):  # type: ignore
        query = AvailabilityQuerySerializer(data=request.data)
        query.is_valid(raise_exception=True)
        data = query.validated_data
        result = check_availability(
            data["court"],
            data["date"],
            data["time_slot"],
            int(data["start_minute"]),
            data["duration_hours"],
            data["exclude_booking"],
        )
        return Response(result.to_dict())

    @action(detail=False, methods=["post"], url_path="calculate-price")
    def calculate_price(self, request):  # type: ignore
        query = PriceQuerySerializer(data=request.data)
        query.is_valid(raise_exception=True)
        data = query.validated_data
        time_slot = get_time_slot(data["time_slot"])
        quote = calculate_price(
            time_slot,
            data["duration_hours"],
            customer_type=data["customer_type"],
            discount_percent=data["discount_percent"],
            deposit_amount=data["deposit_amount"],
        )
        payload = quote.to_dict()
        if data["include_table"]:
            payload["table"] = price_table(time_slot, data["customer_type"])
        return Response(payload)

    @action(detail=False, methods=["get"], url_path="schedule/daily", permission_classes=[permissions.IsAdminUser])
    def schedule_daily(self, request):  # type: ignore
        query = ScheduleQuerySerializer(data=request.query_params)
        query.is_valid(raise_exception=True)
        schedule = build_schedule(query.validated_data["date"], query.validated_data.get("day_type"))
        return Response(schedule.to_dict())

    @action(detail=False, methods=["get"], url_path="public/availability", permission_classes=[permissions.AllowAny])
    def public_availability(self, request):  # type: ignore
        query = ScheduleQuerySerializer(data=request.query_params)
        query.is_valid(raise_exception=True)
        return Response(aggregate_availability(query.validated_data["date"]).to_dict())

    @action(detail=False, methods=["get"], url_path="available-courts")
    def available_courts(self, request):  # type: ignore
        query = AvailableCourtsQuerySerializer(data=request.query_params)
        query.is_valid(raise_exception=True)
        courts = available_courts(query.validated_data["date"], query.validated_data["time_slot"])
        return Response(CourtSerializer(courts, many=True).data)
