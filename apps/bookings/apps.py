from django.apps import AppConfig


class BookingsConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "apps.bookings"
    label = "bookings"

    def ready(self) -> None:
        from shared.application.message_bus import message_bus

        from .application import command_handlers as handlers
        from .application.event_handlers import log_booking_event
        from .domain import events

        message_bus.register_command_handler(
            handlers.CreateBookingCommand, handlers.CreateBookingHandler().handle, replace=True
        )
        message_bus.register_command_handler(
            handlers.RescheduleBookingCommand, handlers.RescheduleBookingHandler().handle, replace=True
        )
        message_bus.register_command_handler(
            handlers.CancelBookingCommand, handlers.CancelBookingHandler().handle, replace=True
        )
        message_bus.register_command_handler(
            handlers.CheckInBookingCommand, handlers.CheckInBookingHandler().handle, replace=True
        )
        message_bus.register_command_handler(
            handlers.CheckOutBookingCommand, handlers.CheckOutBookingHandler().handle, replace=True
        )
        message_bus.register_command_handler(
            handlers.RecordPaymentCommand, handlers.RecordPaymentHandler().handle, replace=True
        )

        for event_type in (
            events.BookingCreated,
            events.BookingCancelled,
            events.BookingStatusChanged,
            events.BookingPaymentRecorded,
        ):
            message_bus.register_event_handler(event_type, log_booking_event)
