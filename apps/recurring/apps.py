from django.apps import AppConfig


class RecurringConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "apps.recurring"
    label = "recurring"

    def ready(self) -> None:
        from shared.application.message_bus import message_bus

        from .application import command_handlers as handlers
        from .application.event_handlers import log_group_event
        from .domain import events

        message_bus.register_command_handler(
            handlers.PreviewRecurringCommand, handlers.PreviewRecurringHandler().handle, replace=True
        )
        message_bus.register_command_handler(
            handlers.CreateRecurringGroupCommand, handlers.CreateRecurringGroupHandler().handle, replace=True
        )
        message_bus.register_command_handler(
            handlers.CancelRecurringGroupCommand, handlers.CancelRecurringGroupHandler().handle, replace=True
        )
        message_bus.register_command_handler(
            handlers.ApplyBulkPaymentCommand, handlers.ApplyBulkPaymentHandler().handle, replace=True
        )

        for event_type in (
            events.RecurringGroupCreated,
            events.RecurringGroupCancelled,
            events.BulkPaymentApplied,
        ):
            message_bus.register_event_handler(event_type, log_group_event)
