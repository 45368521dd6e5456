"""Subscribers for recurring group events."""

import logging

from shared.domain.base import DomainEvent

logger = logging.getLogger("apps.recurring.audit")


def log_group_event(event: DomainEvent) -> None:
    payload = event.to_dict()
    payload.update({
        "group_id": getattr(event, "group_id", None),
        "group_code": getattr(event, "group_code", None),
    })
    logger.info(f"{payload['event_type']} {payload}")
