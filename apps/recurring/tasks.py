"""Celery tasks for recurring groups."""

from __future__ import annotations

import logging

from celery import shared_task  # type: ignore
from django.utils import timezone  # type: ignore

from .models import RecurringBookingGroup

logger = logging.getLogger(__name__)


@shared_task(name="recurring.complete_finished_groups")
def complete_finished_groups() -> dict[str, int]:
    """
    Mark active groups whose last date has passed as completed.

    Returns:
        dict: {"completed": number of groups updated}
    """
    today = timezone.localdate()
    try:
        completed = RecurringBookingGroup.objects.filter(
            status=RecurringBookingGroup.Status.ACTIVE,
            end_date__lt=today,
        ).update(status=RecurringBookingGroup.Status.COMPLETED, updated_at=timezone.now())
    except Exception as e:
        logger.error(f"Error completing finished recurring groups: {e}", exc_info=True)
        raise

    if completed:
        logger.info(f"Marked {completed} recurring groups as completed")
    return {"completed": completed}
