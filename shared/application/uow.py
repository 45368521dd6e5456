"""
Unit of Work

Wraps a use case in a database transaction and publishes the domain
events recorded on its aggregates only after the commit succeeds.
"""

from typing import List
import logging

from django.db import transaction  # type: ignore

from shared.domain.base import DomainEvent
from shared.infrastructure.storage import as_dependency_failure, storage_guard

logger = logging.getLogger(__name__)


class DjangoUnitOfWork:
    """
    Django implementation of Unit of Work

    Usage:
        with DjangoUnitOfWork() as uow:
            booking = Booking.objects.create(...)
            booking.record_event(BookingCreated(...))
            uow.collect_events(booking)
        # events are published after commit

    Database errors raised inside the block surface as DependencyFailure.
    """

    def __init__(self, resource: str = 'booking store'):
        self._events: List[DomainEvent] = []
        self._resource = resource
        self._transaction = None

    def __enter__(self):
        self._transaction = transaction.atomic()
        with storage_guard(self._resource):
            self._transaction.__enter__()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        try:
            if exc_type is None:
                self.commit()
            else:
                self.rollback()
        finally:
            with storage_guard(self._resource):
                self._transaction.__exit__(exc_type, exc_val, exc_tb)

        failure = as_dependency_failure(exc_val, self._resource)
        if failure is not None:
            logger.error(f"Unit of work on {self._resource} failed: {exc_val}")
            raise failure from exc_val
        return False

    def commit(self):
        events = self._events.copy()
        self._events.clear()
        logger.debug(f"Committing unit of work with {len(events)} events")
        if events:
            transaction.on_commit(lambda: self._publish_events(events))

    def rollback(self):
        logger.warning(f"Rolling back unit of work, discarding {len(self._events)} events")
        self._events.clear()

    def collect_events(self, aggregate):
        """Move recorded events from an aggregate into this unit of work"""
        if hasattr(aggregate, 'pull_events'):
            new_events = aggregate.pull_events()
            if new_events:
                self._events.extend(new_events)
                logger.debug(
                    f"Collected {len(new_events)} events from "
                    f"{aggregate.__class__.__name__} (ID: {getattr(aggregate, 'pk', None)})"
                )

    def _publish_events(self, events: List[DomainEvent]):
        from shared.application.message_bus import message_bus

        logger.info(f"Publishing {len(events)} domain events after commit")
        try:
            message_bus.publish_events(events)
        except Exception as e:
            logger.error(f"Error publishing events: {e}", exc_info=True)
