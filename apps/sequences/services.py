"""Atomic sequence generation."""

from __future__ import annotations

import logging
from typing import Protocol

from django.db import DatabaseError, IntegrityError, transaction  # type: ignore
from django.db.models import F  # type: ignore

from shared.domain.errors import DependencyFailure

from .models import SequenceCounter

logger = logging.getLogger(__name__)


class SequenceUnavailableError(DependencyFailure):
    """The counter store could not issue a number. Never fall back."""

    def __init__(self, key: str, message: str = ''):
        self.key = key
        super().__init__("sequence store", message or f"Could not issue next value for {key!r}")


class SequenceStore(Protocol):
    def increment(self, key: str) -> int:
        ...


class DjangoSequenceStore:
    """
    Counter table with an atomic increment-and-return

    The increment is a single UPDATE ... SET value = value + 1; the row is
    locked by that UPDATE until the surrounding transaction ends, so the
    value read back afterwards belongs to this caller alone.
    """

    def increment(self, key: str) -> int:
        with transaction.atomic():
            updated = SequenceCounter.objects.filter(key=key).update(value=F("value") + 1)
            if not updated:
                self._create_row(key)
                updated = SequenceCounter.objects.filter(key=key).update(value=F("value") + 1)
            if updated != 1:
                raise SequenceUnavailableError(key, f"Counter row for {key!r} vanished during increment")
            return SequenceCounter.objects.values_list("value", flat=True).get(key=key)

    @staticmethod
    def _create_row(key: str) -> None:
        # A concurrent caller may create the row first; the savepoint keeps
        # the outer transaction usable after the duplicate-key error.
        try:
            with transaction.atomic():
                SequenceCounter.objects.create(key=key, value=0)
        except IntegrityError:
            pass


class SequenceGenerator:
    """Issue 1, 2, 3... per key with no repeats and no gaps."""

    def __init__(self, store: SequenceStore | None = None):
        self.store = store or DjangoSequenceStore()

    def next(self, key: str) -> int:
        try:
            value = self.store.increment(key)
        except SequenceUnavailableError:
            raise
        except DatabaseError as exc:
            logger.error(f"Sequence store failed for key {key}: {exc}", exc_info=True)
            raise SequenceUnavailableError(key, f"Sequence store unavailable: {exc}") from exc
        logger.debug(f"Issued sequence value {value} for key {key}")
        return value


sequence_generator = SequenceGenerator()
