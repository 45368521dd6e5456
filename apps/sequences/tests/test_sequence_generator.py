"""Tests for atomic sequence issuance and code formatting."""

from __future__ import annotations

import threading
from concurrent.futures import ThreadPoolExecutor
from datetime import date

import pytest
from django.db import OperationalError, connection
from django.test import TransactionTestCase

from apps.sequences.codes import format_code, next_booking_code, next_group_code
from apps.sequences.models import SequenceCounter
from apps.sequences.services import DjangoSequenceStore, SequenceGenerator, SequenceUnavailableError
from shared.domain.errors import DependencyFailure


class InMemoryStore:
    def __init__(self):
        self._values: dict[str, int] = {}
        self._lock = threading.Lock()

    def increment(self, key: str) -> int:
        with self._lock:
            self._values[key] = self._values.get(key, 0) + 1
            return self._values[key]


class BrokenStore:
    def increment(self, key: str) -> int:
        raise OperationalError("connection refused")


def test_format_code_pads_and_prefixes():
    assert format_code("BK", date(2026, 10, 19), 7) == "BK202610190007"
    assert format_code("RG", date(2026, 1, 2), 12345) == "RG2026010212345"


def test_generator_yields_one_to_n_under_concurrency():
    generator = SequenceGenerator(InMemoryStore())
    with ThreadPoolExecutor(max_workers=16) as pool:
        values = list(pool.map(lambda _: generator.next("k"), range(200)))
    assert sorted(values) == list(range(1, 201))


def test_store_failure_is_a_hard_dependency_failure():
    generator = SequenceGenerator(BrokenStore())
    with pytest.raises(SequenceUnavailableError) as excinfo:
        generator.next("booking-BK20261019")
    assert isinstance(excinfo.value, DependencyFailure)
    assert excinfo.value.retryable


@pytest.mark.django_db
def test_database_store_counts_per_key():
    generator = SequenceGenerator(DjangoSequenceStore())
    assert [generator.next("a") for _ in range(3)] == [1, 2, 3]
    assert generator.next("b") == 1
    assert SequenceCounter.objects.get(key="a").value == 3


@pytest.mark.django_db
def test_codes_use_separate_daily_namespaces():
    day = date(2026, 10, 19)
    assert next_booking_code(day) == "BK202610190001"
    assert next_booking_code(day) == "BK202610190002"
    assert next_booking_code(date(2026, 10, 20)) == "BK202610200001"
    assert next_group_code(day) == "RG202610190001"


class ConcurrentSequenceTests(TransactionTestCase):
    """Real concurrent increments; needs a database with row-level locking."""

    def setUp(self) -> None:
        if connection.vendor != "postgresql":
            self.skipTest("concurrent increments need PostgreSQL")

    def test_concurrent_callers_get_distinct_gap_free_values(self) -> None:
        generator = SequenceGenerator(DjangoSequenceStore())

        def issue(_):
            try:
                return generator.next("concurrent")
            finally:
                connection.close()

        with ThreadPoolExecutor(max_workers=8) as pool:
            values = list(pool.map(issue, range(40)))

        self.assertEqual(sorted(values), list(range(1, 41)))
