"""Durable counters backing code generation."""

from __future__ import annotations

from django.db import models  # type: ignore
from django.utils.translation import gettext_lazy as _  # type: ignore


class SequenceCounter(models.Model):
    """One row per code namespace, created lazily and only ever incremented."""

    key = models.CharField(max_length=64, primary_key=True)
    value = models.PositiveBigIntegerField(default=0)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = _("Sequence counter")
        verbose_name_plural = _("Sequence counters")

    def __str__(self) -> str:
        return f"{self.key}={self.value}"
