"""Global boolean feature flags, mutated by admins only."""
from __future__ import annotations

from django.db import models


class SystemSetting(models.Model):
    key = models.CharField(max_length=64, primary_key=True)
    value = models.BooleanField(default=False)
    description = models.CharField(max_length=255, blank=True)

    class Meta:
        ordering = ["key"]

    def __str__(self) -> str:  # pragma: no cover
        return f"{self.key}={self.value}"
