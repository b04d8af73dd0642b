"""Feature flag snapshots.

Flags are read once per request into an immutable `FeatureFlags` object
that middleware attaches to `request.flags`; handlers receive it from the
request instead of querying a global. The snapshot is cached process-wide
and dropped whenever an admin writes new values (last write wins).
"""
from __future__ import annotations

import logging
from collections.abc import Mapping

from django.conf import settings
from django.core.cache import cache
from django.db import transaction

from .models import SystemSetting

logger = logging.getLogger(__name__)

CACHE_KEY = "system:feature-flags"

ENABLE_PUBLIC_REGISTRATION = "ENABLE_PUBLIC_REGISTRATION"
REQUIRE_EMAIL_VERIFICATION = "REQUIRE_EMAIL_VERIFICATION"
MAINTENANCE_MODE = "MAINTENANCE_MODE"
ENABLE_CERTIFICATES = "ENABLE_CERTIFICATES"
ENABLE_STUDENT_UPLOADS = "ENABLE_STUDENT_UPLOADS"
SHOW_COURSE_ANNOUNCEMENTS = "SHOW_COURSE_ANNOUNCEMENTS"
SHOW_FEATURED_COURSES = "SHOW_FEATURED_COURSES"
ENABLE_DARK_MODE = "ENABLE_DARK_MODE"

# key -> (default, description)
KNOWN_FLAGS: dict[str, tuple[bool, str]] = {
    ENABLE_PUBLIC_REGISTRATION: (True, "Allow visitors to create new accounts."),
    REQUIRE_EMAIL_VERIFICATION: (True, "Enforce email confirmation before login."),
    MAINTENANCE_MODE: (False, "Block access for non-admin users immediately."),
    ENABLE_CERTIFICATES: (True, "Allow students to claim certificates upon completion."),
    ENABLE_STUDENT_UPLOADS: (True, "Enable file uploads for assignments."),
    SHOW_COURSE_ANNOUNCEMENTS: (True, "Display the announcements tab in the course player."),
    SHOW_FEATURED_COURSES: (True, "Show the curated course list on the homepage."),
    ENABLE_DARK_MODE: (False, "Apply dark theme globally."),
}


class FeatureFlags(Mapping):
    """Read-only view of every flag, defaults filled in."""

    __slots__ = ("_values",)

    def __init__(self, stored: Mapping[str, bool] | None = None):
        values = {key: default for key, (default, _) in KNOWN_FLAGS.items()}
        values.update({key: bool(value) for key, value in (stored or {}).items()})
        self._values = values

    def __getitem__(self, key: str) -> bool:
        return self._values[key]

    def __iter__(self):
        return iter(self._values)

    def __len__(self) -> int:
        return len(self._values)

    def __repr__(self) -> str:  # pragma: no cover
        return f"FeatureFlags({self._values!r})"

    def enabled(self, key: str) -> bool:
        return bool(self._values.get(key, False))

    def as_dict(self) -> dict[str, bool]:
        return dict(self._values)


def load_flags() -> FeatureFlags:
    stored = cache.get(CACHE_KEY)
    if stored is None:
        stored = dict(SystemSetting.objects.values_list("key", "value"))
        cache.set(CACHE_KEY, stored, settings.FEATURE_FLAGS_CACHE_TIMEOUT)
    return FeatureFlags(stored)


def invalidate_flags() -> None:
    cache.delete(CACHE_KEY)


@transaction.atomic
def update_flags(changes: Mapping[str, bool]) -> FeatureFlags:
    """Persist new flag values. Keys must be known flags."""
    unknown = sorted(set(changes) - set(KNOWN_FLAGS))
    if unknown:
        raise KeyError(", ".join(unknown))
    for key, value in changes.items():
        SystemSetting.objects.update_or_create(
            key=key,
            defaults={"value": bool(value), "description": KNOWN_FLAGS[key][1]},
        )
    transaction.on_commit(invalidate_flags)
    logger.info("Feature flags updated: %s", {k: bool(v) for k, v in changes.items()})
    # Build the fresh snapshot from the rows just written
    invalidate_flags()
    return load_flags()


def flags_for(request) -> FeatureFlags:
    """The snapshot attached by middleware, loading one if it is missing."""
    flags = getattr(request, "flags", None)
    return flags if flags is not None else load_flags()
