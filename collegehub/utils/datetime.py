# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""DateTime utilities for collegehub.

All timestamps are stored in UTC (PostgreSQL TIMESTAMPTZ) and every Python
datetime handled by the application is timezone-aware.

Usage:
    from collegehub.utils.datetime import utc_now

    created_at: Mapped[datetime] = mapped_column(default=utc_now)
"""

import math
from datetime import datetime, timezone


def utc_now() -> datetime:
    """Get current UTC time as timezone-aware datetime."""
    return datetime.now(timezone.utc)


def to_epoch_millis(value: datetime) -> int:
    """Convert a datetime to milliseconds since the Unix epoch.

    Naive datetimes are treated as UTC.

    Args:
        value: Datetime to convert.

    Returns:
        Milliseconds since epoch.
    """
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return int(value.timestamp() * 1000)


def from_epoch_millis(millis: int) -> datetime:
    """Create a timezone-aware UTC datetime from epoch milliseconds.

    Args:
        millis: Milliseconds since epoch.

    Returns:
        Timezone-aware UTC datetime.
    """
    return datetime.fromtimestamp(millis / 1000, tz=timezone.utc)


def format_time_remaining(seconds: float) -> str:
    """Render a wait time for users.

    Below a minute the value is shown in seconds, below an hour in whole
    minutes and otherwise in whole hours. Minutes and hours round up.

    Args:
        seconds: Remaining time in seconds.

    Returns:
        Human readable string such as ``"45 seconds"`` or ``"2 minutes"``.

    Example:
        >>> format_time_remaining(61)
        '2 minutes'
    """
    seconds = max(0, math.ceil(seconds))
    if seconds < 60:
        return f"{seconds} second{'s' if seconds != 1 else ''}"
    if seconds < 3600:
        minutes = math.ceil(seconds / 60)
        return f"{minutes} minute{'s' if minutes != 1 else ''}"
    hours = math.ceil(seconds / 3600)
    return f"{hours} hour{'s' if hours != 1 else ''}"
