# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""DateTime utilities for wbctl.

All datetimes are timezone-aware UTC.
"""

from datetime import datetime, timezone


def utc_now() -> datetime:
    """Get current UTC time as timezone-aware datetime.

    Returns:
        Timezone-aware datetime representing current UTC time.
    """
    return datetime.now(timezone.utc)


def format_iso(dt: datetime) -> str:
    """Format a datetime as an ISO 8601 string with millisecond precision.

    Args:
        dt: Datetime to format. Naive values are assumed to be UTC.

    Returns:
        String like "2025-03-01T12:30:45.123Z".

    Example:
        >>> format_iso(datetime(2025, 3, 1, 12, 30, 45, 123456, tzinfo=timezone.utc))
        '2025-03-01T12:30:45.123Z'
    """
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    dt = dt.astimezone(timezone.utc)
    return dt.strftime("%Y-%m-%dT%H:%M:%S.") + f"{dt.microsecond // 1000:03d}Z"


def filename_timestamp(dt: datetime | None = None) -> str:
    """Return a sortable timestamp that is safe inside a file name.

    Colons and periods of the ISO form are replaced with hyphens.

    Args:
        dt: Datetime to format. Defaults to the current UTC time.

    Example:
        >>> filename_timestamp(datetime(2025, 3, 1, 12, 30, 45, 123000, tzinfo=timezone.utc))
        '2025-03-01T12-30-45-123Z'
    """
    return format_iso(dt or utc_now()).replace(":", "-").replace(".", "-")
