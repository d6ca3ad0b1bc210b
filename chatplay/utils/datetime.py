# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""DateTime utilities for chatplay.

All session timestamps are timezone-aware UTC. Databases that drop the
zone (SQLite) hand back naive values, which ensure_utc() normalizes.

Usage:
    from chatplay.utils.datetime import utc_now

    started_at = utc_now()
"""

from datetime import datetime, timezone


def utc_now() -> datetime:
    """Get current UTC time as timezone-aware datetime."""
    return datetime.now(timezone.utc)


def ensure_utc(dt: datetime | None) -> datetime | None:
    """Ensure a datetime is timezone-aware UTC.

    Args:
        dt: A datetime object (naive or aware) or None.

    Returns:
        Timezone-aware UTC datetime or None. Naive values are assumed
        to already be UTC.
    """
    if dt is None:
        return None

    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)

    return dt.astimezone(timezone.utc)


def seconds_between(start: datetime | None, end: datetime | None = None) -> int | None:
    """Whole seconds elapsed between two datetimes.

    Args:
        start: Start of the interval.
        end: End of the interval. Defaults to now.

    Returns:
        Elapsed seconds, or None when start is unknown.
    """
    if start is None:
        return None
    end_utc = ensure_utc(end) if end is not None else utc_now()
    return max(0, int((end_utc - ensure_utc(start)).total_seconds()))
