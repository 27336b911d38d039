"""Time helpers shared by models, services, and the stream layer."""

from __future__ import annotations

from datetime import UTC, datetime, timedelta

_MIN_TICK = timedelta(microseconds=1)


def utcnow() -> datetime:
    """Return the current UTC time as a naive datetime (DB storage convention)."""
    return datetime.now(UTC).replace(tzinfo=None)


def next_timestamp(previous: datetime | None) -> datetime:
    """Return a timestamp strictly later than ``previous``.

    Mutation timestamps gate change detection, so they must advance even when
    two writes land within the clock's resolution.
    """
    now = utcnow()
    if previous is not None and now <= previous:
        return previous + _MIN_TICK
    return now
