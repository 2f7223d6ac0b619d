"""Deadline arithmetic for exam sessions.

Every function here is pure: callers read the clock once (``utcnow``) and pass the same
``now`` to each computation so two derived values never disagree by a few milliseconds.
The deadline computed at session creation is the only authority on remaining time;
client-side countdowns are advisory.
"""
from datetime import datetime, timedelta, timezone
from typing import Optional


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def as_utc(value: datetime) -> datetime:
    # SQLite hands back naive datetimes even for timezone-aware columns
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def compute_deadline(now: datetime, duration_minutes: int) -> datetime:
    return as_utc(now) + timedelta(minutes=duration_minutes)


def remaining(now: datetime, scheduled_end_time: datetime) -> timedelta:
    left = as_utc(scheduled_end_time) - as_utc(now)
    return max(left, timedelta(0))


def elapsed(now: datetime, start_time: datetime) -> timedelta:
    spent = as_utc(now) - as_utc(start_time)
    return max(spent, timedelta(0))


def effective_remaining(time_remaining: timedelta, min_guarantee_minutes: Optional[int]) -> timedelta:
    """Display floor for a recovering client. Never feeds back into the stored deadline."""
    if not min_guarantee_minutes:
        return time_remaining
    return max(time_remaining, timedelta(minutes=min_guarantee_minutes))
