"""
Star history series built from an ordered list of StarEvent values.
"""

from collections import Counter
from datetime import datetime, timezone
import numpy as np

# Comparison series start here; earlier stars only count towards the totals
SERIES_START = datetime(2013, 1, 10, 23, tzinfo=timezone.utc)


def star_series(events, since=None):
    """
    Cumulative star count over time.

    Args:
        events (list): StarEvent values sorted by `starred_at`.
        since (datetime, optional): Drop points at or before this instant.
            Dropped stars still count towards later totals.

    Returns:
        tuple: (timestamps, counts) as numpy arrays; timestamps are POSIX
        seconds, counts are the running total including that star.
    """
    timestamps = np.array([event.starred_at.timestamp() for event in events], dtype=np.float64)
    counts = np.arange(1, len(events) + 1, dtype=np.int64)
    if since is not None:
        mask = timestamps > since.timestamp()
        return timestamps[mask], counts[mask]
    return timestamps, counts


def daily_star_counts(events):
    """Returns {date: stars received that day}, in date order."""
    if not events:
        return {}
    days = np.array([event.starred_at.date() for event in events], dtype="datetime64[D]")
    unique_days, counts = np.unique(days, return_counts=True)
    return {day.item(): int(count) for day, count in zip(unique_days, counts)}


def summarize(events):
    """
    High-level numbers for a repository's star history.

    Returns:
        dict: total, first_star, last_star, busiest_day, busiest_day_stars
        and by_type (account type -> count). Times are None when there are
        no events.
    """
    summary = {
        "total": len(events),
        "first_star": None,
        "last_star": None,
        "busiest_day": None,
        "busiest_day_stars": 0,
        "by_type": dict(Counter(event.user_type for event in events)),
    }
    if not events:
        return summary

    summary["first_star"] = events[0].starred_at
    summary["last_star"] = events[-1].starred_at

    daily = daily_star_counts(events)
    days = list(daily)
    counts = np.array(list(daily.values()))
    busiest = int(np.argmax(counts))
    summary["busiest_day"] = days[busiest]
    summary["busiest_day_stars"] = int(counts[busiest])
    return summary
