from datetime import datetime
from typing import Optional

from django.utils import timezone

from ..models import QueueFamily
from .aggregation import aggregate_families, window_start
from .entries import entries_since


def bucket_report(time_frame: str, now: Optional[datetime] = None) -> dict:
    """Bucketed wait time and throughput of every family, read fresh from the database."""
    now = now or timezone.now()
    start = window_start(time_frame, now)
    entries_by_family = {family: list(entries_since(family, start)) for family in QueueFamily.values}
    return {
        'timeFrame': time_frame,
        'start': start.isoformat(),
        'end': now.isoformat(),
        'buckets': aggregate_families(entries_by_family, time_frame, now),
    }
