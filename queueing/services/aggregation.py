"""
Time-bucketed queue analytics.

Everything here is a pure function of the entries passed in and the
reference time ``now``: results are recomputed from the full entry set on
every call, so replaying the same input (in any order) always yields the
same buckets.

Entries may be model instances or plain dicts with the same field names;
timestamps may be datetimes or ISO-8601 strings.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date, datetime, time, timedelta
from math import fsum
from typing import Any, Iterable, Mapping, Optional

from django.utils import timezone
from django.utils.dateparse import parse_datetime

from ..exceptions import AggregationInputError
from ..models import EntryStatus

logger = logging.getLogger(__name__)

DAY = 'day'
WEEK = 'week'
MONTH = 'month'
TIME_FRAMES = (DAY, WEEK, MONTH)

COMPLETED = EntryStatus.COMPLETED.value


@dataclass(frozen=True)
class TimeBucket:
    label: str
    count: int = 0
    average_minutes: float = 0.0

    def as_dict(self) -> dict:
        return {'label': self.label, 'count': self.count, 'averageMinutes': self.average_minutes}


def _field(entry: Any, name: str) -> Any:
    if isinstance(entry, Mapping):
        return entry.get(name)
    return getattr(entry, name, None)


def to_datetime(value: Any) -> Optional[datetime]:
    """Coerce a stored timestamp to an aware datetime (``None`` stays ``None``)."""
    if value is None or value == '':
        return None
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, str):
        try:
            parsed = parse_datetime(value)
        except ValueError as exc:
            raise AggregationInputError(f'bad timestamp {value!r}') from exc
        if parsed is None:
            raise AggregationInputError(f'bad timestamp {value!r}')
    else:
        raise AggregationInputError(f'unsupported timestamp type {type(value).__name__}')
    if timezone.is_naive(parsed):
        parsed = timezone.make_aware(parsed)
    return parsed


def _minutes_between(start: datetime, end: datetime) -> float:
    return (end - start).total_seconds() / 60


def _mean(samples: list[float]) -> float:
    return round(fsum(samples) / len(samples), 2) if samples else 0.0


def window_start(time_frame: str, now: datetime) -> datetime:
    """Start of the current day, week (Monday) or month in local time."""
    if time_frame not in TIME_FRAMES:
        raise ValueError(f'unknown time frame {time_frame!r}')
    local_now = timezone.localtime(now)
    start_date = local_now.date()
    if time_frame == WEEK:
        start_date -= timedelta(days=start_date.weekday())
    elif time_frame == MONTH:
        start_date = start_date.replace(day=1)
    return timezone.make_aware(datetime.combine(start_date, time.min), local_now.tzinfo)


def bucket_labels(time_frame: str, start: datetime, now: datetime) -> list[str]:
    if time_frame == DAY:
        return [f'{hour:02d}:00' for hour in range(24)]
    labels = []
    day: date = timezone.localtime(start).date()
    last = timezone.localtime(now).date()
    while day <= last:
        labels.append(day.isoformat())
        day += timedelta(days=1)
    return labels


def bucket_key(moment: datetime, time_frame: str) -> str:
    local = timezone.localtime(moment)
    if time_frame == DAY:
        return f'{local.hour:02d}:00'
    return local.date().isoformat()


def aggregate(entries: Iterable[Any], time_frame: str, now: Optional[datetime] = None) -> list[TimeBucket]:
    """Throughput and average wait per bucket for one queue family.

    ``count`` is the number of entries COMPLETED inside the bucket;
    ``average_minutes`` is the mean of ``called_at - created_at`` over
    entries created inside the bucket. Buckets with no data report 0.
    """
    now = to_datetime(now) or timezone.now()
    start = window_start(time_frame, now)
    labels = bucket_labels(time_frame, start, now)
    counts = {label: 0 for label in labels}
    waits: dict[str, list[float]] = {label: [] for label in labels}

    for entry in entries:
        try:
            completed_at = to_datetime(_field(entry, 'completed_at'))
        except AggregationInputError as exc:
            logger.warning('skipping throughput sample of %s: %s', _field(entry, 'id'), exc)
            completed_at = None
        if completed_at is not None and str(_field(entry, 'status')) == COMPLETED and start <= completed_at <= now:
            key = bucket_key(completed_at, time_frame)
            if key in counts:
                counts[key] += 1

        try:
            created_at = to_datetime(_field(entry, 'created_at'))
            called_at = to_datetime(_field(entry, 'called_at'))
        except AggregationInputError as exc:
            logger.warning('skipping wait-time sample of %s: %s', _field(entry, 'id'), exc)
            continue
        if created_at is None or called_at is None or not start <= created_at <= now:
            continue
        minutes = _minutes_between(created_at, called_at)
        if minutes < 0:
            logger.warning('skipping negative wait time of %s (%.1f min)', _field(entry, 'id'), minutes)
            continue
        key = bucket_key(created_at, time_frame)
        if key in waits:
            waits[key].append(minutes)

    return [TimeBucket(label, counts[label], _mean(waits[label])) for label in labels]


def combine(streams: Mapping[str, list[TimeBucket]]) -> list[dict]:
    """Zip per-family bucket lists by label.

    A label missing from one family's stream reports zeros for that family.
    """
    labels: list[str] = []
    indexed: dict[str, dict[str, TimeBucket]] = {}
    for family, buckets in streams.items():
        indexed[family] = {b.label: b for b in buckets}
        for b in buckets:
            if b.label not in labels:
                labels.append(b.label)
    combined = []
    for label in labels:
        row: dict[str, Any] = {'label': label}
        for family in streams:
            bucket = indexed[family].get(label) or TimeBucket(label)
            row[family] = {'count': bucket.count, 'averageMinutes': bucket.average_minutes}
        combined.append(row)
    return combined


def aggregate_families(entries_by_family: Mapping[str, Iterable[Any]], time_frame: str,
                       now: Optional[datetime] = None) -> list[dict]:
    now = to_datetime(now) or timezone.now()
    return combine({
        family: aggregate(entries, time_frame, now)
        for family, entries in entries_by_family.items()
    })


def summarize(entries: Iterable[Any]) -> dict:
    """Status counts plus average wait and service time of completed entries."""
    counts = {status: 0 for status in EntryStatus.values}
    waits: list[float] = []
    services: list[float] = []
    for entry in entries:
        status = str(_field(entry, 'status'))
        if status in counts:
            counts[status] += 1
        if status != COMPLETED:
            continue
        try:
            created_at = to_datetime(_field(entry, 'created_at'))
            called_at = to_datetime(_field(entry, 'called_at'))
            completed_at = to_datetime(_field(entry, 'completed_at'))
        except AggregationInputError as exc:
            logger.warning('skipping summary sample of %s: %s', _field(entry, 'id'), exc)
            continue
        if called_at is None or completed_at is None:
            continue
        if created_at is not None and called_at >= created_at:
            waits.append(_minutes_between(created_at, called_at))
        if completed_at >= called_at:
            services.append(_minutes_between(called_at, completed_at))
    return {
        'counts': counts,
        'total': sum(counts.values()),
        'averageWaitMinutes': _mean(waits),
        'averageServiceMinutes': _mean(services),
    }


def composition(entries: Iterable[Any], queue_types: Iterable[Mapping]) -> list[dict]:
    """WAITING entries per queue type, zero-filled over ``queue_types``."""
    waiting: dict[Any, int] = {}
    for entry in entries:
        if str(_field(entry, 'status')) != EntryStatus.WAITING.value:
            continue
        type_id = _field(entry, 'queue_type_id')
        waiting[type_id] = waiting.get(type_id, 0) + 1
    return [
        {'type': qt['code'], 'name': qt['name'], 'count': waiting.get(qt['id'], 0)}
        for qt in queue_types
    ]
