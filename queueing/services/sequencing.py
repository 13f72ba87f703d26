"""
Queue number allocation.

Numbers are unique per (family, queue type, service date). The database
unique constraint is the real guard: two sessions computing the same
candidate race on the INSERT, the loser sees an ``IntegrityError`` and
simply tries again with a fresh candidate.
"""
from __future__ import annotations

import logging
from datetime import date
from typing import Iterable, Optional

from django.conf import settings
from django.db import IntegrityError, transaction
from django.utils import timezone

from ..exceptions import AllocationExhausted
from ..models import Patient, QueueEntry, QueueType
from .realtime import notify_entries_changed

logger = logging.getLogger(__name__)


def format_queue_number(prefix: str, fmt: str, number: int) -> str:
    """``format_queue_number('A', '000', 7) == 'A007'``."""
    return f'{prefix or ""}{str(number).zfill(len(fmt or ""))}'


def next_free_number(taken: Iterable[int]) -> int:
    """Smallest positive integer not in ``taken``."""
    used = set(taken)
    candidate = 1
    while candidate in used:
        candidate += 1
    return candidate


def allocate_number(queue_type: QueueType, service_date: date) -> int:
    taken = QueueEntry.objects.filter(
        family=queue_type.family, queue_type=queue_type, service_date=service_date,
    ).values_list('number', flat=True)
    return next_free_number(taken)


def create_entry(
    queue_type: QueueType,
    service_date: Optional[date] = None,
    *,
    patient: Optional[Patient] = None,
    note: str = '',
    max_retries: Optional[int] = None,
) -> QueueEntry:
    """Allocate the next number for ``queue_type`` and persist a WAITING entry."""
    service_date = service_date or timezone.localdate()
    attempts = max_retries if max_retries is not None else settings.QUEUE_ALLOCATION_MAX_RETRIES
    for attempt in range(1, attempts + 1):
        number = allocate_number(queue_type, service_date)
        try:
            with transaction.atomic():
                entry = QueueEntry.objects.create(
                    family=queue_type.family,
                    queue_type=queue_type,
                    service_date=service_date,
                    number=number,
                    patient=patient,
                    note=note,
                )
        except IntegrityError:
            logger.info('number %s for %s on %s already taken (attempt %d/%d)',
                        number, queue_type.code, service_date, attempt, attempts)
            continue
        logger.debug('allocated %s', format_queue_number(queue_type.prefix, queue_type.format, number))
        notify_entries_changed(entry.family, entry.service_date, queue_type.code)
        return entry
    raise AllocationExhausted(queue_type.code, service_date, attempts)
