"""
Queue entry lifecycle.

::

    WAITING --call--> ACTIVE --complete--> COMPLETED
       |  ^             |  ^
     skip |resume     pause |call (recall) / transfer
       v  |             v
    SKIPPED          PAUSED --resume--> WAITING

    WAITING / SKIPPED --cancel--> CANCELLED

``apply_action`` is the pure state machine; it validates first and only then
mutates, so a rejected action leaves the entry untouched. ``transition_entry``
wraps it with row locking, the one-active-entry-per-service-point rule, the
audit trail and change notification.
"""
from __future__ import annotations

import logging
from datetime import datetime
from typing import Any, Optional

from django.db import transaction
from django.utils import timezone

from ..exceptions import InvalidTransition, ServicePointBusy
from ..models import EntryStatus, QueueEntry, QueueEntryTransition, ServicePoint
from .realtime import notify_entries_changed

logger = logging.getLogger(__name__)

WAITING = EntryStatus.WAITING.value
ACTIVE = EntryStatus.ACTIVE.value
PAUSED = EntryStatus.PAUSED.value
SKIPPED = EntryStatus.SKIPPED.value
COMPLETED = EntryStatus.COMPLETED.value
CANCELLED = EntryStatus.CANCELLED.value

# action -> {from status: to status}
TRANSITIONS: dict[str, dict[str, str]] = {
    'call': {WAITING: ACTIVE, ACTIVE: ACTIVE},
    'recall': {ACTIVE: ACTIVE},
    'pause': {ACTIVE: PAUSED},
    'resume': {PAUSED: WAITING, SKIPPED: WAITING},
    'complete': {ACTIVE: COMPLETED},
    'skip': {WAITING: SKIPPED},
    'cancel': {WAITING: CANCELLED, SKIPPED: CANCELLED},
    'transfer': {ACTIVE: ACTIVE},
}
ACTIONS = tuple(TRANSITIONS)


def can_transition(current: str, action: str) -> bool:
    return current in TRANSITIONS.get(action, {})


def _service_point_id(value: Any) -> Any:
    return getattr(value, 'pk', value)


def apply_action(entry: Any, action: str, *, now: Optional[datetime] = None, service_point: Any = None) -> str:
    """Apply ``action`` to ``entry`` in memory and return the new status.

    ``service_point`` is the transfer target, or the station calling the entry.
    """
    current = str(entry.status)
    if not can_transition(current, action):
        raise InvalidTransition(current, action)
    if action == 'transfer':
        if service_point is None:
            raise InvalidTransition(current, action, 'transfer needs a target service point')
        if _service_point_id(service_point) == entry.service_point_id:
            raise InvalidTransition(current, action, 'entry is already at that service point')

    now = now or timezone.now()
    new_status = TRANSITIONS[action][current]
    entry.status = new_status
    if new_status == ACTIVE and entry.called_at is None:
        # First call wins; recalls keep the original timestamp
        entry.called_at = now
    if new_status == COMPLETED:
        entry.completed_at = now
    moves = action == 'transfer' or (action == 'call' and current == WAITING)
    if service_point is not None and moves:
        if isinstance(service_point, ServicePoint):
            entry.service_point = service_point
        else:
            entry.service_point_id = service_point
    return new_status


def _ensure_service_point_free(entry: QueueEntry, service_point_id, action: str) -> None:
    if service_point_id is None:
        return
    # Serializes concurrent calls into the same service point
    ServicePoint.objects.select_for_update().get(pk=service_point_id)
    busy = (
        QueueEntry.objects.select_for_update()
        .filter(service_point_id=service_point_id, status=ACTIVE)
        .exclude(pk=entry.pk)
        .exists()
    )
    if busy:
        raise ServicePointBusy(str(entry.status), action, service_point_id)


def transition_entry(
    entry_id,
    action: str,
    *,
    operator=None,
    service_point: Optional[ServicePoint] = None,
    reason: str = '',
) -> QueueEntry:
    """Persist ``action`` for the entry ``entry_id`` and return the updated row."""
    with transaction.atomic():
        entry = QueueEntry.objects.select_for_update().select_related('queue_type').get(pk=entry_id)
        old_status = entry.status
        old_point_id = entry.service_point_id
        if can_transition(old_status, action) and (action == 'transfer' or (action == 'call' and old_status == WAITING)):
            target_id = service_point.pk if service_point is not None else old_point_id
            _ensure_service_point_free(entry, target_id, action)
        apply_action(entry, action, service_point=service_point)
        entry.save()
        QueueEntryTransition.objects.create(
            entry=entry,
            action=action,
            from_status=old_status,
            to_status=entry.status,
            from_service_point_id=old_point_id,
            to_service_point_id=entry.service_point_id,
            operator=operator if getattr(operator, 'pk', None) else None,
            reason=reason,
        )
    logger.info('entry %s: %s %s -> %s', entry.pk, action, old_status, entry.status)
    notify_entries_changed(entry.family, entry.service_date, entry.queue_type.code)
    return entry
