from datetime import date, datetime
from typing import Iterable, Optional

from django.core.files.storage import default_storage
from django.db.models import Q, QuerySet

from ..models import QueueEntry, QueueEntryTransition
from .sequencing import format_queue_number


def list_entries(*, service_date: Optional[date] = None, status: Optional[str] = None,
                 type_code: Optional[str] = None, family: Optional[str] = None) -> QuerySet:
    """Entries matching the filter, oldest first."""
    qs = QueueEntry.objects.select_related('queue_type', 'service_point', 'patient')
    if family:
        qs = qs.filter(family=family)
    if service_date:
        qs = qs.filter(service_date=service_date)
    if status:
        qs = qs.filter(status=status)
    if type_code:
        qs = qs.filter(queue_type__code=type_code)
    return qs.order_by('created_at')


def entries_since(family: str, start: datetime) -> QuerySet:
    """Entries created or completed on/after ``start``; input for the analytics."""
    return (
        QueueEntry.objects.filter(family=family)
        .filter(Q(created_at__gte=start) | Q(completed_at__gte=start))
        .only('id', 'status', 'created_at', 'called_at', 'completed_at', 'queue_type_id')
    )


def attachment_url(path: str) -> Optional[str]:
    return default_storage.url(path) if path else None


def _ts(value) -> Optional[str]:
    return value.isoformat() if value else None


def entry_payload(entry: QueueEntry) -> dict:
    qt = entry.queue_type
    return {
        'id': str(entry.id),
        'family': entry.family,
        'type': qt.code,
        'number': entry.number,
        'code': format_queue_number(qt.prefix, qt.format, entry.number),
        'serviceDate': entry.service_date.isoformat(),
        'status': entry.status,
        'createdAt': _ts(entry.created_at),
        'calledAt': _ts(entry.called_at),
        'completedAt': _ts(entry.completed_at),
        'servicePointId': entry.service_point_id,
        'patientId': entry.patient_id,
        'patientName': entry.patient.name if entry.patient_id else None,
        'note': entry.note,
        'attachmentUrl': attachment_url(entry.attachment_path),
    }


def transition_history(transitions: Iterable[QueueEntryTransition]) -> list[dict]:
    return [
        {
            'action': t.action,
            'from': t.from_status,
            'to': t.to_status,
            'fromServicePointId': t.from_service_point_id,
            'toServicePointId': t.to_service_point_id,
            'operator': t.operator.username if t.operator else '',
            'timestamp': t.timestamp.isoformat(),
            'reason': t.reason,
        }
        for t in transitions
    ]
