"""
Queue entry endpoints.

Staff create entries at check-in, list them for the service screens and
drive them through their lifecycle (call, pause, resume, complete, skip,
cancel, transfer). Pharmacy and inspection entries share these endpoints;
the ``family`` field tells them apart.
"""
from __future__ import annotations

from django.shortcuts import get_object_or_404
from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from ..exceptions import validate_payload
from ..models import Patient, QueueEntry, QueueType, ServicePoint
from ..permissions import can_operate_family
from ..serializers.queue import (
    AttachmentSerializer,
    EntryCreateSerializer,
    EntryIdSerializer,
    EntryListQuerySerializer,
    TransitionSerializer,
)
from ..services.entries import entry_payload, list_entries, transition_history
from ..services.realtime import notify_entries_changed
from ..services.sequencing import create_entry
from ..services.transitions import transition_entry


def _forbidden():
    return Response({'ok': False, 'error': {'code': 'forbidden', 'message': 'not allowed to operate this queue'}},
                    status=status.HTTP_403_FORBIDDEN)


@api_view(['POST'])
@permission_classes([IsAuthenticated])
def entry_create(request):
    """Check a patient in: allocate the next number of the requested type."""
    data = validate_payload(EntryCreateSerializer, request.data)
    family = data['family']
    if not can_operate_family(request.user, family):
        return _forbidden()
    queue_type = get_object_or_404(QueueType, family=family, code=data['type'])
    if not queue_type.enabled:
        return Response({'ok': False, 'error': {'code': 'queue_type_disabled',
                                                 'message': f'{queue_type.code} is disabled'}},
                        status=status.HTTP_400_BAD_REQUEST)
    patient = None
    if data.get('patientId'):
        patient = get_object_or_404(Patient, pk=data['patientId'])
    entry = create_entry(
        queue_type,
        data.get('serviceDate'),
        patient=patient,
        note=data.get('note', ''),
    )
    return Response({'ok': True, 'data': entry_payload(entry)}, status=status.HTTP_201_CREATED)


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def entry_list(request):
    """List entries, oldest first, optionally filtered by date, status, type and family."""
    q = validate_payload(EntryListQuerySerializer, request.query_params)
    qs = list_entries(
        service_date=q.get('serviceDate'),
        status=q.get('status'),
        type_code=q.get('type'),
        family=q.get('family'),
    )
    return Response({'ok': True, 'data': [entry_payload(e) for e in qs]})


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def entry_detail(request):
    q = validate_payload(EntryIdSerializer, request.query_params)
    entry = get_object_or_404(
        QueueEntry.objects.select_related('queue_type', 'service_point', 'patient'), pk=q['id']
    )
    transitions = entry.transitions.select_related('operator').order_by('timestamp', 'id')
    return Response({'ok': True, 'data': {**entry_payload(entry), 'transitionHistory': transition_history(transitions)}})


@api_view(['POST'])
@permission_classes([IsAuthenticated])
def entry_transition(request):
    """Apply one lifecycle action to an entry.

    Illegal actions answer 409 and leave the entry unchanged. ``call`` on
    an entry that is already ACTIVE re-announces it without touching
    ``calledAt``.
    """
    data = validate_payload(TransitionSerializer, request.data)
    entry = get_object_or_404(QueueEntry.objects.only('id', 'family'), pk=data['id'])
    if not can_operate_family(request.user, entry.family):
        return _forbidden()
    service_point = None
    if data.get('servicePointId'):
        service_point = get_object_or_404(ServicePoint, pk=data['servicePointId'], family=entry.family)
    entry = transition_entry(
        entry.pk,
        data['action'],
        operator=request.user,
        service_point=service_point,
        reason=data.get('reason') or '',
    )
    return Response({'ok': True, 'data': entry_payload(entry)})


@api_view(['POST'])
@permission_classes([IsAuthenticated])
def entry_attachment(request):
    """Store the storage path of a photo taken for the entry (empty clears it)."""
    data = validate_payload(AttachmentSerializer, request.data)
    entry = get_object_or_404(QueueEntry.objects.select_related('queue_type', 'patient'), pk=data['id'])
    if not can_operate_family(request.user, entry.family):
        return _forbidden()
    entry.attachment_path = data['path']
    entry.save(update_fields=['attachment_path'])
    notify_entries_changed(entry.family, entry.service_date, entry.queue_type.code)
    return Response({'ok': True, 'data': entry_payload(entry)})
