"""
Batch appointment endpoints.

Editing operations that cannot be applied (duplicate patient, index out of
range, missing distance data) answer 200 with ``applied: false`` and an
``advisories`` list; the stored order is left as it was.
"""
from __future__ import annotations

from django.shortcuts import get_object_or_404
from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from ..exceptions import validate_payload
from ..models import BatchAppointment, Patient
from ..serializers.batch import BatchCreateSerializer, BatchMoveSerializer, BatchPatientSerializer, BatchRefSerializer
from ..services.batches import batch_payload, create_batch, edit_batch, load_selection
from ..services.ordering import OrderedSelection


def _edit_response(batch: BatchAppointment, advisories: list[dict]) -> Response:
    batch.refresh_from_db()
    return Response({'ok': True, 'applied': not advisories, 'advisories': advisories, 'data': batch_payload(batch)})


@api_view(['POST'])
@permission_classes([IsAuthenticated])
def batch_create(request):
    data = validate_payload(BatchCreateSerializer, request.data)
    found = Patient.objects.in_bulk(data['patientIds'])
    missing = [pid for pid in data['patientIds'] if pid not in found]
    if missing:
        return Response({'ok': False, 'error': {'code': 'patient_not_found',
                                                 'message': f'unknown patients: {missing}'}},
                        status=status.HTTP_404_NOT_FOUND)
    batch, advisories = create_batch(
        appointment_date=data['appointmentDate'],
        patients=[found[pid] for pid in data['patientIds']],
        note=data.get('note', ''),
        created_by=request.user,
        sort_by_distance=data['sortByDistance'],
    )
    return Response({'ok': True, 'advisories': advisories, 'data': batch_payload(batch)},
                    status=status.HTTP_201_CREATED)


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def batch_detail(request):
    q = validate_payload(BatchRefSerializer, request.query_params)
    batch = get_object_or_404(BatchAppointment, pk=q['batchId'])
    can_sort = load_selection(batch).can_sort_by_distance()
    return Response({'ok': True, 'data': {**batch_payload(batch), 'canSortByDistance': can_sort}})


@api_view(['POST'])
@permission_classes([IsAuthenticated])
def batch_add_patient(request):
    data = validate_payload(BatchPatientSerializer, request.data)
    batch = get_object_or_404(BatchAppointment, pk=data['batchId'])
    patient = get_object_or_404(Patient, pk=data['patientId'])
    return _edit_response(batch, edit_batch(batch, lambda s: s.add(patient)))


@api_view(['POST'])
@permission_classes([IsAuthenticated])
def batch_remove_patient(request):
    data = validate_payload(BatchPatientSerializer, request.data)
    batch = get_object_or_404(BatchAppointment, pk=data['batchId'])
    return _edit_response(batch, edit_batch(batch, lambda s: s.remove(data['patientId'])))


@api_view(['POST'])
@permission_classes([IsAuthenticated])
def batch_move_patient(request):
    """Drag-and-drop reorder: move the patient at ``fromIndex`` to ``toIndex``."""
    data = validate_payload(BatchMoveSerializer, request.data)
    batch = get_object_or_404(BatchAppointment, pk=data['batchId'])
    return _edit_response(batch, edit_batch(batch, lambda s: s.move(data['fromIndex'], data['toIndex'])))


@api_view(['POST'])
@permission_classes([IsAuthenticated])
def batch_sort_by_distance(request):
    data = validate_payload(BatchRefSerializer, request.data)
    batch = get_object_or_404(BatchAppointment, pk=data['batchId'])
    return _edit_response(batch, edit_batch(batch, OrderedSelection.sort_by_distance))
