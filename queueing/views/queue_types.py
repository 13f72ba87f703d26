"""
Queue type catalogue and service point mappings.
"""
from __future__ import annotations

from django.db import IntegrityError, transaction
from django.shortcuts import get_object_or_404
from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from ..context import get_context
from ..exceptions import SchemaValidationError, validate_payload
from ..models import QueueType, ServicePoint, ServicePointQueueType
from ..permissions import IsAdminRole
from ..serializers.queue import FamilyQuerySerializer, QueueTypeSerializer, ServicePointLinkSerializer
from ..services.sequencing import format_queue_number


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def queue_type_list(request):
    """Queue types of both families (or one), highest priority first."""
    q = validate_payload(FamilyQuerySerializer, request.query_params)
    data = [
        {**qt, 'example': format_queue_number(qt['prefix'], qt['format'], 1)}
        for qt in get_context().queue_types(q.get('family'))
    ]
    return Response({'ok': True, 'data': data})


@api_view(['POST'])
@permission_classes([IsAuthenticated, IsAdminRole])
def queue_type_save(request):
    """Create a queue type, or update it when ``id`` is given."""
    instance = None
    if request.data.get('id'):
        instance = get_object_or_404(QueueType, pk=request.data.get('id'))
    serializer = QueueTypeSerializer(instance, data=request.data, partial=instance is not None)
    if not serializer.is_valid():
        raise SchemaValidationError(serializer.errors)
    try:
        with transaction.atomic():
            queue_type = serializer.save()
    except IntegrityError:
        return Response({'ok': False, 'error': {'code': 'duplicate_code', 'message': 'code already used in this family'}},
                        status=status.HTTP_409_CONFLICT)
    get_context().invalidate()
    return Response({'ok': True, 'data': QueueTypeSerializer(queue_type).data})


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def service_point_list(request):
    q = validate_payload(FamilyQuerySerializer, request.query_params)
    qs = ServicePoint.objects.prefetch_related('queue_type_links__queue_type').order_by('family', 'code')
    if q.get('family'):
        qs = qs.filter(family=q['family'])
    data = []
    for sp in qs:
        data.append({
            'id': sp.id,
            'family': sp.family,
            'code': sp.code,
            'name': sp.name,
            'enabled': sp.enabled,
            'queueTypes': [
                {'linkId': link.id, 'id': link.queue_type.id, 'code': link.queue_type.code}
                for link in sp.queue_type_links.all()
            ],
        })
    return Response({'ok': True, 'data': data})


@api_view(['POST'])
@permission_classes([IsAuthenticated, IsAdminRole])
def service_point_link(request):
    """Let a service point serve a queue type of its own family."""
    data = validate_payload(ServicePointLinkSerializer, request.data)
    service_point = get_object_or_404(ServicePoint, pk=data['servicePointId'])
    queue_type = get_object_or_404(QueueType, pk=data['queueTypeId'])
    if service_point.family != queue_type.family:
        return Response({'ok': False, 'error': {'code': 'family_mismatch',
                                                 'message': 'service point and queue type belong to different families'}},
                        status=status.HTTP_400_BAD_REQUEST)
    link, created = ServicePointQueueType.objects.get_or_create(service_point=service_point, queue_type=queue_type)
    return Response({'ok': True, 'data': {'linkId': link.id, 'created': created}},
                    status=status.HTTP_201_CREATED if created else status.HTTP_200_OK)


@api_view(['POST'])
@permission_classes([IsAuthenticated, IsAdminRole])
def service_point_unlink(request):
    data = validate_payload(ServicePointLinkSerializer, request.data)
    deleted, _ = ServicePointQueueType.objects.filter(
        service_point_id=data['servicePointId'], queue_type_id=data['queueTypeId']
    ).delete()
    return Response({'ok': True, 'data': {'deleted': deleted}})
