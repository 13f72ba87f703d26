"""
Dashboard analytics: bucketed wait time and throughput, summary cards and
queue composition. Every request recomputes from the current rows.
"""
from django.utils import timezone
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from ..context import get_context
from ..exceptions import validate_payload
from ..models import QueueEntry, QueueFamily
from ..serializers.queue import FamilyQuerySerializer, TimeFrameQuerySerializer
from ..services.aggregation import composition, summarize
from ..services.reports import bucket_report


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def analytics_buckets(request):
    """Wait time and throughput per hour (day) or per date (week/month) for both families."""
    q = validate_payload(TimeFrameQuerySerializer, request.query_params)
    return Response({'ok': True, 'data': bucket_report(q['timeFrame'])})


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def analytics_summary(request):
    """Status counts and average wait/service minutes per family.

    Without ``serviceDate`` the whole history is summarised.
    """
    q = validate_payload(FamilyQuerySerializer, request.query_params)
    families = [q['family']] if q.get('family') else QueueFamily.values
    data = {}
    for family in families:
        qs = QueueEntry.objects.filter(family=family)
        if q.get('serviceDate'):
            qs = qs.filter(service_date=q['serviceDate'])
        data[family] = summarize(qs.only('id', 'status', 'created_at', 'called_at', 'completed_at').iterator())
    return Response({'ok': True, 'data': data})


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def analytics_composition(request):
    """Waiting entries per enabled queue type for the given (default: today's) date."""
    q = validate_payload(FamilyQuerySerializer, request.query_params)
    service_date = q.get('serviceDate') or timezone.localdate()
    families = [q['family']] if q.get('family') else QueueFamily.values
    context = get_context()
    data = {}
    for family in families:
        queue_types = [qt for qt in context.queue_types(family) if qt['enabled']]
        entries = QueueEntry.objects.filter(family=family, service_date=service_date).only('status', 'queue_type_id')
        data[family] = composition(entries, queue_types)
    return Response({'ok': True, 'data': data})
