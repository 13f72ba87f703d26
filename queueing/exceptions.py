"""
Domain errors and the unified API error handler.

Every error leaving the API is rendered as
``{"ok": false, "error": {"code": ..., "message": ...}}``.
"""
from __future__ import annotations

import logging

from rest_framework import status
from rest_framework.exceptions import ValidationError
from rest_framework.response import Response
from rest_framework.views import exception_handler as drf_exception_handler

logger = logging.getLogger(__name__)


class QueueingError(Exception):
    code = 'queueing_error'
    http_status = status.HTTP_400_BAD_REQUEST


# -- ordering advisories: reported back to the caller, the operation is not applied

class OrderingAdvisory(QueueingError):
    code = 'ordering_advisory'


class DuplicateItem(OrderingAdvisory):
    code = 'duplicate_item'

    def __init__(self, item_id):
        super().__init__(f'item {item_id} is already selected')
        self.item_id = item_id


class IndexOutOfRange(OrderingAdvisory):
    code = 'index_out_of_range'

    def __init__(self, index: int, length: int):
        super().__init__(f'index {index} is outside [0, {length})')
        self.index = index
        self.length = length


class MissingDistanceData(OrderingAdvisory):
    code = 'missing_distance_data'

    def __init__(self, item_ids):
        super().__init__('cannot sort by distance, some patients have no distance: '
                         + ', '.join(str(i) for i in item_ids))
        self.item_ids = list(item_ids)


# -- status tracking

class InvalidTransition(QueueingError):
    code = 'invalid_transition'
    http_status = status.HTTP_409_CONFLICT

    def __init__(self, current: str, action: str, message: str | None = None):
        super().__init__(message or f'cannot {action} an entry that is {current}')
        self.current = current
        self.action = action


class ServicePointBusy(InvalidTransition):
    code = 'service_point_busy'

    def __init__(self, current: str, action: str, service_point_id):
        super().__init__(current, action, f'service point {service_point_id} already has an active entry')
        self.service_point_id = service_point_id


# -- numbering

class AllocationExhausted(QueueingError):
    code = 'allocation_exhausted'
    http_status = status.HTTP_503_SERVICE_UNAVAILABLE

    def __init__(self, queue_type: str, service_date, attempts: int):
        super().__init__(f'could not allocate a number for {queue_type} on {service_date} after {attempts} attempts')
        self.attempts = attempts


# -- analytics

class AggregationInputError(QueueingError, ValueError):
    code = 'aggregation_input'


# -- request shapes

class SchemaValidationError(ValidationError):
    default_code = 'schema_validation'


def validate_payload(serializer_class, data, **kwargs) -> dict:
    """Run ``serializer_class`` over ``data`` and return validated data.

    Raises :class:`SchemaValidationError` for any invalid shape.
    """
    serializer = serializer_class(data=data, **kwargs)
    if not serializer.is_valid():
        raise SchemaValidationError(serializer.errors)
    return serializer.validated_data


def api_exception_handler(exc, context):
    if isinstance(exc, QueueingError):
        return Response(
            {'ok': False, 'error': {'code': exc.code, 'message': str(exc)}},
            status=exc.http_status,
        )
    resp = drf_exception_handler(exc, context)
    if resp is None:
        logger.exception('unhandled error in %s', context.get('view').__class__.__name__ if context else '-')
        return Response({'ok': False, 'error': {'code': 'server_error', 'message': str(exc)}}, status=500)
    if isinstance(exc, SchemaValidationError):
        return Response({'ok': False, 'error': {'code': 'schema_validation', 'message': resp.data}},
                        status=resp.status_code)
    # normalize response
    if isinstance(resp.data, dict):
        detail = resp.data.get('detail') or resp.data
    else:
        detail = resp.data
    return Response({'ok': False, 'error': {'code': 'api_error', 'message': detail}}, status=resp.status_code)
