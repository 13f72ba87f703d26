"""
Admin access check and IP allow-list configuration.

``/api/access/check`` is deliberately outside the restricted prefixes so a
blocked client can still learn why it is blocked.
"""
from django.db import transaction
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import AllowAny, IsAuthenticated
from rest_framework.response import Response

from ..context import get_context
from ..exceptions import validate_payload
from ..models import Setting
from ..permissions import IsAdminRole
from ..serializers.queue import AccessRulesSerializer
from ..services.access import check_admin_access, client_ip, parse_rules


@api_view(['GET'])
@permission_classes([AllowAny])
def access_check(request):
    return Response(check_admin_access(client_ip(request), get_context().access_rules()))


@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated, IsAdminRole])
def access_rules(request):
    """Read or replace one stored rule value of the allow-list category."""
    category = get_context().rules_category
    if request.method == 'GET':
        rows = Setting.objects.filter(category=category).order_by('key')
        return Response({'ok': True, 'data': {
            'category': category,
            'values': [{'key': s.key, 'value': s.value_text} for s in rows],
            'rules': parse_rules(s.value_text for s in rows),
        }})
    data = validate_payload(AccessRulesSerializer, request.data)
    with transaction.atomic():
        setting, _ = Setting.objects.update_or_create(
            category=category, key=data['key'], defaults={'value_text': data['value']},
        )
    get_context().invalidate()
    return Response({'ok': True, 'data': {'key': setting.key, 'rules': parse_rules([setting.value_text])}})
