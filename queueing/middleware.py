from django.conf import settings
from django.http import JsonResponse

from .context import get_context
from .services.access import check_admin_access, client_ip


class AdminIPRestrictionMiddleware:
    """Return 403 for administrative paths when the client IP is not allow-listed."""

    def __init__(self, get_response, context=None):
        self.get_response = get_response
        self._context = context
        self.prefixes = tuple(getattr(settings, 'ADMIN_PATH_PREFIXES', ('/admin/', '/api/admin/')))

    @property
    def context(self):
        return self._context or get_context()

    def __call__(self, request):
        path = request.path or ''
        if any(path.startswith(p) for p in self.prefixes):
            result = check_admin_access(client_ip(request), self.context.access_rules())
            if not result['allowed']:
                return JsonResponse(
                    {'ok': False, 'error': {'code': 'access_denied', 'message': result['message']}},
                    status=403,
                )
        return self.get_response(request)
