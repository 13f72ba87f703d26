"""
URL mappings for the queueing API.

Paths carry no trailing slash. Everything under ``/api/admin/`` is also
subject to the IP allow-list enforced by ``AdminIPRestrictionMiddleware``.
"""
from django.urls import include, path

from .views import health
from .views.access import access_check, access_rules
from .views.analytics import analytics_buckets, analytics_composition, analytics_summary
from .views.batches import (
    batch_add_patient,
    batch_create,
    batch_detail,
    batch_move_patient,
    batch_remove_patient,
    batch_sort_by_distance,
)
from .views.queue_types import (
    queue_type_list,
    queue_type_save,
    service_point_link,
    service_point_list,
    service_point_unlink,
)
from .views.queues import entry_attachment, entry_create, entry_detail, entry_list, entry_transition


urlpatterns = [
    path('', include('django_prometheus.urls')),
    path('healthz', health.healthz),

    # Queue entries
    path('api/queue/entries', entry_list),
    path('api/queue/entries/create', entry_create),
    path('api/queue/entries/detail', entry_detail),
    path('api/queue/entries/transition', entry_transition),
    path('api/queue/entries/attachment', entry_attachment),

    # Queue types and service points
    path('api/queue/types', queue_type_list),
    path('api/admin/queue/types/save', queue_type_save),
    path('api/queue/service-points', service_point_list),
    path('api/admin/queue/service-points/link', service_point_link),
    path('api/admin/queue/service-points/unlink', service_point_unlink),

    # Analytics
    path('api/analytics/buckets', analytics_buckets),
    path('api/analytics/summary', analytics_summary),
    path('api/analytics/composition', analytics_composition),

    # Batch appointments
    path('api/appointments/batch/create', batch_create),
    path('api/appointments/batch/detail', batch_detail),
    path('api/appointments/batch/add', batch_add_patient),
    path('api/appointments/batch/remove', batch_remove_patient),
    path('api/appointments/batch/move', batch_move_patient),
    path('api/appointments/batch/sort-by-distance', batch_sort_by_distance),

    # Access guard
    path('api/access/check', access_check),
    path('api/admin/access/rules', access_rules),
]
