"""
Process-wide queueing context.

Instead of module-level caches, the access-rule list and the queue type
catalogue are owned by a :class:`QueueingContext`. The app config builds one
at start-up (see ``apps.py``); tests and management commands may build their
own and must call :meth:`close` when done.
"""
from __future__ import annotations

import logging
from typing import Optional

from django.apps import apps
from django.conf import settings
from django.core.cache import cache

from .services.access import parse_rules

logger = logging.getLogger(__name__)


class QueueingContext:
    def __init__(self, *, rules_category: str = 'IP', cache_seconds: int = 60, namespace: str = 'default'):
        self.rules_category = rules_category
        self.cache_seconds = cache_seconds
        # Contexts with the same namespace share cached values across processes
        self.namespace = namespace
        self.closed = False

    @classmethod
    def from_settings(cls) -> 'QueueingContext':
        return cls(
            rules_category=getattr(settings, 'ACCESS_RULES_CATEGORY', 'IP'),
            cache_seconds=getattr(settings, 'ACCESS_RULES_CACHE_SECONDS', 60),
            namespace=getattr(settings, 'QUEUEING_CACHE_NAMESPACE', 'default'),
        )

    def _key(self, name: str) -> str:
        return f'queueing:{self.namespace}:{name}'

    def _all_keys(self) -> list[str]:
        from .models import QueueFamily

        families = ['all', *QueueFamily.values]
        return [self._key(f'rules:{self.rules_category}')] + [self._key(f'queue-types:{f}') for f in families]

    def access_rules(self) -> list[str]:
        from .models import Setting

        ck = self._key(f'rules:{self.rules_category}')
        cached = cache.get(ck)
        if cached is not None:
            return cached
        values = Setting.objects.filter(category=self.rules_category).values_list('value_text', flat=True)
        rules = parse_rules(values)
        if not rules:
            logger.info('No IP restrictions configured, allowing all access')
        cache.set(ck, rules, self.cache_seconds)
        return rules

    def queue_types(self, family: Optional[str] = None) -> list[dict]:
        """Enabled and disabled queue types, highest priority first."""
        from .models import QueueType

        ck = self._key(f'queue-types:{family or "all"}')
        cached = cache.get(ck)
        if cached is not None:
            return cached
        qs = QueueType.objects.all().order_by('-priority', 'code')
        if family:
            qs = qs.filter(family=family)
        data = list(qs.values('id', 'family', 'code', 'name', 'prefix', 'format',
                              'purpose', 'enabled', 'algorithm', 'priority'))
        cache.set(ck, data, self.cache_seconds)
        return data

    def invalidate(self) -> None:
        cache.delete_many(self._all_keys())

    def close(self) -> None:
        self.invalidate()
        self.closed = True


def get_context() -> QueueingContext:
    return apps.get_app_config('queueing').context
