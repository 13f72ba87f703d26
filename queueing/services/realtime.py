"""
Change notifications over the Channels layer.

Payloads are an opaque "something changed" signal; subscribers re-query.
"""
from __future__ import annotations

import logging
import re
from datetime import date
from typing import Optional

from asgiref.sync import async_to_sync
from channels.layers import get_channel_layer
from django.utils import timezone

logger = logging.getLogger(__name__)

EVENT_TYPE = 'entries.changed'
_UNSAFE = re.compile(r'[^A-Za-z0-9_.-]')


def _clean(part: str) -> str:
    return _UNSAFE.sub('_', str(part))[:40]


def family_topic(family: str) -> str:
    return f'entries.{_clean(family)}'


def date_topic(family: str, service_date: date) -> str:
    return f'entries.{_clean(family)}.{service_date.isoformat()}'


def type_topic(family: str, service_date: date, type_code: str) -> str:
    return f'{date_topic(family, service_date)}.type.{_clean(type_code)}'


def change_event(topic: str) -> dict:
    return {'type': EVENT_TYPE, 'topic': topic, 'ts': timezone.now().isoformat()}


def notify_entries_changed(family: str, service_date: date, type_code: Optional[str] = None) -> list[str]:
    """Broadcast a change signal to the family, date and (if given) dated type topics."""
    topics = [family_topic(family), date_topic(family, service_date)]
    if type_code:
        topics.append(type_topic(family, service_date, type_code))
    channel_layer = get_channel_layer()
    if channel_layer is None:
        return topics
    for topic in topics:
        try:
            async_to_sync(channel_layer.group_send)(topic, change_event(topic))
        except Exception:
            # The row is already committed; subscribers catch up on their next refresh
            logger.exception('failed to publish change on %s', topic)
    return topics
