import asyncio
import json
import logging
from datetime import date

from channels.db import database_sync_to_async
from channels.generic.websocket import AsyncWebsocketConsumer

from queueing.models import QueueFamily
from queueing.services.aggregation import TIME_FRAMES
from queueing.services.realtime import date_topic, family_topic, type_topic
from queueing.services.reports import bucket_report

logger = logging.getLogger(__name__)


class QueueUpdatesConsumer(AsyncWebsocketConsumer):
    """Relays change signals for one family and service date (optionally one type)."""

    async def connect(self):
        kwargs = self.scope["url_route"]["kwargs"]
        family = kwargs.get("family")
        try:
            service_date = date.fromisoformat(kwargs.get("service_date", ""))
        except ValueError:
            await self.close(code=4000)
            return
        if family not in QueueFamily.values:
            await self.close(code=4004)
            return
        self.topics = [date_topic(family, service_date)]
        type_code = kwargs.get("type_code")
        if type_code:
            self.topics = [type_topic(family, service_date, type_code)]
        for topic in self.topics:
            await self.channel_layer.group_add(topic, self.channel_name)
        await self.accept()
        await self.send(json.dumps({"type": "welcome", "topics": self.topics}))

    async def disconnect(self, close_code):
        for topic in getattr(self, "topics", []):
            await self.channel_layer.group_discard(topic, self.channel_name)

    async def entries_changed(self, event):
        # event: {"type": "entries.changed", "topic": "...", "ts": "..."}
        await self.send(json.dumps(event))


class AnalyticsConsumer(AsyncWebsocketConsumer):
    """Pushes freshly computed dashboard buckets.

    The client asks for a time frame with ``{"type": "aggregate",
    "timeFrame": "day"}``; every change signal from either family then
    triggers a recomputation for the last requested frame. A computation
    still running when a newer request or signal arrives is cancelled.
    """

    async def connect(self):
        user = self.scope.get("user")
        if not (user and user.is_authenticated):
            await self.close(code=4003)
            return
        self.time_frame = None
        self._task = None
        self.topics = [family_topic(f) for f in QueueFamily.values]
        for topic in self.topics:
            await self.channel_layer.group_add(topic, self.channel_name)
        await self.accept()

    async def disconnect(self, close_code):
        self._cancel_pending()
        for topic in getattr(self, "topics", []):
            await self.channel_layer.group_discard(topic, self.channel_name)

    async def receive(self, text_data=None, bytes_data=None):
        if not text_data:
            return
        try:
            data = json.loads(text_data)
        except ValueError:
            await self._error(4000, "invalid_json")
            return
        if not isinstance(data, dict) or data.get("type") != "aggregate":
            await self._error(4002, "unsupported_type")
            return
        time_frame = data.get("timeFrame", "day")
        if time_frame not in TIME_FRAMES:
            await self._error(4001, "invalid_time_frame")
            return
        self.time_frame = time_frame
        self._schedule()

    async def entries_changed(self, event):
        if self.time_frame:
            self._schedule()

    def _cancel_pending(self):
        task = getattr(self, "_task", None)
        if task is not None and not task.done():
            task.cancel()

    def _schedule(self):
        self._cancel_pending()
        self._task = asyncio.ensure_future(self._push(self.time_frame))

    async def _push(self, time_frame):
        try:
            report = await database_sync_to_async(bucket_report)(time_frame)
        except Exception:
            logger.exception("analytics computation failed for %s", time_frame)
            await self._error(5000, "server_error")
            return
        await self.send(json.dumps({"type": "buckets", **report}))

    async def _error(self, code: int, message: str):
        await self.send(json.dumps({"type": "error", "code": code, "message": message}))
