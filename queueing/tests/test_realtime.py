from datetime import date

import pytest
from asgiref.sync import async_to_sync, sync_to_async
from channels.layers import get_channel_layer
from channels.routing import URLRouter
from channels.testing import WebsocketCommunicator
from django.contrib.auth.models import AnonymousUser

from queueing.models import User
from queueing.realtime.routing import websocket_urlpatterns
from queueing.services.realtime import change_event, date_topic, family_topic, notify_entries_changed, type_topic

DAY = date(2026, 10, 19)


def with_user(user):
    router = URLRouter(websocket_urlpatterns)

    async def app(scope, receive, send):
        return await router(dict(scope, user=user), receive, send)

    return app


def test_notify_reaches_family_date_and_type_topics():
    layer = get_channel_layer()
    channel = async_to_sync(layer.new_channel)()
    for topic in (family_topic('pharmacy'), date_topic('pharmacy', DAY), type_topic('pharmacy', DAY, 'GENERAL')):
        async_to_sync(layer.group_add)(topic, channel)

    topics = notify_entries_changed('pharmacy', DAY, 'GENERAL')
    assert topics == ['entries.pharmacy', 'entries.pharmacy.2026-10-19', 'entries.pharmacy.2026-10-19.type.GENERAL']

    received = [async_to_sync(layer.receive)(channel) for _ in topics]
    assert [m['topic'] for m in received] == topics
    assert all(m['type'] == 'entries.changed' for m in received)

    for topic in topics:
        async_to_sync(layer.group_discard)(topic, channel)


@pytest.mark.django_db(transaction=True)
def test_queue_updates_consumer_relays_changes():
    async def scenario():
        communicator = WebsocketCommunicator(URLRouter(websocket_urlpatterns), '/ws/queue/pharmacy/2026-10-19/')
        connected, _ = await communicator.connect()
        assert connected
        welcome = await communicator.receive_json_from()
        assert welcome == {'type': 'welcome', 'topics': ['entries.pharmacy.2026-10-19']}

        await sync_to_async(notify_entries_changed)('pharmacy', DAY, 'GENERAL')
        event = await communicator.receive_json_from()
        assert event['type'] == 'entries.changed'
        assert event['topic'] == 'entries.pharmacy.2026-10-19'

        # other dates are not delivered
        await sync_to_async(notify_entries_changed)('pharmacy', date(2026, 10, 20))
        assert await communicator.receive_nothing()
        await communicator.disconnect()

    async_to_sync(scenario)()


@pytest.mark.django_db(transaction=True)
def test_type_route_only_relays_that_type_on_that_date():
    async def scenario():
        communicator = WebsocketCommunicator(URLRouter(websocket_urlpatterns), '/ws/queue/pharmacy/2026-10-19/GENERAL/')
        connected, _ = await communicator.connect()
        assert connected
        welcome = await communicator.receive_json_from()
        assert welcome['topics'] == ['entries.pharmacy.2026-10-19.type.GENERAL']

        await sync_to_async(notify_entries_changed)('pharmacy', DAY, 'GENERAL')
        event = await communicator.receive_json_from()
        assert event['topic'] == 'entries.pharmacy.2026-10-19.type.GENERAL'

        # same type on another date, and another type on the same date
        await sync_to_async(notify_entries_changed)('pharmacy', date(2026, 10, 20), 'GENERAL')
        await sync_to_async(notify_entries_changed)('pharmacy', DAY, 'URGENT')
        assert await communicator.receive_nothing()
        await communicator.disconnect()

    async_to_sync(scenario)()


@pytest.mark.django_db(transaction=True)
@pytest.mark.parametrize('path,code', [
    ('/ws/queue/pharmacy/not-a-date/', 4000),
    ('/ws/queue/radiology/2026-10-19/', 4004),
])
def test_queue_updates_consumer_rejects_bad_paths(path, code):
    async def scenario():
        communicator = WebsocketCommunicator(URLRouter(websocket_urlpatterns), path)
        connected, close_code = await communicator.connect()
        assert not connected
        assert close_code == code

    async_to_sync(scenario)()


@pytest.mark.django_db(transaction=True)
class TestAnalyticsConsumer:
    def connect(self, user):
        return WebsocketCommunicator(with_user(user), '/ws/analytics/')

    def test_requires_login(self):
        async def scenario():
            communicator = self.connect(AnonymousUser())
            connected, close_code = await communicator.connect()
            assert not connected
            assert close_code == 4003

        async_to_sync(scenario)()

    def test_pushes_buckets_for_last_request(self):
        user = User.objects.create_user(username='dash', password='pw', role='staff')

        async def scenario():
            communicator = self.connect(user)
            connected, _ = await communicator.connect()
            assert connected

            await communicator.send_json_to({'type': 'aggregate', 'timeFrame': 'day'})
            await communicator.send_json_to({'type': 'aggregate', 'timeFrame': 'week'})
            message = await communicator.receive_json_from(timeout=5)
            if message['timeFrame'] == 'day':
                message = await communicator.receive_json_from(timeout=5)
            assert message['type'] == 'buckets'
            assert message['timeFrame'] == 'week'
            assert await communicator.receive_nothing()

            # a change signal recomputes the last requested frame
            topic = family_topic('inspection')
            await get_channel_layer().group_send(topic, change_event(topic))
            message = await communicator.receive_json_from(timeout=5)
            assert message['timeFrame'] == 'week'
            assert all(set(row) == {'label', 'pharmacy', 'inspection'} for row in message['buckets'])
            await communicator.disconnect()

        async_to_sync(scenario)()

    def test_rejects_unknown_messages(self):
        user = User.objects.create_user(username='dash2', password='pw', role='staff')

        async def scenario():
            communicator = self.connect(user)
            await communicator.connect()
            await communicator.send_json_to({'type': 'aggregate', 'timeFrame': 'year'})
            assert (await communicator.receive_json_from())['message'] == 'invalid_time_frame'
            await communicator.send_to(text_data='{not json')
            assert (await communicator.receive_json_from())['message'] == 'invalid_json'
            await communicator.send_json_to({'type': 'subscribe'})
            assert (await communicator.receive_json_from())['message'] == 'unsupported_type'
            await communicator.disconnect()

        async_to_sync(scenario)()
