import pytest

from queueing.context import QueueingContext
from queueing.models import QueueType, Setting

pytestmark = pytest.mark.django_db


def test_rules_are_cached_until_invalidated():
    context = QueueingContext(rules_category='IP', cache_seconds=60, namespace='cache-test')
    Setting.objects.create(category='IP', key='allowed_ips', value_text='10.0.0.0/8')
    assert context.access_rules() == ['10.0.0.0/8']

    Setting.objects.filter(key='allowed_ips').update(value_text='10.0.0.0/8, 127.0.0.1')
    assert context.access_rules() == ['10.0.0.0/8']
    context.invalidate()
    assert context.access_rules() == ['10.0.0.0/8', '127.0.0.1']
    context.close()
    assert context.closed


def test_contexts_do_not_share_cached_values():
    first = QueueingContext(namespace='first')
    second = QueueingContext(rules_category='LAB', namespace='second')
    Setting.objects.create(category='IP', key='a', value_text='1.2.3.4')
    Setting.objects.create(category='LAB', key='a', value_text='5.6.7.8')
    assert first.access_rules() == ['1.2.3.4']
    assert second.access_rules() == ['5.6.7.8']

    QueueType.objects.create(family='inspection', code='INS', name='Inspection')
    assert [qt['code'] for qt in first.queue_types('inspection')] == ['INS']
    assert second.queue_types('pharmacy') == []
    first.close()
    second.close()


def test_invalidation_reaches_every_worker(settings):
    settings.QUEUEING_CACHE_NAMESPACE = 'shared'
    worker_a = QueueingContext.from_settings()
    worker_b = QueueingContext.from_settings()
    Setting.objects.create(category='IP', key='allowed_ips', value_text='10.0.0.1, 10.0.0.2')
    assert worker_a.access_rules() == ['10.0.0.1', '10.0.0.2']
    assert worker_b.access_rules() == ['10.0.0.1', '10.0.0.2']
    QueueType.objects.create(family='pharmacy', code='GENERAL', name='General')
    assert len(worker_b.queue_types('pharmacy')) == 1

    # rule removed and queue type added while served by worker A only
    Setting.objects.filter(key='allowed_ips').update(value_text='10.0.0.1')
    QueueType.objects.create(family='pharmacy', code='URGENT', name='Urgent')
    worker_a.invalidate()

    assert worker_b.access_rules() == ['10.0.0.1']
    assert len(worker_b.queue_types('pharmacy')) == 2
    worker_a.close()
    worker_b.close()
