from datetime import date
from unittest import mock

import pytest

from queueing.exceptions import AllocationExhausted
from queueing.models import QueueEntry, QueueType
from queueing.services import sequencing
from queueing.services.sequencing import create_entry, format_queue_number, next_free_number

pytestmark = pytest.mark.django_db

DAY = date(2026, 10, 19)


@pytest.fixture
def general():
    return QueueType.objects.create(family='pharmacy', code='GENERAL', name='General', prefix='A', format='000')


@pytest.fixture
def urgent():
    return QueueType.objects.create(family='pharmacy', code='URGENT', name='Urgent', prefix='U', format='00')


def test_format_queue_number():
    assert format_queue_number('A', '000', 7) == 'A007'
    assert format_queue_number('U', '00', 123) == 'U123'
    assert format_queue_number('', '0', 5) == '5'


def test_next_free_number():
    assert next_free_number([]) == 1
    assert next_free_number([1, 2, 3]) == 4
    assert next_free_number([2, 3]) == 1


def test_numbers_are_contiguous_per_type_and_date(general, urgent):
    numbers = [create_entry(general, DAY).number for _ in range(3)]
    assert numbers == [1, 2, 3]
    assert create_entry(urgent, DAY).number == 1
    assert create_entry(general, date(2026, 10, 20)).number == 1
    entry = QueueEntry.objects.get(queue_type=general, service_date=DAY, number=2)
    assert entry.status == 'WAITING'
    assert entry.family == 'pharmacy'


def test_collision_is_retried(general):
    create_entry(general, DAY)
    with mock.patch.object(sequencing, 'allocate_number', side_effect=[1, 2]):
        entry = create_entry(general, DAY)
    assert entry.number == 2
    assert QueueEntry.objects.filter(queue_type=general, service_date=DAY).count() == 2


def test_allocation_gives_up_after_max_retries(general):
    create_entry(general, DAY)
    with mock.patch.object(sequencing, 'allocate_number', return_value=1) as allocate:
        with pytest.raises(AllocationExhausted) as exc:
            create_entry(general, DAY, max_retries=3)
    assert allocate.call_count == 3
    assert exc.value.attempts == 3
    assert QueueEntry.objects.count() == 1


def test_creation_is_announced(general):
    with mock.patch.object(sequencing, 'notify_entries_changed') as notify:
        create_entry(general, DAY)
    notify.assert_called_once_with('pharmacy', DAY, 'GENERAL')
