from datetime import date, datetime, timedelta
from types import SimpleNamespace
from unittest import mock

import pytest
from django.utils import timezone

from queueing.exceptions import InvalidTransition, ServicePointBusy
from queueing.models import QueueEntryTransition, QueueType, ServicePoint, User
from queueing.services.sequencing import create_entry
from queueing.services.transitions import ACTIONS, apply_action, can_transition, transition_entry

T0 = timezone.make_aware(datetime(2026, 10, 19, 9, 0))


def make_entry(status='WAITING', service_point_id=None):
    return SimpleNamespace(status=status, called_at=None, completed_at=None, service_point_id=service_point_id)


def test_lifecycle_keeps_first_call_time():
    e = make_entry()
    assert apply_action(e, 'call', now=T0) == 'ACTIVE'
    assert e.called_at == T0
    apply_action(e, 'recall', now=T0 + timedelta(minutes=2))
    apply_action(e, 'pause', now=T0 + timedelta(minutes=3))
    assert e.status == 'PAUSED'
    apply_action(e, 'resume', now=T0 + timedelta(minutes=4))
    assert e.status == 'WAITING'
    apply_action(e, 'call', now=T0 + timedelta(minutes=5))
    assert e.called_at == T0
    apply_action(e, 'complete', now=T0 + timedelta(minutes=9))
    assert e.status == 'COMPLETED'
    assert e.completed_at == T0 + timedelta(minutes=9)


@pytest.mark.parametrize('status,action', [
    ('WAITING', 'complete'),
    ('WAITING', 'pause'),
    ('WAITING', 'recall'),
    ('ACTIVE', 'skip'),
    ('ACTIVE', 'cancel'),
    ('PAUSED', 'complete'),
    ('SKIPPED', 'call'),
])
def test_illegal_action_leaves_entry_untouched(status, action):
    e = make_entry(status)
    with pytest.raises(InvalidTransition) as exc:
        apply_action(e, action, now=T0)
    assert exc.value.current == status
    assert e.status == status
    assert e.called_at is None and e.completed_at is None


@pytest.mark.parametrize('terminal', ['COMPLETED', 'CANCELLED'])
def test_terminal_states_accept_nothing(terminal):
    assert not any(can_transition(terminal, action) for action in ACTIONS)


def test_skip_resume_and_cancel():
    e = make_entry()
    apply_action(e, 'skip')
    assert e.status == 'SKIPPED'
    apply_action(e, 'resume')
    assert e.status == 'WAITING'
    apply_action(e, 'skip')
    apply_action(e, 'cancel')
    assert e.status == 'CANCELLED'


def test_transfer_needs_a_different_service_point():
    e = make_entry('ACTIVE', service_point_id=1)
    with pytest.raises(InvalidTransition):
        apply_action(e, 'transfer')
    with pytest.raises(InvalidTransition):
        apply_action(e, 'transfer', service_point=1)
    assert apply_action(e, 'transfer', service_point=2) == 'ACTIVE'
    assert e.service_point_id == 2


@pytest.mark.django_db
class TestTransitionEntry:
    @pytest.fixture(autouse=True)
    def setup(self):
        self.queue_type = QueueType.objects.create(family='pharmacy', code='GENERAL', name='General', prefix='A')
        self.counter1 = ServicePoint.objects.create(family='pharmacy', code='PH1', name='Counter 1')
        self.counter2 = ServicePoint.objects.create(family='pharmacy', code='PH2', name='Counter 2')
        self.operator = User.objects.create_user(username='ph1', password='pw', role='pharmacist')
        self.day = date(2026, 10, 19)

    def test_call_records_history(self):
        entry = create_entry(self.queue_type, self.day)
        entry = transition_entry(entry.pk, 'call', operator=self.operator, service_point=self.counter1)
        assert entry.status == 'ACTIVE'
        assert entry.service_point_id == self.counter1.pk
        assert entry.called_at is not None
        t = QueueEntryTransition.objects.get(entry=entry)
        assert (t.action, t.from_status, t.to_status) == ('call', 'WAITING', 'ACTIVE')
        assert t.to_service_point_id == self.counter1.pk
        assert t.operator == self.operator

    def test_one_active_entry_per_service_point(self):
        first = create_entry(self.queue_type, self.day)
        second = create_entry(self.queue_type, self.day)
        transition_entry(first.pk, 'call', service_point=self.counter1)
        with pytest.raises(ServicePointBusy):
            transition_entry(second.pk, 'call', service_point=self.counter1)
        second.refresh_from_db()
        assert second.status == 'WAITING'
        assert not QueueEntryTransition.objects.filter(entry=second).exists()
        # recalling the active entry at its own counter is fine
        transition_entry(first.pk, 'call')
        transition_entry(second.pk, 'call', service_point=self.counter2)

    def test_call_locks_the_target_service_point(self):
        entry = create_entry(self.queue_type, self.day)
        manager = ServicePoint.objects
        with mock.patch.object(manager, 'select_for_update', wraps=manager.select_for_update) as lock:
            transition_entry(entry.pk, 'call', service_point=self.counter1)
        lock.assert_called_once_with()

    def test_call_into_removed_service_point_changes_nothing(self):
        entry = create_entry(self.queue_type, self.day)
        gone = ServicePoint.objects.create(family='pharmacy', code='PH9', name='Closed')
        ServicePoint.objects.filter(pk=gone.pk).delete()
        with pytest.raises(ServicePoint.DoesNotExist):
            transition_entry(entry.pk, 'call', service_point=gone)
        entry.refresh_from_db()
        assert entry.status == 'WAITING'

    def test_transfer_moves_entry(self):
        entry = create_entry(self.queue_type, self.day)
        called_at = transition_entry(entry.pk, 'call', service_point=self.counter1).called_at
        entry = transition_entry(entry.pk, 'transfer', service_point=self.counter2, reason='counter closing')
        assert entry.service_point_id == self.counter2.pk
        assert entry.called_at == called_at
        t = QueueEntryTransition.objects.filter(entry=entry, action='transfer').get()
        assert t.from_service_point_id == self.counter1.pk
        assert t.reason == 'counter closing'

    def test_rejected_action_changes_nothing(self):
        entry = create_entry(self.queue_type, self.day)
        with pytest.raises(InvalidTransition):
            transition_entry(entry.pk, 'complete')
        entry.refresh_from_db()
        assert entry.status == 'WAITING'
        assert entry.completed_at is None


def test_completed_entry_cannot_be_called_again():
    e = make_entry()
    apply_action(e, 'call', now=T0)
    apply_action(e, 'call', now=T0 + timedelta(minutes=1))
    assert e.called_at == T0
    apply_action(e, 'complete', now=T0 + timedelta(minutes=6))
    assert e.completed_at >= e.called_at
    with pytest.raises(InvalidTransition):
        apply_action(e, 'call', now=T0 + timedelta(minutes=7))
    assert e.status == 'COMPLETED'
