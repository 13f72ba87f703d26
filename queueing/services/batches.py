"""
Persistence for batch appointments.

A batch is edited as an :class:`OrderedSelection` and written back in one
transaction, rewriting every member's position to 0..n-1.
"""
from __future__ import annotations

from typing import Callable, Iterable, Optional

from django.db import transaction

from ..exceptions import OrderingAdvisory
from ..models import BatchAppointment, BatchAppointmentPatient, Patient
from .ordering import OrderedSelection


def load_selection(batch: BatchAppointment) -> OrderedSelection:
    members = batch.members.select_related('patient').order_by('position')
    return OrderedSelection(m.patient for m in members)


@transaction.atomic
def save_selection(batch: BatchAppointment, selection: OrderedSelection) -> None:
    BatchAppointmentPatient.objects.filter(batch=batch).delete()
    BatchAppointmentPatient.objects.bulk_create([
        BatchAppointmentPatient(batch=batch, patient=patient, position=index)
        for index, patient in enumerate(selection)
    ])
    batch.save(update_fields=['updated_at'])


def create_batch(*, appointment_date, patients: Iterable[Patient], note: str = '',
                 created_by=None, sort_by_distance: bool = False) -> tuple[BatchAppointment, list[dict]]:
    advisories: list[dict] = []
    selection = OrderedSelection()
    for patient in patients:
        apply_edit(selection, lambda s, p=patient: s.add(p), advisories)
    if sort_by_distance:
        apply_edit(selection, OrderedSelection.sort_by_distance, advisories)
    with transaction.atomic():
        batch = BatchAppointment.objects.create(
            appointment_date=appointment_date,
            note=note,
            created_by=created_by if getattr(created_by, 'pk', None) else None,
        )
        save_selection(batch, selection)
    return batch, advisories


def apply_edit(selection: OrderedSelection, edit: Callable[[OrderedSelection], None],
               advisories: Optional[list] = None) -> bool:
    """Run ``edit``; an ordering advisory is recorded instead of raised."""
    try:
        edit(selection)
    except OrderingAdvisory as exc:
        if advisories is not None:
            advisories.append({'code': exc.code, 'message': str(exc)})
        return False
    return True


def edit_batch(batch: BatchAppointment, edit: Callable[[OrderedSelection], None]) -> list[dict]:
    """Load, edit and save ``batch``; returns advisories (empty when applied)."""
    advisories: list[dict] = []
    with transaction.atomic():
        batch = BatchAppointment.objects.select_for_update().get(pk=batch.pk)
        selection = load_selection(batch)
        if apply_edit(selection, edit, advisories):
            save_selection(batch, selection)
    return advisories


def batch_payload(batch: BatchAppointment) -> dict:
    members = batch.members.select_related('patient').order_by('position')
    return {
        'id': batch.id,
        'appointmentDate': batch.appointment_date.isoformat(),
        'note': batch.note,
        'patients': [
            {
                'position': m.position,
                'id': m.patient.id,
                'name': m.patient.name,
                'phone': m.patient.phone,
                'distanceFromHospital': m.patient.distance_from_hospital,
            }
            for m in members
        ],
    }
