"""
Database models for the clinic queue service.

Pharmacy dispensing and inspection (INS) queues share the same tables and
are told apart by a ``family`` column, so numbering, status tracking and
analytics work the same way for both.
"""
from __future__ import annotations

import uuid

from django.contrib.auth.models import AbstractUser
from django.db import models
from django.utils import timezone


class QueueFamily(models.TextChoices):
    PHARMACY = 'pharmacy', 'Pharmacy'
    INSPECTION = 'inspection', 'Inspection'


class EntryStatus(models.TextChoices):
    WAITING = 'WAITING', 'Waiting'
    ACTIVE = 'ACTIVE', 'Active'
    PAUSED = 'PAUSED', 'Paused'
    SKIPPED = 'SKIPPED', 'Skipped'
    COMPLETED = 'COMPLETED', 'Completed'
    CANCELLED = 'CANCELLED', 'Cancelled'


class User(AbstractUser):
    """Staff account with a role used by the permission classes."""
    ROLE_CHOICES = [
        ('staff', 'Staff'),
        ('pharmacist', 'Pharmacist'),
        ('inspector', 'Inspector'),
        ('admin', 'Administrator'),
    ]
    role = models.CharField(max_length=20, choices=ROLE_CHOICES, default='staff')

    def __str__(self) -> str:
        return f"{self.username} ({self.role})"


class QueueType(models.Model):
    """A sub-category of a family controlling prefix, numbering and priority."""
    FORMAT_CHOICES = [('0', '0'), ('00', '00'), ('000', '000')]

    family = models.CharField(max_length=20, choices=QueueFamily.choices, default=QueueFamily.PHARMACY, db_index=True)
    code = models.CharField(max_length=30)
    name = models.CharField(max_length=255)
    prefix = models.CharField(max_length=10, blank=True)
    format = models.CharField(max_length=3, choices=FORMAT_CHOICES, default='000')
    purpose = models.CharField(max_length=255, blank=True)
    enabled = models.BooleanField(default=True)
    algorithm = models.CharField(max_length=30, default='FIFO')
    priority = models.IntegerField(default=0)

    class Meta:
        constraints = [
            models.UniqueConstraint(fields=['family', 'code'], name='uniq_queue_type_code_per_family'),
        ]
        ordering = ['-priority', 'code']

    def __str__(self) -> str:
        return f"{self.family}:{self.code}"


class ServicePoint(models.Model):
    """A counter or room that serves ACTIVE entries."""
    family = models.CharField(max_length=20, choices=QueueFamily.choices, default=QueueFamily.PHARMACY, db_index=True)
    code = models.CharField(max_length=30)
    name = models.CharField(max_length=255)
    enabled = models.BooleanField(default=True)
    queue_types = models.ManyToManyField(
        QueueType, through='ServicePointQueueType', related_name='service_points', blank=True
    )

    class Meta:
        constraints = [
            models.UniqueConstraint(fields=['family', 'code'], name='uniq_service_point_code_per_family'),
        ]

    def __str__(self) -> str:
        return f"{self.name} ({self.code})"


class ServicePointQueueType(models.Model):
    service_point = models.ForeignKey(ServicePoint, on_delete=models.CASCADE, related_name='queue_type_links')
    queue_type = models.ForeignKey(QueueType, on_delete=models.CASCADE, related_name='service_point_links')
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        constraints = [
            models.UniqueConstraint(fields=['service_point', 'queue_type'], name='uniq_service_point_queue_type'),
        ]

    def __str__(self) -> str:
        return f"{self.service_point_id} -> {self.queue_type_id}"


class Patient(models.Model):
    """Lightweight patient record used by check-in and batch appointments."""
    name = models.CharField(max_length=255)
    phone = models.CharField(max_length=32, blank=True, db_index=True)
    # Kilometres from the hospital; unknown for walk-in patients
    distance_from_hospital = models.FloatField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    def __str__(self) -> str:
        return self.name


class QueueEntry(models.Model):
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    family = models.CharField(max_length=20, choices=QueueFamily.choices, db_index=True)
    queue_type = models.ForeignKey(QueueType, on_delete=models.PROTECT, related_name='entries')
    number = models.PositiveIntegerField()
    service_date = models.DateField(db_index=True)
    status = models.CharField(max_length=20, choices=EntryStatus.choices, default=EntryStatus.WAITING, db_index=True)
    created_at = models.DateTimeField(default=timezone.now, db_index=True)
    called_at = models.DateTimeField(null=True, blank=True)
    completed_at = models.DateTimeField(null=True, blank=True, db_index=True)
    service_point = models.ForeignKey(
        ServicePoint, null=True, blank=True, on_delete=models.SET_NULL, related_name='entries'
    )
    patient = models.ForeignKey(Patient, null=True, blank=True, on_delete=models.SET_NULL, related_name='queue_entries')
    note = models.TextField(blank=True)
    # Storage path of an attached photo; the file itself lives in default storage
    attachment_path = models.CharField(max_length=500, blank=True)

    class Meta:
        constraints = [
            models.UniqueConstraint(
                fields=['family', 'queue_type', 'service_date', 'number'],
                name='uniq_queue_number_per_type_and_day',
            ),
        ]
        ordering = ['created_at']

    def __str__(self) -> str:
        return f"{self.queue_type_id}#{self.number} ({self.status})"


class QueueEntryTransition(models.Model):
    """Records an accepted status transition for a queue entry."""
    entry = models.ForeignKey(QueueEntry, related_name='transitions', on_delete=models.CASCADE)
    action = models.CharField(max_length=20)
    from_status = models.CharField(max_length=20)
    to_status = models.CharField(max_length=20)
    from_service_point = models.ForeignKey(
        ServicePoint, null=True, blank=True, on_delete=models.SET_NULL, related_name='+'
    )
    to_service_point = models.ForeignKey(
        ServicePoint, null=True, blank=True, on_delete=models.SET_NULL, related_name='+'
    )
    operator = models.ForeignKey(User, null=True, blank=True, on_delete=models.SET_NULL, related_name='queue_transitions')
    timestamp = models.DateTimeField(default=timezone.now)
    reason = models.CharField(max_length=255, blank=True)

    def __str__(self) -> str:
        return f"{self.entry_id}: {self.from_status} → {self.to_status}"


class BatchAppointment(models.Model):
    """Several patients booked together, served in an explicit order."""
    appointment_date = models.DateField()
    note = models.TextField(blank=True)
    created_by = models.ForeignKey(User, null=True, blank=True, on_delete=models.SET_NULL, related_name='batch_appointments')
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self) -> str:
        return f"Batch #{self.pk} on {self.appointment_date}"


class BatchAppointmentPatient(models.Model):
    batch = models.ForeignKey(BatchAppointment, on_delete=models.CASCADE, related_name='members')
    patient = models.ForeignKey(Patient, on_delete=models.CASCADE, related_name='batch_memberships')
    position = models.PositiveIntegerField()

    class Meta:
        constraints = [
            models.UniqueConstraint(fields=['batch', 'patient'], name='uniq_patient_per_batch'),
        ]
        ordering = ['position']

    def __str__(self) -> str:
        return f"{self.batch_id}[{self.position}] = {self.patient_id}"


class Setting(models.Model):
    """Free-form configuration value grouped by category (e.g. ``IP``)."""
    category = models.CharField(max_length=50, db_index=True)
    key = models.CharField(max_length=100)
    value_text = models.TextField(blank=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        constraints = [
            models.UniqueConstraint(fields=['category', 'key'], name='uniq_setting_key_per_category'),
        ]

    def __str__(self) -> str:
        return f"{self.category}/{self.key}"
