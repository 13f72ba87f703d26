"""
Django admin registrations for the queueing models.
"""

from django.contrib import admin

from .models import (
    BatchAppointment,
    BatchAppointmentPatient,
    Patient,
    QueueEntry,
    QueueEntryTransition,
    QueueType,
    ServicePoint,
    ServicePointQueueType,
    Setting,
    User,
)


@admin.register(User)
class UserAdmin(admin.ModelAdmin):
    list_display = ('username', 'role', 'is_staff', 'is_superuser')
    list_filter = ('role',)
    search_fields = ('username', 'first_name', 'last_name')


@admin.register(QueueType)
class QueueTypeAdmin(admin.ModelAdmin):
    list_display = ('family', 'code', 'name', 'prefix', 'format', 'enabled', 'priority')
    list_filter = ('family', 'enabled')
    search_fields = ('code', 'name')


class ServicePointQueueTypeInline(admin.TabularInline):
    model = ServicePointQueueType
    extra = 0


@admin.register(ServicePoint)
class ServicePointAdmin(admin.ModelAdmin):
    list_display = ('family', 'code', 'name', 'enabled')
    list_filter = ('family', 'enabled')
    search_fields = ('code', 'name')
    inlines = [ServicePointQueueTypeInline]


@admin.register(Patient)
class PatientAdmin(admin.ModelAdmin):
    list_display = ('id', 'name', 'phone', 'distance_from_hospital')
    search_fields = ('name', 'phone')


@admin.register(QueueEntry)
class QueueEntryAdmin(admin.ModelAdmin):
    list_display = ('id', 'family', 'queue_type', 'number', 'service_date', 'status', 'service_point')
    list_filter = ('family', 'status', 'service_date')
    search_fields = ('id', 'queue_type__code', 'patient__name')


@admin.register(QueueEntryTransition)
class QueueEntryTransitionAdmin(admin.ModelAdmin):
    list_display = ('entry', 'action', 'from_status', 'to_status', 'operator', 'timestamp')
    list_filter = ('action', 'to_status')
    search_fields = ('entry__id', 'operator__username')


class BatchAppointmentPatientInline(admin.TabularInline):
    model = BatchAppointmentPatient
    extra = 0


@admin.register(BatchAppointment)
class BatchAppointmentAdmin(admin.ModelAdmin):
    list_display = ('id', 'appointment_date', 'created_by', 'updated_at')
    inlines = [BatchAppointmentPatientInline]


@admin.register(Setting)
class SettingAdmin(admin.ModelAdmin):
    list_display = ('category', 'key', 'value_text')
    list_filter = ('category',)
    search_fields = ('key',)
