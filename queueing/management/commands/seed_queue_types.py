"""
Management command to seed the default queue types and service points.
"""
from django.core.management.base import BaseCommand
from django.db import transaction

from queueing.context import get_context
from queueing.models import QueueFamily, QueueType, ServicePoint, ServicePointQueueType

DEFAULT_QUEUE_TYPES = {
    QueueFamily.PHARMACY: [
        # code, name, prefix, format, priority
        ("GENERAL", "ผู้ป่วยทั่วไป", "A", "000", 10),
        ("URGENT", "เร่งด่วน", "U", "000", 40),
        ("ELDERLY", "ผู้สูงอายุ", "E", "000", 30),
        ("APPOINTMENT", "นัดหมาย", "P", "000", 20),
    ],
    QueueFamily.INSPECTION: [
        ("INS_GENERAL", "ตรวจทั่วไป", "I", "00", 10),
        ("INS_FOLLOWUP", "ตรวจติดตาม", "F", "00", 20),
    ],
}

DEFAULT_SERVICE_POINTS = {
    QueueFamily.PHARMACY: [("PH1", "ช่องจ่ายยา 1"), ("PH2", "ช่องจ่ายยา 2")],
    QueueFamily.INSPECTION: [("IN1", "ห้องตรวจ 1")],
}


class Command(BaseCommand):
    help = "Create the default queue types and service points (idempotent)."

    def add_arguments(self, parser):
        parser.add_argument('--no-links', action='store_true',
                            help='do not link service points to the queue types of their family')

    def handle(self, *args, **options):
        created_types = created_points = created_links = 0
        with transaction.atomic():
            for family, rows in DEFAULT_QUEUE_TYPES.items():
                for code, name, prefix, fmt, priority in rows:
                    _, created = QueueType.objects.get_or_create(
                        family=family, code=code,
                        defaults={"name": name, "prefix": prefix, "format": fmt, "priority": priority},
                    )
                    created_types += created
            for family, rows in DEFAULT_SERVICE_POINTS.items():
                for code, name in rows:
                    point, created = ServicePoint.objects.get_or_create(
                        family=family, code=code, defaults={"name": name},
                    )
                    created_points += created
                    if options['no_links']:
                        continue
                    for queue_type in QueueType.objects.filter(family=family):
                        _, created = ServicePointQueueType.objects.get_or_create(
                            service_point=point, queue_type=queue_type,
                        )
                        created_links += created
        get_context().invalidate()
        self.stdout.write(self.style.SUCCESS(
            f"queue types +{created_types}, service points +{created_points}, links +{created_links}"
        ))
