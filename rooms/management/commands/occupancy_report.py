"""
Management command to print room occupancy per floor and for the building.

Usage:
    python manage.py occupancy_report
    python manage.py occupancy_report --rooms
"""

from django.core.management.base import BaseCommand

from rooms.inventory import floor_label
from rooms.occupancy import get_occupancy_resolver
from rooms.reports import floor_summary, building_summary, export_rows


class Command(BaseCommand):
    help = 'Print floor and building occupancy summaries'

    def add_arguments(self, parser):
        parser.add_argument(
            '--rooms',
            action='store_true',
            help='Also list every room with its type and occupants',
        )

    def handle(self, *args, **options):
        resolver = get_occupancy_resolver()
        inventory = resolver.inventory
        snapshot = resolver.snapshot_from_store()

        self.stdout.write(f"\n{'=' * 60}")
        self.stdout.write(f"  OCCUPANCY REPORT - {snapshot.generated_at:%d %b %Y %H:%M}")
        self.stdout.write(f"{'=' * 60}\n")

        for floor, summary in floor_summary(inventory, snapshot).items():
            self.stdout.write(
                f"  {floor_label(floor):<14} rooms {summary.filled_rooms}/{summary.total_rooms} filled, "
                f"{summary.available_rooms} available, beds {summary.available_beds}/{summary.total_beds} free"
            )

        if options['rooms']:
            self.stdout.write("")
            for row in export_rows(inventory, snapshot):
                if row.room_type is None:
                    self.stdout.write(f"  {row.room:<6} empty")
                    continue
                self.stdout.write(
                    f"  {row.room:<6} {row.room_type:<7} {row.occupied}/{row.capacity}  {', '.join(row.members)}"
                )

        total = building_summary(inventory, snapshot)
        self.stdout.write(f"\n{'=' * 60}")
        self.stdout.write("  BUILDING")
        self.stdout.write(f"{'=' * 60}")
        self.stdout.write(f"  Total rooms: {total.total_rooms}")
        self.stdout.write(self.style.WARNING(f"  Filled: {total.filled_rooms}"))
        self.stdout.write(self.style.SUCCESS(f"  Available: {total.available_rooms}"))
        self.stdout.write(f"{'=' * 60}\n")
