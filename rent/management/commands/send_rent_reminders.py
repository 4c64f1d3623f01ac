"""
Management command to record a payment reminder for every active member
who has not paid for the month.

Usage:
    python manage.py send_rent_reminders --month-key 2024-3
    python manage.py send_rent_reminders --dry-run

Can be added to crontab to run automatically:
    0 10 5 * * cd /path/to/project && python manage.py send_rent_reminders
"""

from django.core.management.base import BaseCommand, CommandError

from core.exceptions import BaseApplicationException
from members.repositories import MemberRepository
from rent.services import RentLedgerService
from rent.utils import MonthKey


class Command(BaseCommand):
    help = 'Send payment reminders to active members who have not paid for the month'

    def add_arguments(self, parser):
        parser.add_argument(
            '--month-key',
            help='Month as YEAR-MONTH, e.g. 2024-3 (default: current month)',
        )
        parser.add_argument(
            '--dry-run',
            action='store_true',
            help='Show who would be reminded without recording anything',
        )

    def handle(self, *args, **options):
        dry_run = options['dry_run']
        try:
            key = MonthKey.parse(options['month_key']) if options['month_key'] else MonthKey.current()
        except BaseApplicationException as e:
            raise CommandError(e.message)

        self.stdout.write(f"\n{'=' * 60}")
        self.stdout.write(f"  RENT REMINDERS - {key.label()} ({key})")
        self.stdout.write(f"{'=' * 60}\n")

        if dry_run:
            self.stdout.write(self.style.WARNING("DRY RUN MODE - No reminders will be recorded\n"))

        ledger = RentLedgerService()
        members = MemberRepository().find_active()
        records = ledger.records_for(members, *key)
        unpaid = [member for member in members
                  if not (records.get(member.id) and records[member.id].is_paid)]

        self.stdout.write(f"Found {len(members)} active members, {len(unpaid)} unpaid\n")

        sent_count = 0
        failed_count = 0
        for member in unpaid:
            label = f"{member.full_name} (Room {member.room_number})"
            if dry_run:
                sent_count += 1
                self.stdout.write(f"  ~ {label} - would be reminded: {member.amount}")
                continue
            try:
                record = ledger.record_reminder(member, *key)
            except BaseApplicationException as e:
                failed_count += 1
                self.stdout.write(self.style.ERROR(f"  ! {label} - {e.message}"))
                continue
            sent_count += 1
            self.stdout.write(
                self.style.SUCCESS(f"  + {label} - reminder #{record.reminder_count}: {member.amount}")
            )

        # Summary
        self.stdout.write(f"\n{'=' * 60}")
        self.stdout.write("  SUMMARY")
        self.stdout.write(f"{'=' * 60}")
        self.stdout.write(f"  Active members: {len(members)}")
        self.stdout.write(f"  Already paid: {len(members) - len(unpaid)}")
        if dry_run:
            self.stdout.write(self.style.WARNING(f"  Would remind: {sent_count}"))
        else:
            self.stdout.write(self.style.SUCCESS(f"  Reminded: {sent_count}"))
            if failed_count:
                self.stdout.write(self.style.ERROR(f"  Failed: {failed_count}"))
        self.stdout.write(f"{'=' * 60}\n")
