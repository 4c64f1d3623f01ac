from io import StringIO

import pytest
from django.core.management import call_command
from django.core.management.base import CommandError

from core.constants import MemberStatus
from rent.models import PaymentRecord
from rent.services import RentLedgerService

pytestmark = pytest.mark.django_db


def run(*args):
    out = StringIO()
    call_command(*args, stdout=out)
    return out.getvalue()


class TestSendRentReminders:

    def test_reminds_unpaid_active_members(self, make_member):
        paid = make_member(room_number='G1', share_type='single')
        unpaid = make_member(room_number='G2', share_type='single')
        make_member(room_number='G3', share_type='single', status=MemberStatus.INACTIVE)
        RentLedgerService().set_paid(paid, 2024, 3, True)

        output = run('send_rent_reminders', '--month-key', '2024-3')

        assert 'Reminded: 1' in output
        record = PaymentRecord.objects.get(member=unpaid, year=2024, month=3)
        assert record.reminder_count == 1
        assert PaymentRecord.objects.get(member=paid).reminder_count == 0

    def test_dry_run_records_nothing(self, make_member):
        make_member()
        output = run('send_rent_reminders', '--month-key', '2024-3', '--dry-run')
        assert 'Would remind: 1' in output
        assert not PaymentRecord.objects.exists()

    def test_bad_month_key(self):
        with pytest.raises(CommandError):
            run('send_rent_reminders', '--month-key', '2024-13')


def test_occupancy_report(make_member):
    make_member(room_number='G1', share_type='single', full_name='Asha Rao')
    output = run('occupancy_report', '--rooms')
    assert 'Ground Floor' in output
    assert 'Total rooms: 66' in output
    assert 'Filled: 1' in output
    assert 'Asha Rao' in output
