from decimal import Decimal

import pytest

from core.constants import MemberStatus
from core.dto import RentNotification
from core.exceptions import ValidationError, ConcurrentModificationError
from members.models import Member
from rent.models import PaymentRecord
from rent.services import RentLedgerService

pytestmark = pytest.mark.django_db


@pytest.fixture
def ledger():
    return RentLedgerService()


class TestSetPaid:

    def test_mark_paid_creates_record(self, ledger, make_member):
        member = make_member()
        record, updated = ledger.set_paid(member, 2024, 3, True)
        assert updated
        assert record.is_paid
        assert record.paid_at is not None
        assert record.version == 1
        assert str(record.month_key) == '2024-3'

    def test_repeat_is_a_no_op(self, ledger, make_member):
        member = make_member()
        first, _ = ledger.set_paid(member, 2024, 3, True)
        again, updated = ledger.set_paid(member, 2024, 3, True)
        assert not updated
        assert again.paid_at == first.paid_at
        assert again.version == first.version

    def test_paid_then_unpaid(self, ledger, make_member):
        member = make_member()
        ledger.set_paid(member, 2024, 3, True)
        record, updated = ledger.set_paid(member, 2024, 3, False)
        assert updated
        assert not record.is_paid
        assert record.paid_at is None
        assert record.version == 2
        record.refresh_from_db()
        assert record.paid_at is None

    def test_unpaid_on_missing_record_initialises_it(self, ledger, make_member):
        member = make_member()
        record, updated = ledger.set_paid(member, 2024, 3, False)
        assert updated
        assert record.pk is not None
        assert not record.is_paid

    def test_months_are_independent(self, ledger, make_member):
        member = make_member()
        ledger.set_paid(member, 2024, 3, True)
        assert not ledger.get_or_init_record(member, 2024, 4).is_paid
        assert ledger.get_or_init_record(member, 2024, 4).pk is None

    def test_records_who_updated(self, ledger, make_member, admin_user):
        member = make_member()
        record, _ = ledger.set_paid(member, 2024, 3, True, user=admin_user)
        assert record.updated_by == 'warden'

    @pytest.mark.parametrize('year, month', [(2024, 13), (2024, 0), (2019, 5), (2051, 1), ('abc', 2)])
    def test_invalid_month(self, ledger, make_member, year, month):
        with pytest.raises(ValidationError):
            ledger.set_paid(make_member(), year, month, True)

    def test_non_boolean_flag(self, ledger, make_member):
        with pytest.raises(ValidationError):
            ledger.set_paid(make_member(), 2024, 3, 'yes')

    def test_inactive_member_rejected(self, ledger, make_member):
        member = make_member(status=MemberStatus.INACTIVE)
        with pytest.raises(ValidationError) as exc:
            ledger.set_paid(member, 2024, 3, True)
        assert exc.value.message == "Cannot update payment status for inactive member"
        assert not PaymentRecord.objects.exists()

    def test_stale_expected_version(self, ledger, make_member):
        member = make_member()
        ledger.set_paid(member, 2024, 3, True)
        with pytest.raises(ConcurrentModificationError):
            ledger.set_paid(member, 2024, 3, False, expected_version=0)

    def test_lost_race_is_not_retried(self, ledger, make_member):
        member = make_member()
        record, _ = ledger.set_paid(member, 2024, 3, True)
        # Another writer bumps the row after this caller read it
        PaymentRecord.objects.filter(pk=record.pk).update(version=5)
        with pytest.raises(ConcurrentModificationError):
            ledger._compare_and_set(record, is_paid=False, paid_at=None)
        record.refresh_from_db()
        assert record.is_paid

    def test_racing_first_insert(self, ledger, make_member, monkeypatch):
        member = make_member()
        PaymentRecord.objects.create(member=member, year=2024, month=3, version=1)
        # This caller read the month before the other insert landed
        monkeypatch.setattr(ledger, 'get_or_init_record',
                            lambda m, y, mo: PaymentRecord(member=m, year=y, month=mo))
        with pytest.raises(ConcurrentModificationError):
            ledger.set_paid(member, 2024, 3, True)

    def test_paid_sends_notification_after_commit(self, ledger, make_member, outbox,
                                                   django_capture_on_commit_callbacks):
        member = make_member(full_name='Asha Rao')
        with django_capture_on_commit_callbacks(execute=True):
            ledger.set_paid(member, 2024, 3, True)
        assert len(outbox) == 1
        notification = outbox[0]
        assert notification.kind == RentNotification.PAYMENT_RECEIVED
        assert notification.member_name == 'Asha Rao'
        assert notification.month_key == '2024-3'
        assert notification.channel == 'whatsapp'

    def test_no_notification_for_no_op_or_unpaid(self, ledger, make_member, outbox,
                                                  django_capture_on_commit_callbacks):
        member = make_member()
        ledger.set_paid(member, 2024, 3, True)
        with django_capture_on_commit_callbacks(execute=True):
            ledger.set_paid(member, 2024, 3, True)
            ledger.set_paid(member, 2024, 3, False)
        assert outbox == []

    def test_backend_failure_keeps_ledger_write(self, ledger, make_member, settings,
                                                 django_capture_on_commit_callbacks):
        from rent.notifications import get_notification_backend
        settings.COLIVING = dict(settings.COLIVING, NOTIFICATION_BACKEND='tests.test_rent_ledger.BrokenBackend')
        get_notification_backend.cache_clear()
        member = make_member()
        with django_capture_on_commit_callbacks(execute=True):
            record, _ = ledger.set_paid(member, 2024, 3, True)
        record.refresh_from_db()
        assert record.is_paid


class BrokenBackend:
    def send(self, notification):
        raise ConnectionError('gateway down')


def test_reloaded_backend_starts_with_empty_outbox(outbox):
    from rent.notifications import get_notification_backend, notify
    assert notify(RentNotification(
        kind=RentNotification.PAYMENT_REMINDER, member_id=1, member_name='Asha Rao',
        phone='9876543210', amount=Decimal('8000'), month_key='2024-3', is_paid=False,
    ))
    assert len(outbox) == 1
    get_notification_backend.cache_clear()
    assert get_notification_backend().outbox == []
    assert len(outbox) == 1


class TestReminders:

    def test_reminder_creates_unpaid_record(self, ledger, make_member):
        member = make_member()
        record = ledger.record_reminder(member, 2024, 3)
        assert not record.is_paid
        assert record.reminder_count == 1

    def test_reminders_accumulate_in_order(self, ledger, make_member):
        member = make_member()
        ledger.record_reminder(member, 2024, 3)
        record = ledger.record_reminder(member, 2024, 3)
        record.refresh_from_db()
        assert record.reminder_count == 2
        assert record.reminders_sent == sorted(record.reminders_sent)

    def test_reminder_keeps_paid_state(self, ledger, make_member):
        member = make_member()
        ledger.set_paid(member, 2024, 3, True)
        record = ledger.record_reminder(member, 2024, 3)
        assert record.is_paid
        assert record.version == 2

    def test_reminder_notification(self, ledger, make_member, outbox, django_capture_on_commit_callbacks):
        member = make_member()
        with django_capture_on_commit_callbacks(execute=True):
            ledger.record_reminder(member, 2024, 3)
        assert [n.kind for n in outbox] == [RentNotification.PAYMENT_REMINDER]


class TestMonthlyStatistics:

    def test_scenario(self, ledger, make_member):
        paid = make_member(room_number='G1', share_type='single', amount=Decimal('8000'))
        make_member(room_number='101', share_type='double', amount=Decimal('6000'))
        make_member(room_number='101', share_type='double', amount=Decimal('6000'))
        ledger.set_paid(paid, 2024, 3, True)

        members = list(Member.objects.filter(status=MemberStatus.ACTIVE))
        stats = ledger.monthly_statistics(members, 2024, 3)
        assert stats.total_members == 3
        assert stats.total_amount == Decimal('20000')
        assert stats.paid_amount == Decimal('8000')
        assert stats.unpaid_amount == Decimal('12000')
        assert stats.paid_members == 1
        assert stats.unpaid_members == 2
        assert stats.collection_rate == Decimal('0.4000')
        assert stats.by_share_type['single'].paid == 1
        assert stats.by_share_type['double'].total == 2
        assert stats.by_share_type['double'].amount == Decimal('12000')
        assert stats.by_share_type['triple'].total == 0
        assert stats.by_share_type['shared'].total == 0

    def test_paid_and_unpaid_add_up(self, ledger, make_member):
        members = [make_member(room_number='301', share_type='shared', amount=Decimal(str(a)))
                   for a in (4500, 4750, 5000)]
        ledger.set_paid(members[1], 2024, 3, True)
        stats = ledger.monthly_statistics(members, 2024, 3)
        assert stats.paid_amount + stats.unpaid_amount == stats.total_amount
        assert stats.paid_members + stats.unpaid_members == stats.total_members

    def test_no_members(self, ledger):
        stats = ledger.monthly_statistics([], 2024, 3)
        assert stats.total_amount == 0
        assert stats.collection_rate == 0
        assert set(stats.by_share_type) == {'single', 'double', 'triple', 'shared'}

    def test_other_months_do_not_count(self, ledger, make_member):
        member = make_member()
        ledger.set_paid(member, 2024, 2, True)
        assert ledger.monthly_statistics([member], 2024, 3).paid_members == 0


def test_monthly_rows(ledger, make_member):
    paid = make_member(full_name='Asha')
    unpaid = make_member(full_name='Ravi')
    ledger.set_paid(paid, 2024, 3, True)
    rows = {row.full_name: row for row in ledger.monthly_rows([paid, unpaid], 2024, 3)}
    assert rows['Asha'].is_paid
    assert rows['Asha'].paid_at is not None
    assert rows['Asha'].version == 1
    assert not rows['Ravi'].is_paid
    assert rows['Ravi'].reminders_sent == []
    assert rows['Ravi'].month_key == '2024-3'


def test_month_lifecycle(ledger, make_member):
    member = make_member(amount=Decimal('5000'))
    assert ledger.get_or_init_record(member, 2024, 3).pk is None

    record = ledger.record_reminder(member, 2024, 3)
    assert not record.is_paid
    assert record.reminder_count == 1

    record, updated = ledger.set_paid(member, 2024, 3, True)
    assert updated and record.paid_at is not None
    paid_at = record.paid_at

    record, updated = ledger.set_paid(member, 2024, 3, True)
    assert not updated
    assert record.paid_at == paid_at

    record, updated = ledger.set_paid(member, 2024, 3, False)
    assert updated
    assert record.paid_at is None
    assert record.reminder_count == 1
