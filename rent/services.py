"""
Rent ledger service - monthly payment state per member.
"""
from decimal import Decimal, ROUND_HALF_UP
from typing import Iterable, List, Optional, Tuple

from django.db import IntegrityError, transaction
from django.db.models import F
from django.utils import timezone

from core.dto import MonthlyStatistics, RentNotification, RentRowDTO
from core.exceptions import ConcurrentModificationError, ValidationError
from core.services import BaseService
from members.models import Member
from .models import PaymentRecord
from .notifications import notify
from .utils import MonthKey

RATE_PLACES = Decimal('0.0001')


class RentLedgerService(BaseService):
    """
    Reads and writes PaymentRecord rows.

    Records are created lazily. Writes to an existing record are a
    compare-and-set on ``version``; a lost race raises
    ConcurrentModificationError and is never retried here.
    """

    def get_or_init_record(self, member: Member, year, month) -> PaymentRecord:
        """Stored record for the month, or an unsaved unpaid one"""
        key = MonthKey.of(year, month)
        record = PaymentRecord.objects.filter(member=member, year=key.year, month=key.month).first()
        if record is None:
            record = PaymentRecord(member=member, year=key.year, month=key.month)
        return record

    def set_paid(self, member: Member, year, month, is_paid: bool, user=None,
                 expected_version: Optional[int] = None) -> Tuple[PaymentRecord, bool]:
        """
        Mark a member's month as paid or unpaid.

        Returns:
            (record, updated) - ``updated`` is False when a stored record already
            held the requested value and nothing was written

        Raises:
            ValidationError: Bad month/year, non-boolean flag or inactive member
            ConcurrentModificationError: The record changed underneath the caller
        """
        key = MonthKey.of(year, month)
        if not isinstance(is_paid, bool):
            raise ValidationError(message="is_paid must be true or false", details={'is_paid': ["Must be a boolean"]})
        if not member.is_active:
            raise ValidationError(message="Cannot update payment status for inactive member")

        record = self.get_or_init_record(member, *key)
        if expected_version is not None and record.version != expected_version:
            raise ConcurrentModificationError(details={'expected_version': expected_version,
                                                       'current_version': record.version})
        if record.pk is not None and record.is_paid == is_paid:
            return record, False

        now = timezone.now()
        changes = {
            'is_paid': is_paid,
            'paid_at': now if is_paid else None,
            'updated_at': now,
            'updated_by': self.actor_name(user),
        }
        with transaction.atomic():
            if record.pk is None:
                record = self._insert(member, key, **changes)
            else:
                self._compare_and_set(record, **changes)
            if is_paid:
                transaction.on_commit(
                    lambda: notify(self._notification(member, key, RentNotification.PAYMENT_RECEIVED, True))
                )

        self.log_info("Payment status updated", member_id=member.id, month_key=str(key),
                      is_paid=is_paid, version=record.version, by=changes['updated_by'])
        return record, True

    def record_reminder(self, member: Member, year, month, user=None) -> PaymentRecord:
        """Append a reminder timestamp, creating the month's record as unpaid if needed"""
        key = MonthKey.of(year, month)
        stamp = timezone.now()
        by = self.actor_name(user)
        with transaction.atomic():
            record = (PaymentRecord.objects.select_for_update()
                      .filter(member=member, year=key.year, month=key.month).first())
            if record is None:
                record = self._insert(member, key, reminders_sent=[stamp.isoformat()],
                                      updated_at=stamp, updated_by=by)
            else:
                self._compare_and_set(record, reminders_sent=record.reminders_sent + [stamp.isoformat()],
                                      updated_at=stamp, updated_by=by)
            transaction.on_commit(
                lambda: notify(self._notification(member, key, RentNotification.PAYMENT_REMINDER, record.is_paid))
            )

        self.log_info("Payment reminder recorded", member_id=member.id, month_key=str(key),
                      reminders=record.reminder_count, by=by)
        return record

    def records_for(self, members: Iterable[Member], year, month) -> dict:
        """{member_id: PaymentRecord} for the month, stored records only"""
        key = MonthKey.of(year, month)
        ids = [member.id for member in members]
        records = PaymentRecord.objects.filter(member_id__in=ids, year=key.year, month=key.month)
        return {record.member_id: record for record in records}

    def monthly_statistics(self, members: List[Member], year, month, records: Optional[dict] = None) -> MonthlyStatistics:
        """
        Collection statistics over ``members`` for one month.
        A member without a record for the month counts as unpaid.
        """
        key = MonthKey.of(year, month)
        if records is None:
            records = self.records_for(members, *key)

        stats = MonthlyStatistics(year=key.year, month=key.month, total_members=len(members))
        for member in members:
            record = records.get(member.id)
            paid = record is not None and record.is_paid
            amount = member.amount or Decimal('0')

            slice_ = stats.by_share_type.get(member.share_type)
            if slice_ is not None:
                slice_.total += 1
                slice_.amount += amount
                if paid:
                    slice_.paid += 1

            stats.total_amount += amount
            if paid:
                stats.paid_amount += amount
                stats.paid_members += 1

        stats.unpaid_amount = stats.total_amount - stats.paid_amount
        stats.unpaid_members = stats.total_members - stats.paid_members
        if stats.total_amount > 0:
            stats.collection_rate = (stats.paid_amount / stats.total_amount).quantize(RATE_PLACES, ROUND_HALF_UP)
        else:
            stats.collection_rate = Decimal('0')
        return stats

    def monthly_rows(self, members: List[Member], year, month,
                     records: Optional[dict] = None) -> List[RentRowDTO]:
        """One row per member with that month's payment state"""
        key = MonthKey.of(year, month)
        if records is None:
            records = self.records_for(members, *key)

        rows = []
        for member in members:
            record = records.get(member.id)
            rows.append(RentRowDTO(
                member_id=member.id,
                full_name=member.full_name,
                phone=member.phone,
                email=member.email,
                room_number=member.room_number,
                floor=member.floor,
                share_type=member.share_type,
                amount=member.amount,
                status=member.status,
                month_key=str(key),
                is_paid=bool(record and record.is_paid),
                paid_at=record.paid_at.isoformat() if record and record.paid_at else None,
                reminders_sent=list(record.reminders_sent) if record else [],
                version=record.version if record else 0,
            ))
        return rows

    def month_overview(self, members: List[Member], year, month) -> Tuple[List[RentRowDTO], MonthlyStatistics]:
        """Rows and statistics from a single records query"""
        records = self.records_for(members, year, month)
        return (self.monthly_rows(members, year, month, records),
                self.monthly_statistics(members, year, month, records))

    def _insert(self, member: Member, key: MonthKey, **fields) -> PaymentRecord:
        """First write for a month; a racing insert loses on the unique constraint"""
        try:
            with transaction.atomic():
                return PaymentRecord.objects.create(member=member, year=key.year, month=key.month,
                                                    version=1, **fields)
        except IntegrityError as e:
            self.log_warning("Concurrent payment record insert", member_id=member.id, month_key=str(key))
            raise ConcurrentModificationError(details={'month_key': str(key)}) from e

    def _compare_and_set(self, record: PaymentRecord, **fields) -> None:
        """Single-row UPDATE guarded by the version the caller read"""
        updated = PaymentRecord.objects.filter(pk=record.pk, version=record.version).update(
            version=F('version') + 1, **fields
        )
        if not updated:
            self.log_warning("Stale payment record write rejected", record_id=record.pk, version=record.version)
            raise ConcurrentModificationError(details={'current_version': record.version})
        for name, value in fields.items():
            setattr(record, name, value)
        record.version += 1

    def _notification(self, member: Member, key: MonthKey, kind: str, is_paid: bool) -> RentNotification:
        return RentNotification(
            kind=kind,
            member_id=member.id,
            member_name=member.full_name,
            phone=member.phone,
            amount=member.amount,
            month_key=str(key),
            is_paid=is_paid,
        )
