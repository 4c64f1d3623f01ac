from django.db import models
from django.core.validators import MinValueValidator, MaxValueValidator
from members.models import Member
from .utils import MonthKey


class PaymentRecord(models.Model):
    """
    Monthly rent ledger entry - one per member per calendar month.
    Created lazily on the first payment update or reminder for that month.
    """
    member = models.ForeignKey(Member, on_delete=models.CASCADE, related_name='payment_records')
    year = models.PositiveSmallIntegerField()
    month = models.PositiveSmallIntegerField(validators=[MinValueValidator(1), MaxValueValidator(12)])

    is_paid = models.BooleanField(default=False)
    paid_at = models.DateTimeField(null=True, blank=True)
    reminders_sent = models.JSONField(default=list, blank=True, help_text="ISO timestamps, oldest first")

    updated_at = models.DateTimeField(auto_now=True)
    updated_by = models.CharField(max_length=150, default='system')
    version = models.PositiveIntegerField(default=0)

    class Meta:
        ordering = ['-year', '-month']
        verbose_name = "Payment Record"
        verbose_name_plural = "Payment Records"
        constraints = [
            models.UniqueConstraint(fields=['member', 'year', 'month'], name='unique_member_month_payment'),
            models.CheckConstraint(
                check=models.Q(is_paid=True, paid_at__isnull=False) | models.Q(is_paid=False, paid_at__isnull=True),
                name='paid_at_iff_paid',
            ),
        ]
        indexes = [
            models.Index(fields=['year', 'month', 'is_paid'], name='payment_month_paid_idx'),
        ]

    def __str__(self):
        state = 'Paid' if self.is_paid else 'Unpaid'
        return f"{self.member.full_name} - {self.month_key} - {state}"

    @property
    def month_key(self) -> MonthKey:
        return MonthKey(self.year, self.month)

    @property
    def reminder_count(self) -> int:
        return len(self.reminders_sent or [])
