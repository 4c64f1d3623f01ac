from decimal import Decimal

from django.db import models
from django.core.validators import MinValueValidator, RegexValidator
from django.utils import timezone
from core.constants import ShareType, Gender, MemberStatus, MemberLimits

ten_digit_phone = RegexValidator(r'^\d{10}$', 'Enter a valid 10-digit phone number.')


class Member(models.Model):
    """Member (tenant) of the co-living building, assigned to one room"""
    full_name = models.CharField(max_length=255)
    gender = models.CharField(max_length=10, choices=Gender.CHOICES)
    age = models.PositiveSmallIntegerField(validators=[MinValueValidator(MemberLimits.MIN_AGE)])
    phone = models.CharField(max_length=10, unique=True, validators=[ten_digit_phone])
    email = models.EmailField(unique=True)
    emergency_contact = models.CharField(max_length=10, validators=[ten_digit_phone],
                                         help_text="Parent or guardian phone number")
    address = models.TextField()
    occupation = models.CharField(max_length=255)
    amount = models.DecimalField(max_digits=10, decimal_places=2, validators=[MinValueValidator(Decimal('0.01'))],
                                 help_text="Monthly rent")

    room_number = models.CharField(max_length=20)
    floor = models.CharField(max_length=5)
    share_type = models.CharField(max_length=10, choices=ShareType.CHOICES, default=ShareType.SINGLE)
    status = models.CharField(max_length=10, choices=MemberStatus.CHOICES, default=MemberStatus.ACTIVE)
    joining_date = models.DateField(default=timezone.localdate)

    profile_pic = models.CharField(max_length=255, blank=True, help_text="Stored asset reference")

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ['-created_at', '-id']
        verbose_name = "Member"
        verbose_name_plural = "Members"
        indexes = [
            models.Index(fields=['status', 'room_number'], name='member_status_room_idx'),
            models.Index(fields=['floor'], name='member_floor_idx'),
            models.Index(fields=['created_at'], name='member_created_idx'),
        ]
        constraints = [
            models.CheckConstraint(check=models.Q(amount__gt=0), name='member_rent_positive'),
        ]

    def __str__(self):
        return f"{self.full_name} ({self.room_number})"

    @property
    def is_active(self):
        return self.status == MemberStatus.ACTIVE

    @property
    def capacity(self):
        return ShareType.CAPACITY.get(self.share_type)
