from rest_framework import serializers

from core.exceptions import ValidationError
from .models import PaymentRecord
from .utils import MonthKey


def _month_key(year, month):
    try:
        return MonthKey.of(year, month)
    except ValidationError as e:
        raise serializers.ValidationError(e.details)


class MonthQuerySerializer(serializers.Serializer):
    """``?month=3&year=2024`` or ``?month_key=2024-3``"""
    month = serializers.CharField(required=False)
    year = serializers.CharField(required=False)
    month_key = serializers.CharField(required=False)

    def validate(self, attrs):
        if attrs.get('month_key'):
            try:
                attrs['key'] = MonthKey.parse(attrs['month_key'])
            except ValidationError as e:
                raise serializers.ValidationError(e.details)
            return attrs
        if not attrs.get('month') or not attrs.get('year'):
            raise serializers.ValidationError("Month and year are required")
        attrs['key'] = _month_key(attrs['year'], attrs['month'])
        return attrs


class MemberMonthSerializer(serializers.Serializer):
    """Member and month addressed by a ledger write"""
    member_id = serializers.IntegerField()
    month = serializers.IntegerField()
    year = serializers.IntegerField()

    def validate(self, attrs):
        attrs['key'] = _month_key(attrs['year'], attrs['month'])
        return attrs


class PaymentUpdateSerializer(MemberMonthSerializer):
    is_paid = serializers.BooleanField()
    version = serializers.IntegerField(required=False, min_value=0)


class PaymentRecordSerializer(serializers.ModelSerializer):
    """Serializer for PaymentRecord"""
    member_id = serializers.IntegerField(read_only=True)
    month_key = serializers.SerializerMethodField()

    class Meta:
        model = PaymentRecord
        fields = [
            'id', 'member_id', 'month_key', 'year', 'month', 'is_paid', 'paid_at',
            'reminders_sent', 'updated_at', 'updated_by', 'version'
        ]
        read_only_fields = fields

    def get_month_key(self, obj):
        return str(obj.month_key)


class RentRowSerializer(serializers.Serializer):
    """Read-only rendering of a RentRowDTO"""
    member_id = serializers.IntegerField()
    full_name = serializers.CharField()
    phone = serializers.CharField()
    email = serializers.EmailField()
    room_number = serializers.CharField()
    floor = serializers.CharField()
    share_type = serializers.CharField()
    amount = serializers.DecimalField(max_digits=10, decimal_places=2)
    status = serializers.CharField()
    month_key = serializers.CharField()
    is_paid = serializers.BooleanField()
    paid_at = serializers.CharField(allow_null=True)
    reminders_sent = serializers.ListField(child=serializers.CharField())
    version = serializers.IntegerField()


class ShareTypeStatisticsSerializer(serializers.Serializer):
    total = serializers.IntegerField()
    paid = serializers.IntegerField()
    amount = serializers.DecimalField(max_digits=12, decimal_places=2)


class MonthlyStatisticsSerializer(serializers.Serializer):
    """Read-only rendering of MonthlyStatistics; money and rate stay exact strings"""
    year = serializers.IntegerField()
    month = serializers.IntegerField()
    total_members = serializers.IntegerField()
    total_amount = serializers.DecimalField(max_digits=12, decimal_places=2)
    paid_amount = serializers.DecimalField(max_digits=12, decimal_places=2)
    unpaid_amount = serializers.DecimalField(max_digits=12, decimal_places=2)
    paid_members = serializers.IntegerField()
    unpaid_members = serializers.IntegerField()
    collection_rate = serializers.DecimalField(max_digits=5, decimal_places=4)
    by_share_type = serializers.DictField(child=ShareTypeStatisticsSerializer())
