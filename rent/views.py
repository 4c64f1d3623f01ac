from dataclasses import asdict

from rest_framework import viewsets, status
from rest_framework.decorators import action
from rest_framework.response import Response
from rest_framework.permissions import IsAuthenticated

from api.permissions import IsStaffAdmin
from members.repositories import MemberRepository
from members.services import MemberService
from .serializers import (
    MonthQuerySerializer, PaymentUpdateSerializer, MemberMonthSerializer,
    PaymentRecordSerializer, RentRowSerializer, MonthlyStatisticsSerializer,
)
from .services import RentLedgerService


class RentViewSet(viewsets.ViewSet):
    """
    ViewSet for the monthly rent ledger
    Lists active members with their payment state and records payments and reminders
    """
    permission_classes = [IsAuthenticated, IsStaffAdmin]

    def get_ledger(self):
        return RentLedgerService()

    def list(self, request):
        """Rental data: one row per active member plus the month's statistics"""
        query = MonthQuerySerializer(data=request.query_params)
        query.is_valid(raise_exception=True)
        key = query.validated_data['key']

        members = MemberRepository().find_active()
        rows, statistics = self.get_ledger().month_overview(members, *key)
        return Response({
            'success': True,
            'month_key': str(key),
            'month_label': key.label(),
            'data': RentRowSerializer([asdict(row) for row in rows], many=True).data,
            'statistics': MonthlyStatisticsSerializer(statistics.as_dict()).data,
        })

    @action(detail=False, methods=['post'], url_path='update-payment')
    def update_payment(self, request):
        """Mark a member's month paid or unpaid"""
        serializer = PaymentUpdateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        member = MemberService().get(data['member_id'])
        record, updated = self.get_ledger().set_paid(
            member, *data['key'], data['is_paid'],
            user=request.user, expected_version=data.get('version'),
        )
        return Response({
            'success': True,
            'message': 'Payment status updated successfully' if updated else 'Payment status already up to date',
            'updated': updated,
            'data': PaymentRecordSerializer(record).data,
        })

    @action(detail=False, methods=['post'], url_path='send-reminder')
    def send_reminder(self, request):
        """Record a payment reminder and hand it to the notification backend"""
        serializer = MemberMonthSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        member = MemberService().get(data['member_id'])
        record = self.get_ledger().record_reminder(member, *data['key'], user=request.user)
        return Response({
            'success': True,
            'message': 'Payment reminder sent successfully',
            'data': PaymentRecordSerializer(record).data,
        }, status=status.HTTP_200_OK)
