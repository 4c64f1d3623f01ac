"""
Member repository - Data access layer for the member store.
Follows Repository pattern for clean separation of concerns.
"""
from typing import Optional, List
from django.db import IntegrityError, transaction
from django.db.models import QuerySet, Q
from core.constants import MemberStatus
from core.exceptions import DuplicatePhoneError, DuplicateEmailError, DuplicateIdentityError
from core.repositories import BaseRepository
from .models import Member


class MemberRepository(BaseRepository[Member]):
    """Repository for Member model"""

    def __init__(self):
        super().__init__(Member)

    def find_active(self, exclude_id: Optional[int] = None) -> List[Member]:
        """All active members, optionally leaving one out"""
        queryset = self.get_all(status=MemberStatus.ACTIVE)
        if exclude_id is not None:
            queryset = queryset.exclude(id=exclude_id)
        return self.evaluate(queryset.order_by('created_at', 'id'), 'find_active')

    def find_active_in_room(self, room_number: str) -> List[Member]:
        queryset = self.get_all(status=MemberStatus.ACTIVE, room_number=room_number)
        return self.evaluate(queryset.order_by('created_at', 'id'), 'find_active_in_room')

    def find_by_id(self, member_id, for_update: bool = False) -> Optional[Member]:
        try:
            member_id = int(member_id)
        except (TypeError, ValueError):
            return None
        queryset = self.get_queryset()
        if for_update:
            queryset = queryset.select_for_update()
        with self.storage_errors('find_by_id'):
            return queryset.filter(id=member_id).first()

    def find_by_phone_or_email(self, phone: Optional[str] = None, email: Optional[str] = None,
                               exclude_id: Optional[int] = None) -> List[Member]:
        """Members holding either identity value, regardless of status"""
        condition = Q()
        if phone:
            condition |= Q(phone=phone)
        if email:
            condition |= Q(email__iexact=email)
        if not condition:
            return []
        queryset = self.get_all().filter(condition)
        if exclude_id is not None:
            queryset = queryset.exclude(id=exclude_id)
        return self.evaluate(queryset, 'find_by_phone_or_email')

    def insert(self, **fields) -> Member:
        try:
            with transaction.atomic():
                return self.create(**fields)
        except IntegrityError as e:
            raise self._identity_conflict(fields.get('phone'), fields.get('email')) from e

    def update_by_id(self, member: Member, **fields) -> Member:
        try:
            with transaction.atomic():
                return self.update(member, **fields)
        except IntegrityError as e:
            raise self._identity_conflict(fields.get('phone'), fields.get('email'), exclude_id=member.id) from e

    def delete_by_id(self, member: Member) -> None:
        self.delete(member)

    def search(self, status: Optional[str] = None, gender: Optional[str] = None,
               floor: Optional[str] = None, search: Optional[str] = None) -> QuerySet[Member]:
        """
        Newest-first member listing.
        ``search`` matches when name, phone, email or room contains it, ignoring case.
        """
        queryset = self.get_queryset()
        if status:
            queryset = queryset.filter(status=status)
        if gender:
            queryset = queryset.filter(gender=gender)
        if floor:
            queryset = queryset.filter(floor=floor)
        if search:
            queryset = queryset.filter(
                Q(full_name__icontains=search) |
                Q(phone__icontains=search) |
                Q(email__icontains=search) |
                Q(room_number__icontains=search)
            )
        return queryset.order_by('-created_at', '-id')

    def _identity_conflict(self, phone, email, exclude_id=None) -> DuplicateIdentityError:
        """Work out which unique constraint a failed write hit"""
        holders = self.find_by_phone_or_email(phone=phone, email=email, exclude_id=exclude_id)
        if phone and any(holder.phone == phone for holder in holders):
            return DuplicatePhoneError(value=phone)
        if email and any(holder.email.lower() == email.lower() for holder in holders):
            return DuplicateEmailError(value=email)
        return DuplicateIdentityError()
