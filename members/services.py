"""
Member service - Business logic layer for the member (tenant) store.
Services orchestrate repositories and contain business rules.
"""
from typing import Optional, List, Dict, Any
from django.db import transaction
from core.constants import MemberStatus, AssignmentReason
from core.dto import MemberDTO
from core.exceptions import (
    NotFoundError, ValidationError, DuplicatePhoneError, DuplicateEmailError,
    RoomFullError, RoomTypeMismatchError,
)
from core.services import BaseService
from core.validators import MemberValidator, MEMBER_FIELDS
from rooms.inventory import RoomInventory, get_room_inventory
from rooms.models import RoomLock
from rooms.occupancy import OccupancyResolver
from .models import Member
from .repositories import MemberRepository
from .storage import ProfilePictureStorage


class MemberService(BaseService):
    """
    Service for member creation, updates and removal.

    Room capacity is enforced inside the same transaction as the write: the
    target room's RoomLock row is locked, a fresh snapshot is checked, the member
    is written, and the room is counted again before commit.
    """

    def __init__(self, inventory: Optional[RoomInventory] = None, repository: Optional[MemberRepository] = None,
                 asset_storage: Optional[ProfilePictureStorage] = None):
        super().__init__()
        self.inventory = inventory or get_room_inventory()
        self.resolver = OccupancyResolver(self.inventory)
        self.member_repo = repository or MemberRepository()
        self.asset_storage = asset_storage or ProfilePictureStorage()
        self.validator = MemberValidator(self.inventory)

    def create(self, data: MemberDTO, profile_pic=None, user=None) -> Member:
        """
        Create a member after validation, identity and room checks.

        Args:
            data: Member attributes
            profile_pic: Optional uploaded image
            user: Acting user, for logging

        Returns:
            Created Member instance

        Raises:
            ValidationError: If any field is invalid
            DuplicatePhoneError, DuplicateEmailError: If phone or email is taken
            RoomFullError, RoomTypeMismatchError: If the room cannot take the member
        """
        cleaned = self.validator.validate(data.as_dict())
        if cleaned.get('joining_date') is None:
            cleaned.pop('joining_date', None)
        self._check_identity(phone=cleaned['phone'], email=cleaned['email'])
        if profile_pic is not None:
            self.asset_storage.validate(profile_pic)

        reference = ''
        try:
            with transaction.atomic():
                if cleaned['status'] == MemberStatus.ACTIVE:
                    self._check_room(cleaned['room_number'], cleaned['share_type'])
                if profile_pic is not None:
                    reference = self.asset_storage.save(profile_pic)
                member = self.member_repo.insert(profile_pic=reference, **cleaned)
                if member.is_active:
                    self._revalidate_room(member.room_number)
        except Exception:
            self.asset_storage.delete(reference)
            raise

        self.log_info(f"Member created: {member.full_name}", member_id=member.id,
                      room=member.room_number, share_type=member.share_type, by=self.actor_name(user))
        return member

    def update(self, member_id, patch: Dict[str, Any], profile_pic=None, user=None) -> Member:
        """
        Apply a partial update to a member.

        Only changed phone/email values are checked for uniqueness. Room checks run
        when the member ends up active and its room, sharing type or status
        (inactive -> active) changed. Deactivation is never gated.

        Raises:
            NotFoundError: If the member does not exist
            ValidationError, DuplicateIdentityError, RoomFullError, RoomTypeMismatchError
        """
        unknown = sorted(set(patch) - set(MEMBER_FIELDS))
        if unknown:
            raise ValidationError(
                message="Unknown fields in update",
                details={name: ["Unknown field"] for name in unknown}
            )
        if profile_pic is not None:
            self.asset_storage.validate(profile_pic)

        reference = ''
        try:
            with transaction.atomic():
                member = self.member_repo.find_by_id(member_id, for_update=True)
                if member is None:
                    raise NotFoundError(resource_type="Member", resource_id=member_id)

                data = dict(patch)
                fields = set(patch)
                if 'floor' in fields and 'room_number' not in fields:
                    data['room_number'] = member.room_number
                    fields.add('room_number')
                cleaned = self.validator.validate(data, fields)
                if 'joining_date' in cleaned and cleaned['joining_date'] is None:
                    cleaned.pop('joining_date')

                changes = {name: value for name, value in cleaned.items() if getattr(member, name) != value}
                self._check_identity(
                    phone=changes.get('phone'),
                    email=changes.get('email'),
                    exclude_id=member.id,
                )

                status = changes.get('status', member.status)
                room_number = changes.get('room_number', member.room_number)
                share_type = changes.get('share_type', member.share_type)
                gated = status == MemberStatus.ACTIVE and (
                    'room_number' in changes or 'share_type' in changes or member.status != MemberStatus.ACTIVE
                )
                if gated:
                    self._check_room(room_number, share_type, exclude_member_id=member.id)

                old_reference = member.profile_pic
                if profile_pic is not None:
                    reference = self.asset_storage.save(profile_pic)
                    changes['profile_pic'] = reference
                if not changes:
                    return member

                self.member_repo.update_by_id(member, **changes)
                if gated:
                    self._revalidate_room(room_number)
                if 'profile_pic' in changes and old_reference:
                    transaction.on_commit(lambda: self.asset_storage.delete(old_reference))
        except Exception:
            self.asset_storage.delete(reference)
            raise

        self.log_info(f"Member updated: {member.full_name}", member_id=member.id,
                      fields=sorted(changes), by=self.actor_name(user))
        return member

    def remove(self, member_id, user=None) -> None:
        """
        Delete a member, its payment records and its profile picture.

        Raises:
            NotFoundError: If the member does not exist
        """
        with transaction.atomic():
            member = self.member_repo.find_by_id(member_id, for_update=True)
            if member is None:
                raise NotFoundError(resource_type="Member", resource_id=member_id)
            reference = member.profile_pic
            self.member_repo.delete_by_id(member)
            if reference:
                transaction.on_commit(lambda: self.asset_storage.delete(reference))

        self.log_info(f"Member deleted: {member.full_name}", member_id=member_id,
                      room=member.room_number, by=self.actor_name(user))

    def get(self, member_id) -> Member:
        member = self.member_repo.find_by_id(member_id)
        if member is None:
            raise NotFoundError(resource_type="Member", resource_id=member_id)
        return member

    def list(self, status: Optional[str] = None, gender: Optional[str] = None,
             floor: Optional[str] = None, search: Optional[str] = None) -> List[Member]:
        """Members newest first, narrowed by the optional filters"""
        queryset = self.member_repo.search(status=status, gender=gender, floor=floor, search=search)
        return self.member_repo.evaluate(queryset, 'list_members')

    def _check_identity(self, phone=None, email=None, exclude_id=None):
        if not phone and not email:
            return
        holders = self.member_repo.find_by_phone_or_email(phone=phone, email=email, exclude_id=exclude_id)
        if phone and any(holder.phone == phone for holder in holders):
            raise DuplicatePhoneError(value=phone)
        if email and any(holder.email.lower() == email.lower() for holder in holders):
            raise DuplicateEmailError(value=email)

    def _check_room(self, room_number: str, share_type: str, exclude_member_id=None):
        """Lock the room and check a fresh snapshot; must run inside a transaction"""
        with self.member_repo.storage_errors('lock_room'):
            RoomLock.acquire(room_number)
        snapshot = self.resolver.snapshot_from_store(self.member_repo, exclude_member_id=exclude_member_id)
        decision = self.resolver.can_assign(room_number, share_type, snapshot)
        if decision.ok:
            return
        if decision.reason == AssignmentReason.TYPE_MISMATCH:
            existing = snapshot.get(room_number).room_type
            raise RoomTypeMismatchError(
                room_number=room_number, share_type=share_type,
                message=f"Room {room_number} is already occupied as {existing} sharing",
            )
        raise RoomFullError(
            room_number=room_number, share_type=share_type,
            message=f"Room {room_number} is at full capacity for {share_type} sharing",
        )

    def _revalidate_room(self, room_number: str):
        """Re-count a room after a write; raising here rolls the write back"""
        occupants = self.member_repo.find_active_in_room(room_number)
        room = self.resolver.compute_occupancy(occupants).get(room_number)
        if room.is_empty:
            return
        if any(occupant.share_type != room.room_type for occupant in occupants):
            self.log_warning("Room type conflict detected after write", room=room_number)
            raise RoomTypeMismatchError(
                room_number=room_number, share_type=room.room_type,
                message=f"Room {room_number} is already occupied as {room.room_type} sharing",
            )
        if room.count > self.resolver.capacity_for(room.room_type):
            self.log_warning("Room overfill detected after write", room=room_number, count=room.count)
            raise RoomFullError(
                room_number=room_number, share_type=room.room_type,
                message=f"Room {room_number} is at full capacity for {room.room_type} sharing",
            )
