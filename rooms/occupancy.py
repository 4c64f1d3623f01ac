"""
Occupancy resolver.

Derives per-room occupancy from the live set of active members and decides
whether a room can take another occupant of a given sharing type. Snapshots
are recomputed on every call and never cached.

A room's type is undefined while it is empty (``room_type is None``) and is
fixed by whichever active member occupies it first.
"""
import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Dict, Iterable, List, Optional, Tuple

from django.utils import timezone

from core.constants import AssignmentReason
from core.exceptions import ValidationError
from core.validators import ShareTypeValidator
from .inventory import RoomInventory

logger = logging.getLogger(__name__)


@dataclass
class RoomOccupancy:
    room_number: str
    count: int = 0
    room_type: Optional[str] = None
    members: List[Tuple[int, str]] = field(default_factory=list)

    @property
    def is_empty(self) -> bool:
        return self.count == 0


@dataclass
class OccupancySnapshot:
    """Point-in-time view of occupied rooms. Not authoritative state."""
    rooms: Dict[str, RoomOccupancy] = field(default_factory=dict)
    generated_at: datetime = field(default_factory=timezone.now)

    def get(self, room_number: str) -> RoomOccupancy:
        """Occupancy for a room; an empty record for unoccupied rooms"""
        return self.rooms.get(room_number) or RoomOccupancy(room_number=room_number)

    def __contains__(self, room_number):
        return room_number in self.rooms

    def __len__(self):
        return len(self.rooms)

    def as_dict(self) -> dict:
        return {
            'generated_at': self.generated_at.isoformat(),
            'occupancy': {
                room: {
                    'count': info.count,
                    'room_type': info.room_type,
                    'members': [{'id': member_id, 'name': name} for member_id, name in info.members],
                }
                for room, info in self.rooms.items()
            },
        }


@dataclass(frozen=True)
class AssignmentDecision:
    ok: bool
    reason: Optional[str] = None


class OccupancyResolver:
    """Occupancy rules over a fixed room inventory"""

    def __init__(self, inventory: RoomInventory):
        self.inventory = inventory

    def compute_occupancy(self, active_members: Iterable) -> OccupancySnapshot:
        """
        Group active members by room.

        Each member needs ``id``, ``full_name``, ``room_number`` and ``share_type``.
        The first member seen in a room fixes its type; a later member with a
        different type is still counted so capacity is never under-reported.
        """
        rooms: Dict[str, RoomOccupancy] = {}
        for member in active_members:
            room = rooms.get(member.room_number)
            if room is None:
                room = rooms[member.room_number] = RoomOccupancy(
                    room_number=member.room_number,
                    room_type=member.share_type,
                )
            elif member.share_type != room.room_type:
                logger.warning(
                    f"Room {room.room_number} is {room.room_type} but member {member.id} "
                    f"is recorded as {member.share_type}"
                )
            room.count += 1
            room.members.append((member.id, member.full_name))
        return OccupancySnapshot(rooms=rooms)

    def capacity_for(self, share_type: str) -> int:
        return self.inventory.capacity_for(share_type)

    def can_assign(self, room_number: str, share_type: str, snapshot: OccupancySnapshot) -> AssignmentDecision:
        """
        Decide whether one more member of ``share_type`` fits in the room.

        Raises:
            InvalidShareTypeError: Unknown sharing type
            ValidationError: Unknown room
        """
        ShareTypeValidator.validate(share_type)
        capacity = self.capacity_for(share_type)
        if not self.inventory.has_room(room_number):
            raise ValidationError(
                message=f"Room {room_number} does not exist",
                details={'room_number': [f"Room {room_number} does not exist"]}
            )

        room = snapshot.get(room_number)
        if room.is_empty:
            return AssignmentDecision(ok=True)
        if room.room_type != share_type:
            return AssignmentDecision(ok=False, reason=AssignmentReason.TYPE_MISMATCH)
        if room.count >= capacity:
            return AssignmentDecision(ok=False, reason=AssignmentReason.FULL)
        return AssignmentDecision(ok=True)

    def available_rooms_for(self, floor: str, share_type: str, snapshot: OccupancySnapshot) -> List[str]:
        """Rooms on a floor that can take a member of ``share_type``, in layout order"""
        ShareTypeValidator.validate(share_type)
        return [
            room for room in self.inventory.rooms_on(floor)
            if self.can_assign(room, share_type, snapshot).ok
        ]

    def snapshot_from_store(self, repository=None, exclude_member_id=None) -> OccupancySnapshot:
        """Fresh snapshot built from the member store's active members"""
        if repository is None:
            from members.repositories import MemberRepository
            repository = MemberRepository()
        return self.compute_occupancy(repository.find_active(exclude_id=exclude_member_id))


def get_occupancy_resolver() -> OccupancyResolver:
    from .inventory import get_room_inventory
    return OccupancyResolver(get_room_inventory())
