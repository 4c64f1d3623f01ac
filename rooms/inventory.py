"""
Room inventory - the fixed physical layout of the building.

Loaded once from settings and shared read-only by every component that
needs to know which rooms exist and how many beds a sharing type gives.
"""
from functools import lru_cache
from types import MappingProxyType
from typing import Dict, Iterable, List, Mapping, Optional, Tuple

from django.conf import settings
from django.core.exceptions import ImproperlyConfigured

from core.constants import DEFAULT_ROOM_LAYOUT, GROUND_FLOOR, ShareType
from core.exceptions import ValidationError, InvalidShareTypeError


class RoomInventory:
    """Immutable floor/room table plus the sharing-type capacity map"""

    def __init__(self, rooms_by_floor: Mapping[str, Iterable[str]],
                 capacity_by_share_type: Optional[Mapping[str, int]] = None):
        capacity_by_share_type = dict(capacity_by_share_type or ShareType.CAPACITY)
        for share_type, capacity in capacity_by_share_type.items():
            if isinstance(capacity, bool) or not isinstance(capacity, int) or capacity <= 0:
                raise ImproperlyConfigured(
                    f"Capacity for sharing type {share_type!r} must be a positive integer, got {capacity!r}"
                )

        floors: List[str] = []
        layout: Dict[str, Tuple[str, ...]] = {}
        floor_by_room: Dict[str, str] = {}
        for floor, rooms in rooms_by_floor.items():
            floor = str(floor)
            rooms = tuple(str(room) for room in rooms)
            for room in rooms:
                if room in floor_by_room:
                    raise ImproperlyConfigured(
                        f"Room {room} is listed under floor {floor_by_room[room]} and floor {floor}"
                    )
                floor_by_room[room] = floor
            floors.append(floor)
            layout[floor] = rooms

        self._floors = tuple(floors)
        self._rooms_by_floor = MappingProxyType(layout)
        self._floor_by_room = MappingProxyType(floor_by_room)
        self._capacity = MappingProxyType(capacity_by_share_type)

    def __repr__(self):
        return f"<RoomInventory floors={len(self._floors)} rooms={len(self._floor_by_room)}>"

    @property
    def floors(self) -> Tuple[str, ...]:
        return self._floors

    @property
    def rooms_by_floor(self) -> Mapping[str, Tuple[str, ...]]:
        return self._rooms_by_floor

    @property
    def capacity_by_share_type(self) -> Mapping[str, int]:
        return self._capacity

    @property
    def room_count(self) -> int:
        return len(self._floor_by_room)

    def has_room(self, room_number: str) -> bool:
        return room_number in self._floor_by_room

    def rooms_on(self, floor: str) -> Tuple[str, ...]:
        """Rooms on a floor, in layout order"""
        try:
            return self._rooms_by_floor[str(floor)]
        except KeyError:
            raise ValidationError(
                message=f"Floor {floor} does not exist",
                details={'floor': [f"Floor {floor} does not exist"]}
            )

    def floor_of(self, room_number: str) -> str:
        """Floor that owns a room"""
        try:
            return self._floor_by_room[room_number]
        except KeyError:
            raise ValidationError(
                message=f"Room {room_number} does not exist",
                details={'room_number': [f"Room {room_number} does not exist"]}
            )

    def capacity_for(self, share_type: str) -> int:
        try:
            return self._capacity[share_type]
        except (KeyError, TypeError):
            raise InvalidShareTypeError(share_type=share_type)

    def all_rooms(self):
        """Yield (floor, room_number) for every room, in layout order"""
        for floor in self._floors:
            for room in self._rooms_by_floor[floor]:
                yield floor, room

    def as_dict(self) -> dict:
        return {
            'floors': list(self._floors),
            'rooms_by_floor': {floor: list(rooms) for floor, rooms in self._rooms_by_floor.items()},
            'capacity_by_share_type': dict(self._capacity),
        }


def floor_label(floor: str) -> str:
    """Display label for a floor identifier"""
    if floor == GROUND_FLOOR:
        return 'Ground Floor'
    return f"{floor}th Floor"


@lru_cache(maxsize=1)
def get_room_inventory() -> RoomInventory:
    """Process-wide inventory built from the COLIVING settings"""
    config = getattr(settings, 'COLIVING', {})
    layout = config.get('ROOM_LAYOUT') or DEFAULT_ROOM_LAYOUT
    capacities = config.get('SHARE_TYPE_CAPACITY') or ShareType.CAPACITY
    return RoomInventory(layout, capacities)
