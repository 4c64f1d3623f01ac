"""
Occupancy reports - floor and building summaries and export rows.

Pure projections of an OccupancySnapshot over the room inventory; no I/O.
"""
import csv
from dataclasses import dataclass, field, asdict
from typing import Dict, List, Optional

from .inventory import RoomInventory, floor_label
from .occupancy import OccupancySnapshot


@dataclass
class FloorSummary:
    total_rooms: int = 0
    filled_rooms: int = 0
    available_rooms: int = 0
    total_beds: int = 0
    available_beds: int = 0


@dataclass
class BuildingSummary:
    total_rooms: int = 0
    filled_rooms: int = 0
    available_rooms: int = 0


@dataclass
class ExportRow:
    floor: str
    floor_label: str
    room: str
    room_type: Optional[str]
    capacity: Optional[int]
    occupied: int
    available: Optional[int]
    members: List[str] = field(default_factory=list)


def floor_summary(inventory: RoomInventory, snapshot: OccupancySnapshot) -> Dict[str, FloorSummary]:
    """
    Per-floor room and bed counts.

    A room is filled when its occupant count reaches the capacity of its type.
    Beds are only counted for occupied rooms, since an empty room has no type.
    """
    summaries = {}
    for floor in inventory.floors:
        summary = FloorSummary()
        for room_number in inventory.rooms_on(floor):
            summary.total_rooms += 1
            room = snapshot.get(room_number)
            if room.is_empty:
                summary.available_rooms += 1
                continue
            capacity = inventory.capacity_for(room.room_type)
            summary.total_beds += capacity
            summary.available_beds += max(capacity - room.count, 0)
            if room.count >= capacity:
                summary.filled_rooms += 1
            else:
                summary.available_rooms += 1
        summaries[floor] = summary
    return summaries


def building_summary(inventory: RoomInventory, snapshot: OccupancySnapshot) -> BuildingSummary:
    total = BuildingSummary()
    for summary in floor_summary(inventory, snapshot).values():
        total.total_rooms += summary.total_rooms
        total.filled_rooms += summary.filled_rooms
        total.available_rooms += summary.available_rooms
    return total


def export_rows(inventory: RoomInventory, snapshot: OccupancySnapshot) -> List[ExportRow]:
    """One row per room in layout order, for tabular export"""
    rows = []
    for floor, room_number in inventory.all_rooms():
        room = snapshot.get(room_number)
        if room.is_empty:
            capacity = available = None
        else:
            capacity = inventory.capacity_for(room.room_type)
            available = max(capacity - room.count, 0)
        rows.append(ExportRow(
            floor=floor,
            floor_label=floor_label(floor),
            room=room_number,
            room_type=room.room_type,
            capacity=capacity,
            occupied=room.count,
            available=available,
            members=[name for _, name in room.members],
        ))
    return rows


def summaries_as_dict(inventory: RoomInventory, snapshot: OccupancySnapshot) -> dict:
    return {
        'generated_at': snapshot.generated_at.isoformat(),
        'building': asdict(building_summary(inventory, snapshot)),
        'floors': {
            floor: dict(asdict(summary), label=floor_label(floor))
            for floor, summary in floor_summary(inventory, snapshot).items()
        },
    }


EXPORT_HEADER = ['Floor', 'Room', 'Room Type', 'Capacity', 'Occupied', 'Available', 'Members']


def write_export_csv(rows: List[ExportRow], stream) -> None:
    """Write export rows as CSV; empty rooms leave type, capacity and availability blank"""
    writer = csv.writer(stream)
    writer.writerow(EXPORT_HEADER)
    for row in rows:
        writer.writerow([
            row.floor_label,
            row.room,
            row.room_type or '',
            '' if row.capacity is None else row.capacity,
            row.occupied,
            '' if row.available is None else row.available,
            ', '.join(row.members),
        ])
