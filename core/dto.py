"""
Data Transfer Objects (DTOs).
Used for passing data between layers without exposing domain models.
"""
from dataclasses import dataclass, field, asdict
from typing import Optional, List, Dict, Any
from decimal import Decimal
from datetime import date

from core.constants import ShareType, MemberStatus, NotificationChannel


@dataclass
class MemberDTO:
    """Data Transfer Object for Member"""
    full_name: str = ""
    gender: str = ""
    age: Optional[int] = None
    phone: str = ""
    email: str = ""
    emergency_contact: str = ""
    address: str = ""
    occupation: str = ""
    amount: Optional[Decimal] = None
    room_number: str = ""
    floor: Optional[str] = None
    share_type: str = ShareType.SINGLE
    status: str = MemberStatus.ACTIVE
    joining_date: Optional[date] = None

    def as_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass
class ShareTypeStatistics:
    """Per sharing-type slice of the monthly statistics"""
    total: int = 0
    paid: int = 0
    amount: Decimal = Decimal('0')


@dataclass
class MonthlyStatistics:
    """Rent collection statistics for one month"""
    year: int
    month: int
    total_members: int = 0
    total_amount: Decimal = Decimal('0')
    paid_amount: Decimal = Decimal('0')
    unpaid_amount: Decimal = Decimal('0')
    paid_members: int = 0
    unpaid_members: int = 0
    collection_rate: Decimal = Decimal('0')
    by_share_type: Dict[str, ShareTypeStatistics] = field(
        default_factory=lambda: {share_type: ShareTypeStatistics() for share_type in ShareType.ALL}
    )

    def as_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass
class RentNotification:
    """Structured, text-free payload handed to the notification backend"""
    kind: str
    member_id: int
    member_name: str
    phone: str
    amount: Decimal
    month_key: str
    is_paid: bool
    channel: str = NotificationChannel.WHATSAPP

    PAYMENT_RECEIVED = "payment_received"
    PAYMENT_REMINDER = "payment_reminder"


@dataclass
class RentRowDTO:
    """One member's line in the monthly rent listing"""
    member_id: int
    full_name: str
    phone: str
    email: str
    room_number: str
    floor: str
    share_type: str
    amount: Decimal
    status: str
    month_key: str
    is_paid: bool
    paid_at: Optional[str] = None
    reminders_sent: List[str] = field(default_factory=list)
    version: int = 0
