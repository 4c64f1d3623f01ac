"""
Application-wide constants.
Centralized constants following DRY principle.
"""


# Sharing types and their bed capacity
class ShareType:
    SINGLE = 'single'
    DOUBLE = 'double'
    TRIPLE = 'triple'
    SHARED = 'shared'

    CHOICES = [
        (SINGLE, 'Single'),
        (DOUBLE, 'Double'),
        (TRIPLE, 'Triple'),
        (SHARED, 'Shared'),
    ]

    CAPACITY = {
        SINGLE: 1,
        DOUBLE: 2,
        TRIPLE: 3,
        SHARED: 4,
    }

    ALL = [SINGLE, DOUBLE, TRIPLE, SHARED]


# Member gender
class Gender:
    MALE = 'male'
    FEMALE = 'female'
    OTHER = 'other'

    CHOICES = [
        (MALE, 'Male'),
        (FEMALE, 'Female'),
        (OTHER, 'Other'),
    ]


# Member lifecycle status
class MemberStatus:
    ACTIVE = 'active'
    INACTIVE = 'inactive'

    CHOICES = [
        (ACTIVE, 'Active'),
        (INACTIVE, 'Inactive'),
    ]


# Assignment refusal reasons
class AssignmentReason:
    TYPE_MISMATCH = 'type-mismatch'
    FULL = 'full'


# Notification channels
class NotificationChannel:
    WHATSAPP = 'whatsapp'
    SMS = 'sms'
    EMAIL = 'email'


GROUND_FLOOR = 'G'


def _numbered_rooms(floor, count):
    return tuple(f"{floor}{n:02d}" for n in range(1, count + 1))


# Physical layout of the building, floor -> rooms in display order
DEFAULT_ROOM_LAYOUT = {
    GROUND_FLOOR: ('G1', 'G2', 'G3', 'G4'),
    '1': _numbered_rooms('1', 10),
    '2': _numbered_rooms('2', 10),
    '3': _numbered_rooms('3', 10),
    '4': _numbered_rooms('4', 10),
    '5': _numbered_rooms('5', 10),
    '6': _numbered_rooms('6', 10),
    '7': _numbered_rooms('7', 2),
}


# Member validation limits
class MemberLimits:
    MIN_AGE = 18
    PHONE_DIGITS = 10
    MAX_RENT_AMOUNT = '9999999.99'


# Month-key bounds accepted at the API boundary
class LedgerLimits:
    MIN_YEAR = 2020
    MAX_YEAR = 2050
    RENT_DUE_DAY = 5


# Profile picture upload constraints
class UploadLimits:
    PROFILE_PIC_MAX_BYTES = 5 * 1024 * 1024
    IMAGE_EXTENSIONS = ['jpg', 'jpeg', 'png', 'gif', 'webp']


