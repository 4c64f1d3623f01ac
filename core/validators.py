"""
Validation utilities and validators.
Centralized validation logic following single responsibility principle.
"""
import re
from typing import Optional, Dict, List, Any, Iterable
from decimal import Decimal, InvalidOperation
from datetime import date

from core.constants import ShareType, Gender, MemberStatus, MemberLimits
from core.exceptions import ValidationError as AppValidationError, InvalidShareTypeError

PHONE_RE = re.compile(r'^\d{%d}$' % MemberLimits.PHONE_DIGITS)
EMAIL_RE = re.compile(r'^[^\s@]+@[^\s@]+\.[^\s@]+$')

MEMBER_FIELDS = (
    'full_name', 'gender', 'age', 'phone', 'email', 'emergency_contact',
    'address', 'occupation', 'amount', 'room_number', 'floor', 'share_type',
    'status', 'joining_date',
)


class ShareTypeValidator:
    """Validates sharing types"""

    @staticmethod
    def validate(share_type) -> str:
        """Return the share type or raise InvalidShareTypeError"""
        if share_type not in ShareType.CAPACITY:
            raise InvalidShareTypeError(share_type=share_type)
        return share_type


class RentValidator:
    """Validates rent-related operations"""

    @staticmethod
    def validate_rent_amount(amount) -> Decimal:
        """Validate rent amount; must be strictly positive"""
        try:
            value = Decimal(str(amount))
        except (InvalidOperation, TypeError, ValueError):
            raise AppValidationError(
                message="Rent amount must be a number",
                code="INVALID_RENT_AMOUNT",
                details={'amount': ["Rent amount must be a number"]}
            )
        if not value.is_finite() or value <= 0:
            raise AppValidationError(
                message="Rent amount must be greater than zero",
                code="INVALID_RENT_AMOUNT",
                details={'amount': ["Rent amount must be greater than zero"]}
            )
        if value > Decimal(MemberLimits.MAX_RENT_AMOUNT):
            raise AppValidationError(
                message="Rent amount exceeds maximum allowed",
                code="RENT_AMOUNT_TOO_LARGE",
                details={'amount': ["Rent amount exceeds maximum allowed"]}
            )
        return value.quantize(Decimal('0.01'))


class MemberValidator:
    """
    Field-level validation of member attributes.

    All failures are collected and raised together as one ValidationError whose
    ``details`` maps each field name to its list of messages.
    """

    def __init__(self, inventory):
        self.inventory = inventory

    def validate(self, data: Dict[str, Any], fields: Optional[Iterable[str]] = None) -> Dict[str, Any]:
        """
        Validate and normalize member data.

        Args:
            data: Raw attribute values
            fields: Fields to validate; all member fields when None (creation)

        Returns:
            Dict of cleaned values for the validated fields

        Raises:
            ValidationError: If any field is invalid
        """
        fields = MEMBER_FIELDS if fields is None else tuple(fields)
        errors: Dict[str, List[str]] = {}
        cleaned: Dict[str, Any] = {}

        for name in fields:
            if name not in MEMBER_FIELDS:
                errors.setdefault(name, []).append("Unknown field")
                continue
            cleaner = getattr(self, f'_clean_{name}')
            try:
                cleaned[name] = cleaner(data.get(name))
            except AppValidationError as e:
                for field_name, messages in e.details.items():
                    errors.setdefault(field_name, []).extend(messages)

        # Floor is derived from the room, and must agree with it when both are given
        if 'room_number' in cleaned and 'room_number' not in errors:
            floor = self.inventory.floor_of(cleaned['room_number'])
            given = cleaned.get('floor')
            if given and given != floor:
                errors.setdefault('floor', []).append(
                    f"Room {cleaned['room_number']} is on floor {floor}, not {given}"
                )
            else:
                cleaned['floor'] = floor

        if errors:
            raise AppValidationError(
                message="Please correct the highlighted fields",
                code="INVALID_MEMBER",
                details=errors
            )
        return cleaned

    @staticmethod
    def _error(field_name, message):
        return AppValidationError(message=message, details={field_name: [message]})

    @staticmethod
    def _text(value) -> str:
        return value.strip() if isinstance(value, str) else ''

    def _required_text(self, field_name, value, label):
        text = self._text(value)
        if not text:
            raise self._error(field_name, f"Please provide {label}")
        return text

    def _clean_full_name(self, value):
        return self._required_text('full_name', value, 'full name')

    def _clean_address(self, value):
        return self._required_text('address', value, 'an address')

    def _clean_occupation(self, value):
        return self._required_text('occupation', value, 'an occupation')

    def _clean_gender(self, value):
        if value not in dict(Gender.CHOICES):
            raise self._error('gender', "Gender must be one of male, female, other")
        return value

    def _clean_age(self, value):
        try:
            age = int(value)
        except (TypeError, ValueError):
            raise self._error('age', "Age must be a whole number")
        if isinstance(value, float) and not value.is_integer():
            raise self._error('age', "Age must be a whole number")
        if age < MemberLimits.MIN_AGE:
            raise self._error('age', f"Member must be at least {MemberLimits.MIN_AGE} years old")
        return age

    def _clean_phone(self, value):
        phone = self._text(value)
        if not PHONE_RE.match(phone):
            raise self._error('phone', "Please provide a valid 10-digit phone number")
        return phone

    def _clean_emergency_contact(self, value):
        phone = self._text(value)
        if not PHONE_RE.match(phone):
            raise self._error('emergency_contact', "Please provide a valid 10-digit emergency contact number")
        return phone

    def _clean_email(self, value):
        email = self._text(value).lower()
        if not EMAIL_RE.match(email):
            raise self._error('email', "Please provide a valid email address")
        return email

    def _clean_amount(self, value):
        if value is None or value == '':
            raise self._error('amount', "Please provide the monthly rent amount")
        return RentValidator.validate_rent_amount(value)

    def _clean_room_number(self, value):
        room = self._text(value).upper()
        if not room:
            raise self._error('room_number', "Please provide room number")
        if not self.inventory.has_room(room):
            raise self._error('room_number', f"Room {room} does not exist")
        return room

    def _clean_floor(self, value):
        floor = self._text(value).upper()
        if not floor:
            return None
        if floor not in self.inventory.floors:
            raise self._error('floor', f"Floor {floor} does not exist")
        return floor

    def _clean_share_type(self, value):
        try:
            return ShareTypeValidator.validate(value)
        except InvalidShareTypeError:
            raise self._error('share_type', "Sharing type must be one of single, double, triple, shared")

    def _clean_status(self, value):
        if value is None:
            return MemberStatus.ACTIVE
        if value not in dict(MemberStatus.CHOICES):
            raise self._error('status', "Status must be active or inactive")
        return value

    def _clean_joining_date(self, value):
        if value is None or value == '':
            return None
        if isinstance(value, date):
            return value
        try:
            return date.fromisoformat(str(value))
        except ValueError:
            raise self._error('joining_date', "Joining date must be YYYY-MM-DD")
