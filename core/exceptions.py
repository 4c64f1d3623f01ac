"""
Custom exceptions for the application.
Following domain-driven design principles with specific exception types.
"""


class BaseApplicationException(Exception):
    """Base exception for all application-specific exceptions"""
    default_message = "An application error occurred"
    default_code = "APPLICATION_ERROR"

    def __init__(self, message=None, code=None, details=None):
        self.message = message or self.default_message
        self.code = code or self.default_code
        self.details = details or {}
        super().__init__(self.message)


class ValidationError(BaseApplicationException):
    """Raised when validation fails. ``details`` maps field -> list of messages."""
    default_message = "Validation failed"
    default_code = "VALIDATION_ERROR"


class InvalidShareTypeError(ValidationError):
    """Raised for a sharing type outside the known set"""
    default_message = "Invalid sharing type"
    default_code = "INVALID_SHARE_TYPE"

    def __init__(self, share_type=None, **kwargs):
        self.share_type = share_type
        kwargs.setdefault('details', {'share_type': [f"Unknown sharing type: {share_type!r}"]})
        super().__init__(**kwargs)


class NotFoundError(BaseApplicationException):
    """Raised when a resource is not found"""
    default_message = "Resource not found"
    default_code = "NOT_FOUND"

    def __init__(self, resource_type=None, resource_id=None, **kwargs):
        self.resource_type = resource_type
        self.resource_id = resource_id
        if resource_type and 'message' not in kwargs:
            kwargs['message'] = f"{resource_type} {resource_id} not found"
        super().__init__(**kwargs)


class BusinessLogicError(BaseApplicationException):
    """Raised when business rule is violated"""
    default_message = "Business rule violation"
    default_code = "BUSINESS_RULE_VIOLATION"


class DuplicateIdentityError(BusinessLogicError):
    """Raised when a phone number or email is already used by another member"""
    default_message = "A member with this identity already exists"
    default_code = "DUPLICATE_IDENTITY"
    field = None

    def __init__(self, value=None, **kwargs):
        self.value = value
        if self.field:
            kwargs.setdefault('details', {'field': self.field})
        super().__init__(**kwargs)


class DuplicatePhoneError(DuplicateIdentityError):
    default_message = "A member with this phone number already exists"
    default_code = "DUPLICATE_PHONE"
    field = 'phone'


class DuplicateEmailError(DuplicateIdentityError):
    default_message = "A member with this email address already exists"
    default_code = "DUPLICATE_EMAIL"
    field = 'email'


class RoomAssignmentError(BusinessLogicError):
    """Base for refused room assignments"""
    default_message = "Room cannot accept this assignment"
    default_code = "ROOM_ASSIGNMENT_REFUSED"

    def __init__(self, room_number=None, share_type=None, **kwargs):
        self.room_number = room_number
        self.share_type = share_type
        kwargs.setdefault('details', {'room_number': room_number, 'share_type': share_type})
        super().__init__(**kwargs)


class RoomFullError(RoomAssignmentError):
    default_message = "Room is at full capacity"
    default_code = "ROOM_FULL"


class RoomTypeMismatchError(RoomAssignmentError):
    default_message = "Room is already occupied with a different sharing type"
    default_code = "ROOM_TYPE_MISMATCH"


class ConcurrentModificationError(BusinessLogicError):
    """Raised when concurrent modification is detected"""
    default_message = "Resource was modified by another request, please try again"
    default_code = "CONCURRENT_MODIFICATION"


class StorageFailureError(BaseApplicationException):
    """Raised when a persistence or asset storage call fails. Retryable by the caller."""
    default_message = "Storage is temporarily unavailable"
    default_code = "STORAGE_FAILURE"
