"""
Profile picture storage.

Stores uploaded member photos through Django's storage backend and hands back
an opaque reference string. The member store keeps that reference and asks for
its deletion later; it never interprets it.
"""
import logging
import os
import uuid

from django.conf import settings
from django.core.exceptions import ValidationError as DjangoValidationError
from django.core.files.storage import default_storage
from django.core.validators import FileExtensionValidator

from core.constants import UploadLimits
from core.exceptions import ValidationError, StorageFailureError

logger = logging.getLogger(__name__)


class ProfilePictureStorage:
    """Image-only, size-capped asset storage for member profile pictures"""

    upload_dir = 'profile_pics'

    def __init__(self, storage=None, max_bytes=None):
        self.storage = storage or default_storage
        if max_bytes is None:
            max_bytes = getattr(settings, 'COLIVING', {}).get(
                'PROFILE_PIC_MAX_BYTES', UploadLimits.PROFILE_PIC_MAX_BYTES
            )
        self.max_bytes = max_bytes
        self.extension_validator = FileExtensionValidator(allowed_extensions=UploadLimits.IMAGE_EXTENSIONS)

    def validate(self, upload):
        """
        Check an uploaded file against the image and size constraints.

        Raises:
            ValidationError: If the file is not an image or is too large
        """
        errors = []
        content_type = getattr(upload, 'content_type', '') or ''
        if not content_type.startswith('image/'):
            errors.append("Profile picture must be an image")
        try:
            self.extension_validator(upload)
        except DjangoValidationError:
            errors.append(
                f"Profile picture must be one of: {', '.join(UploadLimits.IMAGE_EXTENSIONS)}"
            )
        if upload.size > self.max_bytes:
            errors.append(f"Profile picture must be at most {self.max_bytes // (1024 * 1024)}MB")
        if errors:
            raise ValidationError(message=errors[0], code="INVALID_PROFILE_PIC",
                                  details={'profile_pic': errors})

    def save(self, upload) -> str:
        """Validate and store an upload, returning its reference"""
        self.validate(upload)
        extension = os.path.splitext(upload.name)[1].lower()
        name = f"{self.upload_dir}/{uuid.uuid4().hex}{extension}"
        try:
            reference = self.storage.save(name, upload)
        except OSError as e:
            logger.error(f"Failed to store profile picture {upload.name}: {e}", exc_info=True)
            raise StorageFailureError(details={'operation': 'store_profile_pic'}) from e
        logger.info(f"Stored profile picture {reference}")
        return reference

    def delete(self, reference: str) -> None:
        """Delete a stored asset; failures are logged, not raised"""
        if not reference:
            return
        try:
            if self.storage.exists(reference):
                self.storage.delete(reference)
                logger.info(f"Deleted profile picture {reference}")
        except OSError as e:
            logger.error(f"Error deleting profile picture {reference}: {e}", exc_info=True)
