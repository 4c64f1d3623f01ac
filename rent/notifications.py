"""
Rent notifications.

The ledger hands structured RentNotification payloads to a backend chosen by
import path in ``settings.COLIVING['NOTIFICATION_BACKEND']``. Message wording
and delivery belong to the backend.
"""
import logging
from functools import lru_cache

from django.conf import settings
from django.utils.module_loading import import_string

from core.dto import RentNotification

logger = logging.getLogger(__name__)

DEFAULT_BACKEND = 'rent.notifications.LoggingNotificationBackend'


class BaseNotificationBackend:
    """Subclasses deliver a notification or raise"""

    def send(self, notification: RentNotification) -> None:
        raise NotImplementedError('Notification backends must implement send()')


class LoggingNotificationBackend(BaseNotificationBackend):
    """Writes notifications to the log instead of delivering them"""

    def send(self, notification: RentNotification) -> None:
        logger.info(
            f"[{notification.channel}] {notification.kind} for {notification.member_name} "
            f"({notification.phone}): {notification.amount} for {notification.month_key}, "
            f"paid={notification.is_paid}"
        )


@lru_cache(maxsize=None)
def get_notification_backend() -> BaseNotificationBackend:
    path = getattr(settings, 'COLIVING', {}).get('NOTIFICATION_BACKEND', DEFAULT_BACKEND)
    return import_string(path)()


def notify(notification: RentNotification) -> bool:
    """
    Deliver through the configured backend.
    Delivery failures are logged and reported as False, never raised.
    """
    try:
        get_notification_backend().send(notification)
    except Exception as e:
        logger.error(
            f"Failed to send {notification.kind} to member {notification.member_id}: {e}",
            exc_info=True
        )
        return False
    return True
