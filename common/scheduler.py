"""
Background task scheduler for monthly rent reminders.
Uses APScheduler to run tasks in the background without requiring external services.
"""
import logging
import atexit
from apscheduler.schedulers.background import BackgroundScheduler
from apscheduler.triggers.cron import CronTrigger
from django.core.management import call_command
from django.utils import timezone

from core.constants import LedgerLimits

logger = logging.getLogger(__name__)

# Global scheduler instance
scheduler = None


def send_rent_reminders_job():
    """
    Background job to remind every active unpaid member for the current month.
    Runs on the rent due day at 10:00.
    """
    try:
        logger.info("Starting scheduled rent reminders...")
        call_command('send_rent_reminders')
        logger.info("Scheduled rent reminders completed successfully")
    except Exception as e:
        logger.error(f"Error in scheduled rent reminders: {str(e)}", exc_info=True)


def start_scheduler():
    """
    Initialize and start the background scheduler.
    This should be called once when Django starts.
    """
    global scheduler

    if scheduler is not None and scheduler.running:
        logger.warning("Scheduler is already running")
        return

    tz = timezone.get_current_timezone()
    scheduler = BackgroundScheduler(timezone=tz)
    scheduler.add_job(
        send_rent_reminders_job,
        trigger=CronTrigger(day=LedgerLimits.RENT_DUE_DAY, hour=10, minute=0, timezone=tz),
        id='send_rent_reminders',
        name='Send Monthly Rent Reminders',
        replace_existing=True,
        max_instances=1,  # Prevent overlapping runs
        coalesce=True,
    )
    scheduler.start()
    logger.info(f"Rent reminders scheduled for day {LedgerLimits.RENT_DUE_DAY} of each month at 10:00 ({tz})")

    atexit.register(stop_scheduler)


def stop_scheduler():
    """
    Stop the background scheduler.
    Should be called when Django shuts down.
    """
    global scheduler

    if scheduler is not None and scheduler.running:
        scheduler.shutdown(wait=True)
        logger.info("Background scheduler stopped")
    scheduler = None
