# app/services/scheduler.py
"""
Scheduler service for account maintenance jobs
"""

from datetime import datetime, timedelta
from typing import Any, Callable, Dict
from sqlalchemy.orm import Session
from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.interval import IntervalTrigger
from apscheduler.triggers.cron import CronTrigger
import logging

from app.config.settings import Settings
from app.database import SessionLocal
from app.models import User

logger = logging.getLogger(__name__)

class AccountMaintenanceScheduler:
    """Periodic cleanup of expired reset codes and abandoned registrations"""

    def __init__(self, settings: Settings, session_factory: Callable[[], Session] = SessionLocal):
        self.settings = settings
        self.session_factory = session_factory
        self.scheduler = AsyncIOScheduler()
        self.is_running = False

    def start(self):
        """Start the scheduler"""
        if not self.is_running:
            # Disarm reset codes that expired without being used
            self.scheduler.add_job(
                self.clear_expired_reset_tokens,
                trigger=IntervalTrigger(minutes=self.settings.reset_cleanup_interval_minutes),
                id='clear_expired_reset_tokens',
                name='Clear Expired Reset Codes',
                replace_existing=True
            )

            # Remove registrations that never verified, daily at 3 AM
            self.scheduler.add_job(
                self.purge_stale_unverified_users,
                trigger=CronTrigger(hour=3, minute=0),
                id='purge_stale_unverified_users',
                name='Purge Stale Unverified Users',
                replace_existing=True
            )

            self.scheduler.start()
            self.is_running = True
            logger.info("Account maintenance scheduler started")

    def stop(self):
        """Stop the scheduler"""
        if self.is_running:
            self.scheduler.shutdown()
            self.is_running = False
            logger.info("Account maintenance scheduler stopped")

    def clear_expired_reset_tokens(self) -> int:
        """Null out reset codes whose expiry has passed. Returns the number of users touched."""
        db = self.session_factory()
        try:
            cleared = db.query(User).filter(
                User.reset_password_token.isnot(None),
                User.reset_password_expires <= datetime.utcnow()
            ).update(
                {User.reset_password_token: None, User.reset_password_expires: None},
                synchronize_session=False
            )
            db.commit()
            if cleared:
                logger.info(f"Cleared {cleared} expired password reset codes")
            return cleared
        except Exception as e:
            db.rollback()
            logger.error(f"Error clearing expired reset codes: {e}")
            raise
        finally:
            db.close()

    def purge_stale_unverified_users(self) -> int:
        """Delete unverified users older than the configured TTL that own no tasks."""
        db = self.session_factory()
        try:
            cutoff = datetime.utcnow() - timedelta(hours=self.settings.unverified_account_ttl_hours)
            stale_users = db.query(User).filter(
                User.is_verified == False,  # noqa: E712
                User.created_at < cutoff,
                ~User.tasks.any()
            ).all()

            for user in stale_users:
                db.delete(user)
            db.commit()

            if stale_users:
                logger.info(f"Purged {len(stale_users)} unverified users created before {cutoff.isoformat()}")
            return len(stale_users)
        except Exception as e:
            db.rollback()
            logger.error(f"Error purging unverified users: {e}")
            raise
        finally:
            db.close()

    def get_scheduler_status(self) -> Dict[str, Any]:
        """Get scheduler status and job information"""
        jobs = []
        for job in self.scheduler.get_jobs():
            jobs.append({
                "id": job.id,
                "name": job.name,
                "next_run_time": job.next_run_time.isoformat() if job.next_run_time else None,
            })
        return {
            "status": "running" if self.is_running else "stopped",
            "jobs": jobs
        }
