# src/scheduler/tasks.py
import logging
from apscheduler.schedulers.background import BackgroundScheduler
from sqlalchemy.orm import Session
from auth.models import AdminActionLog
from config import settings
from database import SessionLocal
from subscription.services import SubscriptionService

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


def sweep_expired_subscriptions():
    """Revoke premium from users whose subscription has lapsed."""
    logger.info("Starting sweep_expired_subscriptions task")
    db: Session = SessionLocal()
    try:
        revoked = SubscriptionService.sweep_expired_subscriptions(db)
        if revoked:
            db.add(AdminActionLog(admin_id=None, action=f"Scheduled expiry sweep revoked {revoked}"))
            db.commit()
    except Exception as e:
        db.rollback()
        logger.error(f"Error in sweep_expired_subscriptions: {str(e)}", exc_info=True)
    finally:
        db.close()
    logger.info("Finished sweep_expired_subscriptions task")


def reconcile_entitlements():
    """Grant premium for successful payments that never produced it."""
    logger.info("Starting reconcile_entitlements task")
    db: Session = SessionLocal()
    try:
        result = SubscriptionService.reconcile_entitlements(db)
        if result["checked"]:
            logger.warning(f"Reconciliation found {result['checked']} inconsistent payments, repaired {result['repaired']}")
    except Exception as e:
        db.rollback()
        logger.error(f"Error in reconcile_entitlements: {str(e)}", exc_info=True)
    finally:
        db.close()
    logger.info("Finished reconcile_entitlements task")


def start_scheduler() -> BackgroundScheduler:
    """Start the background scheduler."""
    scheduler = BackgroundScheduler()
    scheduler.add_job(sweep_expired_subscriptions, 'interval', minutes=settings.SWEEP_INTERVAL_MINUTES)
    scheduler.add_job(reconcile_entitlements, 'interval', minutes=settings.RECONCILE_INTERVAL_MINUTES)
    scheduler.start()
    return scheduler
