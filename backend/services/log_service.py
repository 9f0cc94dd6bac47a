"""
Log service - the per-user activity log shown in the dashboard.
"""
import logging

from models import db
from models.log_entry import LogEntry, LogType

logger = logging.getLogger(__name__)


def add_log(user_id, log_type, message):
    """Append one entry to the user's log and commit it."""
    entry = LogEntry(user_id=user_id, type=LogType(log_type), message=message)
    db.session.add(entry)
    db.session.commit()
    return entry


def list_logs(user_id):
    """All entries for the user, oldest first."""
    return LogEntry.query.filter_by(user_id=user_id).order_by(LogEntry.id).all()


def clear_logs(user_id):
    """Delete the user's log. Returns the number of entries removed."""
    removed = LogEntry.query.filter_by(user_id=user_id).delete()
    db.session.commit()
    logger.info("[OK] Cleared %d log entries for user %s", removed, user_id)
    return removed
