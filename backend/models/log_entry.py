"""
LogEntry model - the per-user activity log shown beside each sync tool.

Append-only. Entries are removed only by an explicit clear or when a new
sync run starts.
"""
import enum
from datetime import datetime, timezone

from models import db


class LogType(str, enum.Enum):
    INFO = "INFO"
    SUCCESS = "SUCCESS"
    WARN = "WARN"
    ERROR = "ERROR"


class LogEntry(db.Model):
    """A single log line belonging to one user."""

    __tablename__ = "log_entries"

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.String(64), db.ForeignKey("users.id"), nullable=False)
    type = db.Column(db.Enum(LogType), nullable=False, default=LogType.INFO)
    message = db.Column(db.Text, nullable=False)
    timestamp = db.Column(
        db.DateTime, default=lambda: datetime.now(timezone.utc)
    )

    def to_dict(self):
        """Serialize log entry to dictionary for API responses."""
        return {
            "type": self.type.value,
            "message": self.message,
            "timestamp": self.timestamp.isoformat() if self.timestamp else None,
        }

    def __repr__(self):
        return f"<LogEntry {self.id} [{self.type.value}] {self.message[:40]}>"
