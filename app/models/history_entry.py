"""
HistoryEntry model: append-only audit log of user actions.

Entries are written for authentication attempts and for every request that
goes through an authenticated route group. The user link is optional so that
failed attempts by unknown identities can still be recorded.
"""

from datetime import UTC, datetime

from sqlalchemy import JSON, Column, DateTime, ForeignKey, Index, String, Uuid

from app.models.base import SCHEMA_NAME, Base, UUIDMixin, qualified


class HistoryEntry(Base, UUIDMixin):
    __tablename__ = "history_entries"
    __table_args__ = (
        Index("ix_history_entries_user_timestamp", "user_id", "timestamp"),
        {"schema": SCHEMA_NAME},
    )

    user_id = Column(
        Uuid(as_uuid=True),
        ForeignKey(qualified("users.id"), ondelete="SET NULL"),
        nullable=True,
        comment="Acting user, NULL when the identity could not be resolved",
    )

    action = Column(
        String(512),
        nullable=False,
        comment="Free-form description of the action",
    )

    details = Column(
        JSON,
        nullable=True,
        comment="Free-form detail payload",
    )

    timestamp = Column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(UTC),
        comment="When the action happened",
    )

    def __repr__(self):
        return f"<HistoryEntry(id={self.id}, user_id={self.user_id}, action='{self.action}')>"
