"""
User model for authentication and file ownership.

Architecture:
    User → UploadedFile (one-to-many, exclusive ownership)
    User → HistoryEntry (one-to-many, optional link)

Key Features:
    - Secure bcrypt password hashing
    - Email-based identification and login
    - Ordinary / administrator role flag
    - Automatic timestamp tracking
"""

from sqlalchemy import Boolean, Column, Index, String, false
from sqlalchemy.orm import relationship

from app.models.base import SCHEMA_NAME, Base, TimestampMixin, UUIDMixin


class User(Base, UUIDMixin, TimestampMixin):
    """
    Registered account that owns uploaded files.

    The role flag is only ever changed by direct database administration;
    no endpoint mutates it.
    """

    __tablename__ = "users"
    __table_args__ = (
        Index("ix_users_email", "email", unique=True),
        {"schema": SCHEMA_NAME},
    )

    name = Column(
        String(100),
        nullable=False,
        comment="Display name shown in the dashboard",
    )

    email = Column(
        String(255),
        nullable=False,
        comment="Unique email address used for login",
    )

    hashed_password = Column(
        String(255),
        nullable=False,
        comment="Bcrypt hashed password for secure authentication",
    )

    is_admin = Column(
        Boolean,
        nullable=False,
        default=False,
        server_default=false(),
        comment="Whether the user may access the administrative endpoints",
    )

    files = relationship(
        "UploadedFile",
        back_populates="owner",
        passive_deletes=True,
        doc="Spreadsheets uploaded by this user",
    )

    def __repr__(self):
        return f"<User(id={self.id}, email='{self.email}', is_admin={self.is_admin})>"
