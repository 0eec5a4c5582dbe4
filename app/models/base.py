"""
Base configurations and mixins for database models.

This module provides the foundation for all database models in the Excel
Analytics application: a declarative base, UUID primary keys and automatic
timestamps.
"""

import uuid

from sqlalchemy import Column, DateTime, Uuid
from sqlalchemy.orm import declarative_base
from sqlalchemy.sql.functions import now as db_now

from app.config import settings

Base = declarative_base()


class TimestampMixin:
    """
    Mixin class that adds automatic timestamp management to models.

    created_at is set on insert, updated_at is refreshed on every update.
    """

    created_at = Column(
        DateTime(timezone=True),
        server_default=db_now(),
        nullable=False,
        comment="Timestamp when the record was created",
    )
    updated_at = Column(
        DateTime(timezone=True),
        server_default=db_now(),
        onupdate=db_now(),
        nullable=False,
        comment="Timestamp when the record was last updated",
    )


class UUIDMixin:
    """
    Mixin class that adds a UUID4 primary key to models.

    Uses the generic ``Uuid`` type, which maps to the native UUID type on
    PostgreSQL and to CHAR(32) on SQLite.
    """

    id = Column(
        Uuid(as_uuid=True),
        primary_key=True,
        default=uuid.uuid4,
        index=True,
        comment="Primary key using UUID4 format",
    )


SCHEMA_NAME = settings.schema_name


def qualified(table_column: str) -> str:
    """Schema-qualify a ``table.column`` reference for ForeignKey targets."""
    if SCHEMA_NAME:
        return f"{SCHEMA_NAME}.{table_column}"
    return table_column


__all__ = ["Base", "TimestampMixin", "UUIDMixin", "SCHEMA_NAME", "qualified"]
