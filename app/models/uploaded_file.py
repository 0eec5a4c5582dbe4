"""
UploadedFile model for spreadsheets stored on disk together with their
decoded rows.

A user holds at most one record per filename: uploading the same name again
replaces the stored bytes, the decoded rows and the upload date in place.
"""

from sqlalchemy import (
    JSON,
    Column,
    DateTime,
    ForeignKey,
    Index,
    String,
    UniqueConstraint,
    Uuid,
)
from sqlalchemy.orm import relationship

from app.models.base import SCHEMA_NAME, Base, TimestampMixin, UUIDMixin, qualified


class UploadedFile(Base, UUIDMixin, TimestampMixin):
    """Metadata and decoded tabular content of one uploaded spreadsheet."""

    __tablename__ = "uploaded_files"
    __table_args__ = (
        UniqueConstraint("owner_id", "filename", name="uq_uploaded_files_owner_filename"),
        Index("ix_uploaded_files_owner_upload_date", "owner_id", "upload_date"),
        {"schema": SCHEMA_NAME},
    )

    owner_id = Column(
        Uuid(as_uuid=True),
        ForeignKey(qualified("users.id"), ondelete="CASCADE"),
        nullable=False,
        comment="User who uploaded the file",
    )

    filename = Column(
        String(255),
        nullable=False,
        comment="Original filename as supplied by the client (basename only)",
    )

    filepath = Column(
        String(1024),
        nullable=False,
        comment="Location of the raw bytes on the server filesystem",
    )

    mime_type = Column(
        String(255),
        nullable=False,
        comment="MIME type declared by the client at upload time",
    )

    data = Column(
        JSON,
        nullable=False,
        default=list,
        comment="Rows of the first sheet, each a mapping of column name to cell value",
    )

    upload_date = Column(
        DateTime(timezone=True),
        nullable=False,
        comment="Time of the most recent upload of this filename",
    )

    owner = relationship("User", back_populates="files")

    def __repr__(self):
        return f"<UploadedFile(id={self.id}, filename='{self.filename}', owner_id={self.owner_id})>"
