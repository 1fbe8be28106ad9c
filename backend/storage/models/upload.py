import uuid
from sqlalchemy import Boolean, Column, DateTime, Float, String, Text
from sqlalchemy.sql import func

from backend.storage.base import Base


def _uuid_col_type():
    try:
        # SQLAlchemy 2.x portable UUID type
        from sqlalchemy import Uuid  # type: ignore

        return Uuid(as_uuid=False)
    except Exception:
        return String(36)


UUID_COL_TYPE = _uuid_col_type()


class Upload(Base):
    __tablename__ = "uploads"

    id = Column(
        UUID_COL_TYPE,
        primary_key=True,
        default=lambda: str(uuid.uuid4()),
    )

    user_id = Column(
        UUID_COL_TYPE,
        nullable=False,
        index=True
    )

    file_url = Column(
        Text,
        nullable=False
    )

    file_type = Column(
        String(10),   # image / video
        nullable=False
    )

    description = Column(
        String(100),
        nullable=True
    )

    latitude = Column(
        Float,
        nullable=True
    )

    longitude = Column(
        Float,
        nullable=True
    )

    location_source = Column(
        String(20),   # exif / user_location / manual / address
        nullable=False,
        default="user_location"
    )

    location_name = Column(
        Text,
        nullable=True
    )

    capture_date = Column(
        DateTime(timezone=True),
        nullable=True
    )

    ai_verified = Column(
        Boolean,
        nullable=False,
        default=False
    )

    # NULL means verification is still pending
    ai_verification_result = Column(
        Text,
        nullable=True
    )

    verification_status = Column(
        String(20),   # unverified / verified / potential_issues
        nullable=False,
        default="unverified"
    )

    created_at = Column(
        DateTime(timezone=True),
        server_default=func.now(),
        nullable=False
    )

    deleted_at = Column(
        DateTime(timezone=True),
        nullable=True
    )
