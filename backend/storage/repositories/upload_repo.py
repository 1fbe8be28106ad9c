import uuid
from datetime import datetime, timezone
from typing import List, Optional

from sqlalchemy.orm import Session

from backend.storage.models.upload import Upload


class UploadRepository:
    """
    Every read goes through _visible(); soft-deleted rows never leave this class.
    """

    @staticmethod
    def _visible(db: Session):
        return db.query(Upload).filter(Upload.deleted_at.is_(None))

    @staticmethod
    def create(
        db: Session,
        user_id,
        file_url: str,
        file_type: str,
        description: Optional[str] = None,
        latitude: Optional[float] = None,
        longitude: Optional[float] = None,
        location_source: str = "user_location",
        location_name: Optional[str] = None,
        capture_date: Optional[datetime] = None,
    ) -> Upload:
        upload = Upload(
            id=str(uuid.uuid4()),
            user_id=str(user_id),
            file_url=file_url,
            file_type=file_type,
            description=description,
            latitude=latitude,
            longitude=longitude,
            location_source=location_source,
            location_name=location_name,
            capture_date=capture_date,
            ai_verified=False,
            verification_status="unverified",
        )
        db.add(upload)
        db.commit()
        db.refresh(upload)
        return upload

    @staticmethod
    def get(db: Session, upload_id) -> Upload | None:
        upload_id = str(upload_id)
        return UploadRepository._visible(db).filter(
            Upload.id == upload_id
        ).first()

    @staticmethod
    def list_visible(
        db: Session,
        start: Optional[datetime] = None,
        end: Optional[datetime] = None,
        user_id=None,
    ) -> List[Upload]:
        query = UploadRepository._visible(db)
        if start is not None:
            query = query.filter(Upload.capture_date >= start)
        if end is not None:
            query = query.filter(Upload.capture_date <= end)
        if user_id is not None:
            query = query.filter(Upload.user_id == str(user_id))
        return query.order_by(Upload.created_at.desc()).all()

    @staticmethod
    def list_pending(db: Session, limit: int = 10) -> List[Upload]:
        return (
            UploadRepository._visible(db)
            .filter(Upload.ai_verification_result.is_(None))
            .order_by(Upload.created_at.asc())
            .limit(limit)
            .all()
        )

    @staticmethod
    def update_verification(
        db: Session,
        upload_id,
        verified: bool,
        status: str,
        result_text: str
    ) -> None:
        upload_id = str(upload_id)
        db.query(Upload).filter(
            Upload.id == upload_id
        ).update({
            "ai_verified": verified,
            "verification_status": status,
            "ai_verification_result": result_text
        })
        db.commit()

    @staticmethod
    def soft_delete(db: Session, upload_id, user_id) -> bool:
        upload_id = str(upload_id)
        updated = UploadRepository._visible(db).filter(
            Upload.id == upload_id,
            Upload.user_id == str(user_id)
        ).update(
            {"deleted_at": datetime.now(timezone.utc)},
            synchronize_session=False
        )
        db.commit()
        return updated > 0
