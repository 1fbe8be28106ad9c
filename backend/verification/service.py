from typing import List

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from backend.storage.models.upload import Upload
from backend.storage.repositories.upload_repo import UploadRepository
from backend.verification.errors import PersistenceError, UploadNotFoundError, error_kind
from backend.verification.models import VerificationOutcome, VerificationStatus
from backend.verification.normalizer import format_for_storage
from backend.verification.pipeline import ContentVerifier

DEFAULT_BATCH_LIMIT = 10


class VerificationService:
    """
    Loads an upload, runs the verifier and writes the terminal state back.

    A failed run is stored as "unverified" with the error in the result
    text, so it stays distinguishable from a pending upload (NULL result).
    Concurrent runs for the same upload are not coordinated: the last write
    wins.
    """

    def __init__(self, verifier: ContentVerifier, db: Session):
        self.verifier = verifier
        self.db = db
        self.upload_repo = UploadRepository

    def verify_upload(self, upload_id) -> VerificationOutcome:
        upload = self.upload_repo.get(db=self.db, upload_id=upload_id)
        if upload is None:
            raise UploadNotFoundError(f"Upload not found: {upload_id}")
        return self._verify_record(upload)

    def verify_pending(self, limit: int = DEFAULT_BATCH_LIMIT) -> List[VerificationOutcome]:
        uploads = self.upload_repo.list_pending(db=self.db, limit=limit)
        print(f"[VerificationService] Batch: {len(uploads)} pending upload(s)")

        outcomes: List[VerificationOutcome] = []
        for upload in uploads:
            upload_id = str(upload.id)
            try:
                outcomes.append(self._verify_record(upload))
            except PersistenceError as e:
                outcomes.append(
                    VerificationOutcome(
                        upload_id=upload_id,
                        success=False,
                        error_kind=e.kind,
                        error=str(e),
                    )
                )
        return outcomes

    def _verify_record(self, upload: Upload) -> VerificationOutcome:
        upload_id = str(upload.id)

        try:
            result = self.verifier.verify(
                description=upload.description,
                file_url=upload.file_url,
                file_type=upload.file_type,
                latitude=upload.latitude,
                longitude=upload.longitude,
                capture_date=upload.capture_date,
            )
        except Exception as e:
            message = f"Verification failed: {e}"
            print(f"[VerificationService] {upload_id}: {message}")
            self._persist(upload_id, False, VerificationStatus.UNVERIFIED, message)
            return VerificationOutcome(
                upload_id=upload_id,
                success=False,
                status=VerificationStatus.UNVERIFIED,
                result_text=message,
                error_kind=error_kind(e),
                error=str(e),
            )

        stored_text = format_for_storage(result)
        self._persist(upload_id, result.verified, result.status, stored_text)
        return VerificationOutcome(
            upload_id=upload_id,
            success=True,
            verified=result.verified,
            status=result.status,
            result_text=stored_text,
            summary=result.result,
            issues=result.issues,
        )

    def _persist(self, upload_id: str, verified: bool, status: VerificationStatus, text: str) -> None:
        try:
            self.upload_repo.update_verification(
                db=self.db,
                upload_id=upload_id,
                verified=verified,
                status=status.value,
                result_text=text,
            )
        except SQLAlchemyError as e:
            try:
                self.db.rollback()
            except SQLAlchemyError as rollback_error:
                print(f"[VerificationService] Rollback failed: {rollback_error}")
            raise PersistenceError(f"Failed to update verification for {upload_id}: {e}") from e
