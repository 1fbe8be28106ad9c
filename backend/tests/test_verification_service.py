"""
======================================================================
VERIFICATION SERVICE - Persistence & batch behavior
======================================================================

Uses an in-memory SQLite database and a fake verifier.

Verify:
- Success writes verified flag, status and composited text
- Failure writes "unverified" + error text (distinct from pending NULL)
- Batch isolates per-record failures and respects the limit
- Soft-deleted uploads are invisible to every read path
- Write-back failures surface as PersistenceError
======================================================================
"""

import uuid
from datetime import datetime, timezone
from typing import List

import pytest
from sqlalchemy import create_engine
from sqlalchemy.exc import OperationalError
from sqlalchemy.orm import sessionmaker

from backend.storage.base import Base
from backend.storage.models.upload import Upload
from backend.storage.repositories.upload_repo import UploadRepository
from backend.verification.errors import (
    MediaFetchError,
    PersistenceError,
    RemoteFileTimeoutError,
    UploadNotFoundError,
)
from backend.verification.models import VerificationResult, VerificationStatus
from backend.verification.service import VerificationService

USER_ID = str(uuid.uuid4())


def create_test_db():
    """Create an in-memory SQLite database for testing."""
    engine = create_engine("sqlite:///:memory:", echo=False)
    Base.metadata.create_all(bind=engine)
    TestSession = sessionmaker(bind=engine)
    return TestSession()


class FakeVerifier:
    """Returns a canned result, or raises for URLs listed in fail_urls."""

    def __init__(self, fail_urls: dict = None):
        self.fail_urls = fail_urls or {}
        self.calls: List[dict] = []

    def verify(self, description, file_url, file_type, latitude=None, longitude=None, capture_date=None):
        self.calls.append({"description": description, "file_url": file_url, "file_type": file_type})
        if file_url in self.fail_urls:
            raise self.fail_urls[file_url]
        return VerificationResult(
            status=VerificationStatus.POTENTIAL_ISSUES,
            verified=False,
            result="Lighting does not match",
            issues=["Description mentions daytime"],
            verification_factors=["Expected lighting at 23:00:00: Nighttime/Dark"],
        )


def add_upload(db, url="https://cdn.example.com/a.jpg", **kwargs) -> Upload:
    return UploadRepository.create(
        db=db,
        user_id=USER_ID,
        file_url=url,
        file_type=kwargs.pop("file_type", "image"),
        description=kwargs.pop("description", "sunny afternoon"),
        latitude=40.4,
        longitude=-3.7,
        capture_date=datetime(2024, 6, 1, 23, 0, tzinfo=timezone.utc),
        **kwargs,
    )


def test_success_persists_result():
    db = create_test_db()
    upload = add_upload(db)
    service = VerificationService(verifier=FakeVerifier(), db=db)

    outcome = service.verify_upload(upload.id)

    assert outcome.success is True
    assert outcome.status == VerificationStatus.POTENTIAL_ISSUES
    assert outcome.issues == ["Description mentions daytime"]

    db.expire_all()
    stored = UploadRepository.get(db, upload.id)
    assert stored.verification_status == "potential_issues"
    assert stored.ai_verified is False
    assert stored.ai_verification_result.startswith("Lighting does not match")
    assert "Issues:\n• Description mentions daytime" in stored.ai_verification_result
    assert "Verification Factors:" in stored.ai_verification_result


def test_failure_persists_unverified_with_error_text():
    db = create_test_db()
    upload = add_upload(db)
    verifier = FakeVerifier(fail_urls={upload.file_url: MediaFetchError("403 Forbidden")})

    outcome = VerificationService(verifier=verifier, db=db).verify_upload(upload.id)

    assert outcome.success is False
    assert outcome.error_kind == "media_fetch"

    db.expire_all()
    stored = UploadRepository.get(db, upload.id)
    assert stored.verification_status == "unverified"
    assert stored.ai_verified is False
    assert stored.ai_verification_result == "Verification failed: 403 Forbidden"


def test_untyped_model_error_reports_invocation_kind():
    db = create_test_db()
    upload = add_upload(db)
    verifier = FakeVerifier(fail_urls={upload.file_url: TimeoutError("deadline exceeded")})

    outcome = VerificationService(verifier=verifier, db=db).verify_upload(upload.id)

    assert outcome.error_kind == "model_invocation"


def test_unknown_upload_raises_not_found():
    db = create_test_db()
    service = VerificationService(verifier=FakeVerifier(), db=db)

    with pytest.raises(UploadNotFoundError):
        service.verify_upload(str(uuid.uuid4()))


def test_soft_deleted_upload_is_not_verified():
    db = create_test_db()
    upload = add_upload(db)
    assert UploadRepository.soft_delete(db, upload.id, USER_ID) is True
    verifier = FakeVerifier()

    with pytest.raises(UploadNotFoundError):
        VerificationService(verifier=verifier, db=db).verify_upload(upload.id)

    assert verifier.calls == []


def test_soft_deleted_uploads_excluded_from_all_reads():
    db = create_test_db()
    kept = add_upload(db, url="https://cdn.example.com/kept.jpg")
    gone = add_upload(db, url="https://cdn.example.com/gone.jpg")
    UploadRepository.soft_delete(db, gone.id, USER_ID)

    assert UploadRepository.get(db, gone.id) is None
    assert [u.id for u in UploadRepository.list_visible(db)] == [kept.id]
    assert [u.id for u in UploadRepository.list_pending(db)] == [kept.id]

    # the row itself is still there
    assert db.query(Upload).count() == 2


def test_soft_delete_requires_owner():
    db = create_test_db()
    upload = add_upload(db)

    assert UploadRepository.soft_delete(db, upload.id, str(uuid.uuid4())) is False
    assert UploadRepository.get(db, upload.id) is not None


def test_batch_isolates_failures_and_skips_already_verified():
    db = create_test_db()
    first = add_upload(db, url="https://cdn.example.com/1.jpg")
    failing = add_upload(db, url="https://cdn.example.com/2.mp4", file_type="video")
    third = add_upload(db, url="https://cdn.example.com/3.jpg")
    done = add_upload(db, url="https://cdn.example.com/4.jpg")
    UploadRepository.update_verification(db, done.id, True, "verified", "Already done")

    verifier = FakeVerifier(fail_urls={failing.file_url: RemoteFileTimeoutError("timeout")})
    outcomes = VerificationService(verifier=verifier, db=db).verify_pending(limit=10)

    by_id = {o.upload_id: o for o in outcomes}
    assert set(by_id) == {first.id, failing.id, third.id}
    assert by_id[first.id].success is True
    assert by_id[third.id].success is True
    assert by_id[failing.id].success is False
    assert by_id[failing.id].error_kind == "remote_file_timeout"
    assert len(verifier.calls) == 3


def test_batch_respects_limit():
    db = create_test_db()
    for i in range(5):
        add_upload(db, url=f"https://cdn.example.com/{i}.jpg")

    outcomes = VerificationService(verifier=FakeVerifier(), db=db).verify_pending(limit=2)

    assert len(outcomes) == 2
    assert len(UploadRepository.list_pending(db, limit=10)) == 3


def test_write_back_failure_raises_persistence_error():
    db = create_test_db()
    upload = add_upload(db)

    def failing_commit():
        raise OperationalError("UPDATE uploads", {}, Exception("DB down"))

    db.commit = failing_commit  # type: ignore

    with pytest.raises(PersistenceError):
        VerificationService(verifier=FakeVerifier(), db=db).verify_upload(upload.id)


def test_batch_reports_persistence_failure_per_record():
    db = create_test_db()
    add_upload(db)
    add_upload(db, url="https://cdn.example.com/b.jpg")

    def failing_commit():
        raise OperationalError("UPDATE uploads", {}, Exception("DB down"))

    db.commit = failing_commit  # type: ignore

    outcomes = VerificationService(verifier=FakeVerifier(), db=db).verify_pending()

    assert len(outcomes) == 2
    assert all(o.error_kind == "persistence" for o in outcomes)
