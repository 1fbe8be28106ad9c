from __future__ import annotations

import os
import uuid
from datetime import datetime
from typing import Generator, List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from fastapi.responses import JSONResponse
from sqlalchemy.exc import OperationalError, SQLAlchemyError
from sqlalchemy.orm import Session

from backend.api.schemas import (
    BatchVerifyItem,
    BatchVerifyResponse,
    UploadCreateRequest,
    UploadResponse,
    VerifyRequest,
    VerifyResponse,
)
from backend.context.gatherer import ContextGatherer
from backend.context.geocode import MapboxGeocoder
from backend.context.sun import SunriseSunsetClient
from backend.context.weather import OpenWeatherClient
from backend.media.fetcher import MediaFetcher
from backend.media.stager import VideoStager
from backend.storage.db import SessionLocal
from backend.storage.repositories.upload_repo import UploadRepository
from backend.utils.gemini_client import DEFAULT_MODEL_NAME, GeminiClient
from backend.verification.errors import PersistenceError, UploadNotFoundError
from backend.verification.invoker import VerificationInvoker
from backend.verification.pipeline import ContentVerifier
from backend.verification.service import DEFAULT_BATCH_LIMIT, VerificationService


router = APIRouter(prefix="/api")

DB_UNAVAILABLE = "Database temporarily unavailable. Please retry later."


def _validate_uuid(value: str) -> bool:
    try:
        uuid.UUID(value)
        return True
    except (ValueError, AttributeError):
        return False


def _env_flag(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in {"1", "true", "yes", "on"}


def get_db() -> Generator[Session, None, None]:
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def _build_verifier() -> ContentVerifier:
    llm_client = GeminiClient(
        api_key=os.getenv("GEMINI_API_KEY"),
        model_name=os.getenv("GEMINI_MODEL", DEFAULT_MODEL_NAME),
        enable_search=_env_flag("GEMINI_ENABLE_SEARCH", True),
    )
    fetcher = MediaFetcher()

    context_gatherer = ContextGatherer(
        sun_client=SunriseSunsetClient(),
        weather_client=OpenWeatherClient(api_key=os.getenv("OPENWEATHER_API_KEY")),
        geocoder=MapboxGeocoder(token=os.getenv("MAPBOX_TOKEN")),
    )

    return ContentVerifier(
        context_gatherer=context_gatherer,
        fetcher=fetcher,
        stager=VideoStager(llm_client=llm_client, fetcher=fetcher),
        invoker=VerificationInvoker(llm_client=llm_client),
    )


def get_verifier() -> ContentVerifier:
    try:
        return _build_verifier()
    except ValueError as exc:
        print(f"[API] Verifier unavailable: {exc}")
        raise HTTPException(status_code=503, detail="Verification service is not configured")


def get_upload_id(payload: VerifyRequest) -> str:
    if not _validate_uuid(payload.upload_id):
        raise HTTPException(status_code=404, detail="Invalid upload_id format")
    return payload.upload_id


def get_batch_limit() -> int:
    try:
        return int(os.getenv("VERIFY_BATCH_LIMIT", DEFAULT_BATCH_LIMIT))
    except ValueError:
        return DEFAULT_BATCH_LIMIT


@router.post("/verify", response_model=VerifyResponse)
def verify_upload(
    upload_id: str = Depends(get_upload_id),
    db: Session = Depends(get_db),
    verifier: ContentVerifier = Depends(get_verifier),
):
    service = VerificationService(verifier=verifier, db=db)
    try:
        outcome = service.verify_upload(upload_id)
    except UploadNotFoundError:
        raise HTTPException(status_code=404, detail="Upload not found")
    except PersistenceError as exc:
        print(f"[API] {exc}")
        return JSONResponse(status_code=500, content={"error": "Failed to update verification"})
    except (OperationalError, SQLAlchemyError):
        raise HTTPException(status_code=503, detail=DB_UNAVAILABLE)

    if not outcome.success:
        return JSONResponse(
            status_code=500,
            content={"error": "Verification failed", "details": outcome.error},
        )

    return VerifyResponse(
        verified=outcome.verified,
        status=outcome.status.value,
        result=outcome.summary,
        issues=outcome.issues,
    )


@router.get("/verify", response_model=BatchVerifyResponse)
def verify_pending(
    db: Session = Depends(get_db),
    verifier: ContentVerifier = Depends(get_verifier),
    limit: int = Depends(get_batch_limit),
) -> BatchVerifyResponse:
    service = VerificationService(verifier=verifier, db=db)
    try:
        outcomes = service.verify_pending(limit=limit)
    except (OperationalError, SQLAlchemyError):
        raise HTTPException(status_code=503, detail=DB_UNAVAILABLE)

    return BatchVerifyResponse(
        results=[
            BatchVerifyItem(
                id=o.upload_id,
                verified=o.verified,
                status=o.status.value,
                result=o.result_text or (o.error or ""),
            )
            for o in outcomes
        ]
    )


@router.post("/uploads", response_model=UploadResponse, status_code=201)
def create_upload(payload: UploadCreateRequest, db: Session = Depends(get_db)) -> UploadResponse:
    try:
        upload = UploadRepository.create(
            db=db,
            user_id=payload.user_id,
            file_url=payload.file_url,
            file_type=payload.file_type,
            description=payload.description or None,
            latitude=payload.latitude,
            longitude=payload.longitude,
            location_source=payload.location_source,
            location_name=payload.location_name,
            capture_date=payload.capture_date,
        )
    except (OperationalError, SQLAlchemyError):
        try:
            db.rollback()
        except SQLAlchemyError:
            pass
        raise HTTPException(status_code=503, detail=DB_UNAVAILABLE)
    return UploadResponse.model_validate(upload)


@router.get("/uploads", response_model=List[UploadResponse])
def list_uploads(
    start: Optional[datetime] = Query(default=None),
    end: Optional[datetime] = Query(default=None),
    user_id: Optional[uuid.UUID] = Query(default=None),
    db: Session = Depends(get_db),
) -> List[UploadResponse]:
    try:
        uploads = UploadRepository.list_visible(db=db, start=start, end=end, user_id=user_id)
    except (OperationalError, SQLAlchemyError):
        raise HTTPException(status_code=503, detail=DB_UNAVAILABLE)
    return [UploadResponse.model_validate(u) for u in uploads]


@router.get("/uploads/{upload_id}", response_model=UploadResponse)
def get_upload(upload_id: str, db: Session = Depends(get_db)) -> UploadResponse:
    if not _validate_uuid(upload_id):
        raise HTTPException(status_code=404, detail="Invalid upload_id format")
    try:
        upload = UploadRepository.get(db=db, upload_id=upload_id)
    except (OperationalError, SQLAlchemyError):
        raise HTTPException(status_code=503, detail=DB_UNAVAILABLE)
    if upload is None:
        raise HTTPException(status_code=404, detail="Upload not found")
    return UploadResponse.model_validate(upload)


@router.delete("/uploads/{upload_id}", status_code=204)
def delete_upload(
    upload_id: str,
    user_id: uuid.UUID = Query(...),
    db: Session = Depends(get_db),
) -> None:
    if not _validate_uuid(upload_id):
        raise HTTPException(status_code=404, detail="Invalid upload_id format")
    try:
        deleted = UploadRepository.soft_delete(db=db, upload_id=upload_id, user_id=user_id)
    except (OperationalError, SQLAlchemyError):
        raise HTTPException(status_code=503, detail=DB_UNAVAILABLE)
    if not deleted:
        raise HTTPException(status_code=404, detail="Upload not found")
