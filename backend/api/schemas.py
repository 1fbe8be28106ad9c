from __future__ import annotations

from datetime import datetime
from typing import List, Literal, Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, model_validator


class VerifyRequest(BaseModel):
    upload_id: str = Field(..., min_length=1)


class VerifyResponse(BaseModel):
    verified: bool
    status: str
    result: str
    issues: List[str] = Field(default_factory=list)


class BatchVerifyItem(BaseModel):
    id: str
    verified: bool
    status: str
    result: str


class BatchVerifyResponse(BaseModel):
    results: List[BatchVerifyItem]


class UploadCreateRequest(BaseModel):
    user_id: UUID
    file_url: str = Field(..., min_length=1)
    file_type: Literal["image", "video"]
    description: Optional[str] = Field(default=None, max_length=100)
    latitude: Optional[float] = Field(default=None, ge=-90, le=90)
    longitude: Optional[float] = Field(default=None, ge=-180, le=180)
    location_source: Literal["exif", "user_location", "manual", "address"] = "user_location"
    location_name: Optional[str] = None
    capture_date: Optional[datetime] = None

    @model_validator(mode="after")
    def _coordinates_together(self) -> "UploadCreateRequest":
        if (self.latitude is None) != (self.longitude is None):
            raise ValueError("latitude and longitude must be provided together")
        return self


class UploadResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    user_id: str
    file_url: str
    file_type: str
    description: Optional[str] = None
    latitude: Optional[float] = None
    longitude: Optional[float] = None
    location_source: str
    location_name: Optional[str] = None
    capture_date: Optional[datetime] = None
    ai_verified: bool
    ai_verification_result: Optional[str] = None
    verification_status: str
    created_at: Optional[datetime] = None
