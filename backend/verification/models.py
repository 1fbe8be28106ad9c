from enum import Enum
from typing import List, Optional
from pydantic import BaseModel, Field


class VerificationStatus(str, Enum):
    UNVERIFIED = "unverified"
    VERIFIED = "verified"
    POTENTIAL_ISSUES = "potential_issues"


class VerificationResult(BaseModel):
    status: VerificationStatus
    verified: bool
    result: str
    issues: List[str] = Field(default_factory=list)
    verification_factors: List[str] = Field(default_factory=list)


class VerificationOutcome(BaseModel):
    """What the service reports for one upload, success or not."""

    upload_id: str
    success: bool
    verified: bool = False
    status: VerificationStatus = VerificationStatus.UNVERIFIED
    result_text: str = ""
    # Model-written verdict text only; result_text also carries the stored Issues and Factors blocks
    summary: str = ""
    issues: List[str] = Field(default_factory=list)
    error_kind: Optional[str] = None
    error: Optional[str] = None
