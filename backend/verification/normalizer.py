from typing import Any, Dict, List

from pydantic import BaseModel, ConfigDict, Field, field_validator

from backend.verification.models import VerificationResult, VerificationStatus


def ensure_list(value: Any) -> List[str]:
    if isinstance(value, list):
        return [item if isinstance(item, str) else str(item) for item in value if item is not None]
    if isinstance(value, str):
        return [value] if value.strip() else []
    return []


def ensure_text(value: Any) -> str:
    return value if isinstance(value, str) else ""


class ModelVerdict(BaseModel):
    """
    The model's JSON reply. The model is non-deterministic, so every field
    is optional and any unexpected shape collapses to empty.
    """

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    status: VerificationStatus = VerificationStatus.UNVERIFIED
    result: str = ""
    analysis: str = ""
    claims_identified: List[str] = Field(default_factory=list, alias="claimsIdentified")
    verifications_performed: List[str] = Field(default_factory=list, alias="verificationsPerformed")
    text_based_findings: List[str] = Field(default_factory=list, alias="textBasedFindings")
    web_search_results: List[str] = Field(default_factory=list, alias="webSearchResults")
    sources_used: List[str] = Field(default_factory=list, alias="sourcesUsed")
    image_analysis_findings: List[str] = Field(default_factory=list, alias="imageAnalysisFindings")
    additional_issues: List[str] = Field(default_factory=list, alias="additionalIssues")
    recommended_actions: List[str] = Field(default_factory=list, alias="recommendedActions")

    @field_validator("status", mode="before")
    @classmethod
    def _coerce_status(cls, value: Any) -> VerificationStatus:
        try:
            return VerificationStatus(value)
        except ValueError:
            return VerificationStatus.UNVERIFIED

    @field_validator("result", "analysis", mode="before")
    @classmethod
    def _coerce_text(cls, value: Any) -> str:
        return ensure_text(value)

    @field_validator(
        "claims_identified",
        "verifications_performed",
        "text_based_findings",
        "web_search_results",
        "sources_used",
        "image_analysis_findings",
        "additional_issues",
        "recommended_actions",
        mode="before",
    )
    @classmethod
    def _coerce_list(cls, value: Any) -> List[str]:
        return ensure_list(value)


def _section(title: str, items: List[str], bullet: str = "•") -> str:
    lines = "\n".join(f"{bullet} {item}" for item in items)
    return f"\n\n{title}:\n{lines}"


def _is_url(source: str) -> bool:
    return source.startswith("http://") or source.startswith("https://")


def compose_result_text(verdict: ModelVerdict, media_kind: str) -> str:
    text = verdict.result or verdict.analysis or "Verification complete"

    if verdict.text_based_findings:
        text += _section("LEVEL 1 - Trusted Source Verification", verdict.text_based_findings, "✓")

    if verdict.web_search_results:
        text += _section("Web Search Findings", verdict.web_search_results)

    # URLs are already cited inline in the findings
    descriptive_sources = [s for s in verdict.sources_used if not _is_url(s)]
    if descriptive_sources:
        text += _section("Sources", descriptive_sources)

    if verdict.image_analysis_findings:
        label = "VIDEO" if media_kind == "video" else "IMAGE"
        text += _section(f"LEVEL 2 - {label} Analysis", verdict.image_analysis_findings)

    if verdict.claims_identified:
        text += _section("Claims Identified", verdict.claims_identified)

    if verdict.recommended_actions:
        text += _section("Recommended Additional Verification", verdict.recommended_actions)

    if verdict.analysis and verdict.analysis != verdict.result:
        text += f"\n\nDetailed Analysis:\n{verdict.analysis}"

    return text


def normalize_verdict(
    parsed: Dict[str, Any],
    precomputed_issues: List[str],
    precomputed_factors: List[str],
    media_kind: str,
) -> VerificationResult:
    verdict = ModelVerdict.model_validate(parsed)

    return VerificationResult(
        status=verdict.status,
        verified=verdict.status == VerificationStatus.VERIFIED,
        result=compose_result_text(verdict, media_kind),
        issues=list(precomputed_issues) + verdict.additional_issues,
        verification_factors=list(precomputed_factors) + verdict.verifications_performed,
    )


def format_for_storage(result: VerificationResult) -> str:
    text = result.result
    if result.issues:
        text += _section("Issues", result.issues)
    if result.verification_factors:
        text += _section("Verification Factors", result.verification_factors)
    return text.strip()
