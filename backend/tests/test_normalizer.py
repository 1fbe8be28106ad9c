from backend.verification.models import VerificationResult, VerificationStatus
from backend.verification.normalizer import (
    ModelVerdict,
    compose_result_text,
    ensure_list,
    format_for_storage,
    normalize_verdict,
)


FULL_REPLY = {
    "status": "potential_issues",
    "result": "Weather claim contradicts trusted data.",
    "confidence": "medium",
    "analysis": "The description says sunny, but records show rain.",
    "claimsIdentified": ["[TEXT] sunny afternoon"],
    "verificationsPerformed": ["[API] Weather lookup"],
    "textBasedFindings": ["Weather API reports light rain"],
    "webSearchResults": ["Local news reported storms (https://news.example.com/storm)"],
    "sourcesUsed": ["https://news.example.com/storm", "Met Office"],
    "imageAnalysisFindings": ["Overcast sky visible"],
    "additionalIssues": ["Sky does not look sunny"],
    "recommendedActions": ["Check station records"],
}

SECTION_ORDER = [
    "LEVEL 1 - Trusted Source Verification:",
    "Web Search Findings:",
    "Sources:",
    "LEVEL 2 - IMAGE Analysis:",
    "Claims Identified:",
    "Recommended Additional Verification:",
    "Detailed Analysis:",
]


def test_sections_appear_in_fixed_order():
    text = compose_result_text(ModelVerdict.model_validate(FULL_REPLY), "image")

    assert text.startswith("Weather claim contradicts trusted data.")
    positions = [text.index(header) for header in SECTION_ORDER]
    assert positions == sorted(positions)


def test_video_label_in_level_two():
    text = compose_result_text(ModelVerdict.model_validate(FULL_REPLY), "video")
    assert "LEVEL 2 - VIDEO Analysis:" in text


def test_url_sources_are_dropped_from_sources_section():
    text = compose_result_text(ModelVerdict.model_validate(FULL_REPLY), "image")
    sources_block = text.split("Sources:")[1].split("\n\n")[0]
    assert "Met Office" in sources_block
    assert "https://" not in sources_block


def test_sources_section_omitted_when_only_urls():
    reply = dict(FULL_REPLY, sourcesUsed=["https://a.example", "http://b.example"])
    text = compose_result_text(ModelVerdict.model_validate(reply), "image")
    assert "Sources:" not in text


def test_analysis_not_repeated_when_same_as_result():
    reply = {"status": "verified", "result": "Same", "analysis": "Same"}
    text = compose_result_text(ModelVerdict.model_validate(reply), "image")
    assert text == "Same"


def test_analysis_used_as_summary_when_result_missing():
    reply = {"status": "verified", "analysis": "Only analysis"}
    text = compose_result_text(ModelVerdict.model_validate(reply), "image")
    assert text.startswith("Only analysis")


def test_empty_reply_defaults():
    result = normalize_verdict({}, [], [], "image")

    assert result.status == VerificationStatus.UNVERIFIED
    assert result.verified is False
    assert result.result == "Verification complete"
    assert result.issues == []


def test_field_shape_variance_is_tolerated():
    reply = {
        "status": "VERIFIED!!",
        "result": 42,
        "additionalIssues": "single issue as a string",
        "textBasedFindings": {"not": "a list"},
        "claimsIdentified": None,
        "imageAnalysisFindings": ["ok", None, 3],
    }
    verdict = ModelVerdict.model_validate(reply)

    assert verdict.status == VerificationStatus.UNVERIFIED
    assert verdict.result == ""
    assert verdict.additional_issues == ["single issue as a string"]
    assert verdict.text_based_findings == []
    assert verdict.claims_identified == []
    assert verdict.image_analysis_findings == ["ok", "3"]


def test_verified_flag_follows_status():
    assert normalize_verdict({"status": "verified"}, [], [], "image").verified is True
    assert normalize_verdict({"status": "potential_issues"}, [], [], "image").verified is False


def test_precomputed_issues_come_first():
    result = normalize_verdict(
        {"status": "verified", "additionalIssues": ["model issue 1", "model issue 2"]},
        ["lexical alert"],
        ["Expected lighting at 21:00:00: Nighttime/Dark"],
        "image",
    )

    assert result.issues == ["lexical alert", "model issue 1", "model issue 2"]
    assert result.verification_factors == ["Expected lighting at 21:00:00: Nighttime/Dark"]


def test_ensure_list():
    assert ensure_list(["a"]) == ["a"]
    assert ensure_list("a") == ["a"]
    assert ensure_list("  ") == []
    assert ensure_list(7) == []


def test_storage_text_appends_issues_and_factors():
    result = VerificationResult(
        status=VerificationStatus.POTENTIAL_ISSUES,
        verified=False,
        result="Summary",
        issues=["Issue A"],
        verification_factors=["Factor B"],
    )

    assert format_for_storage(result) == "Summary\n\nIssues:\n• Issue A\n\nVerification Factors:\n• Factor B"


def test_storage_text_without_extras():
    result = VerificationResult(status=VerificationStatus.VERIFIED, verified=True, result="Summary")
    assert format_for_storage(result) == "Summary"
