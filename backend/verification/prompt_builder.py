from datetime import datetime
from typing import List, Optional, Tuple

from backend.context.models import ContextSnapshot
from backend.context.sun import local_frame

DAYTIME_WORDS = ["sunny", "daylight", "afternoon", "morning", "day"]
NIGHTTIME_WORDS = ["night", "dark", "evening", "midnight"]


def _clock(moment: Optional[datetime]) -> str:
    if moment is None:
        return "unknown time"
    return moment.strftime("%H:%M:%S")


def _lighting(is_daytime: bool) -> str:
    return "Daytime/Daylight" if is_daytime else "Nighttime/Dark"


def precheck_lighting(description: Optional[str], snapshot: ContextSnapshot) -> Tuple[List[str], List[str]]:
    """
    Naive substring checks of the description against the sun signal.

    Returns (issues, verification_factors). The issues are alerts for the
    model, not conclusions; a mismatch here is a hint worth checking.
    """
    issues: List[str] = []
    factors: List[str] = []

    sun = snapshot.sun
    if sun is None or snapshot.capture_date is None:
        return issues, factors

    capture_time = _clock(local_frame(snapshot.capture_date))

    if description:
        text = description.lower()
        mentions_day = any(word in text for word in DAYTIME_WORDS)
        mentions_night = any(word in text for word in NIGHTTIME_WORDS)

        if mentions_day and not sun.is_daytime:
            issues.append(
                f"Description mentions daytime, but timestamp ({capture_time}) "
                "indicates it was after sunset at this location"
            )
        if mentions_night and sun.is_daytime:
            issues.append(
                f"Description mentions nighttime, but timestamp ({capture_time}) "
                "indicates it was during daylight hours"
            )

    factors.append(
        f"Expected lighting at {capture_time}: {_lighting(sun.is_daytime)} "
        f"(Sunrise: {_clock(sun.sunrise)}, Sunset: {_clock(sun.sunset)})"
    )
    return issues, factors


def build_context_block(snapshot: ContextSnapshot, issues: List[str]) -> str:
    if snapshot.latitude is not None and snapshot.longitude is not None:
        coordinates = f"{snapshot.latitude}, {snapshot.longitude}"
    else:
        coordinates = "Not provided"

    capture = (
        local_frame(snapshot.capture_date).strftime("%Y-%m-%d %H:%M:%S %Z").strip()
        if snapshot.capture_date is not None
        else "Not provided"
    )

    sections = [
        "TRUSTED SOURCE DATA (Use this for PRIMARY verification):",
        "==========================================",
        "LOCATION DATA (Geocoding API):",
        f"- Location Name: {snapshot.location_name or 'Unknown'}",
        f"- Coordinates: {coordinates}",
        "",
        "TIMESTAMP DATA:",
        f"- Capture Date/Time: {capture}",
    ]

    if snapshot.sun is not None:
        sections += [
            "",
            "ASTRONOMICAL DATA (Sunrise-Sunset.org API):",
            f"- Lighting at Capture Time: {_lighting(snapshot.sun.is_daytime)}",
            f"- Sunrise Time: {_clock(snapshot.sun.sunrise)}",
            f"- Sunset Time: {_clock(snapshot.sun.sunset)}",
            "- Authority: Calculated astronomical data - DEFINITIVE for time-of-day verification",
        ]

    if snapshot.weather is not None:
        weather = snapshot.weather
        sections += [
            "",
            "WEATHER DATA (OpenWeatherMap API, current conditions):",
            f"- Conditions: {weather.description}",
        ]
        if weather.temperature is not None:
            sections.append(f"- Temperature: {weather.temperature}°C")
        sections += [
            f"- Weather Type: {', '.join(weather.conditions)}",
            "- Authority: Meteorological data - DEFINITIVE for current weather",
        ]

    if issues:
        sections += ["", "PRE-VERIFICATION ALERTS (heuristic, confirm before reporting):"]
        sections += [f"- {issue}" for issue in issues]

    return "\n".join(sections)


def _analysis_steps(media_kind: str, has_description: bool) -> str:
    label = "VIDEO" if media_kind == "video" else "IMAGE"

    if media_kind == "video":
        visual = [
            "- What events/actions occur in the video across frames?",
            "- Are there consistency issues or anomalies across frames?",
            "- Does the video lighting match the expected time-of-day from astronomical data?",
            "- Are there visual contradictions with verified facts?",
        ]
    else:
        visual = [
            "- Does the image support the verified facts from Step 1?",
            "- Are there visual elements that contradict trusted source data?",
            "- Does image lighting match astronomical predictions?",
            "- Do visible weather conditions align with verified weather data?",
        ]

    if has_description:
        step_one = [
            "STEP 1 - TEXT FACT-CHECKING (PRIMARY):",
            "- Extract all verifiable claims from the description",
            "- Check provided API data first (weather, astronomical, geographic)",
            "- IF API data is current but you need historical data -> USE GOOGLE SEARCH",
            "- News event or historical claim? -> SEARCH \"[event] [location] [date]\" and cite news sources",
            "- Time claim? -> Check against sunrise/sunset data",
            "- Location claim? -> Verify coordinates and place name accuracy",
            "- DOCUMENT EXACT data from trusted sources WITH SOURCE CITATIONS",
        ]
    else:
        step_one = [
            "STEP 1 - CONTEXTUAL VERIFICATION (PRIMARY):",
            "- There is no description to check; verify the media against context only",
            "- Check provided API data (sunrise/sunset, current weather, location)",
            "- IF the capture date is in the past -> USE GOOGLE SEARCH for historical weather",
            "- Verify any visible events or incidents through web search",
            "- Document findings WITH SOURCE CITATIONS",
        ]

    return "\n".join(step_one + ["", f"STEP 2 - {label} ANALYSIS (SECONDARY):"] + visual)


RESPONSE_FORMAT = """Respond with a JSON object:
{
  "status": "verified" | "potential_issues" | "unverified",
  "result": "Brief summary starting with text-based verification findings",
  "confidence": "high" | "medium" | "low",
  "analysis": "Detailed analysis with TEXT VERIFICATION FIRST, then media analysis",
  "claimsIdentified": ["Claims with [TEXT] or [VISUAL] prefix"],
  "verificationsPerformed": ["Checks with [API], [WEB SEARCH], or [IMAGE] prefix"],
  "textBasedFindings": ["Findings from APIs and web sources, with source citations"],
  "webSearchResults": ["Findings from Google Search with source URLs"],
  "sourcesUsed": ["URLs and source names used for verification"],
  "imageAnalysisFindings": ["Visual findings that support/contradict text verification"],
  "additionalIssues": ["Specific issues found"],
  "recommendedActions": ["Additional verification needed, if newsworthy"]
}

Status guide:
- "verified": Text claims verified against trusted sources AND media supports findings
- "potential_issues": Discrepancies between claims and trusted sources OR media contradicts data
- "unverified": Cannot verify claims or significant contradictions with trusted sources

CRITICAL: Respond ONLY with valid, well-formed JSON:
- All strings properly escaped (use \\" for quotes inside strings)
- No trailing commas in arrays or objects
- No line breaks inside string values (use \\n instead)

Respond with the JSON object only, no additional text before or after."""


def build_prompt(
    description: Optional[str],
    snapshot: ContextSnapshot,
    issues: List[str],
    media_kind: str,
) -> str:
    has_description = bool(description and description.strip())

    if has_description:
        description_note = f'User\'s Description: "{description}"'
    else:
        description_note = (
            "NO DESCRIPTION PROVIDED - You must analyze the media itself "
            "and verify against available contextual data."
        )

    media_note = ""
    if media_kind == "video":
        media_note = (
            "\n\nVIDEO ANALYSIS: This is a video file. Analyze key frames to verify claims "
            "about events, actions, locations, lighting conditions, and consistency with "
            "the provided metadata."
        )

    return f"""You are an AUTONOMOUS FACT-CHECKING AI with expertise in media verification, logic, science, geography, and current events.

{description_note}{media_note}

{build_context_block(snapshot, issues)}

VERIFICATION HIERARCHY
======================
You have access to Google Search. Use it for historical weather, news events,
public incidents and anything the API data above cannot answer. Prefer
mainstream trusted sources (major news outlets, government weather services)
and cite URLs and source names.

LEVEL 1 (PRIMARY): TEXT-BASED FACT-CHECKING AGAINST TRUSTED SOURCES
- Check claims against the PROVIDED API data first, then GOOGLE SEARCH
- Time-of-day claims -> astronomical data; weather claims -> weather data, then search
- Location claims -> geographic data; news and historical claims -> MUST use search
- This level is DEFINITIVE: trusted sources are authoritative

LEVEL 2 (SECONDARY): MEDIA ANALYSIS
- Use visual analysis only to SUPPORT or CONTRADICT Level 1 findings
- Media analysis complements text verification; it never replaces it
- Pre-verification alerts are heuristics: confirm or dismiss them, do not copy them blindly

VERIFICATION PROCESS:
{_analysis_steps(media_kind, has_description)}

Report Level 1 findings first, then Level 2 findings in the context of Level 1.
Minor subjective descriptions ("beautiful", "amazing") are fine; focus on
factual discrepancies between claims and trusted sources.

{RESPONSE_FORMAT}"""
