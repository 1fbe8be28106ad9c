"""
Best-effort recovery of the JSON object in a model reply.

Models wrap JSON in prose or code fences, leave trailing commas and put
raw line breaks inside strings. Anything these repairs cannot fix is an
ordinary parse failure for the caller to retry.
"""

import json
import re
from typing import Any, Dict, Optional

from backend.verification.errors import ModelResponseError

# Greedy: first "{" to last "}"
JSON_OBJECT_PATTERN = re.compile(r"\{[\s\S]*\}")
TRAILING_COMMA_PATTERN = re.compile(r",(\s*[}\]])")
CODE_FENCE_PATTERN = re.compile(r"```(?:json)?\s*")


def extract_json_object(text: str) -> Optional[str]:
    if not text:
        return None
    match = JSON_OBJECT_PATTERN.search(text)
    return match.group(0) if match else None


def escape_newlines_in_strings(text: str) -> str:
    out = []
    in_string = False
    escaped = False

    for ch in text:
        if in_string:
            if escaped:
                escaped = False
            elif ch == "\\":
                escaped = True
            elif ch == '"':
                in_string = False
            elif ch == "\n":
                out.append("\\n")
                continue
            elif ch == "\r":
                out.append("\\r")
                continue
        elif ch == '"':
            in_string = True
        out.append(ch)

    return "".join(out)


def repair_json_text(raw: str) -> str:
    fixed = TRAILING_COMMA_PATTERN.sub(r"\1", raw)
    fixed = CODE_FENCE_PATTERN.sub("", fixed)
    return escape_newlines_in_strings(fixed)


def parse_model_json(text: str) -> Dict[str, Any]:
    raw = extract_json_object(text)
    if raw is None:
        raise ModelResponseError(
            f"Model response did not contain valid JSON. Raw response: {(text or '')[:200]}"
        )

    try:
        parsed = json.loads(raw)
    except json.JSONDecodeError as first_error:
        print(f"[JSONRepair] Strict parse failed ({first_error}), applying repairs")
        try:
            parsed = json.loads(repair_json_text(raw))
        except json.JSONDecodeError:
            raise ModelResponseError(
                f"Failed to parse model JSON response: {first_error}"
            ) from first_error

    if not isinstance(parsed, dict):
        raise ModelResponseError("Model JSON response was not an object")
    return parsed
