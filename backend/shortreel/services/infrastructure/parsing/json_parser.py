"""
Tolerant JSON extraction for language-model output.

Models wrap JSON in prose or markdown fences and sometimes leave trailing
commas. These helpers recover the object or report failure.
"""

import json
import re
from typing import Any, Dict, Optional

_FENCE_RE = re.compile(r"```(?:json)?\s*(.*?)```", re.DOTALL | re.IGNORECASE)
_TRAILING_COMMA_RE = re.compile(r",\s*([}\]])")


def strip_code_fences(text: str) -> str:
    """Return the body of the first fenced block, or the text unchanged."""
    match = _FENCE_RE.search(text or "")
    return match.group(1).strip() if match else (text or "").strip()


def extract_largest_balanced_json(text: str) -> Optional[str]:
    """Largest balanced ``{...}`` span in ``text``, ignoring braces inside strings."""
    if not text:
        return None

    best: Optional[str] = None
    depth = 0
    start: Optional[int] = None
    in_string = False
    escape = False

    for index, char in enumerate(text):
        if in_string:
            if escape:
                escape = False
            elif char == "\\":
                escape = True
            elif char == '"':
                in_string = False
            continue

        if char == '"':
            in_string = True
        elif char == "{":
            if depth == 0:
                start = index
            depth += 1
        elif char == "}" and depth > 0:
            depth -= 1
            if depth == 0 and start is not None:
                candidate = text[start:index + 1]
                if best is None or len(candidate) > len(best):
                    best = candidate
                start = None

    return best


def _loads(candidate: str) -> Optional[Any]:
    for attempt in (candidate, _TRAILING_COMMA_RE.sub(r"\1", candidate)):
        try:
            return json.loads(attempt)
        except json.JSONDecodeError:
            continue
    return None


def parse_json_object(text: str) -> Dict[str, Any]:
    """
    Parse the JSON object contained in a model response.

    Raises:
        ValueError: If no JSON object can be recovered
    """
    body = strip_code_fences(text)
    parsed = _loads(body)
    if isinstance(parsed, dict):
        return parsed

    candidate = extract_largest_balanced_json(body)
    if candidate is not None:
        parsed = _loads(candidate)
        if isinstance(parsed, dict):
            return parsed

    raise ValueError("Response did not contain a JSON object")


