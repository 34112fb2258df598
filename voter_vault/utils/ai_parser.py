import json
import logging
import re
from typing import Any, Dict

logger = logging.getLogger("ai_parser")

_FENCE_PATTERN = re.compile(r'```(?:json)?\s*([\s\S]*?)\s*```', re.IGNORECASE)


def parse_json_object(response_text: str) -> Dict[str, Any]:
    """
    Parse a model response into a JSON object.

    Handles:
    1. Plain JSON objects (the usual case with json_object response format)
    2. JSON wrapped in ```json fences
    3. A bare JSON array, treated as the voter list

    Anything unparseable yields an empty dict so the caller falls back to
    defaults instead of raising.
    """
    if not response_text:
        return {}

    clean_text = response_text.strip()
    fenced = _FENCE_PATTERN.search(clean_text)
    if fenced:
        clean_text = fenced.group(1)

    try:
        data = json.loads(clean_text)
    except ValueError:
        # Last resort: outermost braces
        start, end = clean_text.find("{"), clean_text.rfind("}")
        if start == -1 or end <= start:
            logger.warning(f"AI response is not JSON: {clean_text[:120]!r}")
            return {}
        try:
            data = json.loads(clean_text[start:end + 1])
        except ValueError:
            logger.warning(f"AI response is not JSON: {clean_text[:120]!r}")
            return {}

    if isinstance(data, dict):
        return data
    if isinstance(data, list):
        return {"voters": data}
    return {}
