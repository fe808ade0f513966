"""
Best-effort extraction of a JSON object embedded in free text.

Chat replies often wrap the requested object in prose or code fences, so the
reply is searched for the outermost brace-delimited span before parsing.
"""

import json
import re
from typing import Any, Optional

_OBJECT_PATTERN = re.compile(r"\{[\s\S]*\}")


def extract_json_object(text: Optional[str]) -> Optional[dict[str, Any]]:
    """
    Locate and parse the outermost ``{...}`` span in ``text``.

    Args:
        text: Free text that may contain a JSON object

    Returns:
        The parsed object, or None when no span is found, the span is not
        valid JSON, or it does not decode to an object
    """
    if not text:
        return None

    match = _OBJECT_PATTERN.search(text)
    if not match:
        return None

    try:
        parsed = json.loads(match.group(0))
    except (json.JSONDecodeError, ValueError, RecursionError):
        return None

    if not isinstance(parsed, dict):
        return None
    return parsed
