"""Input sanitization for user-supplied text that is rendered back to browsers"""
import re
from typing import Any, List, Optional

_SCRIPT_BLOCK = re.compile(r"<script\b[^<]*(?:(?!</script>)<[^<]*)*</script>", re.IGNORECASE)
_JS_PROTOCOL = re.compile(r"javascript:", re.IGNORECASE)
_EVENT_HANDLER = re.compile(r"\bon\w+\s*=", re.IGNORECASE)
_TAG = re.compile(r"<[^>]*>")


def sanitize_text(value: Optional[str]) -> Optional[str]:
    """
    Strip script blocks, javascript: URLs, inline event handlers and tags.

    The result is plain text and never longer than the input, so column
    limits checked on the request still hold. Entities are left to the
    renderer to escape.
    """
    if value is None:
        return None
    cleaned = _SCRIPT_BLOCK.sub("", value)
    cleaned = _JS_PROTOCOL.sub("", cleaned)
    cleaned = _EVENT_HANDLER.sub("", cleaned)
    cleaned = _TAG.sub("", cleaned)
    return cleaned.strip()


def sanitize_list(values: Optional[List[str]]) -> List[str]:
    return [v for v in (sanitize_text(item) for item in values or []) if v]


def sanitize_fields(data: dict, fields: tuple) -> dict:
    """Return a copy of data with the named string fields sanitized"""
    result: dict[str, Any] = dict(data)
    for field in fields:
        if isinstance(result.get(field), str):
            result[field] = sanitize_text(result[field])
    return result
