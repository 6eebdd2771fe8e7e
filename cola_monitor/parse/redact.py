"""Redaction module to mask secrets in log output."""
import json
import re
from typing import Any, Dict

REDACTED = "[REDACTED]"

SECRET_KEYS = ("token", "cookie", "cookies", "webhook_url", "browserless_token")

# Patterns to redact
_PATTERNS = [
    (re.compile(r"([?&]token=)[^&\s\"']+", re.IGNORECASE), rf"\1{REDACTED}"),
    (re.compile(r"(/api/webhooks/\d+/)[\w-]+"), rf"\1{REDACTED}"),
    (re.compile(r"(Cookie[\"']?\s*[:=]\s*[\"']?)[^\"'\n]+", re.IGNORECASE), rf"\1{REDACTED}"),
    (re.compile(r"(JSESSIONID=)[^;,\s]+", re.IGNORECASE), rf"\1{REDACTED}"),
]


def redact_string(text: str) -> str:
    """Redact secrets from a string."""
    if not text:
        return text

    result = text
    for pattern, replacement in _PATTERNS:
        result = pattern.sub(replacement, result)
    return result


def redact_dict(data: Dict[str, Any]) -> Dict[str, Any]:
    """Recursively redact secrets from a dictionary."""
    if not isinstance(data, dict):
        return data

    redacted = {}
    for key, value in data.items():
        if isinstance(key, str) and key.lower() in SECRET_KEYS:
            redacted[key] = REDACTED
        else:
            redacted[key] = redact_json(value)
    return redacted


def redact_json(data: Any) -> Any:
    """Redact secrets from JSON-serializable data."""
    if isinstance(data, dict):
        return redact_dict(data)
    elif isinstance(data, list):
        return [redact_json(item) for item in data]
    elif isinstance(data, str):
        return redact_string(data)
    else:
        return data


def redact_body(text: str, limit: int = 500) -> str:
    """Redact a response body for logging, walking it as JSON when it parses."""
    try:
        data = json.loads(text)
    except ValueError:
        return redact_string(text[:limit])
    return json.dumps(redact_json(data))[:limit]
