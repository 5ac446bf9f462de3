"""Credential-safe logging module -- drop-in replacement for print().

Redacts API keys and bearer tokens from structured arguments before the
line is written to stdout.

Usage:
    from loanchain.common.safe_log import safe_log
    safe_log("Calling remote extractor", url=url, data=headers)
"""

import copy
import json
from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from typing import Any, Optional, Set

MAX_DATA_CHARS = 10240

# Field names whose values must never reach the logs
_SECRET_FIELDS = {
    "apiKey", "api_key", "groq_api_key", "groqApiKey",
    "authorization", "Authorization",
    "token", "accessToken", "access_token",
}


def _redact_secret(value: Any) -> str:
    text = str(value)
    if text.lower().startswith("bearer "):
        text = text[7:]
    return f"****{text[-4:]}" if len(text) >= 12 else "****"


def _redact_by_field_name(data: Any, visited: Optional[Set[int]] = None) -> Any:
    """Walk structure and redact known secret field names."""
    if visited is None:
        visited = set()
    obj_id = id(data)
    if obj_id in visited:
        return data
    visited.add(obj_id)

    if isinstance(data, dict):
        result = {}
        for k, v in data.items():
            if k in _SECRET_FIELDS and v:
                result[k] = _redact_secret(v)
            else:
                result[k] = _redact_by_field_name(v, visited)
        return result
    elif isinstance(data, list):
        return [_redact_by_field_name(item, visited) for item in data]
    return data


def redact_secrets(data: Any) -> Any:
    """Deep-copy data and redact all credential fields."""
    if data is None:
        return None
    try:
        redacted = copy.deepcopy(data)
    except Exception:
        return {"__redacted__": "deep copy failed"}
    return _redact_by_field_name(redacted)


class _SafeEncoder(json.JSONEncoder):
    def default(self, obj):
        if isinstance(obj, Decimal):
            return float(obj)
        if isinstance(obj, (datetime, date)):
            return obj.isoformat()
        if isinstance(obj, Enum):
            return obj.value
        if isinstance(obj, bytes):
            return "<bytes>"
        return str(obj)


def _encode(value: Any) -> str:
    return json.dumps(redact_secrets(value), cls=_SafeEncoder)


def safe_log(message: str, *args, data: Any = None, **kwargs) -> None:
    """Credential-safe logging function."""
    timestamp = datetime.utcnow().strftime("%Y-%m-%dT%H:%M:%S.%fZ")
    parts = [f"[{timestamp}]", message]

    for arg in args:
        if isinstance(arg, (dict, list)):
            parts.append(_encode(arg))
        else:
            parts.append(str(arg))

    for k, v in kwargs.items():
        if isinstance(v, (dict, list)):
            parts.append(f"{k}={_encode(v)}")
        elif k in _SECRET_FIELDS and v:
            parts.append(f"{k}={_redact_secret(v)}")
        else:
            parts.append(f"{k}={v}")

    if data is not None:
        try:
            data_str = _encode(data)
            if len(data_str) > MAX_DATA_CHARS:
                data_str = data_str[:MAX_DATA_CHARS] + "... [TRUNCATED]"
            parts.append(data_str)
        except (TypeError, ValueError):
            parts.append(str(redact_secrets(data))[:MAX_DATA_CHARS])

    print(" ".join(parts), flush=True)
