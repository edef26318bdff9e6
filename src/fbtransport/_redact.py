"""Safe debug logging of record values and configuration.

Record values are caller data and the configuration points at service
account credentials, so both pass through :func:`redact_for_log` before
reaching a DEBUG log line.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

_SENSITIVE_KEYS: frozenset[str] = frozenset(
    {"auth", "credentials", "password", "private_key", "secret", "token"}
)


def redact_for_log(value: Any, *, max_string: int = 256) -> Any:
    """Return a JSON value with secrets masked and long strings cut."""
    if isinstance(value, str):
        if len(value) <= max_string:
            return value
        return f"{value[:max_string]}…<truncated {len(value)} chars>"
    if isinstance(value, Mapping):
        return {
            str(key): "<redacted>" if str(key).lower() in _SENSITIVE_KEYS else redact_for_log(item, max_string=max_string)
            for key, item in value.items()
        }
    if isinstance(value, list):
        return [redact_for_log(item, max_string=max_string) for item in value]
    return value
