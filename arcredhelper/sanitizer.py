#  SPDX-License-Identifier: MPL-2.0
#  Copyright 2025-present John Mille <john@ews-network.net>

"""Keep access tokens and JSON keys out of log output.

Secrets are registered as soon as they are obtained. Log messages, and the
config file previews logged at debug level, are passed through
:func:`sanitize_string` before they are written.
"""

from __future__ import annotations

import re
import threading
from typing import Any


MASK = "****"
VISIBLE_CHARS = 4

SENSITIVE_KEY_PATTERNS = [
    re.compile(pattern, re.IGNORECASE)
    for pattern in (r"password", r"secret", r"token", r"authorization", r"_?key$")
]

# Secret-bearing lines of the config files this tool writes
_CONFIG_SECRET_PATTERNS = [
    re.compile(r"^(password )(\S+)$", re.MULTILINE),
    re.compile(r"^(\S+:_authToken=)(\S+)$", re.MULTILINE),
    re.compile(r"(<password>)([^<]+)(?=</password>)"),
]


def mask(value: str) -> str:
    """Keep the first four characters of a secret, or nothing of a short one."""
    if not value:
        return value
    if len(value) <= VISIBLE_CHARS:
        return MASK
    return value[:VISIBLE_CHARS] + MASK


class SensitiveValueSanitizer:
    """Thread-safe registry of secret values to redact from text."""

    def __init__(self):
        self._values: set[str] = set()
        self._lock = threading.RLock()

    def register(self, value: str) -> None:
        # Very short values would mask unrelated text
        if isinstance(value, str) and len(value) >= VISIBLE_CHARS:
            with self._lock:
                self._values.add(value)

    def sanitize_string(self, text: str) -> str:
        if not text or not isinstance(text, str):
            return text

        with self._lock:
            # Longest first so a token inside a longer key is not half masked
            values = sorted(self._values, key=len, reverse=True)
        for value in values:
            text = text.replace(value, mask(value))
        return text

    def clear(self) -> None:
        with self._lock:
            self._values.clear()


_SANITIZER = SensitiveValueSanitizer()


def register_sensitive_value(value: str) -> None:
    _SANITIZER.register(value)


def clear_sensitive_values() -> None:
    _SANITIZER.clear()


def sanitize_string(text: str) -> str:
    """Replace every registered secret found in ``text``."""
    return _SANITIZER.sanitize_string(text)


def redact_config_content(content: str) -> str:
    """Mask netrc passwords, npm ``_authToken`` values and Maven passwords."""
    for pattern in _CONFIG_SECRET_PATTERNS:
        content = pattern.sub(
            lambda match: match.group(1) + mask(match.group(2)), content
        )
    return sanitize_string(content)


def _is_sensitive_key(key: str) -> bool:
    return any(pattern.search(key) for pattern in SENSITIVE_KEY_PATTERNS)


def sanitize_for_logging(data: Any) -> Any:
    """
    Recursively mask the values of sensitive looking keys.

    Strings found anywhere else only lose their registered secrets.

    Args:
        data: dict, list, tuple, string or any other value

    Returns:
        A sanitized copy of ``data``
    """
    if isinstance(data, dict):
        return {
            key: _sanitize_item(key, value) for key, value in data.items()
        }
    if isinstance(data, (list, tuple)):
        return type(data)(sanitize_for_logging(item) for item in data)
    if isinstance(data, str):
        return sanitize_string(data)
    return data


def _sanitize_item(key: Any, value: Any) -> Any:
    if not (isinstance(key, str) and _is_sensitive_key(key)):
        return sanitize_for_logging(value)
    if value is None or isinstance(value, (dict, list, tuple)):
        return sanitize_for_logging(value)
    return mask(str(value))
