# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

import re
from typing import Any

MASK = "***REDACTED***"


def _rule(pattern: str) -> tuple[re.Pattern[str], str]:
    # Group 1 is the label kept in front of the mask.
    return re.compile(pattern, re.IGNORECASE), rf"\1{MASK}"


_QUOTED = r"\s*[:=]\s*['\"]?)"

SENSITIVE_RULES = (
    _rule(r"(secret[_-]?key" + _QUOTED + r"([\w\-]{8,})"),
    _rule(r"(bearer\s+)([\w\-.]{20,})"),
    _rule(r"(token" + _QUOTED + r"([\w\-.]{20,})"),
    _rule(r"(treasury_session\s*=\s*)([\w\-.]{20,})"),
    _rule(r"(password" + _QUOTED + r"([^'\"\s]{6,})"),
    _rule(r"(proof" + _QUOTED + r"([^'\"\s]{6,})"),
    _rule(r"(salt" + _QUOTED + r"([\w\-+/=]{8,})"),
    _rule(r"(claim[_-]?code" + _QUOTED + r"([a-z0-9]{6,})"),
    _rule(r"((?:pbkdf2|scrypt):[\w:]+\$)(\S+)"),
    _rule(r"(\w+(?:\+\w+)?://[^:/@\s]+:)([^@\s]+)(?=@)"),
    _rule(r"((?:authorization|cookie)\s*:\s*)(.{10,})"),
)


def sanitize_message(message: str) -> str:
    for pattern, replacement in SENSITIVE_RULES:
        message = pattern.sub(replacement, message)
    return message


def sanitize_record(record: dict[str, Any]) -> bool:
    """loguru filter: masks credentials in place and never drops the record."""
    if "message" in record:
        record["message"] = sanitize_message(record["message"])
    return True
