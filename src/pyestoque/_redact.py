"""Helpers for safe debug logging.

Request and response bodies carry login passwords, company documents
(CNPJ), contact details and inline base64 images (product photos and
company logos). :func:`redact_for_log` masks or summarizes those before
they reach DEBUG logs.
"""

from __future__ import annotations

import re
from collections.abc import Mapping, Sequence
from typing import Any

#: Keys whose value is dropped entirely.
_SECRET_KEYS: frozenset[str] = frozenset(
    {
        "password",
        "token",
        "accesstoken",
        "refreshtoken",
        "authorization",
        "cookie",
        "set-cookie",
    }
)

#: Keys whose value keeps only its last digits.
_DOCUMENT_KEYS: frozenset[str] = frozenset({"cnpj", "cpf"})

_MAX_DEPTH = 20
_ASCII_DIGITS = frozenset("0123456789")
_VISIBLE_DIGITS = 2
_DATA_URL = re.compile(r"^data:(?P<mime>[\w.+-]+/[\w.+-]+)?(;base64)?,", re.IGNORECASE)


def _mask_digits(text: str) -> str:
    """``12.345.678/0001-90`` -> ``**.***.***/****-90``."""
    total = sum(ch in _ASCII_DIGITS for ch in text)
    seen = 0
    masked = []
    for ch in text:
        if ch in _ASCII_DIGITS:
            seen += 1
            masked.append(ch if seen > total - _VISIBLE_DIGITS else "*")
        else:
            masked.append(ch)
    return "".join(masked)


def _mask_email(text: str) -> str:
    _, sep, domain = text.partition("@")
    return f"***@{domain}" if sep else "<redacted>"


def _redact_field(key: str, value: Any, *, max_string: int, depth: int) -> Any:
    lowered = key.lower()
    if lowered in _SECRET_KEYS:
        return "<redacted>"
    if value is None:
        return None
    if lowered in _DOCUMENT_KEYS and isinstance(value, str):
        return _mask_digits(value)
    if lowered == "email" and isinstance(value, str):
        return _mask_email(value)
    if lowered.startswith("phone"):
        # Company phones arrive as a list of {"number", "isWhatsapp"}.
        if isinstance(value, Sequence) and not isinstance(value, str):
            return f"<redacted:{len(value)} phone(s)>"
        return "<redacted>"
    return redact_for_log(value, max_string=max_string, _depth=depth + 1)


def redact_for_log(value: Any, *, max_string: int = 512, _depth: int = 0) -> Any:
    """Return a redacted copy of *value* suitable for debug logs."""
    if _depth > _MAX_DEPTH:
        return "<max-depth>"

    if value is None or isinstance(value, (int, float, bool)):
        return value

    if isinstance(value, str):
        match = _DATA_URL.match(value)
        if match:
            return f"<data-url:{match.group('mime') or 'unknown'},{len(value) - match.end()}b>"
        if len(value) > max_string:
            return f"{value[:max_string]}…<truncated>"
        return value

    if isinstance(value, (bytes, bytearray)):
        return f"<bytes:{len(value)}b>"

    if isinstance(value, Mapping):
        return {
            str(k): _redact_field(str(k), v, max_string=max_string, depth=_depth) for k, v in value.items()
        }

    if isinstance(value, Sequence):
        return [redact_for_log(v, max_string=max_string, _depth=_depth + 1) for v in value]

    return repr(value)
