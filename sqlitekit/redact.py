"""Secret redaction for logged query parameters."""

from __future__ import annotations

import re
from typing import Any, Iterable, Mapping

MASK = "[REDACTED]"

_PATTERNS: list[tuple[re.Pattern[str], str]] = [
    (re.compile(r"\bsk-[A-Za-z0-9]{10,}\b"), "sk-[REDACTED]"),
    (re.compile(r"Bearer\s+[A-Za-z0-9_\-\.=]+", re.IGNORECASE), "Bearer [REDACTED]"),
    (re.compile(r"\b[A-Za-z0-9._%+-]+@[A-Za-z0-9.-]+\.[A-Za-z]{2,}\b"), "[REDACTED_EMAIL]"),
]

# Parameter names whose values are never logged.
_SENSITIVE_KEY = re.compile(r"pass(word|wd)?|secret|token|api_?key|credential", re.IGNORECASE)


def redact_text(text: str, extra_patterns: Iterable[tuple[re.Pattern[str], str]] | None = None) -> str:
    """Strip tokens and e-mail addresses from *text*."""
    patterns = list(_PATTERNS)
    if extra_patterns:
        patterns.extend(extra_patterns)

    redacted = text
    for pattern, repl in patterns:
        redacted = pattern.sub(repl, redacted)
    return redacted


def _redact_value(value: Any) -> Any:
    if isinstance(value, str):
        return redact_text(value)
    if isinstance(value, (bytes, bytearray, memoryview)):
        return f"<{len(value)} bytes>"
    return value


def redact_params(params: Any) -> Any:
    """
    Return a log-safe copy of a bound parameter set.

    Mapping values under sensitive keys are replaced by ``[REDACTED]``;
    string values are passed through :func:`redact_text`. The shape
    (mapping vs. sequence) is preserved.
    """
    if params is None:
        return None
    if isinstance(params, Mapping):
        return {
            key: MASK if isinstance(key, str) and _SENSITIVE_KEY.search(key) else _redact_value(value)
            for key, value in params.items()
        }
    if isinstance(params, (list, tuple)):
        # executemany passes a list of parameter sets
        return [redact_params(v) if isinstance(v, (Mapping, list, tuple)) else _redact_value(v) for v in params]
    return _redact_value(params)
