"""Utilities for safe structured logging fields."""

from __future__ import annotations

import hashlib
from typing import Any


def safe_log_identifier(value: Any, *, prefix: str) -> str:
    """Return a deterministic non-reversible token for log correlation fields."""
    text = str(value or "").strip()
    if not text:
        return f"{prefix}-missing"

    digest = hashlib.sha256(text.encode("utf-8")).hexdigest()[:12]
    return f"{prefix}-{digest}"


def mask_email(email: str | None) -> str:
    """Keep the first local character and the domain, e.g. ``r***@example.com``."""
    text = (email or "").strip()
    local, sep, domain = text.partition("@")
    if not sep or not local:
        return "email-invalid"
    return f"{local[0]}***@{domain}"
