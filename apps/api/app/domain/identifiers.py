"""Record identifier rules."""

import re
import secrets

_OBJECT_ID_PATTERN = re.compile(r"^[0-9a-fA-F]{24}$")


def new_object_id() -> str:
    """Return a fresh 24-hex-character identifier."""
    return secrets.token_hex(12)


def is_object_id(value: object) -> bool:
    return isinstance(value, str) and _OBJECT_ID_PATTERN.fullmatch(value) is not None
