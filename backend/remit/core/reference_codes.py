"""Reference Codes — short human-readable transfer identifiers.

Invariants:
    - Format: "<PREFIX>-" followed by `length` characters of REFERENCE_ALPHABET
    - Alphabet excludes confusable characters (0/O, 1/I)
    - Uniqueness is NOT decided here: the store's unique constraint is the arbiter,
      callers regenerate on collision up to a bounded number of attempts
"""

import re
import secrets

REFERENCE_ALPHABET = "23456789ABCDEFGHJKLMNPQRSTUVWXYZ"
DEFAULT_PREFIX = "FX"
DEFAULT_LENGTH = 6

LOOKUP_PATTERN = re.compile(r"^[A-Z0-9-]{4,20}$")


def generate_reference_code(
    prefix: str = DEFAULT_PREFIX, length: int = DEFAULT_LENGTH,
) -> str:
    suffix = "".join(secrets.choice(REFERENCE_ALPHABET) for _ in range(length))
    return f"{prefix}-{suffix}"


def reference_pattern(
    prefix: str = DEFAULT_PREFIX, length: int = DEFAULT_LENGTH,
) -> re.Pattern[str]:
    """Exact pattern a freshly generated reference code matches."""
    return re.compile(
        rf"^{re.escape(prefix)}-[{REFERENCE_ALPHABET}]{{{length}}}$",
    )


def normalize_lookup_reference(raw: str) -> str | None:
    """Upper-case a caller-supplied reference; None when it cannot be a reference."""
    reference = raw.strip().upper()
    if not LOOKUP_PATTERN.match(reference):
        return None
    return reference
