"""Content hashes used for change detection and dismissal fingerprints."""
from __future__ import annotations

import hashlib
import json

_BASE36_DIGITS = "0123456789abcdefghijklmnopqrstuvwxyz"


def _to_base36(value: int) -> str:
    if value == 0:
        return "0"
    sign = "-" if value < 0 else ""
    value = abs(value)
    digits: list[str] = []
    while value:
        value, remainder = divmod(value, 36)
        digits.append(_BASE36_DIGITS[remainder])
    return sign + "".join(reversed(digits))


def content_hash(text: str) -> str:
    """Return a 32-bit rolling hash of ``text`` rendered in base 36.

    Collisions are possible and accepted: a colliding edit is simply treated
    as unchanged until the next edit to the same unit.
    """

    value = 0
    for char in text:
        value = (value * 31 + ord(char)) & 0xFFFFFFFF
    if value >= 0x80000000:
        value -= 0x100000000
    return _to_base36(value)


def fingerprint(*parts: str) -> str:
    """Return a collision-resistant digest of the given string parts."""

    payload = json.dumps(list(parts), ensure_ascii=False, separators=(",", ":"))
    return hashlib.sha256(payload.encode("utf-8")).hexdigest()


__all__ = ["content_hash", "fingerprint"]
