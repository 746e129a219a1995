from __future__ import annotations

import secrets
import time

_ALPHABET = "0123456789abcdefghijklmnopqrstuvwxyz"


def _to_base36(value: int) -> str:
    if value == 0:
        return "0"
    digits: list[str] = []
    while value:
        value, rem = divmod(value, 36)
        digits.append(_ALPHABET[rem])
    return "".join(reversed(digits))


def generate_id() -> str:
    """Return a session-unique identifier.

    Millisecond clock in base 36 followed by 64 random bits in base 36.
    Not globally unique and not meant to sort.
    """
    stamp = _to_base36(int(time.time() * 1000))
    entropy = _to_base36(secrets.randbits(64))
    return f"{stamp}{entropy}"


__all__ = ["generate_id"]
