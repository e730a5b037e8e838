"""Human-readable order numbers: ``SK-<base36 ms timestamp>-<4 random base36 chars>``.

Callers must treat the value as an opaque unique token.
"""

import secrets
import time

ORDER_NUMBER_PREFIX = "SK"
MAX_ATTEMPTS = 5

_ALPHABET = "0123456789ABCDEFGHIJKLMNOPQRSTUVWXYZ"


def to_base36(number: int) -> str:
    if number == 0:
        return "0"
    digits = []
    while number:
        number, remainder = divmod(number, 36)
        digits.append(_ALPHABET[remainder])
    return "".join(reversed(digits))


def generate_order_number(prefix=ORDER_NUMBER_PREFIX, now_ms=None) -> str:
    timestamp = to_base36(int(now_ms if now_ms is not None else time.time() * 1000))
    suffix = "".join(secrets.choice(_ALPHABET) for _ in range(4))
    return f"{prefix}-{timestamp}-{suffix}"


def next_order_number(is_taken, generate=generate_order_number) -> str | None:
    """Return a number for which ``is_taken(number)`` is false, or None after MAX_ATTEMPTS."""
    for _ in range(MAX_ATTEMPTS):
        candidate = generate()
        if not is_taken(candidate):
            return candidate
    return None
