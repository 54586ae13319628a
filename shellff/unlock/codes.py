from __future__ import annotations

import re
import secrets
import string

from shellff.unlock.constants import DEFAULT_BATCH_MAX

CODE_PREFIX = "SHF"
CODE_ALPHABET = string.ascii_uppercase + string.digits
CODE_SEGMENT_LENGTH = 4
CODE_SEGMENT_COUNT = 2
UNLOCK_CODE_PATTERN = re.compile(r"^SHF-[A-Z0-9]{4}-[A-Z0-9]{4}$")


def _generate_segment(length: int) -> str:
    return "".join(secrets.choice(CODE_ALPHABET) for _ in range(length))


def generate_unique_code() -> str:
    segments = [_generate_segment(CODE_SEGMENT_LENGTH) for _ in range(CODE_SEGMENT_COUNT)]
    return "-".join([CODE_PREFIX, *segments])


def generate_batch_codes(
    quantity: int,
    *,
    existing_codes: set[str] | None = None,
    max_quantity: int = DEFAULT_BATCH_MAX,
) -> list[str]:
    """Return ``quantity`` distinct codes that are not in ``existing_codes``.

    Collisions are simply redrawn. ``max_quantity`` (``UNLOCK_CODE_BATCH_MAX`` in
    settings) keeps the loop far below the 36**8 code space.
    """
    if quantity <= 0:
        raise ValueError("quantity must be positive")
    if quantity > max_quantity:
        raise ValueError(f"quantity must not exceed {max_quantity}")

    taken = set(existing_codes) if existing_codes is not None else set()
    generated: list[str] = []
    while len(generated) < quantity:
        code = generate_unique_code()
        if code in taken:
            continue
        taken.add(code)
        generated.append(code)

    return generated


def normalize_unlock_code(raw_code: str) -> str:
    return raw_code.strip().upper()


def validate_code_format(code: str) -> bool:
    return UNLOCK_CODE_PATTERN.fullmatch(code) is not None
