from __future__ import annotations

import secrets

from ..core.constants import DIGITS, LETTERS
from ..policies.model import TokenGenerationConfig


def build_alphabet(config: TokenGenerationConfig) -> str:
    chars = ""
    if config.include_digits:
        chars += DIGITS
    if config.include_letters:
        chars += LETTERS
    # Both flags off: never produce an empty alphabet.
    return chars or LETTERS + DIGITS


def generate_code(config: TokenGenerationConfig) -> str:
    alphabet = build_alphabet(config)
    random_part = "".join(secrets.choice(alphabet) for _ in range(max(1, config.length)))
    return (config.prefix or "").upper() + random_part
