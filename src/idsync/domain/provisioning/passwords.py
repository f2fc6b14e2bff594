"""Random initial passwords for provisioned accounts."""

from __future__ import annotations

import secrets
import string
from dataclasses import dataclass
from typing import Final

LOWERCASE: Final[str] = string.ascii_lowercase
UPPERCASE: Final[str] = string.ascii_uppercase
DIGITS: Final[str] = string.digits
SYMBOLS: Final[str] = "!#$%&()*+-.:;<=>?@[]^_{}~"

_random = secrets.SystemRandom()


@dataclass(frozen=True, slots=True)
class PasswordPolicy:
    """Minimum number of characters drawn from each disjoint character class."""

    lowercase: int = 4
    uppercase: int = 4
    digits: int = 3
    symbols: int = 3

    def __post_init__(self) -> None:
        counts = (self.lowercase, self.uppercase, self.digits, self.symbols)
        if any(count < 1 for count in counts):
            raise ValueError("Every character class needs at least one character")

    @property
    def length(self) -> int:
        return self.lowercase + self.uppercase + self.digits + self.symbols


def generate_password(policy: PasswordPolicy | None = None) -> str:
    """Return a password satisfying ``policy`` with class boundaries shuffled away."""

    rule = policy or PasswordPolicy()
    characters = [
        *(secrets.choice(LOWERCASE) for _ in range(rule.lowercase)),
        *(secrets.choice(UPPERCASE) for _ in range(rule.uppercase)),
        *(secrets.choice(DIGITS) for _ in range(rule.digits)),
        *(secrets.choice(SYMBOLS) for _ in range(rule.symbols)),
    ]
    _random.shuffle(characters)
    return "".join(characters)
