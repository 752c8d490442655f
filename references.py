from dataclasses import dataclass, field
from secrets import token_bytes
from typing import Mapping

from english_score import ENGLISH_TEXT_FREQUENCY

# AES-128
BLOCK_SIZE = 16


@dataclass(frozen=True)
class CryptReferences:
    """
    Fixed values that are made once per process and then handed to whoever needs them: the key and secret
    that an oracle holds, and the reference letter frequencies for scoring

    >>> refs = CryptReferences.generate(secret=b"Hack the planet")
    >>> len(refs.key), refs.secret
    (16, b'Hack the planet')
    >>> CryptReferences(key=b"too short", secret=b"")
    Traceback (most recent call last):
    ValueError: Key must be 16 bytes, got 9
    """
    key: bytes
    secret: bytes
    frequencies: Mapping[str, float] = field(default_factory=lambda: ENGLISH_TEXT_FREQUENCY, repr=False)

    def __post_init__(self):
        if len(self.key) != BLOCK_SIZE:
            raise ValueError(f"Key must be {BLOCK_SIZE} bytes, got {len(self.key)}")

    @classmethod
    def generate(cls, secret: bytes) -> "CryptReferences":
        """
        Pick a random key from the system's secure random source. There is no fallback if that fails
        """
        return cls(key=token_bytes(BLOCK_SIZE), secret=bytes(secret))
