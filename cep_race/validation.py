from __future__ import annotations

import re
from dataclasses import dataclass
from functools import lru_cache
from typing import Any

from .errors import ConfigurationError, InvalidInputError

# ASCII only: \d would also accept other Unicode decimal digits.
CEP_PATTERN = r"[0-9]{5}-[0-9]{3}"


def compile_pattern(pattern: str) -> re.Pattern[str]:
    try:
        return re.compile(pattern)
    except re.error as exc:
        raise ConfigurationError(f"error occurred during regex compilation: {exc}") from exc


@lru_cache(maxsize=1)
def _cep_regex() -> re.Pattern[str]:
    return compile_pattern(CEP_PATTERN)


def validate(candidate: Any) -> bool:
    """Return True iff ``candidate`` is exactly ``DDDDD-DDD``."""
    if not isinstance(candidate, str):
        return False
    return _cep_regex().fullmatch(candidate) is not None


@dataclass(frozen=True)
class LookupKey:
    value: str

    def __post_init__(self) -> None:
        if not validate(self.value):
            raise InvalidInputError(candidate=str(self.value))

    @classmethod
    def parse(cls, candidate: Any) -> "LookupKey":
        return cls(value=candidate)

    def __str__(self) -> str:
        return self.value
