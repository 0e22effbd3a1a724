from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Any, ClassVar


@dataclass(frozen=True)
class InvalidInputError(Exception):
    candidate: str
    message: str = "invalid CEP format. It should be 00000-000."
    code: ClassVar[str] = "INVALID_INPUT"

    def __str__(self) -> str:
        return f"{self.message} (got {self.candidate!r})"

    def to_dict(self) -> dict[str, Any]:
        return {"code": self.code, "message": self.message, "candidate": self.candidate}


@dataclass(frozen=True)
class ConfigurationError(Exception):
    message: str
    code: ClassVar[str] = "CONFIGURATION_ERROR"

    def __str__(self) -> str:
        return self.message

    def to_dict(self) -> dict[str, Any]:
        return {"code": self.code, "message": self.message}


@dataclass(frozen=True)
class SourceError(Exception):
    source_id: str
    message: str
    http_status: int | None = None
    code: ClassVar[str] = "SOURCE_ERROR"

    def __str__(self) -> str:
        return f"[{self.source_id}] {self.message}"

    def for_source(self, source_id: str) -> "SourceError":
        """Same error attributed to ``source_id``, keeping cause and traceback."""
        if source_id == self.source_id:
            return self
        renamed = replace(self, source_id=source_id).with_traceback(self.__traceback__)
        object.__setattr__(renamed, "__cause__", self.__cause__)
        return renamed

    def to_dict(self) -> dict[str, Any]:
        return {
            "code": self.code,
            "source_id": self.source_id,
            "message": self.message,
            "http_status": self.http_status,
        }


@dataclass(frozen=True)
class TransportError(SourceError):
    code: ClassVar[str] = "TRANSPORT_ERROR"


@dataclass(frozen=True)
class ParseError(SourceError):
    debug_snippet: str | None = None
    code: ClassVar[str] = "PARSE_ERROR"


@dataclass(frozen=True)
class RaceTimeoutError(Exception):
    timeout_seconds: float
    source_ids: tuple[str, ...]
    code: ClassVar[str] = "TIMEOUT"

    def __str__(self) -> str:
        names = " and ".join(self.source_ids)
        return f"the request to {names} exceeded {self.timeout_seconds:g} second(s), resulting in a timeout."

    def to_dict(self) -> dict[str, Any]:
        return {
            "code": self.code,
            "message": str(self),
            "timeout_seconds": self.timeout_seconds,
            "sources": list(self.source_ids),
        }


@dataclass(frozen=True)
class AllSourcesFailedError(Exception):
    failures: tuple[SourceError, ...]
    code: ClassVar[str] = "ALL_SOURCES_FAILED"

    def __str__(self) -> str:
        return "every source failed: " + "; ".join(str(f) for f in self.failures)

    def to_dict(self) -> dict[str, Any]:
        return {
            "code": self.code,
            "message": "every source failed",
            "failures": [f.to_dict() for f in self.failures],
        }
