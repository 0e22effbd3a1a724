from __future__ import annotations

import logging
from dataclasses import dataclass
from functools import partial

from .config import LookupConfig
from .errors import InvalidInputError
from .race import RaceOutcome, race
from .sources.base import Fetcher
from .sources.http_json import fetch_json
from .validation import LookupKey

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_LOOKUP_FAILED = 1
EXIT_INVALID = 2


@dataclass(frozen=True)
class LookupReport:
    candidate: str
    key: LookupKey | None
    outcome: RaceOutcome | None
    error: InvalidInputError | None
    exit_code: int

    @property
    def ok(self) -> bool:
        return self.exit_code == EXIT_OK


def run_lookup(*, candidate: str, config: LookupConfig, fetch: Fetcher | None = None) -> LookupReport:
    """Validate ``candidate`` and race the configured sources for it."""
    try:
        key = LookupKey.parse(candidate)
    except InvalidInputError as exc:
        logger.warning("Rejected CEP %r", candidate)
        return LookupReport(candidate=candidate, key=None, outcome=None, error=exc, exit_code=EXIT_INVALID)

    if fetch is None:
        fetch = partial(fetch_json, timeout_seconds=config.request_timeout_seconds)

    outcome = race(key, config.sources, config.timeout_seconds, fetch=fetch, fail_fast=config.fail_fast)
    return LookupReport(
        candidate=candidate,
        key=key,
        outcome=outcome,
        error=None,
        exit_code=EXIT_OK if outcome.ok else EXIT_LOOKUP_FAILED,
    )
