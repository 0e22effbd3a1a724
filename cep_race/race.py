from __future__ import annotations

import logging
import time
from concurrent.futures import FIRST_COMPLETED, Future, ThreadPoolExecutor, wait
from dataclasses import dataclass, field
from datetime import timedelta
from typing import Sequence, Union

from .errors import AllSourcesFailedError, RaceTimeoutError, SourceError
from .sources.base import Fetcher, LookupResult, SourceDescriptor
from .sources.factory import MAX_SOURCES
from .sources.http_json import fetch_json
from .utils import Timer
from .validation import LookupKey

logger = logging.getLogger(__name__)

RaceError = Union[RaceTimeoutError, AllSourcesFailedError, SourceError]


@dataclass(frozen=True)
class RaceOutcome:
    """
    Tagged result of one race: either ``winner``/``result`` or ``error``.

    ``failures`` holds the sources that errored before the race was decided,
    keyed by source name. Results of sources still in flight when the race
    was decided are never read.
    """

    winner: SourceDescriptor | None
    result: LookupResult | None
    error: RaceError | None
    elapsed_ms: int
    failures: dict[str, SourceError] = field(default_factory=dict)

    def __post_init__(self) -> None:
        if (self.winner is None) == (self.error is None):
            raise ValueError("RaceOutcome needs exactly one of winner or error")
        if (self.winner is None) != (self.result is None):
            raise ValueError("RaceOutcome winner and result go together")

    @property
    def ok(self) -> bool:
        return self.winner is not None


def _failed_last(future: Future) -> bool:
    return future.exception() is not None


def race(
    key: LookupKey,
    sources: Sequence[SourceDescriptor],
    timeout: float | timedelta,
    *,
    fetch: Fetcher | None = None,
    fail_fast: bool = False,
) -> RaceOutcome:
    """
    Query every source concurrently and keep the first successful answer.

    A source that fails drops out of the race while the others keep running
    until the deadline, unless ``fail_fast`` is set, in which case its error
    decides the race. Completions observed in the same wake-up are taken
    successes first, otherwise in arbitrary order.
    """
    if isinstance(timeout, timedelta):
        timeout = timeout.total_seconds()
    if timeout <= 0:
        raise ValueError(f"timeout must be positive, got {timeout}")
    if not sources:
        raise ValueError("race needs at least one source")
    if len(sources) > MAX_SOURCES:
        raise ValueError(f"race supports at most {MAX_SOURCES} sources, got {len(sources)}")

    fetch = fetch or fetch_json
    t = Timer.start_new()
    deadline = time.monotonic() + timeout
    logger.info(
        "Racing %s for %s (deadline %gs)",
        ", ".join(s.name for s in sources),
        key,
        timeout,
    )

    executor = ThreadPoolExecutor(max_workers=len(sources), thread_name_prefix="cep-race")
    try:
        futures: dict[Future, SourceDescriptor] = {
            executor.submit(fetch, source.endpoint(key)): source for source in sources
        }
    finally:
        # Never join: whatever is still running when the race is decided is abandoned.
        executor.shutdown(wait=False)

    pending = set(futures)
    failures: dict[str, SourceError] = {}
    while pending:
        remaining = deadline - time.monotonic()
        if remaining <= 0:
            break
        done, pending = wait(pending, timeout=remaining, return_when=FIRST_COMPLETED)
        for future in sorted(done, key=_failed_last):
            source = futures[future]
            exc = future.exception()
            if exc is None:
                elapsed = t.elapsed_ms()
                logger.info("%s won the race", source.name, extra={"duration_ms": elapsed})
                return RaceOutcome(
                    winner=source,
                    result=future.result(),
                    error=None,
                    elapsed_ms=elapsed,
                    failures=failures,
                )
            if not isinstance(exc, SourceError):
                raise exc
            exc = exc.for_source(source.name)
            failures[source.name] = exc
            logger.warning("%s dropped out of the race", source.name, extra={"error": str(exc)})
            if fail_fast:
                return RaceOutcome(winner=None, result=None, error=exc, elapsed_ms=t.elapsed_ms(), failures=failures)

    error: RaceError
    if pending:
        error = RaceTimeoutError(timeout_seconds=timeout, source_ids=tuple(s.name for s in sources))
        logger.warning("No source answered within %gs", timeout)
    else:
        error = AllSourcesFailedError(failures=tuple(failures.values()))
        logger.warning("Every source failed for %s", key)
    return RaceOutcome(winner=None, result=None, error=error, elapsed_ms=t.elapsed_ms(), failures=failures)
