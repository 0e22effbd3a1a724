from __future__ import annotations

import json
import logging
from urllib.parse import urlsplit

import requests

from ..errors import ParseError, TransportError
from ..utils import Timer, payload_snippet_from_bytes
from .base import LookupResult

logger = logging.getLogger(__name__)

USER_AGENT = "cep-race/0.1.0"
DEFAULT_REQUEST_TIMEOUT_SECONDS = 5.0


def _reject_constant(name: str) -> None:
    # NaN and Infinity are not JSON.
    raise ValueError(f"invalid JSON constant {name}")


def _source_id(endpoint: str) -> str:
    return urlsplit(endpoint).netloc or endpoint


def fetch_json(
    endpoint: str,
    *,
    session: requests.Session | None = None,
    timeout_seconds: float = DEFAULT_REQUEST_TIMEOUT_SECONDS,
) -> LookupResult:
    """
    GET ``endpoint`` once and parse the body as a JSON object.

    Raises TransportError when the request cannot be built, fails at the
    connection level or answers with an HTTP error status, and ParseError when
    the body is not JSON or its top level is not an object. No retries.
    """
    source_id = _source_id(endpoint)
    sess = session or requests.Session()
    t = Timer.start_new()
    logger.debug("GET %s", endpoint, extra={"source": source_id})
    try:
        resp = sess.get(endpoint, headers={"User-Agent": USER_AGENT}, timeout=timeout_seconds)
        # Read the whole body before parsing.
        body = resp.content
    except requests.RequestException as exc:
        raise TransportError(source_id, f"error occurred while attempting to call {endpoint}: {exc}") from exc
    finally:
        if session is None:
            sess.close()

    logger.debug(
        "Response received",
        extra={"source": source_id, "status_code": resp.status_code, "duration_ms": t.elapsed_ms()},
    )
    if resp.status_code >= 400:
        raise TransportError(source_id, f"HTTP error {resp.status_code} from {endpoint}", http_status=resp.status_code)

    try:
        payload = json.loads(body, parse_constant=_reject_constant)
    except (ValueError, RecursionError) as exc:
        raise ParseError(
            source_id,
            f"error encountered while attempting to parse the response body of {endpoint}",
            http_status=resp.status_code,
            debug_snippet=payload_snippet_from_bytes(body),
        ) from exc

    if not isinstance(payload, dict):
        raise ParseError(
            source_id,
            f"expected a JSON object from {endpoint}, got {type(payload).__name__}",
            http_status=resp.status_code,
            debug_snippet=payload_snippet_from_bytes(body),
        )
    return payload
