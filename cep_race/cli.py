from __future__ import annotations

import argparse
import sys
from pathlib import Path
from typing import Any

from .config import load_config
from .errors import ConfigurationError
from .logging_config import configure_logging
from .pipeline import EXIT_INVALID, LookupReport, run_lookup
from .utils import exception_payload, json_dumps, utc_now_iso

PROMPT = "Please enter the CEP:"


def _parse_args(argv: list[str] | None) -> argparse.Namespace:
    p = argparse.ArgumentParser(
        prog="cep-race",
        add_help=True,
        description="Look up a CEP on ApiCep and ViaCep at the same time and keep the fastest answer.",
    )
    p.add_argument("cep", nargs="?", help="CEP to look up (00000-000). Read from stdin when omitted.")
    p.add_argument("--config", help="Path to a JSON configuration file.")
    p.add_argument("--timeout", type=float, help="Deadline in seconds for the whole lookup (default: 1).")
    p.add_argument(
        "--fail-fast",
        action="store_true",
        help="Give up as soon as any source fails instead of waiting for the others.",
    )
    p.add_argument("--json", dest="as_json", action="store_true", help="Print the outcome as JSON.")
    p.add_argument(
        "--debug",
        action="store_true",
        help="Debug logging, and tracebacks in JSON error payloads.",
    )
    return p.parse_args(argv)


def _read_cep(as_json: bool) -> str:
    print(PROMPT, file=sys.stderr if as_json else sys.stdout, flush=True)
    return sys.stdin.readline().strip()


def _report_payload(report: LookupReport, debug: bool) -> dict[str, Any]:
    payload: dict[str, Any] = {
        "cep": report.candidate,
        "ok": report.ok,
        "exit_code": report.exit_code,
        "finished_at": utc_now_iso(),
        "winner": None,
        "result": None,
        "elapsed_ms": None,
        "error": None,
        "failures": {},
    }
    if report.error is not None:
        payload["error"] = exception_payload(report.error, debug=debug)
    outcome = report.outcome
    if outcome is not None:
        payload["elapsed_ms"] = outcome.elapsed_ms
        payload["failures"] = {name: exc.to_dict() for name, exc in outcome.failures.items()}
        if outcome.ok:
            payload["winner"] = outcome.winner.name
            payload["result"] = outcome.result
        else:
            payload["error"] = exception_payload(outcome.error, debug=debug)
    return payload


def _print_report(report: LookupReport) -> None:
    if report.error is not None:
        print(f"error: {report.error}", file=sys.stderr)
        return
    outcome = report.outcome
    if outcome.ok:
        print(f"{outcome.winner.name} answered first ({outcome.elapsed_ms}ms):")
        print(json_dumps(outcome.result))
        return
    print(f"error: {outcome.error}", file=sys.stderr)


def main(argv: list[str] | None = None) -> int:
    args = _parse_args(argv)
    configure_logging(debug=args.debug, json_format=args.as_json)

    try:
        config = load_config(Path(args.config).expanduser() if args.config else None)
        config = config.with_overrides(
            timeout_seconds=args.timeout,
            fail_fast=True if args.fail_fast else None,
        )
    except ConfigurationError as exc:
        print(f"configuration error: {exc}", file=sys.stderr)
        return EXIT_INVALID

    candidate = args.cep if args.cep is not None else _read_cep(args.as_json)
    report = run_lookup(candidate=candidate, config=config)

    if args.as_json:
        print(json_dumps(_report_payload(report, debug=args.debug)))
    else:
        _print_report(report)
    return report.exit_code
