"""Command line interface for tlsgauge."""
from __future__ import annotations

import argparse
import os
import sys
from pathlib import Path
from typing import Sequence

from ..core.config import RuntimeConfig, load_config
from ..core.log import configure_logging
from ..core.models import ProbeTarget, SecurityAssessment
from ..core.pipeline import assess_many
from ..core.safemode import CONSENT_ENV, CONSENT_TOKEN, safe_mode
from ..reporting import to_json, to_markdown, to_sarif

_FORMATTERS = {
    "json": to_json,
    "md": to_markdown,
    "sarif": to_sarif,
}

EXIT_OK = 0
EXIT_ERROR = 1
EXIT_FAILED = 2
EXIT_UNREACHABLE = 3


def _merge_config(args: argparse.Namespace) -> RuntimeConfig:
    if args.consent:
        os.environ[CONSENT_ENV] = CONSENT_TOKEN
    config = load_config(
        cli_allowed_scopes=args.allowed_scope,
        cli_verbose=args.verbose or None,
        cli_timeout_ms=args.timeout,
        cli_retries=args.retries,
    )
    configure_logging(verbose=config.verbose, log_file=args.log_file)
    safe_mode.merge_allowed(config.allowed_scopes)
    if config.verbose:
        print(f"[tlsgauge] Allowed scopes: {sorted(config.allowed_scopes)}", file=sys.stderr)
    return config


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="tlsgauge",
        description="tlsgauge - TLS capability prober and security-posture scorer",
    )
    parser.add_argument("--output", type=Path, help="Write report to file", default=None)
    parser.add_argument("--format", choices=sorted(_FORMATTERS), default="json")
    parser.add_argument("--allowed-scope", dest="allowed_scope", action="append", default=[])
    parser.add_argument(
        "--consent",
        action="store_true",
        help="Acknowledge authorized testing scope",
    )
    parser.add_argument("--verbose", action="store_true")
    parser.add_argument("--log-file", dest="log_file", type=Path, default=None)
    parser.add_argument("--timeout", type=int, default=None, help="Per-probe timeout in ms")
    parser.add_argument("--retries", type=int, default=None, help="Retries for timeouts")

    subparsers = parser.add_subparsers(dest="command", required=True)
    audit_parser = subparsers.add_parser("audit", help="Assess TLS endpoints")
    audit_parser.add_argument("endpoints", nargs="+", help="host or host:port ([v6]:port)")
    audit_parser.add_argument("--port", type=int, default=443, help="Default port")
    return parser


def parse_endpoint(text: str, default_port: int = 443, timeout_ms: int = 10_000) -> ProbeTarget:
    """Parse ``host``, ``host:port`` or ``[v6addr]:port`` into a target."""

    value = text.strip()
    for prefix in ("https://", "tls://"):
        if value.lower().startswith(prefix):
            value = value[len(prefix):].rstrip("/")
    port = default_port
    if value.startswith("["):
        host, sep, rest = value[1:].partition("]")
        if not sep:
            raise ValueError(f"Invalid endpoint: {text}")
        if rest:
            if not rest.startswith(":"):
                raise ValueError(f"Invalid endpoint: {text}")
            port = _parse_port(rest[1:], text)
    elif value.count(":") == 1:
        host, port_str = value.split(":", 1)
        port = _parse_port(port_str, text)
    else:
        host = value
    if not host:
        raise ValueError(f"Invalid endpoint: {text}")
    return ProbeTarget(host=host.lower(), port=port, timeout_ms=timeout_ms)


def _parse_port(value: str, text: str) -> int:
    try:
        port = int(value)
    except ValueError:
        raise ValueError(f"Invalid port in endpoint: {text}") from None
    if not 0 < port < 65536:
        raise ValueError(f"Port out of range in endpoint: {text}")
    return port


def _write_output(path: Path | None, content: str) -> None:
    if path is None:
        print(content)
    else:
        path.write_text(content, encoding="utf-8")
        print(f"Report written to {path}", file=sys.stderr)


def exit_code(assessments: Sequence[SecurityAssessment]) -> int:
    """Map assessments to the CI exit-code convention."""

    if any(a.unreachable for a in assessments):
        return EXIT_UNREACHABLE
    if all(a.passed for a in assessments):
        return EXIT_OK
    return EXIT_FAILED


def main(argv: Sequence[str] | None = None) -> int:
    parser = _build_parser()
    args = parser.parse_args(argv)
    try:
        config = _merge_config(args)
        if args.command == "audit":
            targets = [
                parse_endpoint(endpoint, args.port, config.timeout_ms)
                for endpoint in args.endpoints
            ]
            assessments = assess_many(
                targets,
                max_workers=config.batch_workers,
                probe_workers=config.probe_workers,
                retries=config.retries,
            )
            _write_output(args.output, _FORMATTERS[args.format](assessments))
            for assessment in assessments:
                if assessment.unreachable:
                    print(
                        f"UNREACHABLE: {assessment.target.locator} could not be contacted; "
                        "check DNS and network access (this is not a TLS score)",
                        file=sys.stderr,
                    )
            return exit_code(assessments)

        parser.error("Unsupported command")
    except (ValueError, PermissionError, OSError) as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return EXIT_ERROR
    return EXIT_OK


if __name__ == "__main__":  # pragma: no cover
    sys.exit(main())
