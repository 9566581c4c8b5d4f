"""
CLI: audit a gateway configuration file.

    gateway-audit krakend.json --ignore 1.2.1,5.1.6 --severity critical,high

Recommendations are printed one per line (or as a JSON document with
`--format json`). Exits with 1 when the configuration cannot be loaded or a
filter is invalid.
"""

from __future__ import annotations

import argparse
import sys
from collections.abc import Sequence

from gateway_audit.audit.engine import audit
from gateway_audit.core.canonical import to_canonical_json_pretty
from gateway_audit.core.config import settings
from gateway_audit.core.errors import GatewayAuditError
from gateway_audit.gateway.loader import load_service_config_file


def _split(value: str) -> list[str]:
    return [item.strip() for item in value.split(",") if item.strip()]


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="gateway-audit",
        description="Audit an API gateway configuration for security and best practices.",
    )
    parser.add_argument("config", help="Path to the gateway configuration (JSON)")
    parser.add_argument(
        "-i",
        "--ignore",
        default=",".join(settings.audit_excluded_rules_list),
        help="Comma separated rule IDs to skip",
    )
    parser.add_argument(
        "-s",
        "--severity",
        default=",".join(settings.audit_default_severities_list),
        help="Comma separated severities to report",
    )
    parser.add_argument(
        "-f",
        "--format",
        choices=("text", "json"),
        default="text",
        help="Output format",
    )
    return parser


def main(argv: Sequence[str] | None = None) -> int:
    args = build_parser().parse_args(argv)

    try:
        service = load_service_config_file(args.config)
        result = audit(service, exclude=_split(args.ignore), levels=_split(args.severity))
    except GatewayAuditError as e:
        print(f"{args.config}: {e.message}", file=sys.stderr)
        return 1

    if args.format == "json":
        print(to_canonical_json_pretty(result.model_dump(mode="json")["recommendations"]))
        return 0

    for i, recommendation in enumerate(result.recommendations):
        print(
            "%02d: %s %s  \t%s"
            % (i, recommendation.rule, recommendation.severity.value, recommendation.message)
        )
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
