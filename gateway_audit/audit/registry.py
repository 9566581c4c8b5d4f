"""
Rule registry.

The registry is an immutable table built once at import time. Rule IDs are
dotted hierarchical strings ("2.1.3") grouped by family:

- 1.x Authentication
- 2.x Transport security and exposure
- 3.x Traffic management and timeouts
- 4.x Telemetry
- 5.x Service and endpoint shape
- 6.x Async agents
- 7.x Deprecated constructs

Declaration order does not matter: recommendations are always sorted by
`rule_sort_key`.
"""

from dataclasses import dataclass
from types import MappingProxyType

from gateway_audit.audit import predicates as p
from gateway_audit.audit.messages import render_message
from gateway_audit.domain.enums import Severity
from gateway_audit.gateway import namespaces as ns


@dataclass(frozen=True)
class Rule:
    """A named, severity-tagged predicate over a snapshot."""

    id: str
    severity: Severity
    message: str
    predicate: p.Predicate


def rule_sort_key(rule_id: str) -> tuple[int, ...]:
    """
    Numeric ordering of dotted IDs; shorter IDs sort before their extensions.

    Example:
        >>> sorted(["2.2.1", "2.1.10", "2.1", "2.1.3"], key=rule_sort_key)
        ['2.1', '2.1.3', '2.1.10', '2.2.1']
    """
    return tuple(int(segment) for segment in rule_id.split("."))


def _rule(rule_id: str, severity: Severity, predicate: p.Predicate, **params) -> Rule:
    return Rule(rule_id, severity, render_message(rule_id, **params), predicate)


_DEPRECATED_SERVER_PLUGINS = (
    "virtualhost",
    "static-filesystem",
    "basic-auth",
    "geoip",
    "redis-ratelimit",
    "url-rewrite",
)
_DEPRECATED_CLIENT_PLUGINS = ("no-redirect", "http-logger", "static-filesystem")
_DEPRECATED_REQ_RESP_PLUGINS = ("response-schema-validator", "content-replacer")


RULES: tuple[Rule, ...] = (
    _rule("1.1.1", Severity.MEDIUM, p.has_basic_auth),
    _rule("1.1.2", Severity.MEDIUM, p.has_api_keys),
    _rule("1.2.1", Severity.HIGH, p.has_no_jwt),
    _rule("2.1.1", Severity.HIGH, p.has_insecure_connections),
    _rule("2.1.2", Severity.HIGH, p.has_no_tls),
    _rule("2.1.3", Severity.CRITICAL, p.has_tls_disabled),
    _rule("2.1.7", Severity.HIGH, p.has_no_http_secure),
    _rule("2.1.8", Severity.HIGH, p.has_h2c),
    _rule("2.1.9", Severity.HIGH, p.has_backend_insecure_connections),
    _rule("2.2.1", Severity.MEDIUM, p.has_no_obfuscated_version_header),
    _rule("2.2.2", Severity.HIGH, p.has_no_cors),
    _rule("2.2.3", Severity.HIGH, p.has_headers_wildcard),
    _rule("2.2.4", Severity.HIGH, p.has_query_string_wildcard),
    _rule("2.3.1", Severity.HIGH, p.has_empty_grpc_server),
    _rule("3.1.1", Severity.MEDIUM, p.has_bot_detector_disabled),
    _rule("3.1.2", Severity.MEDIUM, p.has_no_ratelimit),
    _rule("3.1.3", Severity.MEDIUM, p.has_no_circuit_breaker),
    _rule("3.3.1", Severity.LOW, p.has_timeout_bigger_than(3_000), seconds=3),
    _rule("3.3.2", Severity.MEDIUM, p.has_timeout_bigger_than(5_000), seconds=5),
    _rule("3.3.3", Severity.HIGH, p.has_timeout_bigger_than(30_000), seconds=30),
    _rule("3.3.4", Severity.CRITICAL, p.has_timeout_bigger_than(60_000), seconds=60),
    _rule("3.3.5", Severity.HIGH, p.has_unlimited_cache),
    _rule("4.1.1", Severity.MEDIUM, p.has_no_metrics),
    _rule("4.1.3", Severity.HIGH, p.has_several_telemetry_components),
    _rule("4.2.1", Severity.MEDIUM, p.has_no_tracing),
    _rule("4.3.1", Severity.MEDIUM, p.has_no_logging),
    _rule("5.1.1", Severity.LOW, p.has_restful_disabled),
    _rule("5.1.2", Severity.MEDIUM, p.has_debug_enabled),
    _rule("5.1.3", Severity.MEDIUM, p.has_echo_enabled),
    _rule("5.1.4", Severity.LOW, p.has_multiple_unsafe_methods),
    _rule("5.1.5", Severity.MEDIUM, p.has_sequential_proxy),
    _rule("5.1.6", Severity.MEDIUM, p.has_endpoint_wildcard),
    _rule("5.1.7", Severity.MEDIUM, p.has_endpoint_catch_all),
    _rule("5.2.1", Severity.HIGH, p.has_endpoint_without_backends),
    _rule("5.2.2", Severity.LOW, p.has_a_single_backend_per_endpoint),
    _rule("5.2.3", Severity.LOW, p.has_all_endpoints_as_noop),
    _rule("6.1.1", Severity.LOW, p.has_sequential_start),
    *(
        _rule(f"7.1.{i}", Severity.LOW, p.has_deprecated_server_plugin(name))
        for i, name in enumerate(_DEPRECATED_SERVER_PLUGINS, start=1)
    ),
    *(
        _rule(f"7.1.{i}", Severity.LOW, p.has_deprecated_client_plugin(name))
        for i, name in enumerate(_DEPRECATED_CLIENT_PLUGINS, start=7)
    ),
    *(
        _rule(f"7.1.{i}", Severity.LOW, p.has_deprecated_req_resp_plugin(name))
        for i, name in enumerate(_DEPRECATED_REQ_RESP_PLUGINS, start=10)
    ),
    _rule("7.2.1", Severity.LOW, p.has_component(ns.INSTANA)),
    _rule("7.2.2", Severity.LOW, p.has_component(ns.GANALYTICS)),
    _rule("7.2.3", Severity.LOW, p.has_component(ns.OPENCENSUS)),
    _rule("7.3.1", Severity.LOW, p.has_deprecated_tls_key_files),
)

RULES_BY_ID = MappingProxyType({rule.id: rule for rule in RULES})


def list_rules() -> list[Rule]:
    """The whole catalog, in rule ID order."""
    return sorted(RULES, key=lambda rule: rule_sort_key(rule.id))
