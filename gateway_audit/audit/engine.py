"""
Audit engine.

Runs the rule registry against the snapshot of a gateway configuration and
returns a deterministic, filtered, ordered list of recommendations.

The only failure an audit can surface is a structurally invalid
configuration (raised by the loader) or an invalid filter; once a valid tree
is given, evaluating the rules cannot fail.
"""

import logging
import time
from collections.abc import Iterable

from pydantic import BaseModel

from gateway_audit.audit.registry import RULES, Rule, rule_sort_key
from gateway_audit.core.errors import ValidationError
from gateway_audit.domain.enums import ALL_SEVERITIES, Severity
from gateway_audit.gateway.loader import ConfigSource, load_service_config
from gateway_audit.snapshot.models import Snapshot
from gateway_audit.snapshot.parser import parse

logger = logging.getLogger(__name__)


class Recommendation(BaseModel):
    """One fired rule."""

    rule: str
    severity: Severity
    message: str


class AuditResult(BaseModel):
    """Recommendations plus the snapshot the rules ran against."""

    recommendations: list[Recommendation]
    stats: Snapshot


def coerce_severities(levels: Iterable[Severity | str]) -> frozenset[Severity]:
    """
    Turn a severity filter into a set of Severity values.

    Names are case-insensitive.

    Raises:
        ValidationError: If a level is not a known severity
    """
    result = set()
    for level in levels:
        if isinstance(level, Severity):
            result.add(level)
            continue
        try:
            result.add(Severity(str(level).strip().upper()))
        except ValueError:
            raise ValidationError(
                f"Unknown severity level: {level}",
                details={"level": level, "allowed": [s.value for s in Severity]},
            ) from None
    return frozenset(result)


def evaluate(
    snapshot: Snapshot,
    exclude: Iterable[str] = (),
    levels: Iterable[Severity | str] = ALL_SEVERITIES,
) -> list[Recommendation]:
    """
    Evaluate the registry against an already built snapshot.

    Args:
        snapshot: Snapshot to check
        exclude: Rule IDs to skip (exact dotted match)
        levels: Severities to report

    Returns:
        Recommendations sorted by rule ID
    """
    excluded = set(exclude)
    allowed = coerce_severities(levels)

    fired: list[Rule] = [
        rule
        for rule in RULES
        if rule.id not in excluded and rule.severity in allowed and rule.predicate(snapshot)
    ]
    fired.sort(key=lambda rule: rule_sort_key(rule.id))

    return [
        Recommendation(rule=rule.id, severity=rule.severity, message=rule.message)
        for rule in fired
    ]


def audit(
    config: ConfigSource,
    exclude: Iterable[str] = (),
    levels: Iterable[Severity | str] = ALL_SEVERITIES,
) -> AuditResult:
    """
    Audit a gateway configuration.

    Args:
        config: A ServiceConfig or anything the loader accepts (mapping,
            JSON text, path)
        exclude: Rule IDs to skip (exact dotted match)
        levels: Severities to report, as Severity values or names

    Returns:
        AuditResult with the ordered recommendations and the snapshot

    Raises:
        ConfigurationError: If the configuration is structurally invalid
        ValidationError: If a severity level is unknown

    Example:
        >>> result = audit({"version": 3, "debug_endpoint": True}, levels=["medium"])
        >>> [r.rule for r in result.recommendations][:3]
        ['2.2.1', '3.1.1', '3.1.2']
    """
    start_time = time.time()
    # Reject a bad filter before doing any work
    allowed = coerce_severities(levels)

    try:
        service = load_service_config(config)
    except Exception:
        _record_audit_metrics("error", time.time() - start_time, 0)
        raise

    snapshot = parse(service)
    recommendations = evaluate(snapshot, exclude, allowed)

    duration = time.time() - start_time
    logger.info(
        f"Audited configuration: {len(recommendations)} recommendations",
        extra={
            "rule_count": len(RULES),
            "recommendation_count": len(recommendations),
            "endpoint_count": len(snapshot.endpoints),
            "duration_ms": round(duration * 1000, 2),
        },
    )
    _record_audit_metrics("success", duration, len(recommendations))

    return AuditResult(recommendations=recommendations, stats=snapshot)


def _record_audit_metrics(status: str, duration: float, recommendation_count: int) -> None:
    """
    Record audit metrics to Prometheus.

    Metrics failures never break an audit.

    Args:
        status: "success" or "error"
        duration: Audit duration in seconds
        recommendation_count: Number of recommendations produced
    """
    try:
        from gateway_audit.core.observability import metrics

        metrics.audit_runs_total.labels(status=status).inc()
        metrics.audit_duration_seconds.observe(duration)
        if status == "success":
            metrics.audit_recommendations_count.observe(recommendation_count)
    except Exception:
        logger.debug("Audit metrics not recorded", exc_info=True)
