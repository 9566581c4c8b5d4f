"""
Configuration audit.

Key Components:
- predicates: Existential checks over a snapshot
- messages: Recommendation message catalog
- registry: Immutable table of rules (ID, severity, message, predicate)
- engine: Filtering, evaluation and ordering of recommendations

Design Principles:
- Determinism: Same configuration and filters give the same ordered output
- Never rejects a configuration on best-practice grounds, only reports
"""

from gateway_audit.audit.engine import AuditResult, Recommendation, audit, evaluate
from gateway_audit.audit.registry import RULES, Rule, list_rules, rule_sort_key

__all__ = [
    "RULES",
    "AuditResult",
    "Recommendation",
    "Rule",
    "audit",
    "evaluate",
    "list_rules",
    "rule_sort_key",
]
