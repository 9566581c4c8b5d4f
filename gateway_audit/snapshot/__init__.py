"""
Numeric snapshot of a gateway configuration.

Key Components:
- models: Snapshot tree (service, agents, endpoints, backends)
- bits: Stable bit positions and plugin identifiers
- extractors: Per-namespace component vectors
- parser: Configuration -> snapshot projection

Bit positions are append-only: encoded snapshots rely on them.
"""

from gateway_audit.snapshot.models import (
    AgentSnapshot,
    BackendSnapshot,
    EndpointSnapshot,
    Snapshot,
)
from gateway_audit.snapshot.parser import parse

__all__ = [
    "AgentSnapshot",
    "BackendSnapshot",
    "EndpointSnapshot",
    "Snapshot",
    "parse",
]
