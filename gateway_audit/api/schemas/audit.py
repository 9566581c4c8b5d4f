from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field

from gateway_audit.domain.enums import Severity
from gateway_audit.snapshot.models import Snapshot


class AuditRequest(BaseModel):
    config: dict[str, Any] = Field(description="Gateway configuration tree (krakend.json)")
    exclude: list[str] | None = Field(
        default=None, description="Rule IDs to skip; defaults to AUDIT_EXCLUDED_RULES"
    )
    severities: list[str] | None = Field(
        default=None,
        description="Severities to report (case-insensitive); defaults to AUDIT_DEFAULT_SEVERITIES",
    )
    include_stats: bool = Field(
        default=False, description="Also return the snapshot the rules ran against"
    )


class RecommendationResponse(BaseModel):
    rule: str
    severity: Severity
    message: str


class AuditResponse(BaseModel):
    recommendations: list[RecommendationResponse]
    stats: Snapshot | None = None


class RuleResponse(BaseModel):
    id: str
    severity: Severity
    message: str
