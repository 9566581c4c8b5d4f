from __future__ import annotations

from fastapi import APIRouter

from gateway_audit.api.schemas import AuditRequest, AuditResponse, RecommendationResponse
from gateway_audit.audit.engine import audit
from gateway_audit.core.config import settings

router = APIRouter(tags=["audit"])


@router.post("/audit", response_model=AuditResponse, response_model_by_alias=False)
def post_audit(payload: AuditRequest):
    """
    Audit a gateway configuration.

    Missing `exclude` and `severities` fall back to AUDIT_EXCLUDED_RULES and
    AUDIT_DEFAULT_SEVERITIES. An invalid configuration returns 422, an
    unknown severity returns 400.
    """
    exclude = (
        payload.exclude if payload.exclude is not None else settings.audit_excluded_rules_list
    )
    severities = (
        payload.severities
        if payload.severities is not None
        else settings.audit_default_severities_list
    )

    result = audit(payload.config, exclude=exclude, levels=severities)

    return AuditResponse(
        recommendations=[
            RecommendationResponse(rule=r.rule, severity=r.severity, message=r.message)
            for r in result.recommendations
        ],
        stats=result.stats if payload.include_stats else None,
    )
