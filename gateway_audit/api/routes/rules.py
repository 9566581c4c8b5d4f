from __future__ import annotations

from fastapi import APIRouter, HTTPException, status

from gateway_audit.api.schemas import RuleResponse
from gateway_audit.audit.registry import RULES_BY_ID, list_rules

router = APIRouter(tags=["rules"])


@router.get("/rules", response_model=list[RuleResponse])
def get_rules():
    """List the whole rule catalog in rule ID order."""
    return [
        RuleResponse(id=rule.id, severity=rule.severity, message=rule.message)
        for rule in list_rules()
    ]


@router.get("/rules/{rule_id}", response_model=RuleResponse)
def get_rule(rule_id: str):
    """Get a single rule by its dotted ID."""
    rule = RULES_BY_ID.get(rule_id)
    if rule is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Rule not found: {rule_id}",
        )
    return RuleResponse(id=rule.id, severity=rule.severity, message=rule.message)
