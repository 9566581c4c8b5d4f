"""
Pydantic schemas for API request/response validation.
"""

# Re-export schemas for convenient imports.
from .audit import AuditRequest as AuditRequest
from .audit import AuditResponse as AuditResponse
from .audit import RecommendationResponse as RecommendationResponse
from .audit import RuleResponse as RuleResponse
from .snapshot import DecodeRequest as DecodeRequest
from .snapshot import DecodeResponse as DecodeResponse
from .snapshot import EncodeRequest as EncodeRequest
from .snapshot import EncodeResponse as EncodeResponse
