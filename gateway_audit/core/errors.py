"""
Domain-specific exceptions for the Gateway Audit service.

These exceptions represent failures of the caller's input (configuration
trees, filters, encoded snapshots) and are mapped to appropriate HTTP status
codes in the API layer.

Note: the parser and the rule engine never raise for content reasons. Only
the configuration loader, the filter coercion and the codec decode path do.
"""

from typing import Any


class GatewayAuditError(Exception):
    """Base exception for all gateway audit domain errors."""

    def __init__(self, message: str, details: dict[str, Any] | None = None):
        self.message = message
        self.details = details or {}
        super().__init__(self.message)


class ValidationError(GatewayAuditError):
    """
    Raised when caller-supplied parameters fail validation.

    Examples:
    - Unknown severity level in the audit filter
    - Encoded payload that is not valid base64

    HTTP Status: 400 Bad Request
    """

    pass


class ConfigurationError(GatewayAuditError):
    """
    Raised when a gateway configuration tree is structurally invalid.

    Examples:
    - Source document is not valid JSON
    - `endpoints` is not a list
    - A backend is not an object

    This is the only failure an audit can surface.

    HTTP Status: 422 Unprocessable Entity
    """

    pass


class CodecError(GatewayAuditError):
    """Base class for failures while decoding a compact snapshot."""

    pass


class DecompressionError(CodecError):
    """
    Raised when an encoded snapshot cannot be decompressed.

    Examples:
    - Truncated payload
    - Bytes that were never gzip compressed

    HTTP Status: 400 Bad Request
    """

    pass


class DeserializationError(CodecError):
    """
    Raised when decompressed content is not a valid snapshot.

    Examples:
    - Content is not msgpack
    - Top level value is not a map
    - A flag vector holds something other than integers

    HTTP Status: 400 Bad Request
    """

    pass


# HTTP Status Code Mapping
ERROR_STATUS_MAP = {
    ValidationError: 400,
    ConfigurationError: 422,
    CodecError: 400,
    DecompressionError: 400,
    DeserializationError: 400,
}


def get_status_code(error: Exception) -> int:
    """
    Get the HTTP status code for a given exception.

    Args:
        error: The exception instance

    Returns:
        HTTP status code (defaults to 500 for unknown errors)
    """
    return ERROR_STATUS_MAP.get(type(error), 500)
