"""
Domain enums shared by the parser, the rule engine and the API layer.

Values are part of the public output (recommendations, API payloads), so
they never change once released.
"""

from enum import Enum


class Severity(str, Enum):
    """How urgent it is to act on a recommendation."""

    CRITICAL = "CRITICAL"
    HIGH = "HIGH"
    MEDIUM = "MEDIUM"
    LOW = "LOW"


ALL_SEVERITIES = frozenset(Severity)


class Encoding(str, Enum):
    """
    Response encodings understood by the gateway.

    Anything not listed here is reported as OTHER.
    """

    NOOP = "no-op"
    JSON = "json"
    SAFE_JSON = "safejson"
    STRING = "string"
    RSS = "rss"
    XML = "xml"


class HTTPMethod(str, Enum):
    """Methods the parser cares about when counting unsafe backends."""

    GET = "GET"
    HEAD = "HEAD"
    POST = "POST"
    PUT = "PUT"
    PATCH = "PATCH"
    DELETE = "DELETE"


SAFE_METHODS = frozenset({HTTPMethod.GET.value, HTTPMethod.HEAD.value})
