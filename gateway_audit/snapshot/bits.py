"""
Bit positions used by the numeric snapshot.

Positions are part of the encoded format: a flag keeps its index forever and
new flags only ever get new indices. Never renumber or reuse a position.
"""

from gateway_audit.domain.enums import Encoding

# ============================================================================
# Service flags (Snapshot.flags[0])
# ============================================================================

SERVICE_PLUGIN = 0
SERVICE_SEQUENTIAL_START = 1
SERVICE_DEBUG = 2
SERVICE_ALLOW_INSECURE_CONNECTIONS = 3
SERVICE_DISABLE_STRICT_REST = 4
SERVICE_HAS_TLS = 5
SERVICE_TLS_ENABLED = 6
SERVICE_TLS_ENABLE_MTLS = 7
SERVICE_TLS_DISABLE_SYSTEM_CA_POOL = 8
SERVICE_TLS_CA_CERTS = 9
SERVICE_ECHO = 10
SERVICE_USE_H2C = 11
SERVICE_TLS_PRIV_PUB_KEY = 12

# ============================================================================
# Encodings (one-hot, shared by endpoints, backends and agents)
# ============================================================================

ENCODING_NOOP = 0
ENCODING_JSON = 1
ENCODING_SAFE_JSON = 2
ENCODING_STRING = 3
ENCODING_RSS = 4
ENCODING_XML = 5
ENCODING_OTHER = 6

ENCODING_BITS = {
    Encoding.NOOP.value: ENCODING_NOOP,
    Encoding.JSON.value: ENCODING_JSON,
    Encoding.SAFE_JSON.value: ENCODING_SAFE_JSON,
    Encoding.STRING.value: ENCODING_STRING,
    Encoding.RSS.value: ENCODING_RSS,
    Encoding.XML.value: ENCODING_XML,
}

# ============================================================================
# Backend shape (BackendSnapshot.flags[0], after the encoding bits)
# ============================================================================

BACKEND_ALLOW = ENCODING_OTHER + 1
BACKEND_DENY = ENCODING_OTHER + 2
BACKEND_MAPPING = ENCODING_OTHER + 3
BACKEND_GROUP = ENCODING_OTHER + 4
BACKEND_TARGET = ENCODING_OTHER + 5
BACKEND_IS_COLLECTION = ENCODING_OTHER + 6
# Reserved, never set by the parser
BACKEND_HEADERS_TO_PASS = ENCODING_OTHER + 7
BACKEND_QUERY = ENCODING_OTHER + 8

# ============================================================================
# Endpoint detail positions (EndpointSnapshot.flags)
# ============================================================================

ENDPOINT_ENCODING = 0
ENDPOINT_QUERY_STRINGS = 1
ENDPOINT_HEADERS = 2
ENDPOINT_TIMEOUT_MS = 3
ENDPOINT_WILDCARDS = 4
ENDPOINT_UNSAFE_METHODS = 5

# Bits of flags[ENDPOINT_WILDCARDS]
WILDCARD_PATH = 0
WILDCARD_QUERY_STRING = 1
WILDCARD_HEADER = 2
WILDCARD_CATCH_ALL = 3

CATCH_ALL_PATH = "/__catchall"

# ============================================================================
# Agent detail positions (AgentSnapshot.flags)
# ============================================================================

AGENT_ENCODING = 0
AGENT_WORKERS = 1
AGENT_MAX_RETRIES = 2
AGENT_TIMEOUT_MS = 3

# ============================================================================
# Router options (components["router"][0])
# ============================================================================

ROUTER_ERROR_BODY = 0
ROUTER_DISABLE_HEALTH = 1
ROUTER_DISABLE_ACCESS_LOG = 2
ROUTER_HEALTH_PATH = 3
ROUTER_RETURN_ERROR_MSG = 4
ROUTER_DISABLE_REDIRECT_TRAILING_SLASH = 5
ROUTER_DISABLE_REDIRECT_FIXED_PATH = 6
ROUTER_REMOVE_EXTRA_SLASH = 7
ROUTER_DISABLE_HANDLE_METHOD_NOT_ALLOWED = 8
ROUTER_DISABLE_PATH_DECODING = 9
ROUTER_AUTO_OPTIONS = 10
ROUTER_FORWARDED_BY_CLIENT_IP = 11
ROUTER_REMOTE_IP_HEADERS = 12
ROUTER_TRUSTED_PROXIES = 13
ROUTER_APP_ENGINE = 14
ROUTER_MAX_MULTIPART_MEMORY = 15
ROUTER_LOGGER_SKIP_PATHS = 16
ROUTER_HIDE_VERSION_HEADER = 17
ROUTER_USE_H2C = 18

# ============================================================================
# Component vectors
# ============================================================================

# components["proxy"][0]
PROXY_SEQUENTIAL = 0
PROXY_FLATMAP_FILTER = 1
PROXY_SHADOW = 2
PROXY_COMBINER = 3
PROXY_STATIC = 4

# components["backend/http/client"][0]
HTTP_CLIENT = 0
HTTP_CLIENT_ALLOW_INSECURE_CONNECTIONS = 1
HTTP_CLIENT_CERTS = 2

# components["qos/http-cache"][0]
HTTP_CACHE_SHARED = 0
HTTP_CACHE_MAX_ITEMS = 1
HTTP_CACHE_MAX_SIZE = 2

# components["telemetry/opentelemetry"]
OTEL_METRIC_REPORTING_PERIOD = 0
OTEL_TRACE_SAMPLE_RATE = 1
OTEL_OTLP_METRICS = 2
OTEL_OTLP_TRACES = 3
OTEL_PROMETHEUS = 4

# Legacy plugin identifiers, OR'd into bit-vectors as bit positions
SERVER_PLUGINS = {
    "static-filesystem": 1,
    "basic-auth": 2,
    "geoip": 3,
    "redis-ratelimit": 4,
    "url-rewrite": 5,
    "virtualhost": 6,
    "wildcard": 7,
    "ip-filter": 8,
    "jwk-aggregator": 9,
}

# Client plugins are recorded by value, not as a bit-vector
CLIENT_PLUGINS = {
    "no-redirect": 1,
    "http-logger": 2,
    "static-filesystem": 3,
    "http-proxy": 4,
}

REQ_RESP_PLUGINS = {
    "response-schema-validator": 1,
    "content-replacer": 2,
}


def add_bit(value: int, position: int) -> int:
    """Return `value` with the bit at `position` set."""
    return value | (1 << position)


def has_bit(value: int, position: int) -> bool:
    """Whether the bit at `position` is set in `value`."""
    return (value >> position) & 1 == 1


def encoding_bit(name: str) -> int:
    """One-hot value for an encoding name; unknown names map to OTHER."""
    return add_bit(0, ENCODING_BITS.get(name, ENCODING_OTHER))
