"""
Rule predicates over a numeric snapshot.

Each predicate answers one existential question about the whole tree ("is
there an endpoint whose timeout exceeds N ms?", "is TLS present but
disabled?"). Predicates only read the snapshot and never raise: a vector that
is shorter than expected reads as zeros.
"""

from collections.abc import Callable, Sequence

from gateway_audit.gateway import namespaces as ns
from gateway_audit.snapshot import bits
from gateway_audit.snapshot.models import Snapshot

Predicate = Callable[[Snapshot], bool]


def _at(vector: Sequence[int] | None, index: int) -> int:
    if vector is None or index >= len(vector):
        return 0
    return vector[index]


def _service_bit(snapshot: Snapshot, position: int) -> bool:
    return bits.has_bit(snapshot.service_flags, position)


def _endpoint_wildcard(snapshot: Snapshot, position: int) -> bool:
    return any(
        bits.has_bit(_at(e.flags, bits.ENDPOINT_WILDCARDS), position) for e in snapshot.endpoints
    )


def _server_plugin(snapshot: Snapshot, name: str) -> bool:
    return bits.has_bit(
        _at(snapshot.component(ns.SERVER_PLUGIN), 0), bits.SERVER_PLUGINS[name]
    )


# ============================================================================
# Authentication
# ============================================================================


def has_basic_auth(snapshot: Snapshot) -> bool:
    if _server_plugin(snapshot, "basic-auth"):
        return True
    if snapshot.has_component(ns.BASIC_AUTH):
        return True
    return any(e.has_component(ns.BASIC_AUTH) for e in snapshot.endpoints)


def has_api_keys(snapshot: Snapshot) -> bool:
    return snapshot.has_component(ns.API_KEYS)


def has_no_jwt(snapshot: Snapshot) -> bool:
    return not any(e.has_component(ns.JWT_VALIDATOR) for e in snapshot.endpoints)


# ============================================================================
# Transport security
# ============================================================================


def has_insecure_connections(snapshot: Snapshot) -> bool:
    return _service_bit(snapshot, bits.SERVICE_ALLOW_INSECURE_CONNECTIONS)


def has_no_tls(snapshot: Snapshot) -> bool:
    return not _service_bit(snapshot, bits.SERVICE_HAS_TLS)


def has_tls_disabled(snapshot: Snapshot) -> bool:
    return _service_bit(snapshot, bits.SERVICE_HAS_TLS) and not _service_bit(
        snapshot, bits.SERVICE_TLS_ENABLED
    )


def has_no_http_secure(snapshot: Snapshot) -> bool:
    return not snapshot.has_component(ns.HTTP_SECURE)


def has_h2c(snapshot: Snapshot) -> bool:
    if _service_bit(snapshot, bits.SERVICE_USE_H2C):
        return True
    # Deprecated router option
    return bits.has_bit(_at(snapshot.component(ns.ROUTER), 0), bits.ROUTER_USE_H2C)


def has_backend_insecure_connections(snapshot: Snapshot) -> bool:
    return any(
        bits.has_bit(
            _at(b.component(ns.HTTP_CLIENT), 0), bits.HTTP_CLIENT_ALLOW_INSECURE_CONNECTIONS
        )
        for b in snapshot.iter_endpoint_backends()
    )


def has_deprecated_tls_key_files(snapshot: Snapshot) -> bool:
    return _service_bit(snapshot, bits.SERVICE_TLS_PRIV_PUB_KEY)


# ============================================================================
# Exposure
# ============================================================================


def has_no_obfuscated_version_header(snapshot: Snapshot) -> bool:
    return not bits.has_bit(
        _at(snapshot.component(ns.ROUTER), 0), bits.ROUTER_HIDE_VERSION_HEADER
    )


def has_no_cors(snapshot: Snapshot) -> bool:
    return not snapshot.has_component(ns.CORS)


def has_headers_wildcard(snapshot: Snapshot) -> bool:
    return _endpoint_wildcard(snapshot, bits.WILDCARD_HEADER)


def has_query_string_wildcard(snapshot: Snapshot) -> bool:
    return _endpoint_wildcard(snapshot, bits.WILDCARD_QUERY_STRING)


def has_empty_grpc_server(snapshot: Snapshot) -> bool:
    services = snapshot.component(ns.GRPC)
    return bool(services) and services[0] == 0


# ============================================================================
# Traffic management
# ============================================================================


def has_bot_detector_disabled(snapshot: Snapshot) -> bool:
    return not snapshot.has_component(ns.BOT_DETECTOR)


def has_no_ratelimit(snapshot: Snapshot) -> bool:
    if snapshot.has_component(ns.RATELIMIT_ROUTER) or snapshot.has_component(
        ns.RATELIMIT_SERVICE
    ):
        return False
    if _server_plugin(snapshot, "redis-ratelimit"):
        return False
    for endpoint in snapshot.endpoints:
        if endpoint.has_component(ns.RATELIMIT_ROUTER) or endpoint.has_component(
            ns.RATELIMIT_PROXY
        ):
            return False
        if any(b.has_component(ns.RATELIMIT_PROXY) for b in endpoint.backends):
            return False
    return True


def has_no_circuit_breaker(snapshot: Snapshot) -> bool:
    for endpoint in snapshot.endpoints:
        if endpoint.has_component(ns.CIRCUIT_BREAKER):
            return False
        if any(b.has_component(ns.CIRCUIT_BREAKER) for b in endpoint.backends):
            return False
    return True


def has_timeout_bigger_than(milliseconds: int) -> Predicate:
    """Predicate: some endpoint timeout is strictly above `milliseconds`."""

    def predicate(snapshot: Snapshot) -> bool:
        return any(
            _at(e.flags, bits.ENDPOINT_TIMEOUT_MS) > milliseconds for e in snapshot.endpoints
        )

    return predicate


def has_unlimited_cache(snapshot: Snapshot) -> bool:
    for backend in snapshot.iter_endpoint_backends():
        cache = backend.component(ns.HTTP_CACHE)
        if cache is None:
            continue
        flags = _at(cache, 0)
        if not bits.has_bit(flags, bits.HTTP_CACHE_MAX_ITEMS) or not bits.has_bit(
            flags, bits.HTTP_CACHE_MAX_SIZE
        ):
            return True
    return False


# ============================================================================
# Telemetry
# ============================================================================


def _metrics_sources(snapshot: Snapshot) -> int:
    # Named providers count once each; OpenTelemetry counts each enabled
    # OTLP and Prometheus metrics exporter, not its mere presence
    total = sum(1 for k in ns.METRICS_PROVIDERS if snapshot.has_component(k))
    otel = snapshot.component(ns.OPENTELEMETRY)
    if otel is not None:
        total += _at(otel, bits.OTEL_OTLP_METRICS) + _at(otel, bits.OTEL_PROMETHEUS)
    return total


def has_no_metrics(snapshot: Snapshot) -> bool:
    return not any(snapshot.has_component(k) for k in ns.METRICS_PROVIDERS)


def has_several_telemetry_components(snapshot: Snapshot) -> bool:
    """More than one metrics source."""
    return _metrics_sources(snapshot) > 1


def has_no_tracing(snapshot: Snapshot) -> bool:
    if any(snapshot.has_component(k) for k in ns.TRACING_PROVIDERS):
        return False
    otel = snapshot.component(ns.OPENTELEMETRY)
    return otel is None or _at(otel, bits.OTEL_OTLP_TRACES) < 1


def has_no_logging(snapshot: Snapshot) -> bool:
    return not any(snapshot.has_component(k) for k in ns.LOGGING_PROVIDERS)


def has_component(namespace: str) -> Predicate:
    """Predicate: `namespace` is attached at service level."""

    def predicate(snapshot: Snapshot) -> bool:
        return snapshot.has_component(namespace)

    return predicate


# ============================================================================
# Service and endpoint shape
# ============================================================================


def has_restful_disabled(snapshot: Snapshot) -> bool:
    return _service_bit(snapshot, bits.SERVICE_DISABLE_STRICT_REST)


def has_debug_enabled(snapshot: Snapshot) -> bool:
    return _service_bit(snapshot, bits.SERVICE_DEBUG)


def has_echo_enabled(snapshot: Snapshot) -> bool:
    return _service_bit(snapshot, bits.SERVICE_ECHO)


def has_multiple_unsafe_methods(snapshot: Snapshot) -> bool:
    return any(_at(e.flags, bits.ENDPOINT_UNSAFE_METHODS) > 1 for e in snapshot.endpoints)


def has_sequential_proxy(snapshot: Snapshot) -> bool:
    return any(
        bits.has_bit(_at(e.component(ns.PROXY), 0), bits.PROXY_SEQUENTIAL)
        for e in snapshot.endpoints
    )


def has_endpoint_wildcard(snapshot: Snapshot) -> bool:
    return _endpoint_wildcard(snapshot, bits.WILDCARD_PATH)


def has_endpoint_catch_all(snapshot: Snapshot) -> bool:
    return _endpoint_wildcard(snapshot, bits.WILDCARD_CATCH_ALL)


def has_endpoint_without_backends(snapshot: Snapshot) -> bool:
    return any(not e.backends for e in snapshot.endpoints)


def has_a_single_backend_per_endpoint(snapshot: Snapshot) -> bool:
    # Needs at least one endpoint: an empty service says nothing about aggregation
    return bool(snapshot.endpoints) and all(len(e.backends) <= 1 for e in snapshot.endpoints)


def has_all_endpoints_as_noop(snapshot: Snapshot) -> bool:
    return bool(snapshot.endpoints) and all(
        bits.has_bit(_at(e.flags, bits.ENDPOINT_ENCODING), bits.ENCODING_NOOP)
        for e in snapshot.endpoints
    )


def has_sequential_start(snapshot: Snapshot) -> bool:
    return _service_bit(snapshot, bits.SERVICE_SEQUENTIAL_START) and len(snapshot.agents) >= 10


# ============================================================================
# Deprecated plugins
# ============================================================================


def has_deprecated_server_plugin(name: str) -> Predicate:
    """Predicate: the legacy server plugin `name` is loaded."""

    def predicate(snapshot: Snapshot) -> bool:
        return _server_plugin(snapshot, name)

    return predicate


def has_deprecated_client_plugin(name: str) -> Predicate:
    """Predicate: some endpoint uses the legacy client plugin `name`."""
    plugin_id = bits.CLIENT_PLUGINS[name]

    def predicate(snapshot: Snapshot) -> bool:
        for endpoint in snapshot.endpoints:
            plugin = endpoint.component(ns.CLIENT_PLUGIN)
            if plugin and plugin[0] == plugin_id:
                return True
            # Client plugins are usually declared on the backend
            for backend in endpoint.backends:
                plugin = backend.component(ns.CLIENT_PLUGIN)
                if plugin and plugin[0] == plugin_id:
                    return True
        return False

    return predicate


def has_deprecated_req_resp_plugin(name: str) -> Predicate:
    """Predicate: some endpoint or backend uses the legacy modifier plugin `name`."""
    position = bits.REQ_RESP_PLUGINS[name]

    def predicate(snapshot: Snapshot) -> bool:
        for endpoint in snapshot.endpoints:
            if bits.has_bit(_at(endpoint.component(ns.REQ_RESP_PLUGIN), 0), position):
                return True
            for backend in endpoint.backends:
                if bits.has_bit(_at(backend.component(ns.REQ_RESP_PLUGIN), 0), position):
                    return True
        return False

    return predicate
