"""
Parser: gateway configuration -> numeric snapshot.

`parse` is a pure projection. It never raises for content reasons and never
touches its input; shapes it does not understand degrade to zero or empty
values. Deprecated settings that mean the same thing as a current one set the
same bit, so the rules never see legacy shapes.
"""

from gateway_audit.domain.enums import SAFE_METHODS
from gateway_audit.gateway import namespaces as ns
from gateway_audit.gateway.durations import to_milliseconds
from gateway_audit.gateway.models import (
    AsyncAgentConfig,
    BackendConfig,
    EndpointConfig,
    ServiceConfig,
)
from gateway_audit.snapshot import bits
from gateway_audit.snapshot.extractors import extract_components
from gateway_audit.snapshot.models import (
    AgentSnapshot,
    BackendSnapshot,
    EndpointSnapshot,
    Snapshot,
)


def parse(config: ServiceConfig) -> Snapshot:
    """
    Project a (normalized) service configuration into a snapshot.

    Example:
        >>> parse(ServiceConfig(debug_endpoint=True)).flags
        [4]
    """
    return Snapshot(
        flags=[_service_flags(config)],
        agents=[_parse_agent(a) for a in config.async_agent],
        endpoints=[_parse_endpoint(e) for e in config.endpoints],
        components=extract_components(config.extra_config),
    )


def _service_flags(config: ServiceConfig) -> int:
    tls = config.tls
    client_tls = config.client_tls
    checks = [
        (bits.SERVICE_PLUGIN, config.plugin is not None),
        (bits.SERVICE_SEQUENTIAL_START, config.sequential_start),
        (bits.SERVICE_DEBUG, config.debug_endpoint),
        # The root level flag is deprecated in favour of client_tls
        (
            bits.SERVICE_ALLOW_INSECURE_CONNECTIONS,
            config.allow_insecure_connections
            or (client_tls is not None and client_tls.allow_insecure_connections),
        ),
        (bits.SERVICE_DISABLE_STRICT_REST, config.disable_rest),
        (bits.SERVICE_ECHO, config.echo_endpoint),
        (bits.SERVICE_USE_H2C, config.use_h2c),
    ]
    if tls is not None:
        checks += [
            (bits.SERVICE_HAS_TLS, True),
            (bits.SERVICE_TLS_ENABLED, not tls.disabled),
            (bits.SERVICE_TLS_ENABLE_MTLS, tls.enable_mtls),
            (bits.SERVICE_TLS_DISABLE_SYSTEM_CA_POOL, tls.disable_system_ca_pool),
            (bits.SERVICE_TLS_CA_CERTS, len(tls.ca_certs) > 0),
            (bits.SERVICE_TLS_PRIV_PUB_KEY, bool(tls.public_key or tls.private_key)),
        ]

    value = 0
    for position, enabled in checks:
        if enabled:
            value = bits.add_bit(value, position)
    return value


def _parse_agent(agent: AsyncAgentConfig) -> AgentSnapshot:
    return AgentSnapshot(
        flags=[
            bits.encoding_bit(agent.encoding),
            agent.consumer.workers,
            agent.connection.max_retries,
            to_milliseconds(agent.consumer.timeout),
        ],
        backends=[_parse_backend(b) for b in agent.backend],
        components=extract_components(agent.extra_config),
    )


def _wildcards(endpoint: EndpointConfig) -> int:
    value = 0
    if endpoint.endpoint.endswith("*"):
        value = bits.add_bit(value, bits.WILDCARD_PATH)
    if "*" in endpoint.input_query_strings:
        value = bits.add_bit(value, bits.WILDCARD_QUERY_STRING)
    if "*" in endpoint.input_headers:
        value = bits.add_bit(value, bits.WILDCARD_HEADER)
    if endpoint.endpoint == bits.CATCH_ALL_PATH:
        value = bits.add_bit(value, bits.WILDCARD_CATCH_ALL)
    return value


def _unsafe_methods(backends: list[BackendConfig]) -> int:
    # A gRPC call is never a plain idempotent read, whatever its method
    return sum(
        1
        for b in backends
        if b.method not in SAFE_METHODS or ns.BACKEND_GRPC in b.extra_config
    )


def _parse_endpoint(endpoint: EndpointConfig) -> EndpointSnapshot:
    return EndpointSnapshot(
        flags=[
            bits.encoding_bit(endpoint.output_encoding),
            len(endpoint.input_query_strings),
            len(endpoint.input_headers),
            to_milliseconds(endpoint.timeout),
            _wildcards(endpoint),
            _unsafe_methods(endpoint.backend),
        ],
        backends=[_parse_backend(b) for b in endpoint.backend],
        components=extract_components(endpoint.extra_config),
    )


def _parse_backend(backend: BackendConfig) -> BackendSnapshot:
    value = bits.encoding_bit(backend.encoding)
    for position, enabled in (
        (bits.BACKEND_ALLOW, len(backend.allow) > 0),
        (bits.BACKEND_DENY, len(backend.deny) > 0),
        (bits.BACKEND_MAPPING, len(backend.mapping) > 0),
        (bits.BACKEND_GROUP, backend.group != ""),
        (bits.BACKEND_TARGET, backend.target != ""),
        (bits.BACKEND_IS_COLLECTION, backend.is_collection),
    ):
        if enabled:
            value = bits.add_bit(value, position)

    return BackendSnapshot(flags=[value], components=extract_components(backend.extra_config))
