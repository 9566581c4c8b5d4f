"""
Component map extraction.

Every `extra_config` section is a mapping from an extension namespace to a
free-form value owned by that extension. Each known namespace has an
extractor turning its settings into a fixed-length integer vector; any other
namespace is recorded as attached with an empty vector.

Extractors never raise: a value of the wrong type is treated as absent.
A known namespace whose value is not an object is still recorded, with an
empty vector.
"""

from collections.abc import Callable
from typing import Any

from gateway_audit.core.canonical import canonical_json_size
from gateway_audit.gateway import namespaces as ns
from gateway_audit.gateway.durations import duration_or_zero, to_milliseconds
from gateway_audit.snapshot import bits

Extractor = Callable[[dict[str, Any]], list[int]]


# ============================================================================
# Lenient readers
# ============================================================================


def _is_true(cfg: dict[str, Any], key: str) -> bool:
    return cfg.get(key) is True


def _number(cfg: dict[str, Any], key: str) -> float | None:
    value = cfg.get(key)
    if isinstance(value, bool) or not isinstance(value, int | float):
        return None
    return value


def _positive_int(cfg: dict[str, Any], key: str) -> int:
    value = _number(cfg, key)
    return int(value) if value is not None and value > 0 else 0


def _positive(cfg: dict[str, Any], key: str) -> bool:
    value = _number(cfg, key)
    return value is not None and value > 0


def _list_len(cfg: dict[str, Any], key: str) -> int:
    value = cfg.get(key)
    return len(value) if isinstance(value, list) else 0


def _non_empty_str(cfg: dict[str, Any], key: str) -> bool:
    value = cfg.get(key)
    return isinstance(value, str) and value != ""


def _duration_ms(cfg: dict[str, Any], key: str) -> int:
    value = cfg.get(key)
    if not isinstance(value, str) or not value:
        return 0
    return to_milliseconds(duration_or_zero(value))


def _plugin_names(cfg: dict[str, Any]) -> list[str]:
    name = cfg.get("name")
    if isinstance(name, str):
        return [name]
    if isinstance(name, list):
        return [n for n in name if isinstance(n, str)]
    return []


def _bit_flags(checks: list[tuple[int, bool]]) -> int:
    value = 0
    for position, enabled in checks:
        if enabled:
            value = bits.add_bit(value, position)
    return value


# ============================================================================
# Plugins
# ============================================================================


def extract_server_plugin(cfg: dict[str, Any]) -> list[int]:
    """[bit-vector of server plugin ids]; unknown names set bit 0."""
    value = 0
    for name in _plugin_names(cfg):
        value = bits.add_bit(value, bits.SERVER_PLUGINS.get(name, 0))
    return [value]


def extract_client_plugin(cfg: dict[str, Any]) -> list[int]:
    """[client plugin id] (0 when unknown). Only a single name is honoured."""
    name = cfg.get("name")
    if not isinstance(name, str):
        return [0]
    return [bits.CLIENT_PLUGINS.get(name, 0)]


def extract_req_resp_plugin(cfg: dict[str, Any]) -> list[int]:
    """[bit-vector of request/response modifier plugin ids]"""
    value = 0
    for name in _plugin_names(cfg):
        value = bits.add_bit(value, bits.REQ_RESP_PLUGINS.get(name, 0))
    return [value]


# ============================================================================
# Core pipeline
# ============================================================================


def extract_proxy(cfg: dict[str, Any]) -> list[int]:
    return [
        _bit_flags(
            [
                (bits.PROXY_SEQUENTIAL, _is_true(cfg, "sequential")),
                (bits.PROXY_FLATMAP_FILTER, "flatmap_filter" in cfg),
                (bits.PROXY_SHADOW, _is_true(cfg, "shadow")),
                (bits.PROXY_COMBINER, "combiner" in cfg),
                (bits.PROXY_STATIC, "static" in cfg),
            ],
        )
    ]


def extract_router(cfg: dict[str, Any]) -> list[int]:
    """[router option bits], see the ROUTER_* positions."""
    return [
        _bit_flags(
            [
                (bits.ROUTER_ERROR_BODY, _is_true(cfg, "error_body")),
                (bits.ROUTER_DISABLE_HEALTH, _is_true(cfg, "disable_health")),
                (bits.ROUTER_DISABLE_ACCESS_LOG, _is_true(cfg, "disable_access_log")),
                (bits.ROUTER_HEALTH_PATH, "health_path" in cfg),
                (bits.ROUTER_RETURN_ERROR_MSG, _is_true(cfg, "return_error_msg")),
                (
                    bits.ROUTER_DISABLE_REDIRECT_TRAILING_SLASH,
                    _is_true(cfg, "disable_redirect_trailing_slash"),
                ),
                (
                    bits.ROUTER_DISABLE_REDIRECT_FIXED_PATH,
                    _is_true(cfg, "disable_redirect_fixed_path"),
                ),
                (bits.ROUTER_REMOVE_EXTRA_SLASH, _is_true(cfg, "remove_extra_slash")),
                (
                    bits.ROUTER_DISABLE_HANDLE_METHOD_NOT_ALLOWED,
                    _is_true(cfg, "disable_handle_method_not_allowed"),
                ),
                (bits.ROUTER_DISABLE_PATH_DECODING, _is_true(cfg, "disable_path_decoding")),
                (bits.ROUTER_AUTO_OPTIONS, _is_true(cfg, "auto_options")),
                (bits.ROUTER_FORWARDED_BY_CLIENT_IP, _is_true(cfg, "forwarded_by_client_ip")),
                (bits.ROUTER_REMOTE_IP_HEADERS, _list_len(cfg, "remote_ip_headers") > 0),
                (bits.ROUTER_TRUSTED_PROXIES, _list_len(cfg, "trusted_proxies") > 0),
                (bits.ROUTER_APP_ENGINE, _is_true(cfg, "app_engine")),
                (bits.ROUTER_MAX_MULTIPART_MEMORY, _positive(cfg, "max_multipart_memory")),
                (bits.ROUTER_LOGGER_SKIP_PATHS, _list_len(cfg, "logger_skip_paths") > 0),
                (bits.ROUTER_HIDE_VERSION_HEADER, _is_true(cfg, "hide_version_header")),
                (bits.ROUTER_USE_H2C, _is_true(cfg, "use_h2c")),
            ],
        )
    ]


def extract_http_client(cfg: dict[str, Any]) -> list[int]:
    """[bit 0 always, bit 1 insecure connections, bit 2 client certificates]"""
    value = bits.add_bit(0, bits.HTTP_CLIENT)
    client_tls = cfg.get("client_tls")
    if isinstance(client_tls, dict):
        if _is_true(client_tls, "allow_insecure_connections"):
            value = bits.add_bit(value, bits.HTTP_CLIENT_ALLOW_INSECURE_CONNECTIONS)
        if _list_len(client_tls, "client_certs") > 0:
            value = bits.add_bit(value, bits.HTTP_CLIENT_CERTS)
    return [value]


def extract_grpc(cfg: dict[str, Any]) -> list[int]:
    """[number of services] for a gRPC server, [] for client-only settings."""
    server = cfg.get("server")
    if not isinstance(server, dict):
        return []
    return [_list_len(server, "services")]


def extract_websocket(cfg: dict[str, Any]) -> list[int]:
    options = _bit_flags(
        [
            (0, _is_true(cfg, "disable_otel_metrics")),
            (1, _is_true(cfg, "enable_direct_communication")),
            (2, _is_true(cfg, "return_error_details")),
            (3, _is_true(cfg, "connect_event")),
            (4, _is_true(cfg, "disconnect_event")),
        ],
    )
    return [
        options,
        _positive_int(cfg, "read_buffer_size"),
        _positive_int(cfg, "write_buffer_size"),
        _positive_int(cfg, "message_buffer_size"),
        _positive_int(cfg, "max_message_size"),
        _positive_int(cfg, "max_retries"),
        _duration_ms(cfg, "write_wait"),
        _duration_ms(cfg, "pong_wait"),
        _duration_ms(cfg, "ping_period"),
        _duration_ms(cfg, "timeout"),
        _list_len(cfg, "subprotocols"),
    ]


# ============================================================================
# Security and traffic management
# ============================================================================


def extract_revoker(cfg: dict[str, Any]) -> list[int]:
    """[uses the optimal hash, number of token keys]"""
    return [int(cfg.get("hash_name") == "optimal"), _list_len(cfg, "token_keys")]


def extract_bot_detector(cfg: dict[str, Any]) -> list[int]:
    """[allow list size, deny list size, pattern count, cache size]"""
    cache_size = _number(cfg, "cache_size")
    return [
        _list_len(cfg, "allow"),
        _list_len(cfg, "deny"),
        _list_len(cfg, "patterns"),
        int(cache_size) if cache_size is not None else 0,
    ]


def extract_ratelimit_router(cfg: dict[str, Any]) -> list[int]:
    strategy = cfg.get("strategy")
    return [
        _bit_flags(
            [
                (0, _positive(cfg, "max_rate")),
                (1, _positive(cfg, "client_max_rate")),
                (2, strategy == "ip"),
                (3, strategy == "header"),
            ],
        )
    ]


def extract_http_cache(cfg: dict[str, Any]) -> list[int]:
    return [
        _bit_flags(
            [
                (bits.HTTP_CACHE_SHARED, _is_true(cfg, "shared")),
                (bits.HTTP_CACHE_MAX_ITEMS, _positive(cfg, "max_items")),
                (bits.HTTP_CACHE_MAX_SIZE, _positive(cfg, "max_size")),
            ],
        )
    ]


# ============================================================================
# Telemetry
# ============================================================================

_OPENCENSUS_EXPORTERS = (
    "logger",
    "zipkin",
    "jaeger",
    "influxdb",
    "prometheus",
    "xray",
    "stackdriver",
    "datadog",
    "ocagent",
)


def extract_opencensus(cfg: dict[str, Any]) -> list[int]:
    """[one bit per configured exporter]"""
    exporters = cfg.get("exporters")
    if not isinstance(exporters, dict):
        return [0]
    return [
        _bit_flags(
            [(position, name in exporters) for position, name in enumerate(_OPENCENSUS_EXPORTERS)],
        )
    ]


def extract_moesif(cfg: dict[str, Any]) -> list[int]:
    return [
        _positive_int(cfg, "event_queue_size"),
        _positive_int(cfg, "batch_size"),
        _positive_int(cfg, "timer_wake_up_seconds"),
    ]


def _enabled_exporters(exporters: Any, flag: str) -> int:
    # An exporter is on for a signal unless it explicitly disables it
    if not isinstance(exporters, list):
        return 0
    return sum(1 for e in exporters if isinstance(e, dict) and e.get(flag) is not True)


def extract_opentelemetry(cfg: dict[str, Any]) -> list[int]:
    """
    [metric reporting period (-1 if unset), trace sample rate in percent
    (-1 if unset), OTLP exporters with metrics, OTLP exporters with traces,
    prometheus exporters with metrics]
    """
    period = _number(cfg, "metric_reporting_period")
    rate = _number(cfg, "trace_sample_rate")

    exporters = cfg.get("exporters")
    if not isinstance(exporters, dict):
        exporters = {}

    return [
        int(period) if period is not None else -1,
        int(rate * 100) if rate is not None else -1,
        _enabled_exporters(exporters.get("otlp"), "disable_metrics"),
        _enabled_exporters(exporters.get("otlp"), "disable_traces"),
        _enabled_exporters(exporters.get("prometheus"), "disable_metrics"),
    ]


# ============================================================================
# Modifiers and validation
# ============================================================================

_BODY_MODIFIER_KINDS = ("regexp", "literal", "upper", "lower", "trim")


def extract_response_json_schema(cfg: dict[str, Any]) -> list[int]:
    """[schema size, custom error body, error status, custom content type]"""
    result = [0, 0, 0, 0]
    schema = cfg.get("schema")
    if isinstance(schema, dict):
        result[0] = canonical_json_size(schema)
    error = cfg.get("error")
    if isinstance(error, dict):
        result[1] = int(_non_empty_str(error, "body"))
        result[2] = _positive_int(error, "status")
        result[3] = int(_non_empty_str(error, "content_type"))
    return result


def extract_response_body(cfg: dict[str, Any]) -> list[int]:
    """[modifier count, then one count per modifier kind]"""
    modifiers = cfg.get("modifiers")
    if not isinstance(modifiers, list):
        return [0] * (len(_BODY_MODIFIER_KINDS) + 1)

    counts = dict.fromkeys(_BODY_MODIFIER_KINDS, 0)
    for modifier in modifiers:
        # A modifier is a single-key object naming its kind
        if isinstance(modifier, dict) and modifier:
            kind = next(iter(modifier))
            if kind in counts:
                counts[kind] += 1
    return [len(modifiers), *counts.values()]


def extract_response_headers(cfg: dict[str, Any]) -> list[int]:
    return [
        _bit_flags(
            [
                (0, "delete" in cfg),
                (1, "add" in cfg),
                (2, "rename" in cfg),
                (3, "replace" in cfg),
            ],
        )
    ]


def extract_lua(cfg: dict[str, Any]) -> list[int]:
    """[bit 0 pre script, bit 1 post script]"""
    return [
        _bit_flags(
            [
                (0, isinstance(cfg.get("pre"), str)),
                (1, isinstance(cfg.get("post"), str)),
            ],
        )
    ]


EXTRACTORS: dict[str, Extractor] = {
    ns.SERVER_PLUGIN: extract_server_plugin,
    ns.CLIENT_PLUGIN: extract_client_plugin,
    ns.REQ_RESP_PLUGIN: extract_req_resp_plugin,
    ns.PROXY: extract_proxy,
    ns.ROUTER: extract_router,
    ns.REVOKER: extract_revoker,
    ns.BOT_DETECTOR: extract_bot_detector,
    ns.OPENCENSUS: extract_opencensus,
    ns.RATELIMIT_ROUTER: extract_ratelimit_router,
    ns.HTTP_CLIENT: extract_http_client,
    ns.MOESIF: extract_moesif,
    ns.OPENTELEMETRY: extract_opentelemetry,
    ns.GRPC: extract_grpc,
    ns.RESPONSE_JSON_SCHEMA: extract_response_json_schema,
    ns.RESPONSE_BODY: extract_response_body,
    ns.RESPONSE_HEADERS: extract_response_headers,
    ns.WEBSOCKET: extract_websocket,
    ns.LUA_PROXY: extract_lua,
    ns.LUA_BACKEND: extract_lua,
    ns.LUA_ENDPOINT: extract_lua,
    ns.HTTP_CACHE: extract_http_cache,
}


def extract_components(extra_config: dict[str, Any] | None) -> dict[str, list[int]]:
    """
    Build the component map of one scope.

    Args:
        extra_config: The scope's `extra_config` section

    Returns:
        Namespace -> integer vector, one entry per attached namespace
    """
    components: dict[str, list[int]] = {}
    for namespace, value in (extra_config or {}).items():
        extractor = EXTRACTORS.get(namespace)
        if extractor is None or not isinstance(value, dict):
            components[namespace] = []
        else:
            components[namespace] = extractor(value)
    return components
