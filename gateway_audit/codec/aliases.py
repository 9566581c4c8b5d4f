"""
Alias dictionary: extension namespace <-> short code.

Encoded snapshots store these codes instead of the namespace strings. The
table is append-only: a code, once assigned, belongs to its namespace forever,
otherwise previously encoded snapshots would decode to the wrong namespace.
New namespaces take the next unused code.

Namespaces outside the table are stored verbatim, except those that would read
back as something else: a name equal to a short code (an extension literally
named "a" or "13") or one starting with the escape marker gets the marker
prepended, and decoding strips exactly one marker.
"""

from types import MappingProxyType

from gateway_audit.gateway import namespaces as ns

NAMESPACE_ALIASES = MappingProxyType(
    {
        ns.SERVER_PLUGIN: "a",
        ns.CLIENT_PLUGIN: "b",
        ns.REQ_RESP_PLUGIN: "c",
        ns.PROXY: "d",
        ns.ROUTER: "e",
        ns.REVOKER: "f",
        ns.BOT_DETECTOR: "g",
        ns.OPENCENSUS: "h",
        ns.RATELIMIT_ROUTER: "i",
        ns.RATELIMIT_PROXY: "j",
        ns.NEWRELIC: "k",
        ns.GANALYTICS: "l",
        ns.INSTANA: "m",
        ns.JWT_VALIDATOR: "n",
        ns.JWT_SIGNER: "o",
        ns.API_KEYS: "p",
        ns.HTTP_SECURE: "q",
        ns.LOGGING: "r",
        ns.GELF: "s",
        ns.LOGSTASH: "t",
        ns.BACKEND_GRPC: "u",
        ns.BASIC_AUTH: "v",
        ns.VIRTUALHOST: "w",
        ns.STATIC_FILESYSTEM_SERVER: "x",
        ns.STATIC_FILESYSTEM_BACKEND: "y",
        ns.HTTP_CLIENT: "z",
        ns.MOESIF: "0",
        ns.OPENTELEMETRY: "1",
        ns.GRPC: "2",
        ns.RESPONSE_BODY_GENERATOR: "3",
        ns.RESPONSE_JSON_SCHEMA: "4",
        ns.WEBSOCKET: "5",
        ns.RESPONSE_HEADERS: "6",
        ns.LUA_PROXY: "7",
        ns.LUA_BACKEND: "8",
        ns.LUA_ENDPOINT: "9",
        ns.HTTP_CACHE: "10",
        ns.AI_LLM: "11",
        ns.AI_MCP: "12",
        ns.CORS: "13",
        ns.CIRCUIT_BREAKER: "14",
        ns.METRICS: "15",
        ns.RATELIMIT_SERVICE: "16",
        ns.RESPONSE_BODY: "17",
    }
)

ALIAS_NAMESPACES = MappingProxyType({code: name for name, code in NAMESPACE_ALIASES.items()})

ESCAPE_MARKER = "~"


def _alias(namespace: str) -> str:
    code = NAMESPACE_ALIASES.get(namespace)
    if code is not None:
        return code
    if namespace in ALIAS_NAMESPACES or namespace.startswith(ESCAPE_MARKER):
        return ESCAPE_MARKER + namespace
    return namespace


def _unalias(key: str) -> str:
    if key.startswith(ESCAPE_MARKER):
        return key[len(ESCAPE_MARKER) :]
    return ALIAS_NAMESPACES.get(key, key)


def alias_components(components: dict[str, list[int]]) -> dict[str, list[int]]:
    """Replace known namespaces by their short code."""
    return {_alias(k): v for k, v in components.items()}


def unalias_components(components: dict[str, list[int]]) -> dict[str, list[int]]:
    """Replace short codes by the namespace they stand for."""
    return {_unalias(k): v for k, v in components.items()}
