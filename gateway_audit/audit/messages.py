"""
Recommendation message catalog.

Templates are keyed by rule ID and rendered with `str.format`; the only
parametrized ones are the timeout thresholds.
"""

TIMEOUT_TEMPLATE = "Ensure that your timeouts are below {seconds} seconds."

MESSAGES = {
    # Authentication
    "1.1.1": "Ensure that basic auth is not used to protect your API, prefer JWT validation.",
    "1.1.2": "Ensure that API keys are not the only protection of your API, prefer JWT validation.",
    "1.2.1": "Ensure that your endpoints are protected with JWT validation (auth/validator).",
    # Transport security
    "2.1.1": "Ensure that insecure connections to your backends are not allowed.",
    "2.1.2": "Ensure that TLS is configured to serve your API.",
    "2.1.3": "Ensure your TLS is enabled.",
    "2.1.7": "Ensure you enable HTTP security header checks (security/http).",
    "2.1.8": "Ensure that HTTP/2 cleartext (h2c) is disabled.",
    "2.1.9": "Ensure that no backend HTTP client allows insecure connections.",
    # Exposure
    "2.2.1": "Ensure that the version banner is hidden in runtime.",
    "2.2.2": "Ensure that CORS is enabled.",
    "2.2.3": "Ensure that endpoints do not forward all the headers to the backends.",
    "2.2.4": "Ensure that endpoints do not forward all the query strings to the backends.",
    "2.3.1": "Ensure that your gRPC server declares at least one service.",
    # Traffic management
    "3.1.1": "Ensure that the Bot detector is enabled.",
    "3.1.2": (
        "Ensure you enable some rate-limiting strategy and avoid having an All-You-Can-Eat API."
    ),
    "3.1.3": "Ensure you protect your backends with a circuit breaker.",
    "3.3.1": TIMEOUT_TEMPLATE,
    "3.3.2": TIMEOUT_TEMPLATE,
    "3.3.3": TIMEOUT_TEMPLATE,
    "3.3.4": TIMEOUT_TEMPLATE,
    "3.3.5": "Ensure that every backend cache sets both max_items and max_size.",
    # Telemetry
    "4.1.1": "Ensure that you have some telemetry system for metrics.",
    "4.1.3": "Ensure that you report metrics to a single telemetry system.",
    "4.2.1": "Ensure that you have some telemetry system for tracing.",
    "4.3.1": "Ensure that you have the improved logging component, which improves log parsing.",
    # Service and endpoint shape
    "5.1.1": "Ensure that strict REST paths are not disabled.",
    "5.1.2": "Ensure that the debug endpoint is disabled in production.",
    "5.1.3": "Ensure that the echo endpoint is disabled in production.",
    "5.1.4": "Ensure that each endpoint uses at most one unsafe method on its backends.",
    "5.1.5": "Ensure that sequential proxy calls are really needed, they add latency.",
    "5.1.6": "Ensure that endpoints do not end with a wildcard.",
    "5.1.7": "Ensure that the catch-all endpoint is not used.",
    "5.2.1": "Ensure that every endpoint has at least one backend.",
    "5.2.2": "Ensure you benefit from aggregating several backends in a single endpoint.",
    "5.2.3": "Ensure you benefit from response manipulation, all endpoints use no-op encoding.",
    # Async agents
    "6.1.1": "Ensure that sequential start is really needed with this many async agents.",
    # Deprecations
    "7.1.1": "Replace the deprecated virtualhost plugin with the server/virtualhost component.",
    "7.1.2": (
        "Replace the deprecated static-filesystem server plugin with the "
        "server/static-filesystem component."
    ),
    "7.1.3": "Replace the deprecated basic-auth plugin with the auth/basic component.",
    "7.1.4": "Replace the deprecated geoip plugin with the geoip component.",
    "7.1.5": "Replace the deprecated redis-ratelimit plugin with the qos/ratelimit components.",
    "7.1.6": "Replace the deprecated url-rewrite plugin with the url-rewrite component.",
    "7.1.7": "Replace the deprecated no-redirect plugin with the backend/http/client component.",
    "7.1.8": "Replace the deprecated http-logger plugin with the telemetry components.",
    "7.1.9": (
        "Replace the deprecated static-filesystem client plugin with the "
        "backend/static-filesystem component."
    ),
    "7.1.10": (
        "Replace the deprecated response-schema-validator plugin with the "
        "validation/response-json-schema component."
    ),
    "7.1.11": (
        "Replace the deprecated content-replacer plugin with the "
        "modifier/response-body component."
    ),
    "7.2.1": "Stop using the deprecated Instana telemetry component, move to OpenTelemetry.",
    "7.2.2": "Stop using the deprecated Google Analytics telemetry component.",
    "7.2.3": "Stop using the deprecated OpenCensus telemetry component, move to OpenTelemetry.",
    "7.3.1": "Replace the deprecated TLS public_key and private_key fields with the keys list.",
}


def render_message(rule_id: str, **params) -> str:
    """Render the message of `rule_id` with its parameters."""
    return MESSAGES[rule_id].format(**params)
