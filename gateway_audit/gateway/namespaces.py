"""
Extension namespaces recognised in `extra_config` sections.

Each gateway component registers its settings under a namespace key. Only
the namespaces the parser extracts details from, or the rules look for, are
listed here; any other namespace is still recorded as attached.
"""

# Plugins
SERVER_PLUGIN = "plugin/http-server"
CLIENT_PLUGIN = "plugin/http-client"
REQ_RESP_PLUGIN = "plugin/req-resp-modifier"

# Core pipeline
PROXY = "proxy"
ROUTER = "router"
HTTP_CLIENT = "backend/http/client"
BACKEND_GRPC = "backend/grpc"
GRPC = "grpc"
WEBSOCKET = "websocket"
STATIC_FILESYSTEM_BACKEND = "backend/static-filesystem"

# Security and auth
BOT_DETECTOR = "security/bot-detector"
HTTP_SECURE = "security/http"
CORS = "security/cors"
JWT_VALIDATOR = "auth/validator"
JWT_SIGNER = "auth/signer"
REVOKER = "auth/revoker"
API_KEYS = "auth/api-keys"
BASIC_AUTH = "auth/basic"
VIRTUALHOST = "server/virtualhost"
STATIC_FILESYSTEM_SERVER = "server/static-filesystem"

# Traffic management
RATELIMIT_ROUTER = "qos/ratelimit/router"
RATELIMIT_PROXY = "qos/ratelimit/proxy"
RATELIMIT_SERVICE = "qos/ratelimit/service"
CIRCUIT_BREAKER = "qos/circuit-breaker"
HTTP_CACHE = "qos/http-cache"

# Telemetry
OPENCENSUS = "telemetry/opencensus"
OPENTELEMETRY = "telemetry/opentelemetry"
METRICS = "telemetry/metrics"
NEWRELIC = "telemetry/newrelic"
GANALYTICS = "telemetry/ganalytics"
INSTANA = "telemetry/instana"
MOESIF = "telemetry/moesif"
LOGGING = "telemetry/logging"
GELF = "telemetry/gelf"
LOGSTASH = "telemetry/logstash"

# Modifiers and validation
LUA_PROXY = "modifier/lua-proxy"
LUA_BACKEND = "modifier/lua-backend"
LUA_ENDPOINT = "modifier/lua-endpoint"
RESPONSE_BODY = "modifier/response-body"
RESPONSE_BODY_GENERATOR = "modifier/response-body-generator"
RESPONSE_HEADERS = "modifier/response-headers"
RESPONSE_JSON_SCHEMA = "validation/response-json-schema"

# AI gateway
AI_LLM = "ai/llm"
AI_MCP = "ai/mcp"

# Telemetry components that report metrics on their own
METRICS_PROVIDERS = (OPENCENSUS, METRICS, NEWRELIC, GANALYTICS, INSTANA)

# Telemetry components that report traces on their own
TRACING_PROVIDERS = (OPENCENSUS, NEWRELIC, INSTANA)

# Components replacing the default gateway logger
LOGGING_PROVIDERS = (LOGGING, GELF, LOGSTASH)
