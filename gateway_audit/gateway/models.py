"""Pydantic models for the gateway configuration tree.

The models only describe the parts of a gateway configuration the audit
looks at. Unknown keys are ignored and `extra_config` sections are kept as
free-form mappings, since their shape is owned by each extension.
"""

from __future__ import annotations

from datetime import timedelta
from typing import Annotated, Any

from pydantic import BaseModel, BeforeValidator, ConfigDict, Field, model_validator

from gateway_audit.domain.enums import Encoding, HTTPMethod
from gateway_audit.gateway.durations import ZERO, duration_or_zero

DEFAULT_TIMEOUT = timedelta(seconds=2)


class _GatewayModel(BaseModel):
    """Base model: unknown keys ignored, explicit nulls fall back to defaults."""

    model_config = ConfigDict(extra="ignore")

    @model_validator(mode="before")
    @classmethod
    def drop_nulls(cls, data: Any) -> Any:
        if isinstance(data, dict):
            return {k: v for k, v in data.items() if v is not None}
        return data


def _coerce_duration(value: Any) -> Any:
    # Strings follow the gateway's own duration syntax; anything else is
    # left to pydantic's timedelta parsing.
    if isinstance(value, str):
        return duration_or_zero(value)
    return value


GatewayDuration = Annotated[timedelta, BeforeValidator(_coerce_duration)]


class PluginConfig(_GatewayModel):
    """Location of the plugin binaries to load at start-up."""

    folder: str = ""
    pattern: str = ""


class TLSConfig(_GatewayModel):
    """Server-side TLS settings (`tls`)."""

    disabled: bool = False
    enable_mtls: bool = False
    disable_system_ca_pool: bool = False
    ca_certs: list[str] = Field(default_factory=list)
    # Deprecated in favour of `keys`
    public_key: str = ""
    private_key: str = ""
    keys: list[dict[str, Any]] = Field(default_factory=list)


class ClientTLSConfig(_GatewayModel):
    """TLS settings for connections to the backends (`client_tls`)."""

    allow_insecure_connections: bool = False
    disable_system_ca_pool: bool = False
    ca_certs: list[str] = Field(default_factory=list)
    client_certs: list[dict[str, Any]] = Field(default_factory=list)


class BackendConfig(_GatewayModel):
    """A single upstream call made by an endpoint or an async agent."""

    url_pattern: str = ""
    host: list[str] = Field(default_factory=list)
    method: str = ""
    encoding: str = ""
    allow: list[str] = Field(default_factory=list)
    deny: list[str] = Field(default_factory=list)
    mapping: dict[str, str] = Field(default_factory=dict)
    group: str = ""
    target: str = ""
    is_collection: bool = False
    extra_config: dict[str, Any] = Field(default_factory=dict)


class EndpointConfig(_GatewayModel):
    """A route exposed by the gateway."""

    endpoint: str = ""
    method: str = ""
    timeout: GatewayDuration = ZERO
    output_encoding: str = ""
    input_query_strings: list[str] = Field(default_factory=list)
    input_headers: list[str] = Field(default_factory=list)
    backend: list[BackendConfig] = Field(default_factory=list)
    extra_config: dict[str, Any] = Field(default_factory=dict)


class ConsumerConfig(_GatewayModel):
    """Consumer side of an async agent."""

    topic: str = ""
    workers: int = 0
    timeout: GatewayDuration = ZERO
    max_rate: float = 0


class ConnectionConfig(_GatewayModel):
    """Connection handling of an async agent."""

    max_retries: int = 0
    backoff_strategy: str = ""
    health_interval: GatewayDuration = ZERO


class AsyncAgentConfig(_GatewayModel):
    """An asynchronous consumer that feeds messages to backends."""

    name: str = ""
    encoding: str = ""
    consumer: ConsumerConfig = Field(default_factory=ConsumerConfig)
    connection: ConnectionConfig = Field(default_factory=ConnectionConfig)
    backend: list[BackendConfig] = Field(default_factory=list)
    extra_config: dict[str, Any] = Field(default_factory=dict)


class ServiceConfig(_GatewayModel):
    """
    Root of a gateway configuration (`krakend.json`).

    Key names follow the configuration file, so a parsed JSON document can be
    validated directly:

        >>> ServiceConfig.model_validate({"version": 3, "debug_endpoint": True})
    """

    version: int = 3
    name: str = ""
    port: int = 0
    timeout: GatewayDuration = ZERO
    plugin: PluginConfig | None = None
    sequential_start: bool = False
    debug_endpoint: bool = False
    echo_endpoint: bool = False
    # Deprecated in favour of `client_tls.allow_insecure_connections`
    allow_insecure_connections: bool = False
    disable_rest: bool = False
    use_h2c: bool = False
    tls: TLSConfig | None = None
    client_tls: ClientTLSConfig | None = None
    endpoints: list[EndpointConfig] = Field(default_factory=list)
    async_agent: list[AsyncAgentConfig] = Field(default_factory=list)
    extra_config: dict[str, Any] = Field(default_factory=dict)

    def normalized(self) -> ServiceConfig:
        """
        Return a copy with the gateway's start-up defaults applied.

        - Service timeout defaults to 2 seconds
        - Endpoint method defaults to GET and is upper-cased
        - Endpoint timeout inherits the service timeout
        - Endpoint output encoding defaults to json
        - Backend method inherits the endpoint method

        The receiver is left untouched, and applying it twice is a no-op.
        """
        cfg = self.model_copy(deep=True)

        if not cfg.timeout:
            cfg.timeout = DEFAULT_TIMEOUT

        for endpoint in cfg.endpoints:
            endpoint.method = (endpoint.method or HTTPMethod.GET.value).upper()
            if not endpoint.timeout:
                endpoint.timeout = cfg.timeout
            if not endpoint.output_encoding:
                endpoint.output_encoding = Encoding.JSON.value
            for backend in endpoint.backend:
                backend.method = (backend.method or endpoint.method).upper()

        for agent in cfg.async_agent:
            for backend in agent.backend:
                backend.method = (backend.method or HTTPMethod.GET.value).upper()

        return cfg
