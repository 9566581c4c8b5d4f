"""
Unit tests for the configuration -> snapshot parser.

Tests cover:
- Service-wide bits (TLS, debug, echo, legacy insecure flag)
- Endpoint details (encoding, counts, timeout, wildcards, unsafe methods)
- Backend shape bits
- Async agent details
- Purity (input untouched, same output for same input)
"""

import pytest

from gateway_audit.gateway.loader import load_service_config
from gateway_audit.gateway.models import ServiceConfig
from gateway_audit.snapshot import bits, parse


def _parse(document: dict):
    return parse(load_service_config(document))


class TestServiceFlags:
    """Tests for Snapshot.flags[0]."""

    @pytest.mark.anyio
    async def test_default_service_has_no_bits(self):
        assert _parse({}).flags == [0]

    @pytest.mark.anyio
    async def test_debug_endpoint(self):
        assert parse(ServiceConfig(debug_endpoint=True)).flags == [4]

    @pytest.mark.anyio
    async def test_tls_present_and_enabled(self):
        flags = _parse({"tls": {}}).service_flags
        assert bits.has_bit(flags, bits.SERVICE_HAS_TLS)
        assert bits.has_bit(flags, bits.SERVICE_TLS_ENABLED)

    @pytest.mark.anyio
    async def test_tls_disabled(self):
        """Test that a disabled TLS block is present but not enabled."""
        assert _parse({"tls": {"disabled": True}}).flags == [1 << bits.SERVICE_HAS_TLS]

    @pytest.mark.anyio
    async def test_tls_details(self):
        flags = _parse(
            {
                "tls": {
                    "enable_mtls": True,
                    "disable_system_ca_pool": True,
                    "ca_certs": ["/ca.pem"],
                    "public_key": "/cert.pem",
                }
            }
        ).service_flags
        for position in (
            bits.SERVICE_TLS_ENABLE_MTLS,
            bits.SERVICE_TLS_DISABLE_SYSTEM_CA_POOL,
            bits.SERVICE_TLS_CA_CERTS,
            bits.SERVICE_TLS_PRIV_PUB_KEY,
        ):
            assert bits.has_bit(flags, position)

    @pytest.mark.anyio
    async def test_insecure_connections_from_legacy_or_client_tls(self):
        """Test that both the deprecated and the current flag set the same bit."""
        legacy = _parse({"allow_insecure_connections": True}).service_flags
        current = _parse({"client_tls": {"allow_insecure_connections": True}}).service_flags
        assert legacy == current == 1 << bits.SERVICE_ALLOW_INSECURE_CONNECTIONS

    @pytest.mark.anyio
    async def test_remaining_service_bits(self):
        flags = _parse(
            {
                "plugin": {"folder": "/plugins"},
                "sequential_start": True,
                "disable_rest": True,
                "echo_endpoint": True,
                "use_h2c": True,
            }
        ).service_flags
        expected = 0
        for position in (
            bits.SERVICE_PLUGIN,
            bits.SERVICE_SEQUENTIAL_START,
            bits.SERVICE_DISABLE_STRICT_REST,
            bits.SERVICE_ECHO,
            bits.SERVICE_USE_H2C,
        ):
            expected = bits.add_bit(expected, position)
        assert flags == expected


class TestEndpoints:
    """Tests for EndpointSnapshot.flags."""

    @pytest.mark.anyio
    async def test_default_endpoint_details(self, minimal_config):
        endpoint = _parse(minimal_config).endpoints[0]
        assert endpoint.flags == [1 << bits.ENCODING_JSON, 0, 0, 2000, 0, 0]
        assert endpoint.backends == []
        assert endpoint.components == {}

    @pytest.mark.anyio
    async def test_counts_and_timeout(self):
        endpoint = _parse(
            {
                "endpoints": [
                    {
                        "endpoint": "/a",
                        "timeout": "40s",
                        "output_encoding": "no-op",
                        "input_query_strings": ["page", "size"],
                        "input_headers": ["Authorization"],
                    }
                ]
            }
        ).endpoints[0]
        assert endpoint.flags[:4] == [1 << bits.ENCODING_NOOP, 2, 1, 40_000]

    @pytest.mark.anyio
    async def test_unknown_encoding_is_other(self):
        endpoint = _parse({"endpoints": [{"output_encoding": "yaml"}]}).endpoints[0]
        assert endpoint.flags[bits.ENDPOINT_ENCODING] == 1 << bits.ENCODING_OTHER

    @pytest.mark.anyio
    async def test_wildcards(self):
        endpoint = _parse(
            {
                "endpoints": [
                    {
                        "endpoint": "/files/*",
                        "input_query_strings": ["*"],
                        "input_headers": ["*"],
                    }
                ]
            }
        ).endpoints[0]
        wildcards = endpoint.flags[bits.ENDPOINT_WILDCARDS]
        assert bits.has_bit(wildcards, bits.WILDCARD_PATH)
        assert bits.has_bit(wildcards, bits.WILDCARD_QUERY_STRING)
        assert bits.has_bit(wildcards, bits.WILDCARD_HEADER)
        assert not bits.has_bit(wildcards, bits.WILDCARD_CATCH_ALL)

    @pytest.mark.anyio
    async def test_catch_all(self):
        endpoint = _parse({"endpoints": [{"endpoint": "/__catchall"}]}).endpoints[0]
        assert endpoint.flags[bits.ENDPOINT_WILDCARDS] == 1 << bits.WILDCARD_CATCH_ALL

    @pytest.mark.anyio
    async def test_unsafe_methods(self):
        """Test that non GET/HEAD backends and gRPC backends count as unsafe."""
        endpoint = _parse(
            {
                "endpoints": [
                    {
                        "endpoint": "/a",
                        "method": "POST",
                        "backend": [
                            {},
                            {"method": "PUT"},
                            {"method": "GET"},
                            {"method": "HEAD", "extra_config": {"backend/grpc": {}}},
                        ],
                    }
                ]
            }
        ).endpoints[0]
        assert endpoint.flags[bits.ENDPOINT_UNSAFE_METHODS] == 3


class TestBackends:
    """Tests for BackendSnapshot.flags."""

    @pytest.mark.anyio
    async def test_backend_shape_bits(self):
        backend = _parse(
            {
                "endpoints": [
                    {
                        "backend": [
                            {
                                "encoding": "xml",
                                "allow": ["a"],
                                "deny": ["b"],
                                "mapping": {"a": "c"},
                                "group": "g",
                                "target": "data",
                                "is_collection": True,
                            }
                        ]
                    }
                ]
            }
        ).endpoints[0].backends[0]

        expected = 1 << bits.ENCODING_XML
        for position in (
            bits.BACKEND_ALLOW,
            bits.BACKEND_DENY,
            bits.BACKEND_MAPPING,
            bits.BACKEND_GROUP,
            bits.BACKEND_TARGET,
            bits.BACKEND_IS_COLLECTION,
        ):
            expected = bits.add_bit(expected, position)
        assert backend.flags == [expected]

    @pytest.mark.anyio
    async def test_backend_components(self):
        backend = _parse(
            {"endpoints": [{"backend": [{"extra_config": {"qos/circuit-breaker": {}}}]}]}
        ).endpoints[0].backends[0]
        assert backend.components == {"qos/circuit-breaker": []}


class TestAgents:
    """Tests for AgentSnapshot."""

    @pytest.mark.anyio
    async def test_agent_details(self):
        agent = _parse(
            {
                "async_agent": [
                    {
                        "name": "orders",
                        "encoding": "safejson",
                        "consumer": {"topic": "orders.*", "workers": 4, "timeout": "1s"},
                        "connection": {"max_retries": 10},
                        "backend": [{"url_pattern": "/orders"}],
                        "extra_config": {"async/amqp": {"name": "orders"}},
                    }
                ]
            }
        ).agents[0]

        assert agent.flags == [1 << bits.ENCODING_SAFE_JSON, 4, 10, 1000]
        assert len(agent.backends) == 1
        assert agent.components == {"async/amqp": []}


class TestParsePurity:
    """Tests for determinism and immutability."""

    @pytest.mark.anyio
    async def test_same_input_same_snapshot(self, legacy_config):
        assert _parse(legacy_config) == _parse(legacy_config)

    @pytest.mark.anyio
    async def test_input_is_not_modified(self, hardened_config):
        cfg = load_service_config(hardened_config)
        before = cfg.model_copy(deep=True)
        parse(cfg)
        assert cfg == before
