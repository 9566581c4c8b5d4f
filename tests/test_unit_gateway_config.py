"""
Unit tests for the gateway configuration model and loader.

Tests cover:
- Gateway defaults applied by ServiceConfig.normalized()
- Unknown keys and explicit nulls
- Loading from mappings, JSON text, bytes and files
- Structural errors reported as ConfigurationError
"""

import json
from datetime import timedelta
from pathlib import Path

import pytest

from gateway_audit.core.errors import ConfigurationError
from gateway_audit.gateway.loader import load_service_config, load_service_config_file
from gateway_audit.gateway.models import ServiceConfig


class TestNormalized:
    """Tests for the gateway defaults."""

    @pytest.mark.anyio
    async def test_service_timeout_defaults_to_two_seconds(self):
        cfg = ServiceConfig().normalized()
        assert cfg.timeout == timedelta(seconds=2)

    @pytest.mark.anyio
    async def test_endpoint_defaults(self):
        """Test method, timeout and encoding defaults of an endpoint."""
        cfg = ServiceConfig.model_validate(
            {"timeout": "5s", "endpoints": [{"endpoint": "/a", "backend": [{}]}]}
        ).normalized()

        endpoint = cfg.endpoints[0]
        assert endpoint.method == "GET"
        assert endpoint.timeout == timedelta(seconds=5)
        assert endpoint.output_encoding == "json"
        assert endpoint.backend[0].method == "GET"

    @pytest.mark.anyio
    async def test_methods_are_upper_cased_and_inherited(self):
        cfg = ServiceConfig.model_validate(
            {
                "endpoints": [
                    {"endpoint": "/a", "method": "post", "backend": [{}, {"method": "get"}]}
                ]
            }
        ).normalized()

        endpoint = cfg.endpoints[0]
        assert endpoint.method == "POST"
        assert [b.method for b in endpoint.backend] == ["POST", "GET"]

    @pytest.mark.anyio
    async def test_explicit_values_are_kept(self):
        cfg = ServiceConfig.model_validate(
            {
                "timeout": "10s",
                "endpoints": [
                    {"endpoint": "/a", "timeout": "40s", "output_encoding": "no-op"},
                ],
            }
        ).normalized()

        assert cfg.endpoints[0].timeout == timedelta(seconds=40)
        assert cfg.endpoints[0].output_encoding == "no-op"

    @pytest.mark.anyio
    async def test_does_not_mutate_receiver(self):
        cfg = ServiceConfig.model_validate({"endpoints": [{"endpoint": "/a"}]})
        cfg.normalized()
        assert cfg.endpoints[0].method == ""
        assert cfg.timeout == timedelta(0)

    @pytest.mark.anyio
    async def test_is_idempotent(self):
        cfg = ServiceConfig.model_validate({"endpoints": [{"endpoint": "/a", "backend": [{}]}]})
        once = cfg.normalized()
        assert once.normalized() == once

    @pytest.mark.anyio
    async def test_agent_backend_method_defaults_to_get(self):
        cfg = ServiceConfig.model_validate({"async_agent": [{"backend": [{}]}]}).normalized()
        assert cfg.async_agent[0].backend[0].method == "GET"


class TestServiceConfigValidation:
    """Tests for lenient field handling."""

    @pytest.mark.anyio
    async def test_unknown_keys_are_ignored(self):
        cfg = ServiceConfig.model_validate({"version": 3, "$schema": "x", "output": "stdout"})
        assert cfg.version == 3

    @pytest.mark.anyio
    async def test_nulls_fall_back_to_defaults(self):
        cfg = ServiceConfig.model_validate({"endpoints": None, "extra_config": None})
        assert cfg.endpoints == []
        assert cfg.extra_config == {}

    @pytest.mark.anyio
    async def test_unparseable_duration_is_zero(self):
        cfg = ServiceConfig.model_validate({"timeout": "forever"})
        assert cfg.timeout == timedelta(0)


class TestLoadServiceConfig:
    """Tests for load_service_config."""

    @pytest.mark.anyio
    async def test_load_from_mapping(self, minimal_config):
        cfg = load_service_config(minimal_config)
        assert cfg.endpoints[0].endpoint == "/ping"
        assert cfg.endpoints[0].method == "GET"

    @pytest.mark.anyio
    async def test_load_from_json_text_and_bytes(self, minimal_config):
        text = json.dumps(minimal_config)
        assert load_service_config(text) == load_service_config(text.encode("utf-8"))

    @pytest.mark.anyio
    async def test_load_from_service_config_normalizes(self):
        cfg = load_service_config(ServiceConfig())
        assert cfg.timeout == timedelta(seconds=2)

    @pytest.mark.anyio
    async def test_load_from_file(self, hardened_config_path: Path):
        cfg = load_service_config_file(hardened_config_path)
        assert cfg.name == "hardened gateway"
        assert len(cfg.endpoints[0].backend) == 2

    @pytest.mark.anyio
    async def test_missing_file_raises(self, tmp_path: Path):
        with pytest.raises(ConfigurationError) as exc_info:
            load_service_config_file(tmp_path / "missing.json")
        assert "path" in exc_info.value.details

    @pytest.mark.anyio
    async def test_invalid_json_raises(self):
        with pytest.raises(ConfigurationError, match="not a valid JSON document"):
            load_service_config("{not json")

    @pytest.mark.anyio
    async def test_non_object_root_raises(self):
        with pytest.raises(ConfigurationError) as exc_info:
            load_service_config("[1, 2, 3]")
        assert exc_info.value.details == {"type": "list"}

    @pytest.mark.anyio
    async def test_wrong_structure_reports_locations(self):
        """Test that a structural error reports where it happened."""
        with pytest.raises(ConfigurationError) as exc_info:
            load_service_config({"endpoints": [{"backend": "not-a-list"}]})

        errors = exc_info.value.details["errors"]
        assert errors
        assert errors[0]["loc"].startswith("endpoints.0.backend")
