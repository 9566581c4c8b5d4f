"""
Pytest configuration and shared fixtures.

Provides:
- AnyIO backend selection
- Gateway configuration trees (minimal, hardened, legacy)
- FastAPI TestClient
"""

from __future__ import annotations

import copy
import json
from pathlib import Path
from typing import Any

import pytest
from fastapi.testclient import TestClient

from gateway_audit.main import create_app

FIXTURES_DIR = Path(__file__).resolve().parent / "fixtures"


# =============================================================================
# AnyIO Backend Configuration
# =============================================================================
@pytest.fixture
def anyio_backend():
    return "asyncio"


# =============================================================================
# Gateway configurations
# =============================================================================


@pytest.fixture
def hardened_config_path() -> Path:
    """Path of a configuration that follows every recommendation it can."""
    return FIXTURES_DIR / "hardened.json"


@pytest.fixture
def hardened_config(hardened_config_path: Path) -> dict[str, Any]:
    return json.loads(hardened_config_path.read_text(encoding="utf-8"))


@pytest.fixture
def minimal_config() -> dict[str, Any]:
    """A single endpoint without backends and nothing else."""
    return {"version": 3, "endpoints": [{"endpoint": "/ping"}]}


@pytest.fixture
def legacy_config() -> dict[str, Any]:
    """A configuration full of deprecated settings and plugins."""
    return copy.deepcopy(
        {
            "version": 3,
            "timeout": "45s",
            "allow_insecure_connections": True,
            "debug_endpoint": True,
            "echo_endpoint": True,
            "plugin": {"folder": "/opt/plugins", "pattern": ".so"},
            "tls": {
                "disabled": True,
                "public_key": "/etc/tls/cert.pem",
                "private_key": "/etc/tls/key.pem",
            },
            "extra_config": {
                "plugin/http-server": {"name": ["basic-auth", "geoip"]},
                "router": {"use_h2c": True},
                "telemetry/opencensus": {"exporters": {"prometheus": {"port": 9091}}},
                "telemetry/instana": {},
            },
            "endpoints": [
                {
                    "endpoint": "/__catchall",
                    "input_headers": ["*"],
                    "input_query_strings": ["*"],
                    "output_encoding": "no-op",
                    "backend": [
                        {
                            "host": ["http://legacy:8080"],
                            "url_pattern": "/",
                            "encoding": "no-op",
                            "extra_config": {
                                "plugin/http-client": {"name": "no-redirect"},
                                "backend/http/client": {
                                    "client_tls": {"allow_insecure_connections": True}
                                },
                            },
                        }
                    ],
                }
            ],
        }
    )


# =============================================================================
# API
# =============================================================================


@pytest.fixture
def client() -> TestClient:
    return TestClient(create_app())
