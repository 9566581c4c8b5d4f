"""
Loading gateway configurations.

The loader is the only place where a configuration can be rejected: the tree
must have the right structure (objects where objects are expected, lists
where lists are expected). Whether the configuration follows good practices
is the audit's business, never the loader's.
"""

import json
import logging
from collections.abc import Mapping
from os import PathLike
from pathlib import Path
from typing import Any

from pydantic import ValidationError as PydanticValidationError

from gateway_audit.core.errors import ConfigurationError
from gateway_audit.gateway.models import ServiceConfig

logger = logging.getLogger(__name__)

ConfigSource = ServiceConfig | Mapping[str, Any] | str | bytes | PathLike


def _validation_details(exc: PydanticValidationError) -> list[dict[str, Any]]:
    return [
        {
            "loc": ".".join(str(part) for part in error["loc"]),
            "msg": error["msg"],
            "type": error["type"],
        }
        for error in exc.errors()
    ]


def _read_document(source: str | bytes | PathLike) -> Any:
    if isinstance(source, PathLike):
        path = Path(source)
        try:
            text = path.read_text(encoding="utf-8")
        except OSError as e:
            raise ConfigurationError(
                f"Cannot read configuration file: {path}",
                details={"path": str(path), "reason": str(e)},
            ) from e
    else:
        text = source

    try:
        return json.loads(text)
    except (json.JSONDecodeError, UnicodeDecodeError) as e:
        raise ConfigurationError(
            "Configuration is not a valid JSON document",
            details={"reason": str(e)},
        ) from e


def load_service_config(source: ConfigSource) -> ServiceConfig:
    """
    Load, validate and normalize a gateway configuration.

    Args:
        source: A ServiceConfig, a parsed mapping, JSON text/bytes, or a
            path to a JSON file

    Returns:
        The normalized configuration (gateway defaults applied)

    Raises:
        ConfigurationError: If the source cannot be read or the tree is
            structurally invalid
    """
    if isinstance(source, ServiceConfig):
        return source.normalized()

    document = source if isinstance(source, Mapping) else _read_document(source)

    if not isinstance(document, Mapping):
        raise ConfigurationError(
            "Configuration root must be a JSON object",
            details={"type": type(document).__name__},
        )

    try:
        config = ServiceConfig.model_validate(dict(document))
    except PydanticValidationError as e:
        logger.info(
            "Rejected structurally invalid configuration",
            extra={"error_count": e.error_count()},
        )
        raise ConfigurationError(
            "Configuration is structurally invalid",
            details={"errors": _validation_details(e)},
        ) from e

    return config.normalized()


def load_service_config_file(path: str | PathLike) -> ServiceConfig:
    """Load a configuration file. Plain strings are treated as paths here."""
    return load_service_config(Path(path))
