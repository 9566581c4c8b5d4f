"""
Compact snapshot codec.

Wire format: gzip(msgpack(snapshot with aliased namespaces)). There is no
embedded schema version; compatibility relies on bit positions and alias
codes being append-only.

    >>> data = encode(snapshot)
    >>> decode(data) == normalize(snapshot)
    True

Encoding is deterministic: equal snapshots always produce the same bytes
(component keys are written in sorted order and the gzip header carries no
timestamp).
"""

import gzip
import logging
import zlib
from collections.abc import Callable

import msgpack
from pydantic import ValidationError as PydanticValidationError

from gateway_audit.codec.aliases import alias_components, unalias_components
from gateway_audit.core.config import settings
from gateway_audit.core.errors import DecompressionError, DeserializationError, ValidationError
from gateway_audit.snapshot.models import Snapshot

logger = logging.getLogger(__name__)

ComponentMapper = Callable[[dict[str, list[int]]], dict[str, list[int]]]


def normalize(snapshot: Snapshot) -> Snapshot:
    """
    Return a deep copy where every missing container is an empty one.

    This is the exact value `decode(encode(snapshot))` yields.
    """
    return Snapshot.model_validate(snapshot.model_dump(by_alias=True, warnings=False))


def _rename_components(snapshot: Snapshot, mapper: ComponentMapper) -> Snapshot:
    # Mutates `snapshot`; callers only ever pass a private copy
    def rename(components: dict[str, list[int]]) -> dict[str, list[int]]:
        return mapper(dict(sorted(components.items())))

    snapshot.components = rename(snapshot.components)
    for scope in [*snapshot.agents, *snapshot.endpoints]:
        scope.components = rename(scope.components)
        for backend in scope.backends:
            backend.components = rename(backend.components)
    return snapshot


def encode(snapshot: Snapshot, compression_level: int | None = None) -> bytes:
    """
    Serialize a snapshot into its compact binary form.

    Args:
        snapshot: Snapshot to encode (left untouched)
        compression_level: gzip level, defaults to the configured level (9)

    Returns:
        The compressed payload

    Raises:
        ValidationError: If the compression level is outside 0..9
    """
    level = settings.codec_compression_level if compression_level is None else compression_level
    if not 0 <= level <= 9:
        raise ValidationError(
            "Compression level must be between 0 and 9",
            details={"compression_level": level},
        )

    content = _rename_components(normalize(snapshot), alias_components)
    packed = msgpack.packb(content.model_dump(by_alias=True), use_bin_type=True)
    data = gzip.compress(packed, compresslevel=level, mtime=0)

    logger.debug(
        "Encoded snapshot",
        extra={"packed_bytes": len(packed), "compressed_bytes": len(data)},
    )
    _record_codec_metrics("encode", "success", len(data))
    return data


def decode(data: bytes) -> Snapshot:
    """
    Restore a snapshot from its compact binary form.

    Args:
        data: Payload produced by `encode`

    Returns:
        The snapshot, with namespaces restored and empty containers filled in

    Raises:
        DecompressionError: If the payload is not valid gzip (corrupt,
            truncated or empty)
        DeserializationError: If the decompressed content is not a snapshot
    """
    if not data:
        _record_codec_metrics("decode", "error", 0)
        raise DecompressionError("Encoded snapshot is empty")

    try:
        packed = gzip.decompress(data)
    except (OSError, EOFError, zlib.error) as e:
        _record_codec_metrics("decode", "error", len(data))
        raise DecompressionError(
            "Encoded snapshot cannot be decompressed",
            details={"reason": str(e), "size": len(data)},
        ) from e

    try:
        raw = msgpack.unpackb(packed, raw=False)
        snapshot = Snapshot.model_validate(raw)
    except PydanticValidationError as e:
        _record_codec_metrics("decode", "error", len(data))
        raise DeserializationError(
            "Decoded content is not a valid snapshot",
            details={"errors": [err["msg"] for err in e.errors()]},
        ) from e
    except (ValueError, TypeError) as e:
        _record_codec_metrics("decode", "error", len(data))
        raise DeserializationError(
            "Decompressed content is not valid msgpack",
            details={"reason": str(e)},
        ) from e

    snapshot = _rename_components(snapshot, unalias_components)

    logger.debug(
        "Decoded snapshot",
        extra={"compressed_bytes": len(data), "packed_bytes": len(packed)},
    )
    _record_codec_metrics("decode", "success", len(data))
    return snapshot


def _record_codec_metrics(operation: str, status: str, size: int) -> None:
    """
    Record codec metrics to Prometheus.

    Metrics failures never break encoding or decoding.

    Args:
        operation: "encode" or "decode"
        status: "success" or "error"
        size: Size of the compressed payload in bytes
    """
    try:
        from gateway_audit.core.observability import metrics

        metrics.codec_operations_total.labels(operation=operation, status=status).inc()
        if status == "success":
            metrics.codec_payload_bytes.labels(operation=operation).observe(size)
    except Exception:
        logger.debug("Codec metrics not recorded", exc_info=True)
