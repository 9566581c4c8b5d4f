from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field

from gateway_audit.snapshot.models import Snapshot


class EncodeRequest(BaseModel):
    config: dict[str, Any] = Field(description="Gateway configuration tree (krakend.json)")
    compression_level: int | None = Field(
        default=None, ge=0, le=9, description="gzip level; defaults to CODEC_COMPRESSION_LEVEL"
    )


class EncodeResponse(BaseModel):
    snapshot: Snapshot
    payload: str = Field(description="Base64 encoded compact snapshot")
    size: int = Field(description="Size of the compact snapshot in bytes")


class DecodeRequest(BaseModel):
    payload: str = Field(min_length=1, description="Base64 encoded compact snapshot")


class DecodeResponse(BaseModel):
    snapshot: Snapshot
