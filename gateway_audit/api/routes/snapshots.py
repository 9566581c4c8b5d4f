from __future__ import annotations

import base64
import binascii

from fastapi import APIRouter

from gateway_audit.api.schemas import DecodeRequest, DecodeResponse, EncodeRequest, EncodeResponse
from gateway_audit.codec import decode, encode
from gateway_audit.core.errors import ValidationError
from gateway_audit.gateway.loader import load_service_config
from gateway_audit.snapshot import parse

router = APIRouter(tags=["snapshots"])


@router.post(
    "/snapshots/encode", response_model=EncodeResponse, response_model_by_alias=False
)
def post_encode(payload: EncodeRequest):
    """Parse a configuration and return its snapshot plus the compact base64 form."""
    snapshot = parse(load_service_config(payload.config))
    data = encode(snapshot, compression_level=payload.compression_level)
    return EncodeResponse(
        snapshot=snapshot,
        payload=base64.b64encode(data).decode("ascii"),
        size=len(data),
    )


@router.post(
    "/snapshots/decode", response_model=DecodeResponse, response_model_by_alias=False
)
def post_decode(payload: DecodeRequest):
    """Restore a snapshot from its compact base64 form."""
    try:
        data = base64.b64decode(payload.payload, validate=True)
    except (binascii.Error, ValueError) as e:
        raise ValidationError(
            "Payload is not valid base64",
            details={"reason": str(e)},
        ) from e
    return DecodeResponse(snapshot=decode(data))
