"""
Compact binary codec for numeric snapshots.

Key Components:
- aliases: Append-only namespace <-> short code dictionary
- codec: encode/decode with msgpack and gzip
"""

from gateway_audit.codec.codec import decode, encode, normalize

__all__ = [
    "decode",
    "encode",
    "normalize",
]
