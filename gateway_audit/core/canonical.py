"""
JSON canonicalization helpers.

Used wherever the size or the bytes of a JSON document must not depend on
key insertion order: the schema size recorded for response validation
components, and the JSON report printed by the command line.
"""

import json
from typing import Any


def canonicalize_json(obj: Any) -> dict | list | Any:
    """
    Produce a deterministic, canonical representation of a JSON object.

    - All dictionary keys are sorted alphabetically
    - Nested structures are recursively canonicalized
    - Arrays keep their input order

    Example:
        >>> canonicalize_json({"z": 1, "a": {"c": 2, "b": 3}})
        {'a': {'b': 3, 'c': 2}, 'z': 1}
    """
    if isinstance(obj, dict):
        return {k: canonicalize_json(v) for k, v in sorted(obj.items())}

    elif isinstance(obj, list):
        return [canonicalize_json(item) for item in obj]

    else:
        return obj


def to_canonical_json_string(obj: Any) -> str:
    """
    Convert a Python object to a compact canonical JSON string.

    Example:
        >>> to_canonical_json_string({"type": "object", "required": ["id"]})
        '{"required":["id"],"type":"object"}'
    """
    canonical = canonicalize_json(obj)

    # separators=(',', ':') removes spaces after commas and colons
    return json.dumps(canonical, sort_keys=True, separators=(",", ":"), ensure_ascii=False)


def to_canonical_json_pretty(obj: Any) -> str:
    """Convert a Python object to a pretty-printed canonical JSON string."""
    canonical = canonicalize_json(obj)
    return json.dumps(canonical, sort_keys=True, indent=2, ensure_ascii=False)


def canonical_json_size(obj: Any) -> int:
    """Size in UTF-8 bytes of the compact canonical form of `obj`."""
    return len(to_canonical_json_string(obj).encode("utf-8"))
