"""Canonical content hashing for bill payloads.

The digest doubles as the bill's integrity fingerprint and its dedup key, so
it must be stable under key reordering: mappings are rebuilt with sorted keys
at every depth before serialisation, sequences keep their order.
"""

from __future__ import annotations

import hashlib
import hmac
import json
from collections.abc import Mapping
from typing import Any

from .exceptions import EncodingError


def normalize(value: Any) -> Any:
    if isinstance(value, Mapping):
        for key in value:
            if not isinstance(key, str):
                raise EncodingError(f"document keys must be strings, got {type(key).__name__}: {key!r}")
        return {key: normalize(value[key]) for key in sorted(value)}
    if isinstance(value, (list, tuple)):
        return [normalize(item) for item in value]
    return value


def canonical_bytes(document: Any) -> bytes:
    try:
        encoded = json.dumps(
            normalize(document),
            ensure_ascii=False,
            separators=(",", ":"),
            allow_nan=False,
        )
        return encoded.encode("utf-8")
    except (TypeError, ValueError) as exc:
        # UnicodeEncodeError (lone surrogates) is a ValueError
        raise EncodingError(f"document is not JSON representable: {exc}") from exc


def generate_bill_hash(document: Any) -> str:
    """Return the SHA-256 hex digest of the canonical form of ``document``."""
    return hashlib.sha256(canonical_bytes(document)).hexdigest()


def verify_bill_hash(document: Any, expected_hash: str) -> bool:
    return hmac.compare_digest(generate_bill_hash(document), expected_hash)


__all__ = ["canonical_bytes", "generate_bill_hash", "normalize", "verify_bill_hash"]
