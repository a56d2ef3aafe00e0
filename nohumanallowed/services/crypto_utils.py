import hashlib
import hmac
import json
import math
from collections.abc import Mapping
from typing import Any, Protocol

SIGNATURE_LENGTH = 32  # 128-bit truncated HMAC
METADATA_FINGERPRINT_LENGTH = 16


class DigestProvider(Protocol):
    """SHA-256 / HMAC-SHA256 backend, hex encoded."""

    def sha256_hex(self, message: str) -> str: ...

    def hmac_sha256_hex(self, key: str, message: str) -> str: ...


class HashlibDigest:
    """Default digest provider backed by hashlib and hmac."""

    def sha256_hex(self, message: str) -> str:
        return hashlib.sha256(message.encode("utf-8")).hexdigest()

    def hmac_sha256_hex(self, key: str, message: str) -> str:
        return hmac.new(key.encode("utf-8"), message.encode("utf-8"), hashlib.sha256).hexdigest()


default_digest = HashlibDigest()


def hmac_sign(
    payload: str,
    secret: str,
    length: int = SIGNATURE_LENGTH,
    digest: DigestProvider | None = None,
) -> str:
    """Compute an HMAC-SHA256 signature truncated to `length` hex characters."""
    digest = digest or default_digest
    return digest.hmac_sha256_hex(secret, payload)[:length]


def safe_compare(a: Any, b: Any) -> bool:
    """Constant-time string comparison. Non-strings never match."""
    if not isinstance(a, str) or not isinstance(b, str):
        return False
    if len(a) != len(b):
        return False
    return hmac.compare_digest(a.encode("utf-8"), b.encode("utf-8"))


def is_number(value: Any) -> bool:
    """True for ints and floats, but not bools."""
    return isinstance(value, int | float) and not isinstance(value, bool)


def is_finite_number(value: Any) -> bool:
    return is_number(value) and math.isfinite(value)


def format_number(value: int | float) -> str:
    """
    Render a number the way a JSON client would.

    Integral floats lose their trailing ".0" so that 1700000000.0 and
    1700000000 produce the same signing payload.
    """
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return repr(value) if isinstance(value, float) else str(value)


def canonical_json(value: Any) -> str:
    """
    Deterministic JSON serialization with recursively sorted keys.

    Two semantically equal values always serialize identically, regardless of
    the order in which their mappings were built.
    """
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, int | float):
        if isinstance(value, float) and not math.isfinite(value):
            return "null"
        return format_number(value)
    if isinstance(value, str):
        return json.dumps(value, ensure_ascii=False)
    if isinstance(value, Mapping):
        items = sorted(((str(key), item) for key, item in value.items()), key=lambda pair: pair[0])
        pairs = [
            json.dumps(key, ensure_ascii=False) + ":" + canonical_json(item) for key, item in items
        ]
        return "{" + ",".join(pairs) + "}"
    if isinstance(value, list | tuple):
        return "[" + ",".join(canonical_json(item) for item in value) + "]"
    raise TypeError(f"Cannot canonicalize value of type {type(value).__name__}")


def metadata_fingerprint(
    metadata: Mapping[Any, Any] | None,
    digest: DigestProvider | None = None,
) -> str:
    """Short SHA-256 fingerprint of canonical metadata, empty when absent."""
    if metadata is None:
        return ""
    digest = digest or default_digest
    return digest.sha256_hex(canonical_json(metadata))[:METADATA_FINGERPRINT_LENGTH]
