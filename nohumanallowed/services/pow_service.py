import math
import re
import secrets
import time
from collections.abc import Mapping
from typing import Any

import structlog

from nohumanallowed.schemas.challenge import Challenge, VerifyResult
from nohumanallowed.services.crypto_utils import (
    DigestProvider,
    default_digest,
    format_number,
    hmac_sign,
    is_finite_number,
    is_number,
    metadata_fingerprint,
    safe_compare,
)

logger = structlog.get_logger()

CHALLENGE_ID_PREFIX = "nha_"
DEFAULT_DIFFICULTY = 4
MIN_DIFFICULTY = 1
MAX_DIFFICULTY = 6
DEFAULT_EXPIRES_IN = 60
TARGET_PATTERN = re.compile(r"0{1,6}")


def normalize_difficulty(difficulty: Any) -> int:
    """Floor and clamp a requested difficulty into [1, 6]; junk becomes 4."""
    if not is_finite_number(difficulty):
        difficulty = DEFAULT_DIFFICULTY
    return max(MIN_DIFFICULTY, min(MAX_DIFFICULTY, math.floor(difficulty)))


def normalize_expires_in(expires_in: Any) -> int | float:
    if not is_finite_number(expires_in) or expires_in <= 0:
        return DEFAULT_EXPIRES_IN
    return expires_in


def _signing_payload(
    prefix: str,
    target: str,
    expires_at: int | float,
    metadata: Mapping[Any, Any] | None,
    digest: DigestProvider,
) -> str:
    meta_hash = metadata_fingerprint(metadata, digest)
    return f"{prefix}:{target}:{format_number(expires_at)}:{meta_hash}"


def create_challenge(
    difficulty: Any = DEFAULT_DIFFICULTY,
    expires_in: Any = DEFAULT_EXPIRES_IN,
    metadata: Mapping[Any, Any] | None = None,
    secret: str | None = None,
    digest: DigestProvider | None = None,
) -> Challenge:
    """
    Generate a new proof-of-work challenge.

    Malformed numeric options are normalized, never rejected. When a secret is
    given the challenge is signed, binding prefix, target, expiry and metadata.

    Raises:
        TypeError: metadata holds a value with no JSON form and a secret was
            given, so the challenge could never verify.
    """
    digest = digest or default_digest

    target = "0" * normalize_difficulty(difficulty)
    expires_at = math.floor(time.time()) + normalize_expires_in(expires_in)
    if isinstance(expires_at, float) and expires_at.is_integer():
        expires_at = int(expires_at)

    challenge_id = f"{CHALLENGE_ID_PREFIX}{secrets.token_hex(12)}"
    prefix = secrets.token_hex(8)

    signature = None
    if secret:
        payload = _signing_payload(prefix, target, expires_at, metadata, digest)
        signature = hmac_sign(payload, secret, digest=digest)

    return Challenge(
        id=challenge_id,
        prefix=prefix,
        target=target,
        expires_at=expires_at,
        metadata=dict(metadata) if metadata is not None else None,
        signature=signature,
    )


def _reject(reason: str, hash_hex: str | None = None) -> VerifyResult:
    logger.debug("challenge_rejected", reason=reason)
    return VerifyResult(valid=False, reason=reason, hash=hash_hex)


def verify_challenge(
    *,
    prefix: Any,
    nonce: Any,
    target: Any,
    expires_at: Any,
    signature: Any = None,
    secret: str | None = None,
    require_signature: bool = False,
    metadata: Mapping[Any, Any] | None = None,
    digest: DigestProvider | None = None,
) -> VerifyResult:
    """
    Verify a submitted solution.

    Never raises for caller-supplied input; the first failing check is
    returned as the reason. A signature is never ignored: if one is submitted
    the secret must be available to check it.
    """
    digest = digest or default_digest

    if not isinstance(prefix, str) or not prefix:
        return _reject("invalid_input")

    if isinstance(nonce, str):
        nonce_str = nonce
    elif is_finite_number(nonce):
        nonce_str = format_number(nonce)
    else:
        return _reject("invalid_input")

    if not isinstance(target, str) or not TARGET_PATTERN.fullmatch(target):
        return _reject("invalid_target")

    if not is_number(expires_at) or not math.isfinite(expires_at) or expires_at <= 0:
        return _reject("invalid_expiry")

    if math.floor(time.time()) > expires_at:
        return _reject("expired")

    if require_signature:
        if not secret:
            return _reject("missing_secret")
        if not signature:
            return _reject("missing_signature")

    if signature and not secret:
        return _reject("missing_secret")

    if signature and secret:
        try:
            payload = _signing_payload(prefix, target, expires_at, metadata, digest)
        except TypeError:
            return _reject("invalid_input")
        expected = hmac_sign(payload, secret, digest=digest)
        if not safe_compare(signature, expected):
            return _reject("invalid_signature")

    hash_hex = digest.sha256_hex(f"{prefix}{nonce_str}")
    if not hash_hex.startswith(target):
        return _reject("invalid_hash", hash_hex)

    return VerifyResult(valid=True, hash=hash_hex)
