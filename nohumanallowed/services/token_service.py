import base64
import time

import structlog

from nohumanallowed.schemas.token import TokenVerifyResult
from nohumanallowed.services.crypto_utils import DigestProvider, hmac_sign, safe_compare
from nohumanallowed.services.pow_service import CHALLENGE_ID_PREFIX

logger = structlog.get_logger()

TOKEN_DELIMITER = "."
DEFAULT_MAX_AGE_MS = 300_000  # 5 minutes

INVALID = TokenVerifyResult(valid=False)


def _now_ms() -> int:
    return int(time.time() * 1000)


def issue_token(
    challenge_id: str, secret: str | None = None, digest: DigestProvider | None = None
) -> str:
    """
    Issue a session token for a solved challenge.

    Raises ValueError if challenge_id is not a challenge identifier; that is a
    caller bug, not bad client input.
    """
    if not isinstance(challenge_id, str) or not challenge_id.startswith(CHALLENGE_ID_PREFIX):
        raise ValueError(f'Invalid challenge_id: must start with "{CHALLENGE_ID_PREFIX}"')

    payload = f"{challenge_id}:{_now_ms()}"
    encoded = base64.b64encode(payload.encode("utf-8")).decode("ascii")

    if secret:
        return f"{encoded}{TOKEN_DELIMITER}{hmac_sign(payload, secret, digest=digest)}"
    return encoded


def _check_token(
    token: str,
    secret: str | None,
    max_age_ms: int,
    require_secret: bool,
    digest: DigestProvider | None,
) -> TokenVerifyResult:
    if not token or not isinstance(token, str):
        return INVALID

    parts = token.split(TOKEN_DELIMITER)
    encoded = parts[0]
    signature = parts[1] if len(parts) > 1 else None
    if not encoded:
        return INVALID

    payload = base64.b64decode(encoded).decode("utf-8")
    fields = payload.split(":")
    if len(fields) != 2:
        return INVALID

    challenge_id, timestamp_str = fields
    if not challenge_id.startswith(CHALLENGE_ID_PREFIX):
        return INVALID

    if not (timestamp_str.isascii() and timestamp_str.isdigit()):
        return INVALID
    timestamp = int(timestamp_str)
    if timestamp <= 0:
        return INVALID

    # >= so that max_age_ms=0 means "already expired"
    if _now_ms() - timestamp >= max_age_ms:
        return INVALID

    if require_secret and not secret:
        return INVALID

    if secret:
        if not signature:
            return INVALID
        if not safe_compare(signature, hmac_sign(payload, secret, digest=digest)):
            return INVALID

    return TokenVerifyResult(valid=True, challenge_id=challenge_id)


def verify_token(
    token: str,
    secret: str | None = None,
    max_age_ms: int = DEFAULT_MAX_AGE_MS,
    require_secret: bool = False,
    digest: DigestProvider | None = None,
) -> TokenVerifyResult:
    """
    Verify a session token's format, age and (optionally) signature.

    Any decode or parse failure yields an invalid result; nothing is raised.
    """
    try:
        return _check_token(token, secret, max_age_ms, require_secret, digest)
    except (ValueError, TypeError):  # binascii.Error and UnicodeDecodeError included
        logger.debug("token_decode_failed")
        return INVALID
