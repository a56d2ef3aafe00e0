import structlog
from fastapi import APIRouter

from nohumanallowed.config import settings
from nohumanallowed.schemas.token import TokenVerifyRequest, TokenVerifyResult
from nohumanallowed.services.token_service import verify_token

router = APIRouter()
logger = structlog.get_logger()


@router.post(
    "/tokens/verify",
    response_model=TokenVerifyResult,
    response_model_exclude_none=True,
)
async def verify_token_endpoint(token_data: TokenVerifyRequest):
    """
    Check a session token issued after a successful verification.

    Tokens are stateless; they stay valid until they are older than the
    configured maximum age.
    """
    result = verify_token(
        token_data.token,
        secret=settings.challenge_secret,
        max_age_ms=settings.token_max_age_ms,
        require_secret=settings.require_signature,
    )

    logger.info("token_verified", valid=result.valid, challenge_id=result.challenge_id)

    return result
