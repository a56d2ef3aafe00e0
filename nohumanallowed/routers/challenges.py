import structlog
from fastapi import APIRouter

from nohumanallowed.config import settings
from nohumanallowed.schemas.challenge import (
    Challenge,
    ChallengeCreate,
    ChallengeVerifyRequest,
    ChallengeVerifyResponse,
)
from nohumanallowed.services.pow_service import (
    CHALLENGE_ID_PREFIX,
    create_challenge,
    verify_challenge,
)
from nohumanallowed.services.token_service import issue_token

router = APIRouter()
logger = structlog.get_logger()


@router.post(
    "/challenges",
    response_model=Challenge,
    response_model_exclude_none=True,
    status_code=201,
)
async def create_challenge_endpoint(challenge_data: ChallengeCreate):
    """
    Request a proof-of-work challenge.

    The challenge is signed when a server secret is configured; the client
    must send the signature back unchanged with its solution.
    """
    difficulty = challenge_data.difficulty
    expires_in = challenge_data.expires_in

    challenge = create_challenge(
        difficulty=settings.default_difficulty if difficulty is None else difficulty,
        expires_in=settings.default_expires_in if expires_in is None else expires_in,
        metadata=challenge_data.metadata,
        secret=settings.challenge_secret,
    )

    logger.info(
        "challenge_created",
        challenge_id=challenge.id,
        difficulty=len(challenge.target),
        signed=challenge.signature is not None,
    )

    return challenge


@router.post(
    "/challenges/verify",
    response_model=ChallengeVerifyResponse,
    response_model_exclude_none=True,
)
async def verify_challenge_endpoint(submission: ChallengeVerifyRequest):
    """
    Verify a solved challenge.

    A session token is issued for valid solutions that name their challenge
    id. Replay protection is up to the caller.
    """
    result = verify_challenge(
        prefix=submission.prefix,
        nonce=submission.nonce,
        target=submission.target,
        expires_at=submission.expires_at,
        signature=submission.signature,
        secret=settings.challenge_secret,
        require_signature=settings.require_signature,
        metadata=submission.metadata,
    )

    token = None
    challenge_id = submission.id
    if result.valid and challenge_id and challenge_id.startswith(CHALLENGE_ID_PREFIX):
        token = issue_token(challenge_id, settings.challenge_secret)

    logger.info(
        "challenge_verified",
        challenge_id=challenge_id,
        valid=result.valid,
        reason=result.reason,
        token_issued=token is not None,
    )

    return ChallengeVerifyResponse(
        valid=result.valid,
        reason=result.reason,
        hash=result.hash,
        token=token,
    )
