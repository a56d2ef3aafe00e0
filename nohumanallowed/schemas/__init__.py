from nohumanallowed.schemas.challenge import (
    Challenge,
    ChallengeCreate,
    ChallengeVerifyRequest,
    ChallengeVerifyResponse,
    VerifyReason,
    VerifyResult,
)
from nohumanallowed.schemas.token import TokenVerifyRequest, TokenVerifyResult

__all__ = [
    "Challenge",
    "ChallengeCreate",
    "ChallengeVerifyRequest",
    "ChallengeVerifyResponse",
    "TokenVerifyRequest",
    "TokenVerifyResult",
    "VerifyReason",
    "VerifyResult",
]
