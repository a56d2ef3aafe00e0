"""Stateless proof-of-work challenges that let agents in and keep humans out."""

__version__ = "0.1.0"

from nohumanallowed.schemas.challenge import Challenge, VerifyResult  # noqa: E402
from nohumanallowed.schemas.token import TokenVerifyResult  # noqa: E402
from nohumanallowed.services.crypto_utils import (  # noqa: E402
    DigestProvider,
    HashlibDigest,
    canonical_json,
)
from nohumanallowed.services.pow_service import create_challenge, verify_challenge  # noqa: E402
from nohumanallowed.services.solver_service import (  # noqa: E402
    SolveEstimate,
    SolveResult,
    estimate_solve_time,
    solve_challenge,
    solve_challenge_async,
)
from nohumanallowed.services.token_service import issue_token, verify_token  # noqa: E402

__all__ = [
    "Challenge",
    "DigestProvider",
    "HashlibDigest",
    "SolveEstimate",
    "SolveResult",
    "TokenVerifyResult",
    "VerifyResult",
    "__version__",
    "canonical_json",
    "create_challenge",
    "estimate_solve_time",
    "issue_token",
    "solve_challenge",
    "solve_challenge_async",
    "verify_challenge",
    "verify_token",
]
