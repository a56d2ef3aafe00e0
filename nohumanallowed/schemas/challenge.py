from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field

VerifyReason = Literal[
    "expired",
    "invalid_hash",
    "invalid_signature",
    "missing_signature",
    "missing_secret",
    "invalid_input",
    "invalid_target",
    "invalid_expiry",
]


class Challenge(BaseModel):
    """A proof-of-work challenge. Never mutated after creation."""

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    id: str = Field(..., pattern=r"^nha_[a-f0-9]{24}$")
    prefix: str = Field(..., min_length=16, max_length=16, pattern=r"^[a-f0-9]{16}$")
    target: str = Field(..., pattern=r"^0{1,6}$")
    expires_at: int | float = Field(..., alias="expiresAt")
    metadata: dict[Any, Any] | None = None
    signature: str | None = Field(default=None, min_length=32, max_length=32)

    def to_wire(self) -> dict[str, Any]:
        """JSON-ready dict with camelCase keys and absent optionals dropped."""
        return self.model_dump(by_alias=True, exclude_none=True)


class VerifyResult(BaseModel):
    model_config = ConfigDict(frozen=True)

    valid: bool
    reason: VerifyReason | None = None
    hash: str | None = None


class ChallengeCreate(BaseModel):
    """
    Challenge options. Numbers are loosely typed so that junk values fall back
    to defaults instead of producing a 422.
    """

    model_config = ConfigDict(populate_by_name=True)

    difficulty: Any = Field(default=None, description="Leading hex zeros, clamped to 1-6")
    expires_in: Any = Field(
        default=None, alias="expiresIn", description="Seconds until the challenge expires"
    )
    metadata: dict[str, Any] | None = None


class ChallengeVerifyRequest(BaseModel):
    """
    Solution submitted by a client.

    Fields are loosely typed on purpose: malformed protocol values are reported
    back as a structured reason rather than a 422.
    """

    model_config = ConfigDict(populate_by_name=True)

    id: str | None = None
    prefix: Any = None
    nonce: Any = None
    target: Any = None
    expires_at: Any = Field(default=None, alias="expiresAt")
    signature: str | None = None
    metadata: dict[str, Any] | None = None


class ChallengeVerifyResponse(BaseModel):
    valid: bool
    reason: VerifyReason | None = None
    hash: str | None = None
    token: str | None = None
