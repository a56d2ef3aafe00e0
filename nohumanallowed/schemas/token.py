from pydantic import BaseModel, ConfigDict, Field


class TokenVerifyRequest(BaseModel):
    token: str = Field(..., max_length=4096)


class TokenVerifyResult(BaseModel):
    model_config = ConfigDict(populate_by_name=True, frozen=True)

    valid: bool
    challenge_id: str | None = Field(default=None, alias="challengeId")
