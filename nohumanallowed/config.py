from pydantic import ConfigDict, field_validator
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    model_config = ConfigDict(
        env_prefix="NHA_",
        env_file=".env",
        env_file_encoding="utf-8",
    )

    # Signing (recommended: 32+ chars). Never sent over the wire.
    challenge_secret: str | None = None
    require_signature: bool = False

    # Challenges
    default_difficulty: int = 4
    default_expires_in: int = 60  # seconds

    # Tokens
    token_max_age_ms: int = 300_000  # 5 minutes

    # Solver
    solver_max_iterations: int = 10_000_000
    solver_progress_interval: int = 100_000

    # Logging
    log_level: str = "INFO"
    log_format: str = "console"  # "console" or "json"

    # Server
    host: str = "127.0.0.1"
    port: int = 8000

    # CORS
    cors_origins: list[str] | str = ["http://localhost:5173", "http://127.0.0.1:5173"]

    @field_validator("cors_origins", mode="before")
    @classmethod
    def parse_cors_origins(cls, v):
        """Parse CORS origins from comma-separated string or list."""
        if isinstance(v, str):
            return [origin.strip() for origin in v.split(",") if origin.strip()]
        return v


settings = Settings()
