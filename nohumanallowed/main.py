from contextlib import asynccontextmanager

import structlog
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from nohumanallowed import __version__
from nohumanallowed.config import settings
from nohumanallowed.logging_config import setup_logging
from nohumanallowed.middleware.logging import LoggingMiddleware
from nohumanallowed.routers import challenges, tokens

MIN_SECRET_LENGTH = 32


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Configure logging and report the signing mode at startup."""
    setup_logging()
    logger = structlog.get_logger()

    if not settings.challenge_secret:
        logger.warning("challenge_signing_disabled", require_signature=settings.require_signature)
    elif len(settings.challenge_secret) < MIN_SECRET_LENGTH:
        logger.warning("challenge_secret_short", min_length=MIN_SECRET_LENGTH)

    logger.info("api_started", version=__version__)
    yield


app = FastAPI(
    title="nohumanallowed",
    description="Stateless proof-of-work challenges for the agentic web",
    version=__version__,
    lifespan=lifespan,
)

app.add_middleware(LoggingMiddleware)

# CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Routers
app.include_router(challenges.router, prefix="/api/v1", tags=["challenges"])
app.include_router(tokens.router, prefix="/api/v1", tags=["tokens"])


@app.get("/health")
async def health_check():
    return {"status": "healthy"}
