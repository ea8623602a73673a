# SPDX-License-Identifier: MPL-2.0
"""FastAPI application for the Moltbook feed."""

import logging
from typing import Any, Dict, List, Optional

from fastapi import Body, FastAPI, HTTPException, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.trustedhost import TrustedHostMiddleware
from fastapi.responses import JSONResponse
from pydantic import BaseModel, ValidationError
from slowapi import Limiter, _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded
from slowapi.middleware import SlowAPIMiddleware
from slowapi.util import get_remote_address

from moltbot import __version__
from moltbot.bot import Moltbot
from moltbot.config import Settings
from moltbot.core.crypto import export_public_key_pem
from moltbot.core.exceptions import EncodingError, MoltbotError
from moltbot.core.feed import verify_post
from moltbot.core.models import Post

logger = logging.getLogger(__name__)


class PromptRequest(BaseModel):
    """Body of ``POST /api/posts``."""

    prompt: str


def _known_key(settings: Settings) -> Optional[str]:
    pair = settings.key_store().load()
    return export_public_key_pem(pair.public_key) if pair else None


async def _moltbot_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.error("Request failed: %s", exc)
    message = exc.message if isinstance(exc, MoltbotError) else str(exc)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"error": type(exc).__name__, "detail": message},
    )


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    """Create and configure the FastAPI application."""
    settings = settings or Settings.from_env()
    bot = Moltbot(settings.key_store(), embed_public_key=settings.embed_public_key)
    feed = settings.feed()

    app = FastAPI(
        title="Moltbook API",
        description="Attested bot posts with independent verification",
        version=__version__,
        docs_url="/api/docs",
        redoc_url="/api/redoc",
    )
    # Add rate limiting, one limiter per app so counters are not shared
    limiter = Limiter(key_func=get_remote_address, default_limits=["100/minute"])
    app.state.limiter = limiter
    app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)
    app.add_exception_handler(MoltbotError, _moltbot_error_handler)
    app.add_middleware(SlowAPIMiddleware)

    # Security headers middleware
    @app.middleware("http")
    async def add_security_headers(request: Request, call_next):  # type: ignore[no-untyped-def]
        """Add security headers to all responses."""
        response = await call_next(request)
        response.headers["X-Content-Type-Options"] = "nosniff"
        response.headers["X-Frame-Options"] = "DENY"
        response.headers["Content-Security-Policy"] = "default-src 'self'"
        return response

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.allowed_origins,
        allow_credentials=True,
        allow_methods=["GET", "POST"],
        allow_headers=["Content-Type", "Authorization"],
        max_age=600,
    )
    app.add_middleware(TrustedHostMiddleware, allowed_hosts=settings.trusted_hosts)

    @app.get("/health", summary="Health Check", tags=["Health"])
    @limiter.limit("500/minute")
    async def health_check(request: Request) -> Dict[str, str]:
        """Health check endpoint for monitoring and load balancers."""
        return {"status": "healthy", "service": "moltbook-api", "version": __version__}

    @app.get("/api/public-key", summary="Bot public key", tags=["Keys"])
    @limiter.limit("200/minute")
    def public_key(request: Request) -> Dict[str, str]:
        """Return the bot public key as SubjectPublicKeyInfo PEM."""
        pem = _known_key(settings)
        if pem is None:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Bot key pair has not been created")
        return {"public_key": pem}

    @app.get("/api/feed", summary="Verified feed", tags=["Feed"])
    @limiter.limit("200/minute")
    def list_feed(request: Request, require_known_key: bool = False) -> List[Dict[str, Any]]:
        """List every post with its verification result."""
        posts = feed.load_and_verify(_known_key(settings), require_known_key=require_known_key)
        return [p.to_wire() for p in posts]

    @app.post("/api/posts", summary="Create an attested post", tags=["Feed"], status_code=status.HTTP_201_CREATED)
    @limiter.limit("60/minute")
    def create_post(request: Request, body: PromptRequest) -> Dict[str, Any]:
        """Run the bot on a prompt and append the attested post to the feed."""
        try:
            post = bot.run(body.prompt)
        except EncodingError as e:
            raise HTTPException(status_code=422, detail=e.message) from e
        feed.append(post)
        return post.to_wire()

    @app.post("/api/verify", summary="Verify a post", tags=["Verification"])
    @limiter.limit("200/minute")
    def verify_endpoint(
        request: Request,
        payload: Dict[str, Any] = Body(...),
        require_known_key: bool = False,
    ) -> Dict[str, bool]:
        """Verify a post against its embedded key or the bot key."""
        try:
            candidate = Post.model_validate(payload)
        except ValidationError:
            return {"verified": False}
        return {"verified": verify_post(candidate, _known_key(settings), require_known_key=require_known_key)}

    return app
