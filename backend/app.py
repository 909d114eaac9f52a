import logging
from typing import Optional

import httpx
import uvicorn
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from auth import router as auth_router
from cors import OriginGuard, OriginGuardMiddleware
from env import configure_logging, load_environment
from settings import Settings, load_settings

logger = logging.getLogger(__name__)


def create_app(
    settings: Optional[Settings] = None,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> FastAPI:
    """Build the relay application.

    Settings are read from the environment once, here, when not passed in.
    `transport` replaces the network transport used for token endpoint calls.
    """
    if settings is None:
        load_environment()
        settings = load_settings()

    app = FastAPI(title="Spotify Auth Relay")
    app.state.settings = settings
    app.state.transport = transport

    origins = sorted(settings.allowed_origins)
    app.add_middleware(
        CORSMiddleware, allow_origins=origins, allow_credentials=True, allow_methods=["*"], allow_headers=["*"]
    )
    # Added last so it runs first: disallowed origins never reach CORSMiddleware.
    app.add_middleware(OriginGuardMiddleware, guard=OriginGuard(origins))

    @app.get("/healthz")
    def healthz():
        return {"ok": True}

    app.include_router(auth_router)
    return app


def main() -> None:
    load_environment()
    configure_logging()
    settings = load_settings()
    logger.info("Listening on port %s. Go /login to initiate authentication flow.", settings.port)
    uvicorn.run(create_app(settings), host="0.0.0.0", port=settings.port, log_level="info")


if __name__ == "__main__":
    main()
