"""
FastAPI Application Entry Point

Integrates:
  - Slack outgoing-webhook handler (POST /hello)
  - Middleware for logging & error handling
  - TLS configuration resolved before the server binds

Run: python main.py --conf conf/config.json
"""

import argparse
import logging
import os
import sys
import tempfile
from contextlib import asynccontextmanager
from pathlib import Path
from typing import Any, Dict, List, Optional

from dotenv import load_dotenv
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from infra.config import ConfigError, EffectiveConfig, get_config
from transport.slack import router as slack_router

# Setup logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


def create_app(config: Optional[EffectiveConfig] = None) -> FastAPI:
    """
    Build the FastAPI application.

    Args:
        config: Resolved configuration; defaults apply when None
    """

    config = config or EffectiveConfig(use_tls=False)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        logger.info("=" * 60)
        logger.info("slack-hello-back starting up...")
        logger.info(f"Port: {config.http_port}")
        logger.info(f"TLS: {'enabled' if config.use_tls else 'disabled'}")
        logger.info(f"Greeting: {config.greeting_prefix}")
        logger.info("=" * 60)

        yield

        logger.info("slack-hello-back shutting down...")

    app = FastAPI(
        title="slack-hello-back",
        description="Says hello back to Slack outgoing webhooks",
        version="1.0.0",
        lifespan=lifespan,
    )
    app.state.greeting_prefix = config.greeting_prefix

    @app.middleware("http")
    async def log_requests(request: Request, call_next):
        """Log all requests."""
        logger.debug(f"{request.method} {request.url.path}")
        try:
            response = await call_next(request)
            return response
        except Exception as e:
            logger.error(f"Request error: {str(e)}", exc_info=True)
            return JSONResponse(
                status_code=500,
                content={"detail": "Internal server error"},
            )

    app.include_router(slack_router)
    return app


app = create_app()


def tls_options(config: EffectiveConfig, workdir: str) -> Dict[str, Any]:
    """
    uvicorn ssl_* keyword arguments for the resolved keystore.

    The keystore is a PEM bundle (certificate chain + private key). Inline
    contents are written to a private file in `workdir`, since the TLS
    layer only loads from paths.
    """

    if not config.use_tls:
        return {}

    if config.keystore_contents is not None:
        fd, keystore_path = tempfile.mkstemp(suffix=".pem", dir=workdir)
        with os.fdopen(fd, "wb") as f:
            f.write(config.keystore_contents)
    else:
        keystore_path = config.keystore_file

    return {
        "ssl_certfile": keystore_path,
        "ssl_keyfile": keystore_path,
        "ssl_keyfile_password": config.keystore_pass,
    }


def main(argv: Optional[List[str]] = None) -> int:
    """
    Resolve configuration and serve until interrupted.

    Returns:
        Process exit status; 1 when configuration is invalid
    """

    parser = argparse.ArgumentParser(description="Slack hello-back service")
    parser.add_argument("--conf", help="JSON base configuration file")
    parser.add_argument("--host", default="0.0.0.0", help="Listen address")
    args = parser.parse_args(argv)

    load_dotenv(Path(__file__).parent / ".env")

    try:
        config = get_config(args.conf, os.environ)
    except ConfigError as e:
        logger.error(f"Refusing to start: {e}")
        return 1

    import uvicorn

    with tempfile.TemporaryDirectory(prefix="shb-") as workdir:
        uvicorn.run(
            create_app(config),
            host=args.host,
            port=config.http_port,
            **tls_options(config, workdir),
        )
    return 0


if __name__ == "__main__":
    sys.exit(main())
