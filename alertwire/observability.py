"""Logfire cloud observability initialization and instrumentation."""

import logging

import logfire

from alertwire import __version__
from alertwire.config import Settings

logger = logging.getLogger(__name__)


def initialize_logfire(settings: Settings, app=None) -> bool:
    """
    Initialize Logfire and instrument the libraries the pipeline runs on.

    Must be called once at startup, before the first query agent is built.

    Instruments:
    - PydanticAI (LLM query generation)
    - HTTPX clients (Superfeedr, Kalshi, Resend, Twilio)
    - FastAPI, when an app is passed
    - Python logging (bridged to Logfire)

    Returns:
        True when Logfire was configured.
    """
    if not settings.logfire_token:
        logger.warning("Logfire token not set - observability disabled")
        return False

    try:
        logfire.configure(
            token=settings.logfire_token,
            service_name="alertwire",
            service_version=__version__,
            environment=settings.environment,
        )

        logfire.instrument_pydantic_ai()
        logfire.instrument_httpx()
        if app is not None:
            logfire.instrument_fastapi(app)

        root_logger = logging.getLogger()
        root_logger.addHandler(logfire.LogfireLoggingHandler())

        logger.info("✓ Logfire cloud tracking initialized")
        return True

    except Exception as e:
        logger.warning(f"Failed to initialize Logfire: {e}")
        return False
