"""Alertwire CLI entry point."""

import argparse
import asyncio
import logging
import sys
from pathlib import Path

from dotenv import load_dotenv
from pydantic import ValidationError

env_file = Path(__file__).parent.parent / ".env"
load_dotenv(env_file)

from alertwire import __version__
from alertwire.alerts import UserDirectory
from alertwire.config import get_settings
from alertwire.exceptions import AlertError
from alertwire.markets import format_event_title, parse_ticker
from alertwire.queries import LLMQueryGenerator, RuleBasedQueryGenerator
from alertwire.services.superfeedr import build_topic_url
from alertwire.storage import WebhookRegistry, close_db, get_engine, get_session_factory, init_db

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
)

logger = logging.getLogger(__name__)


def _init_logfire() -> None:
    """Initialize Logfire if available, without failing commands."""
    try:
        from alertwire.observability import initialize_logfire

        initialize_logfire(get_settings())
    except Exception as e:
        logger.warning(f"Failed to initialize Logfire: {e}")


def cmd_init_db(args: argparse.Namespace) -> int:
    """Create database tables."""

    async def _run() -> None:
        settings = get_settings()
        try:
            await init_db(get_engine(settings.database_url))
        finally:
            await close_db()

    try:
        asyncio.run(_run())
        print("\n✓ Database tables created\n")
        return 0
    except Exception as e:
        logger.error(f"Failed to initialize database: {e}")
        print(f"\n❌ Database initialization failed: {e}\n")
        return 1


def cmd_config(args: argparse.Namespace) -> int:
    """Display merged configuration."""
    try:
        settings = get_settings()

        print("\n=== Alertwire Configuration ===\n")
        print(f"Data Directory: {settings.data_dir}")
        print(f"Environment: {settings.environment}")
        print(f"Webhook Callback: {settings.webhook_callback_url}")
        print(f"Webhook Test Endpoint: {'enabled' if settings.webhook_test_enabled else 'disabled'}\n")

        print("Hub:")
        print(f"  URL: {settings.hub.hub_url}")
        print(f"  Track URL: {settings.hub.track_url}")
        print(f"  Timeout: {settings.hub.timeout_seconds}s\n")

        print("Queries:")
        print(f"  Use LLM: {settings.queries.use_llm}")
        print(f"  Model: {settings.queries.model}")
        print(f"  Temperature: {settings.queries.temperature}\n")

        print("Alerts:")
        print(f"  Blocked Categories: {', '.join(settings.alerts.blocked_categories) or '(none)'}")
        limits = ", ".join(
            f"{tier}={'unlimited' if limit < 0 else limit}"
            for tier, limit in settings.alerts.tier_limits.items()
        )
        print(f"  Tier Limits: {limits}")
        print(f"  Default Tier: {settings.alerts.default_tier}\n")

        print("Dispatch:")
        print(f"  Max Concurrency: {settings.dispatch.max_concurrency}")
        print(f"  SMS Enabled: {settings.dispatch.sms_enabled}")
        print(f"  SMS Max Length: {settings.sms.max_length}\n")

        print("Credentials:")
        hub_set = settings.superfeedr_login and settings.superfeedr_token
        twilio_set = settings.twilio_account_sid and settings.twilio_auth_token
        print(f"  Superfeedr: {'✓ Set' if hub_set else '✗ Not set'}")
        print(f"  OpenAI: {'✓ Set' if settings.openai_api_key else '✗ Not set'}")
        print(f"  Anthropic: {'✓ Set' if settings.anthropic_api_key else '✗ Not set'}")
        print(f"  Resend: {'✓ Set' if settings.resend_api_key else '✗ Not set'}")
        print(f"  Twilio: {'✓ Set' if twilio_set else '✗ Not set'}")
        print(f"  Logfire: {'✓ Set' if settings.logfire_token else '✗ Not set'}\n")

        return 0

    except ValidationError as e:
        print("\n❌ Configuration Error:\n")
        for error in e.errors():
            print(f"  • {'.'.join(str(x) for x in error['loc'])}: {error['msg']}")
        print()
        return 1
    except Exception as e:
        logger.error(f"Failed to load config: {e}")
        print(f"\n❌ Failed to load configuration: {e}\n")
        return 1


def cmd_query(args: argparse.Namespace) -> int:
    """Preview the search query an alert on this ticker would subscribe."""
    if args.llm:
        _init_logfire()

    try:
        settings = get_settings()
        parsed = parse_ticker(args.ticker)
        generator = LLMQueryGenerator(settings) if args.llm else RuleBasedQueryGenerator()
        result = asyncio.run(generator.generate(parsed.event_ticker, args.title))

        print("\n=== Query Preview ===\n")
        print(f"Event Ticker: {parsed.event_ticker}")
        print(f"Event Title: {args.title or format_event_title(parsed.event_ticker)}")
        print(f"Category: {parsed.category or '(unknown)'}")
        print(f"Entities: {', '.join(parsed.entities) or '(none)'}")
        print(f"Search Terms: {', '.join(result.search_terms)}")
        print(f"Source: {'LLM' if result.used_llm else 'rule-based'} (confidence {result.confidence:.2f})")
        print(f"\nQuery: {result.query}")
        print(f"Topic: {build_topic_url(result.query, settings.hub.track_url)}\n")
        return 0

    except AlertError as e:
        print(f"\n❌ {e.message}\n")
        return 1
    except Exception as e:
        logger.error(f"Query preview failed: {e}", exc_info=True)
        print(f"\n❌ Query preview failed: {e}\n")
        return 1


def cmd_user(args: argparse.Namespace) -> int:
    """Create or update a user's contact details."""

    async def _run():
        settings = get_settings()
        try:
            engine = get_engine(settings.database_url)
            await init_db(engine)
            registry = WebhookRegistry(get_session_factory())
            directory = UserDirectory(registry, settings.alerts)
            return await directory.save_contact(args.user_id, args.email, args.phone, args.tier)
        finally:
            await close_db()

    try:
        contact = asyncio.run(_run())
        print(f"\n✓ Saved {contact.user_id}: email={contact.email} "
              f"phone={'set' if contact.has_phone else 'none'} tier={contact.tier}\n")
        return 0
    except Exception as e:
        logger.error(f"Failed to save user: {e}")
        print(f"\n❌ Failed to save user: {e}\n")
        return 1


def cmd_serve(args: argparse.Namespace) -> int:
    """Run the API server."""
    import uvicorn

    if args.debug:
        logging.getLogger().setLevel(logging.DEBUG)

    print(f"\n=== Alertwire API {__version__} ===\n")
    try:
        uvicorn.run(
            "alertwire.api.server:create_app",
            factory=True,
            host=args.host,
            port=args.port,
            reload=args.reload,
        )
        return 0
    except KeyboardInterrupt:
        print("\n\nReceived interrupt signal. Shutting down...\n")
        return 0


def main() -> int:
    """Main CLI entry point."""
    parser = argparse.ArgumentParser(
        description="Alertwire: breaking-news alerts for prediction market events",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )

    parser.add_argument(
        "--version",
        action="version",
        version=f"Alertwire {__version__}",
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    parser_init_db = subparsers.add_parser(
        "init-db",
        help="Create database tables",
    )
    parser_init_db.set_defaults(func=cmd_init_db)

    parser_config = subparsers.add_parser(
        "config",
        help="Display merged configuration",
    )
    parser_config.set_defaults(func=cmd_config)

    parser_query = subparsers.add_parser(
        "query",
        help="Preview the search query for a market or event ticker",
    )
    parser_query.add_argument("ticker", help="Market or event ticker, e.g. KXBTC-25DEC05")
    parser_query.add_argument("--title", help="Human event title used as an LLM hint")
    parser_query.add_argument(
        "--llm",
        action="store_true",
        help="Use LLM-assisted generation (falls back to rule-based)",
    )
    parser_query.set_defaults(func=cmd_query)

    parser_user = subparsers.add_parser(
        "user",
        help="Create or update a user's contact details",
    )
    parser_user.add_argument("user_id", help="User ID")
    parser_user.add_argument("--email", required=True, help="Email address")
    parser_user.add_argument("--phone", help="Phone number in E.164 format")
    parser_user.add_argument("--tier", help="Plan tier, e.g. FREE or PRO")
    parser_user.set_defaults(func=cmd_user)

    parser_serve = subparsers.add_parser(
        "serve",
        help="Run the API server",
    )
    parser_serve.add_argument("--host", default="0.0.0.0", help="Bind address")
    parser_serve.add_argument("--port", type=int, default=8000, help="Port")
    parser_serve.add_argument("--reload", action="store_true", help="Reload on code changes")
    parser_serve.add_argument("--debug", action="store_true", help="Enable debug logging")
    parser_serve.set_defaults(func=cmd_serve)

    args = parser.parse_args()

    if not hasattr(args, "func"):
        parser.print_help()
        return 1

    return args.func(args)


if __name__ == "__main__":
    sys.exit(main())
