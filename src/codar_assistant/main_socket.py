"""
Socket Mode entry point for the Codar assistant.
Connects to Slack via WebSocket - no public URL needed.

Usage:
    python -m codar_assistant.main_socket
"""
import asyncio
import logging

from slack_bolt.adapter.socket_mode.async_handler import AsyncSocketModeHandler
from slack_bolt.async_app import AsyncApp

from .config import Settings, get_settings
from .llm.client import LLMClient
from .llm.models import available_models
from .log import setup_logging
from .mlops.tracing import MLflowTracer
from .pipeline.dispatch import CompletionDispatcher
from .router import EventRouter
from .slack.app import register_listeners
from .store.preferences import ModelPreferenceStore

logger = logging.getLogger("socket_listener")


def build_router(settings: Settings) -> EventRouter:
    preferences = ModelPreferenceStore(default_model=settings.DEFAULT_MODEL)
    llm = LLMClient.from_settings(settings, tracer=MLflowTracer.from_settings(settings))
    dispatcher = CompletionDispatcher(llm, preferences, history_limit=settings.HISTORY_LIMIT)
    return EventRouter(
        dispatcher,
        preferences,
        catalog=available_models(),
        mentions_enabled=settings.MENTIONS_ENABLED,
        involvement_window=settings.INVOLVEMENT_WINDOW,
    )


def build_app(settings: Settings) -> AsyncApp:
    app = AsyncApp(
        token=settings.SLACK_BOT_TOKEN,
        # Socket Mode doesn't need signing secret for request verification
        signing_secret=settings.SLACK_SIGNING_SECRET or None,
    )
    register_listeners(app, build_router(settings))
    return app


async def run() -> None:
    settings = get_settings()
    app = build_app(settings)
    handler = AsyncSocketModeHandler(app, settings.SLACK_APP_TOKEN)
    logger.info("⚡️ Code Assistant app is running!")
    await handler.start_async()


def main():
    """Start the Socket Mode handler."""
    setup_logging()
    try:
        asyncio.run(run())
    except KeyboardInterrupt:
        logger.info("Stopping socket listener...")


if __name__ == "__main__":
    main()
