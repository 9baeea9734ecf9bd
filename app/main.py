"""Application entrypoint."""

from __future__ import annotations

import asyncio
import signal

from telegram import BotCommand, BotCommandScopeDefault
from telegram.ext import ApplicationBuilder

from app.config import load_settings
from app.handlers.commands import HandlerContext, setup as setup_handlers
from app.hive.nodes import NodeProvider
from app.services.reputation import ReputationClient
from app.utils.logging import configure_logging, get_logger

logger = get_logger(__name__)


async def main() -> None:
    settings = load_settings()
    configure_logging(settings.log_level)

    if not settings.telegram_bot_token:
        raise RuntimeError("TELEGRAM_BOT_TOKEN is not set")

    application = ApplicationBuilder().token(settings.telegram_bot_token).build()
    await application.initialize()

    commands = [
        BotCommand("user", "Show Hive stats for an account"),
        BotCommand("ping", "Check that the bot is alive"),
    ]
    await application.bot.set_my_commands(commands, scope=BotCommandScopeDefault())

    provider = NodeProvider(settings.hive_nodes, timeout=settings.hive_request_timeout)
    provider.current()
    reputation = ReputationClient(
        str(settings.reputation_api_url) if settings.reputation_api_url else None,
        window_days=settings.history_window_days,
    )
    if not reputation.enabled:
        logger.warning("reputation_service_disabled")

    handler_context = HandlerContext(
        provider=provider,
        reputation=reputation,
        window_days=settings.history_window_days,
        reward_app_account=settings.reward_app_account,
    )
    setup_handlers(application, handler_context)

    try:
        await application.start()
        if application.updater:
            await application.updater.start_polling()

        me = application.bot.username
        logger.info("bot_started", username=me, commands=len(commands))

        stop_event = asyncio.Event()

        def signal_handler(signum, frame):
            logger.info("shutdown_signal_received", signal=signum)
            stop_event.set()

        signal.signal(signal.SIGINT, signal_handler)
        signal.signal(signal.SIGTERM, signal_handler)

        await stop_event.wait()

    finally:
        logger.info("bot_stopping")
        if application.updater:
            await application.updater.stop()
        await application.stop()
        await application.shutdown()
        await reputation.aclose()
        await provider.aclose()


def run() -> None:
    """Synchronous wrapper for the console script."""
    asyncio.run(main())


if __name__ == "__main__":
    run()
