"""Telegram command handlers."""

from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional

from telegram import LinkPreviewOptions, Update, constants
from telegram.error import BadRequest
from telegram.ext import (
    Application,
    CallbackContext,
    CommandHandler,
    MessageHandler,
    filters,
)

from app.hive.nodes import NodeProvider
from app.report import UserReport, build_user_report, normalize_account_name
from app.services.history import DEFAULT_WINDOW_DAYS, REWARD_APP_ACCOUNT
from app.services.reputation import ReputationSource
from app.utils.formatting import (
    format_not_found,
    format_user_report,
    unescape_markdown,
)
from app.utils.logging import bind_context, clear_context, get_logger

logger = get_logger(__name__)

MISSING_ACCOUNT_TEXT = "Please specify a user to get info."
PONG_TEXT = "Pong!"
LOOKUP_FAILED_TEXT = (
    "Something went wrong while looking up @{account}. Please try again."
)

BANG_USER = r"^!user(\s|$)"
BANG_PING = r"^!ping\s*$"
NO_PREVIEW = LinkPreviewOptions(is_disabled=True)


@dataclass
class HandlerContext:
    provider: NodeProvider
    reputation: ReputationSource
    window_days: int = DEFAULT_WINDOW_DAYS
    reward_app_account: str = REWARD_APP_ACCOUNT


def setup(application: Application, handler_context: HandlerContext) -> None:
    """Register handlers on the Telegram application."""
    application.bot_data["ctx"] = handler_context

    application.add_handler(CommandHandler("user", user_command))
    application.add_handler(CommandHandler("ping", ping_command))

    application.add_handler(
        MessageHandler(filters.TEXT & filters.Regex(BANG_USER), bang_user_handler)
    )
    application.add_handler(
        MessageHandler(filters.TEXT & filters.Regex(BANG_PING), ping_command)
    )


def get_ctx(context: CallbackContext) -> HandlerContext:
    return context.application.bot_data["ctx"]


def requester_name(update: Update) -> Optional[str]:
    user = update.effective_user
    if not user:
        return None
    if getattr(user, "full_name", None):
        return user.full_name
    if getattr(user, "username", None):
        return f"@{user.username}"
    return None


async def ping_command(update: Update, context: CallbackContext) -> None:
    if update.message:
        await update.message.reply_text(PONG_TEXT, parse_mode=None)


async def user_command(update: Update, context: CallbackContext) -> None:
    """Handle ``/user <account>``."""
    args: List[str] = list(context.args or [])
    await send_user_report(update, context, args[0] if args else None)


async def bang_user_handler(update: Update, context: CallbackContext) -> None:
    """Handle the plain-text ``!user <account>`` form."""
    text = update.message.text if update.message else ""
    parts = (text or "").split()
    await send_user_report(update, context, parts[1] if len(parts) > 1 else None)


async def send_user_report(
    update: Update, context: CallbackContext, raw_account: Optional[str]
) -> None:
    """Look up an account and reply with its metrics card."""
    if not update.message:
        return

    account = normalize_account_name(raw_account or "")
    if not account:
        await update.message.reply_text(MISSING_ACCOUNT_TEXT, parse_mode=None)
        return

    ctx = get_ctx(context)
    bind_context(account=account)
    try:
        if update.effective_chat:
            await context.bot.send_chat_action(
                chat_id=update.effective_chat.id, action=constants.ChatAction.TYPING
            )

        logger.info("user_lookup_starting", node=ctx.provider.current_node)
        report = await build_user_report(
            ctx.provider,
            ctx.reputation,
            account,
            window_days=ctx.window_days,
            sentinel=ctx.reward_app_account,
        )

        if not report.found:
            await update.message.reply_text(format_not_found(account), parse_mode=None)
            return

        response_text = format_user_report(report, requested_by=requester_name(update))
        await reply_markdown(update, response_text, preview=avatar_preview(report))
    except Exception as exc:
        logger.exception("user_lookup_failed", error=str(exc))
        await update.message.reply_text(
            LOOKUP_FAILED_TEXT.format(account=account), parse_mode=None
        )
    finally:
        clear_context()


def avatar_preview(report: UserReport) -> LinkPreviewOptions:
    """Show the account avatar as a small preview above the card."""
    return LinkPreviewOptions(
        url=report.avatar_url, prefer_small_media=True, show_above_text=True
    )


async def reply_markdown(
    update: Update, text: str, preview: LinkPreviewOptions = NO_PREVIEW
) -> None:
    """Send MarkdownV2, falling back to plain text if Telegram rejects it."""
    try:
        await update.message.reply_text(
            text,
            parse_mode="MarkdownV2",
            link_preview_options=preview,
        )
    except BadRequest as exc:
        logger.warning("telegram_markdown_failed", error=str(exc), text=text)
        await update.message.reply_text(
            unescape_markdown(text),
            parse_mode=None,
            link_preview_options=preview,
        )
