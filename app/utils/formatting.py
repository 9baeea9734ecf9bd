"""Helpers for Telegram-safe Markdown formatting."""

from __future__ import annotations

import re
from typing import List, Optional

from app.report import UserReport
from app.services.history import HistoryScan
from app.utils.amounts import is_finite

NOT_AVAILABLE = "n/a"

_MARKDOWN_SPECIAL = r"_*[]()~`>#+-=|{}.!\\"
_LINK_RE = re.compile(r"\[([^\]]+)\]\(([^)]+)\)")


def escape_markdown(text: str) -> str:
    """Escape Telegram MarkdownV2 control characters."""
    if text is None:
        text = ""
    if not isinstance(text, str):
        text = str(text)
    return "".join(
        f"\\{char}" if char in _MARKDOWN_SPECIAL else char for char in text
    )


def escape_markdown_url(url: str) -> str:
    """Escape Telegram MarkdownV2-sensitive characters inside link URLs."""
    if not url:
        return ""
    return url.replace("\\", "\\\\").replace("(", "\\(").replace(")", "\\)")


def unescape_markdown(text: str) -> str:
    """Turn a MarkdownV2 message back into readable plain text."""
    if not text:
        return ""
    result = _LINK_RE.sub(r"\1 (\2)", text)
    # Bold/italic markers are only meaningful when unescaped.
    result = re.sub(r"(?<!\\)[*_]", "", result)
    return re.sub(r"\\(.)", r"\1", result)


def format_number(value: Optional[float], digits: int = 3) -> str:
    """Fixed-point rendering; None, inf and nan become 'n/a'."""
    if not is_finite(value):
        return NOT_AVAILABLE
    return f"{value:.{digits}f}"


def _field(label: str, value: str) -> str:
    return f"*{escape_markdown(label)}:* {escape_markdown(value)}"


def _history_line(label: str, scan: HistoryScan, window_days: int) -> str:
    count = str(scan.total_items)
    if not scan.complete:
        count += " (partial)"
    return " · ".join(
        [
            _field(f"{label} {window_days} days", count),
            _field("reward.app", str(scan.total_reward_app)),
            _field("Self Votes", str(scan.total_self_votes)),
        ]
    )


def format_user_report(report: UserReport, requested_by: Optional[str] = None) -> str:
    """Render a found account as a MarkdownV2 card."""
    info = report.lookup.info
    if info is None:
        return format_not_found(report.account)

    account = report.account
    profile = escape_markdown_url(report.profile_url)
    title = f"*[{escape_markdown('@' + account)}]({profile})*"

    delegated = (
        f"{format_number(info.delegated_hp)} "
        f"({format_number(info.delegated_percentage, 2)}%)"
    )
    stake_line = " · ".join(
        [_field("HP", format_number(info.hp)), _field("HP Delegated", delegated)]
    )
    efficiency_line = " · ".join(
        [
            _field("KE", format_number(info.ke)),
            _field("Power Down", "Yes" if info.is_power_down else "No"),
        ]
    )

    lines: List[str] = [
        title,
        stake_line,
        efficiency_line,
        "",
        _history_line("Posts", report.posts, report.window_days),
        _history_line("Comments", report.comments, report.window_days),
        "",
        _field(
            f"CSI Score {report.window_days} days",
            format_number(report.reputation, 2),
        ),
    ]
    if requested_by:
        lines.append("")
        lines.append(f"_{escape_markdown(f'Requested by {requested_by}')}_")
    return "\n".join(lines)


def format_not_found(account: str) -> str:
    """Plain-text reply for an unknown or unavailable account."""
    return f"No account data found for @{account}"
