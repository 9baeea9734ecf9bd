"""Assemble everything shown for one account lookup."""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from app.hive.client import ContentKind
from app.hive.nodes import NodeProvider
from app.services.account import AccountLookup, LookupStatus, lookup_account
from app.services.history import (
    DEFAULT_WINDOW_DAYS,
    REWARD_APP_ACCOUNT,
    HistoryScan,
    scan_history,
)
from app.services.reputation import ReputationSource
from app.utils.logging import get_logger

logger = get_logger(__name__)

PROFILE_URL = "https://peakd.com/@{account}"
AVATAR_URL = "https://images.hive.blog/u/{account}/avatar"


@dataclass
class UserReport:
    account: str
    lookup: AccountLookup
    posts: HistoryScan
    comments: HistoryScan
    reputation: Optional[float]
    window_days: int = DEFAULT_WINDOW_DAYS

    @property
    def found(self) -> bool:
        return self.lookup.found

    @property
    def profile_url(self) -> str:
        return PROFILE_URL.format(account=self.account)

    @property
    def avatar_url(self) -> str:
        return AVATAR_URL.format(account=self.account)

    def to_dict(self) -> Dict[str, Any]:
        info = self.lookup.info
        return {
            "account": self.account,
            "profile_url": self.profile_url,
            "avatar_url": self.avatar_url,
            "status": self.lookup.status.value,
            "window_days": self.window_days,
            "hive": info.hive if info else None,
            "hbd": info.hbd if info else None,
            "hbd_saving": info.hbd_saving if info else None,
            "hp": info.hp if info else None,
            "delegated_hp": info.delegated_hp if info else None,
            "received_hp": info.received_hp if info else None,
            "delegated_percentage": info.delegated_percentage if info else None,
            "ke": info.ke if info else None,
            "power_down": info.is_power_down if info else None,
            "posts": self.posts.to_dict(),
            "comments": self.comments.to_dict(),
            "csi": self.reputation,
        }


def normalize_account_name(raw: str) -> str:
    """Strip a leading '@' and lower-case, as Hive names are lower-case."""
    return raw.strip().lstrip("@").lower()


async def build_user_report(
    provider: NodeProvider,
    reputation: ReputationSource,
    account: str,
    *,
    window_days: int = DEFAULT_WINDOW_DAYS,
    sentinel: str = REWARD_APP_ACCOUNT,
    now: Optional[datetime] = None,
) -> UserReport:
    """Run the account lookup, both history scans and the CSI fetch concurrently.

    Each part already degrades on its own; an exception that still escapes
    one of them is logged and that part is reported as unavailable.
    """
    now = now or datetime.now(timezone.utc)
    results = await asyncio.gather(
        lookup_account(provider, account),
        scan_history(
            provider,
            account,
            ContentKind.POST,
            window_days=window_days,
            sentinel=sentinel,
            now=now,
        ),
        scan_history(
            provider,
            account,
            ContentKind.COMMENT,
            window_days=window_days,
            sentinel=sentinel,
            now=now,
        ),
        reputation.get_score(account),
        return_exceptions=True,
    )
    lookup, posts, comments, score = results

    if isinstance(lookup, BaseException):
        logger.error("report_part_failed", part="account", error=str(lookup))
        lookup = AccountLookup(status=LookupStatus.FAILED, error=str(lookup))
    if isinstance(posts, BaseException):
        logger.error("report_part_failed", part="posts", error=str(posts))
        posts = HistoryScan(kind=ContentKind.POST, complete=False)
    if isinstance(comments, BaseException):
        logger.error("report_part_failed", part="comments", error=str(comments))
        comments = HistoryScan(kind=ContentKind.COMMENT, complete=False)
    if isinstance(score, BaseException):
        logger.error("report_part_failed", part="reputation", error=str(score))
        score = None

    logger.info(
        "user_report_built",
        account=account,
        status=lookup.status.value,
        posts=posts.total_items,
        comments=comments.total_items,
    )
    return UserReport(
        account=account,
        lookup=lookup,
        posts=posts,
        comments=comments,
        reputation=score,
        window_days=window_days,
    )
