"""Account balances and stake metrics."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Mapping, Optional

from app.hive.client import HiveClient
from app.hive.nodes import NodeProvider
from app.services.vesting import convert_vests_to_hp
from app.utils.amounts import extract_number, safe_ratio
from app.utils.logging import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True)
class AccountInfo:
    """Derived metrics for one account.

    Attributes:
        hive, hbd, hbd_saving: Liquid and savings balances.
        hp, delegated_hp, received_hp: Stake converted from VESTS.
        ke: (curation + posting rewards) / 1000 / hp.
        is_power_down: True while a vesting withdrawal is scheduled.
        vesting_shares, delegated_vesting_shares: Raw VESTS, used for the
            delegation percentage.
    """

    hive: float
    hbd: float
    hbd_saving: float
    hp: float
    delegated_hp: float
    received_hp: float
    ke: float
    is_power_down: bool
    vesting_shares: float
    delegated_vesting_shares: float

    @property
    def delegated_percentage(self) -> float:
        """Share of own VESTS delegated out, from raw (unconverted) shares."""
        return safe_ratio(self.delegated_vesting_shares, self.vesting_shares) * 100


class LookupStatus(str, Enum):
    FOUND = "found"
    NOT_FOUND = "not_found"
    FAILED = "failed"


@dataclass(frozen=True)
class AccountLookup:
    status: LookupStatus
    info: Optional[AccountInfo] = None
    error: Optional[str] = None

    @property
    def found(self) -> bool:
        return self.status is LookupStatus.FOUND


async def build_account_info(
    provider: NodeProvider,
    account: Mapping[str, Any],
    client: Optional[HiveClient] = None,
) -> AccountInfo:
    """Compute metrics from a raw ``condenser_api.get_accounts`` entry."""
    client = client or provider.current()
    vesting_shares = extract_number(account.get("vesting_shares"))
    delegated_vesting_shares = extract_number(account.get("delegated_vesting_shares"))
    received_vesting_shares = extract_number(account.get("received_vesting_shares"))

    hp = await convert_vests_to_hp(provider, vesting_shares, client)
    delegated_hp = await convert_vests_to_hp(
        provider, delegated_vesting_shares, client
    )
    received_hp = await convert_vests_to_hp(provider, received_vesting_shares, client)

    rewards = float(account.get("curation_rewards") or 0) + float(
        account.get("posting_rewards") or 0
    )
    ke = safe_ratio(rewards / 1000, hp)

    return AccountInfo(
        hive=extract_number(account.get("balance")),
        hbd=extract_number(account.get("hbd_balance")),
        hbd_saving=extract_number(account.get("savings_hbd_balance")),
        hp=hp,
        delegated_hp=delegated_hp,
        received_hp=received_hp,
        ke=ke,
        is_power_down=extract_number(account.get("vesting_withdraw_rate")) > 0,
        vesting_shares=vesting_shares,
        delegated_vesting_shares=delegated_vesting_shares,
    )


async def lookup_account(provider: NodeProvider, name: str) -> AccountLookup:
    """Fetch and derive account metrics, never raising.

    Every request goes to the handle taken at the start. If it fails, the
    provider moves past that node before the result is returned.
    """
    client = provider.current()
    try:
        account = await client.get_account(name)
        if account is None:
            logger.info("account_not_found", account=name, node=client.url)
            return AccountLookup(status=LookupStatus.NOT_FOUND)
        info = await build_account_info(provider, account, client)
    except Exception as exc:
        logger.error(
            "account_lookup_failed", account=name, node=client.url, error=str(exc)
        )
        provider.rotate(client, reason=str(exc))
        return AccountLookup(status=LookupStatus.FAILED, error=str(exc))

    return AccountLookup(status=LookupStatus.FOUND, info=info)


async def get_user_info(provider: NodeProvider, name: str) -> Optional[AccountInfo]:
    """Return account metrics, or None when the account is missing or unavailable."""
    lookup = await lookup_account(provider, name)
    return lookup.info
