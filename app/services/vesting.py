"""Convert VESTS into Hive Power."""

from __future__ import annotations

from typing import Any, Mapping, Optional, Tuple

from app.hive.client import HiveClient
from app.hive.nodes import NodeProvider
from app.utils.amounts import extract_number, safe_ratio


def vesting_constants(global_properties: Mapping[str, Any]) -> Tuple[float, float]:
    """Return ``(total_vesting_fund_hive, total_vesting_shares)`` from one snapshot."""
    fund = extract_number(global_properties.get("total_vesting_fund_hive"))
    shares = extract_number(global_properties.get("total_vesting_shares"))
    return fund, shares


def vests_to_hp(
    amount: float, total_vesting_fund: float, total_vesting_shares: float
) -> float:
    """Apply the network exchange rate.

    Zero total shares gives inf (or nan for a zero amount) instead of raising.
    """
    return safe_ratio(total_vesting_fund * amount, total_vesting_shares)


async def convert_vests_to_hp(
    provider: NodeProvider, amount: float, client: Optional[HiveClient] = None
) -> float:
    """Fetch the global properties through the current node and convert ``amount``.

    Pass ``client`` to pin the request to a handle taken earlier.
    Errors propagate; callers decide how a failed fetch is reported.
    """
    client = client or provider.current()
    properties = await client.get_dynamic_global_properties()
    fund, shares = vesting_constants(properties)
    return vests_to_hp(amount, fund, shares)
