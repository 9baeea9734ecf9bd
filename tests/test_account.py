import math

import pytest

from app.services.account import LookupStatus, get_user_info, lookup_account

from conftest import NODES, make_account


@pytest.mark.asyncio
async def test_lookup_account_derives_metrics(provider, fake_hive):
    fake_hive.accounts["alice"] = make_account()

    lookup = await lookup_account(provider, "alice")

    assert lookup.status is LookupStatus.FOUND
    info = lookup.info
    assert info.hive == 12.345
    assert info.hbd == 1.5
    assert info.hbd_saving == 100.0
    assert info.hp == 500.0
    assert info.delegated_hp == 125.0
    assert info.received_hp == 50.0
    # (300 + 200) / 1000 / 500 HP
    assert info.ke == pytest.approx(0.001)
    assert info.is_power_down is False
    assert info.vesting_shares == 1000.0
    assert info.delegated_vesting_shares == 250.0


@pytest.mark.asyncio
async def test_three_conversions_fetch_global_properties(provider, fake_hive):
    fake_hive.accounts["alice"] = make_account()

    await lookup_account(provider, "alice")

    methods = [call[1] for call in fake_hive.calls]
    assert methods.count("get_dynamic_global_properties") == 3


@pytest.mark.asyncio
async def test_delegation_percentage_uses_raw_shares(provider, fake_hive):
    fake_hive.accounts["alice"] = make_account()

    info = await get_user_info(provider, "alice")

    assert f"{info.delegated_percentage:.2f}" == "25.00"


@pytest.mark.asyncio
async def test_power_down_flag(provider, fake_hive):
    fake_hive.accounts["alice"] = make_account(vesting_withdraw_rate="12.5 VESTS")

    info = await get_user_info(provider, "alice")

    assert info.is_power_down is True


@pytest.mark.asyncio
async def test_missing_account_is_not_found(provider):
    lookup = await lookup_account(provider, "ghost")

    assert lookup.status is LookupStatus.NOT_FOUND
    assert lookup.info is None
    assert await get_user_info(provider, "ghost") is None


@pytest.mark.asyncio
async def test_fetch_failure_returns_none_and_rotates(provider, fake_hive):
    fake_hive.accounts["alice"] = make_account()
    fake_hive.failing_hosts.add("node-a.test")

    lookup = await lookup_account(provider, "alice")

    assert lookup.status is LookupStatus.FAILED
    assert lookup.info is None
    assert "502" in lookup.error
    assert provider.current().url == NODES[1]

    # the next request goes to the healthy node
    assert await get_user_info(provider, "alice") is not None


@pytest.mark.asyncio
async def test_zero_network_shares_keeps_lookup_alive(provider, fake_hive):
    fake_hive.accounts["alice"] = make_account()
    fake_hive.global_properties["total_vesting_shares"] = "0.000000 VESTS"

    info = await get_user_info(provider, "alice")

    assert info is not None
    assert math.isinf(info.hp)
    assert info.ke == 0.0
