import json
from datetime import datetime
from typing import Dict, Iterable, List

import httpx
import pytest

from app.hive.nodes import NodeProvider

NODES = ["https://node-a.test", "https://node-b.test", "https://node-c.test"]


def make_item(
    permlink: str,
    created: datetime,
    voters: Iterable[str] = (),
    beneficiaries: Iterable[str] = (),
    author: str = "alice",
) -> dict:
    """Build a discussion object shaped like condenser_api output."""
    return {
        "author": author,
        "permlink": permlink,
        "created": created.strftime("%Y-%m-%dT%H:%M:%S"),
        "active_votes": [{"voter": v, "percent": 10000} for v in voters],
        "beneficiaries": [{"account": b, "weight": 500} for b in beneficiaries],
    }


def make_account(name: str = "alice", **overrides) -> dict:
    account = {
        "name": name,
        "balance": "12.345 HIVE",
        "hbd_balance": "1.500 HBD",
        "savings_hbd_balance": "100.000 HBD",
        "vesting_shares": "1000.000000 VESTS",
        "delegated_vesting_shares": "250.000000 VESTS",
        "received_vesting_shares": "100.000000 VESTS",
        "vesting_withdraw_rate": "0.000000 VESTS",
        "curation_rewards": 300,
        "posting_rewards": 200,
    }
    account.update(overrides)
    return account


class FakeHive:
    """In-memory Hive node answering condenser_api JSON-RPC calls."""

    def __init__(self) -> None:
        self.accounts: Dict[str, dict] = {}
        self.global_properties = {
            "total_vesting_fund_hive": "1000.000 HIVE",
            "total_vesting_shares": "2000.000000 VESTS",
        }
        self.posts: Dict[str, List[dict]] = {}
        self.comments: Dict[str, List[dict]] = {}
        self.calls: List[tuple] = []
        self.failing_hosts: set = set()
        self.fail_after: Dict[str, int] = {}
        self.ignore_cursor = False

    def discussion_calls(self, method: str) -> List[tuple]:
        return [call for call in self.calls if call[1] == method]

    def handler(self, request: httpx.Request) -> httpx.Response:
        payload = json.loads(request.content)
        method = payload["method"].split(".", 1)[1]
        params = payload["params"]
        self.calls.append((request.url.host, method, params))

        if request.url.host in self.failing_hosts:
            return httpx.Response(502, text="bad gateway")

        budget = self.fail_after.get(method)
        if budget is not None:
            if budget <= 0:
                return httpx.Response(
                    200,
                    json={
                        "jsonrpc": "2.0",
                        "id": payload["id"],
                        "error": {"code": -32000, "message": "node overloaded"},
                    },
                )
            self.fail_after[method] = budget - 1

        if method == "get_accounts":
            names = params[0]
            result = [self.accounts[n] for n in names if n in self.accounts]
        elif method == "get_dynamic_global_properties":
            result = self.global_properties
        elif method == "get_discussions_by_author_before_date":
            author, start, _, limit = params
            result = self._page(self.posts.get(author, []), start, limit)
        elif method == "get_discussions_by_comments":
            query = params[0]
            result = self._page(
                self.comments.get(query["start_author"], []),
                query["start_permlink"],
                query["limit"],
            )
        else:
            return httpx.Response(
                200,
                json={
                    "jsonrpc": "2.0",
                    "id": payload["id"],
                    "error": {"code": -32601, "message": "method not found"},
                },
            )

        return httpx.Response(
            200, json={"jsonrpc": "2.0", "id": payload["id"], "result": result}
        )

    def _page(self, items: List[dict], start: str, limit: int) -> List[dict]:
        # Like Hive, a page that starts at a permlink includes that item.
        offset = 0
        if start and not self.ignore_cursor:
            offset = next(
                (i for i, item in enumerate(items) if item["permlink"] == start),
                len(items),
            )
        return items[offset : offset + limit]


@pytest.fixture
def fake_hive() -> FakeHive:
    return FakeHive()


@pytest.fixture
def provider(fake_hive: FakeHive) -> NodeProvider:
    http = httpx.AsyncClient(transport=httpx.MockTransport(fake_hive.handler))
    return NodeProvider(NODES, http=http)
