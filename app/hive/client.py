"""JSON-RPC client for a single Hive API node."""

from __future__ import annotations

import itertools
from enum import Enum
from typing import Any, Dict, List, Optional

import httpx

from app.utils.logging import get_logger

logger = get_logger(__name__)

JSONRPC_VERSION = "2.0"


class ContentKind(str, Enum):
    """Kinds of authored content the history scanner can walk."""

    POST = "post"
    COMMENT = "comment"

    @property
    def page_size(self) -> int:
        return 10 if self is ContentKind.POST else 100


class HiveRPCError(RuntimeError):
    """Raised for any failed call against a Hive node."""

    def __init__(self, node: str, method: str, message: str) -> None:
        super().__init__(f"{method} on {node}: {message}")
        self.node = node
        self.method = method


class HiveClient:
    """Bind one node URL to a shared ``httpx.AsyncClient``.

    Handles are cheap to create; the HTTP connection pool belongs to
    whoever passes ``http`` in (normally :class:`app.hive.nodes.NodeProvider`).
    """

    _ids = itertools.count(1)

    def __init__(self, url: str, http: httpx.AsyncClient) -> None:
        self.url = url
        self._http = http

    def __repr__(self) -> str:
        return f"HiveClient({self.url!r})"

    async def call(self, api: str, method: str, params: Any) -> Any:
        """Issue one JSON-RPC request and return its ``result`` member."""
        full_method = f"{api}.{method}"
        logger.debug("hive_rpc_call", node=self.url, method=full_method)
        payload = {
            "jsonrpc": JSONRPC_VERSION,
            "id": next(self._ids),
            "method": full_method,
            "params": params,
        }
        try:
            response = await self._http.post(self.url, json=payload)
            response.raise_for_status()
            body = response.json()
        except httpx.HTTPError as exc:
            message = str(exc) or type(exc).__name__
            raise HiveRPCError(self.url, full_method, message) from exc
        except ValueError as exc:
            raise HiveRPCError(self.url, full_method, f"invalid JSON: {exc}") from exc

        if not isinstance(body, dict):
            raise HiveRPCError(self.url, full_method, "unexpected response shape")

        error = body.get("error")
        if error:
            message = error.get("message") if isinstance(error, dict) else str(error)
            raise HiveRPCError(self.url, full_method, message or "unknown error")

        if "result" not in body:
            raise HiveRPCError(self.url, full_method, "response has no result")
        return body["result"]

    async def get_account(self, name: str) -> Optional[Dict[str, Any]]:
        """Return the raw account object, or None when it does not exist."""
        result = await self.call("condenser_api", "get_accounts", [[name]])
        if not result:
            return None
        return result[0]

    async def get_dynamic_global_properties(self) -> Dict[str, Any]:
        return await self.call("condenser_api", "get_dynamic_global_properties", [])

    async def get_discussions(
        self,
        kind: ContentKind,
        author: str,
        start_permlink: str = "",
        limit: Optional[int] = None,
    ) -> List[Dict[str, Any]]:
        """Fetch one page of an author's posts or comments, newest first.

        An empty ``start_permlink`` starts from the most recent item.
        """
        limit = limit or kind.page_size
        if kind is ContentKind.POST:
            params: Any = [author, start_permlink, "", limit]
            method = "get_discussions_by_author_before_date"
        else:
            params = [
                {
                    "start_author": author,
                    "start_permlink": start_permlink,
                    "limit": limit,
                }
            ]
            method = "get_discussions_by_comments"

        result = await self.call("condenser_api", method, params)
        if result is None:
            return []
        if not isinstance(result, list):
            raise HiveRPCError(self.url, method, "expected a list of discussions")
        return result
