"""Round-robin selection of the active Hive node."""

from __future__ import annotations

from typing import List, Optional, Sequence

import httpx

from app.config import DEFAULT_HIVE_NODES
from app.hive.client import HiveClient
from app.utils.logging import get_logger

logger = get_logger(__name__)


class NodeProvider:
    """Hold the active :class:`HiveClient` and rotate through a fixed node list.

    The provider is passed explicitly to everything that talks to Hive.
    Rotating never closes anything: a handle taken before a rotation stays
    usable for the calls already in flight against it.
    """

    def __init__(
        self,
        nodes: Optional[Sequence[str]] = None,
        *,
        timeout: float = 15.0,
        http: Optional[httpx.AsyncClient] = None,
    ) -> None:
        self.nodes: List[str] = [n.rstrip("/") for n in (nodes or DEFAULT_HIVE_NODES)]
        self.index: Optional[int] = None
        self._owns_http = http is None
        self._http = http or httpx.AsyncClient(timeout=timeout)
        self._current: Optional[HiveClient] = None

    @property
    def current_node(self) -> Optional[str]:
        return self._current.url if self._current else None

    def advance(self) -> HiveClient:
        """Switch to the next node in the list and return its handle."""
        self.index = 0 if self.index is None else (self.index + 1) % len(self.nodes)
        node = self.nodes[self.index]
        logger.info("hive_node_switched", node=node, index=self.index)
        self._current = HiveClient(node, self._http)
        return self._current

    def rotate(
        self, failed: Optional[HiveClient] = None, reason: Optional[str] = None
    ) -> HiveClient:
        """Fail over after a request against ``failed`` broke.

        Concurrent callers that failed on the same handle move the provider
        once: only a failure on the active handle advances it. Without
        ``failed`` the provider always advances.
        """
        if failed is not None and failed is not self._current:
            logger.debug(
                "hive_node_failover_skipped",
                failed_node=failed.url,
                node=self.current_node,
            )
            return self.current()
        if reason:
            logger.warning("hive_node_failover", node=self.current_node, reason=reason)
        return self.advance()

    def current(self) -> HiveClient:
        """Return the active handle, selecting the first node on first use."""
        if self._current is None:
            return self.advance()
        return self._current

    async def aclose(self) -> None:
        if self._owns_http:
            await self._http.aclose()

    async def __aenter__(self) -> "NodeProvider":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.aclose()
