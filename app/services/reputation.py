"""Client for the external CSI reputation score service."""

from __future__ import annotations

from typing import Any, Optional, Protocol

import httpx

from app.utils.logging import get_logger

logger = get_logger(__name__)


class ReputationSource(Protocol):
    """Anything that can score an account over a trailing window of days."""

    async def get_score(self, account: str) -> Optional[float]:
        ...


class ReputationClient:
    """Fetch a CSI score from ``GET {base_url}/{account}?days=N``.

    Without a ``base_url`` the client is disabled and always answers None.
    """

    DEFAULT_TIMEOUT = 10.0

    def __init__(
        self,
        base_url: Optional[str] = None,
        *,
        window_days: int = 30,
        timeout: Optional[float] = None,
        http: Optional[httpx.AsyncClient] = None,
    ) -> None:
        self.base_url = str(base_url).rstrip("/") if base_url else None
        self.window_days = window_days
        self._owns_http = http is None
        self._http = http or httpx.AsyncClient(timeout=timeout or self.DEFAULT_TIMEOUT)

    @property
    def enabled(self) -> bool:
        return self.base_url is not None

    async def get_score(self, account: str) -> Optional[float]:
        if not self.base_url:
            return None

        url = f"{self.base_url}/{account}"
        try:
            response = await self._http.get(url, params={"days": self.window_days})
            if response.status_code == 404:
                logger.info("reputation_not_found", account=account)
                return None
            response.raise_for_status()
            return _parse_score(response.json())
        except (httpx.HTTPError, ValueError) as exc:
            logger.warning("reputation_fetch_failed", account=account, error=str(exc))
            return None

    async def aclose(self) -> None:
        if self._owns_http:
            await self._http.aclose()


def _parse_score(body: Any) -> Optional[float]:
    """Accept ``{"csi": x}``, ``{"score": x}`` or a bare number."""
    if isinstance(body, dict):
        value = body.get("csi")
        if value is None:
            value = body.get("score")
    else:
        value = body
    if value is None or isinstance(value, bool):
        return None
    try:
        return float(value)
    except (TypeError, ValueError):
        return None
