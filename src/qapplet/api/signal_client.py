"""
Signal client - HTTP transport to the host's local signal endpoint

Built on httpx.AsyncClient. Any HTTP-level completion (2xx/4xx/5xx) comes
back as a SignalResult; failures below HTTP raise TransportError, or
HostUnavailableError when the host software is not listening.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Any, Mapping, Optional

import httpx

from qapplet.api.schemas import SignalRequest, SignalResponse
from qapplet.errors import HostUnavailableError, TransportError
from qapplet.utils.logger import get_logger, LogCategory

log = get_logger().for_category(LogCategory.TRANSPORT)

DEFAULT_BACKEND_URL = "http://localhost:27301"
SIGNALS_PATH = "/api/2.0/signals"


def backend_url_from_env() -> str:
    return os.environ.get("backendUrl") or DEFAULT_BACKEND_URL


@dataclass(frozen=True)
class SignalResult:
    """Status and decoded body of one host response"""
    status_code: int
    body: Any = None

    @property
    def ok(self) -> bool:
        return 200 <= self.status_code < 300

    @property
    def id(self) -> Any:
        if isinstance(self.body, Mapping):
            return SignalResponse.model_validate(self.body).id
        return None


def _signal_id(signal_or_id: Any) -> Any:
    if isinstance(signal_or_id, Mapping):
        return signal_or_id.get("id")
    if hasattr(signal_or_id, "id"):
        return signal_or_id.id
    return signal_or_id


def _decode_body(resp: httpx.Response) -> Any:
    if not resp.content:
        return None
    try:
        return resp.json()
    except ValueError:
        return resp.text


class SignalClient:
    """
    Async client for POST/DELETE on the host signal endpoint.

    Args:
        backend_url: Host base URL (default http://localhost:27301 or $backendUrl)
        timeout: Per-request timeout in seconds
        transport: Optional custom transport (useful for testing)

    Example:
        >>> async with SignalClient() as client:
        ...     result = await client.send(request)
        ...     await client.delete(result.id)
    """

    def __init__(
        self,
        backend_url: Optional[str] = None,
        *,
        timeout: float = 10.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self.backend_url = (backend_url or backend_url_from_env()).rstrip("/")
        self._client = httpx.AsyncClient(
            base_url=self.backend_url,
            headers={"Content-Type": "application/json"},
            timeout=timeout,
            transport=transport,
        )

    async def aclose(self) -> None:
        await self._client.aclose()

    async def __aenter__(self) -> SignalClient:
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.aclose()

    async def _request(self, method: str, path: str, json_body: Any = None) -> SignalResult:
        url = f"{self.backend_url}{path}"
        try:
            resp = await self._client.request(method, path, json=json_body)
        except httpx.ConnectError as e:
            log.error(
                f"Error: failed to connect to {self.backend_url}, "
                "make sure the Das Keyboard Q software is running"
            )
            raise HostUnavailableError(f"Host not reachable at {url}", url=url, cause=e) from e
        except httpx.RequestError as e:
            log.error(f"{method} {url} failed", error=str(e), error_type=type(e).__name__)
            raise TransportError(f"{method} {url} failed: {e}", url=url, cause=e) from e

        result = SignalResult(status_code=resp.status_code, body=_decode_body(resp))
        if result.ok:
            log.debug(f"{method} {path} → {resp.status_code}")
        else:
            log.warn(f"{method} {path} → {resp.status_code}", body=str(result.body)[:200])
        return result

    async def send(self, request: SignalRequest) -> SignalResult:
        """POST one encoded signal"""
        return await self._request("POST", SIGNALS_PATH, request.model_dump(mode="json"))

    async def delete(self, signal_or_id: Any) -> SignalResult:
        """
        DELETE a signal by id.

        Accepts a raw id, an object exposing .id, or a mapping with "id".
        """
        signal_id = _signal_id(signal_or_id)
        if signal_id is None:
            raise ValueError(f"No signal id found in {signal_or_id!r}")
        return await self._request("DELETE", f"{SIGNALS_PATH}/{signal_id}")
