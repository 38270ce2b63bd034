import json
import logging
from dataclasses import dataclass
from typing import Any, Optional

import httpx

from app.core.exceptions import ProviderError

logger = logging.getLogger(__name__)

# Billing statuses reported by AbacatePay; anything else is still in flight
STATUS_PAID = "PAID"
STATUS_EXPIRED = "EXPIRED"
STATUS_REFUNDED = "REFUNDED"


@dataclass(frozen=True)
class Billing:
    id: str
    url: Optional[str]


class AbacatePayClient:
    """Thin async client for the AbacatePay billing API."""

    def __init__(
        self,
        base_url: str,
        api_key: str,
        timeout: float = 30.0,
        http_client: Optional[httpx.AsyncClient] = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.api_key = api_key
        self.timeout = timeout
        self._http_client = http_client

    def _url(self, path: str) -> str:
        return f"{self.base_url}/{path.lstrip('/')}"

    def _headers(self) -> dict:
        return {
            "Authorization": f"Bearer {self.api_key}",
            "Content-Type": "application/json",
        }

    async def _request(self, method: str, path: str, payload: Optional[dict] = None) -> httpx.Response:
        try:
            if self._http_client is not None:
                return await self._http_client.request(
                    method, self._url(path), headers=self._headers(), json=payload, timeout=self.timeout
                )
            async with httpx.AsyncClient(timeout=self.timeout) as client:
                return await client.request(method, self._url(path), headers=self._headers(), json=payload)
        except httpx.HTTPError as e:
            logger.error(f"AbacatePay {method} {path} failed: {e}")
            raise ProviderError(f"Payment provider unreachable: {e}") from e

    @staticmethod
    def _json(response: httpx.Response) -> Any:
        try:
            return response.json()
        except json.JSONDecodeError:
            return {}

    async def create_billing(self, payload: dict) -> Billing:
        """Creates a one-time charge and returns its id and checkout url."""
        response = await self._request("POST", "/billing/create", payload)
        body = self._json(response)
        logger.info(f"AbacatePay response: {json.dumps(body)}")

        if not response.is_success:
            message = None
            if isinstance(body, dict):
                message = body.get("message") or body.get("error")
            raise ProviderError(message or "Failed to create payment")

        body = body if isinstance(body, dict) else {}
        data = body.get("data")
        if not isinstance(data, dict):
            data = body
        billing_id = data.get("id") or body.get("id")
        if not billing_id:
            raise ProviderError("Payment provider returned no billing id")
        return Billing(id=str(billing_id), url=data.get("url") or body.get("url"))

    async def list_billings(self) -> list[dict]:
        response = await self._request("GET", "/billing/list")
        if not response.is_success:
            logger.error(f"AbacatePay API error: {response.text}")
            raise ProviderError("Error checking payment status")

        body = self._json(response)
        entries = body.get("data") if isinstance(body, dict) else None
        if not isinstance(entries, list):
            return []
        return [entry for entry in entries if isinstance(entry, dict)]

    async def find_billing(self, billing_id: str) -> Optional[dict]:
        for entry in await self.list_billings():
            if entry.get("id") == billing_id:
                return entry
        return None
