"""Cliente ARM para capacidades PowerBI Embedded (Microsoft.PowerBIDedicated)."""

from __future__ import annotations

import logging
from urllib.parse import quote

import httpx
from pydantic import ValidationError

from adapters.azure_auth import ClientSecretCredential
from adapters.http_client import build_async_client
from core.config import AcceptanceSettings
from core.domain.models import CapacityDetails

logger = logging.getLogger(__name__)

API_VERSION = "2017-10-01"


class CapacityClientError(Exception):
    """Respuesta no-2xx (o cuerpo ilegible) de ARM; conserva la respuesta para clasificarla (404 vs resto)."""

    def __init__(self, response: httpx.Response, detail: str | None = None) -> None:
        super().__init__(
            f"HTTP {response.status_code} {response.request.method} {response.request.url}: "
            f"{detail or response.text}"
        )
        self.response = response


class CapacityClient:
    """`GetDetails` de una capacidad por grupo de recursos y nombre."""

    def __init__(
        self,
        settings: AcceptanceSettings | None = None,
        *,
        credential: ClientSecretCredential | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._settings = settings or AcceptanceSettings()
        self._credential = credential or ClientSecretCredential(self._settings, transport=transport)
        self._transport = transport

    def capacity_url(self, resource_group: str, name: str) -> str:
        s = self._settings
        return (
            f"{s.resource_manager_endpoint.rstrip('/')}"
            f"/subscriptions/{quote(s.subscription_id or '', safe='')}"
            f"/resourceGroups/{quote(resource_group, safe='')}"
            f"/providers/Microsoft.PowerBIDedicated/capacities/{quote(name, safe='')}"
        )

    async def get_details(self, resource_group: str, name: str) -> CapacityDetails:
        token = await self._credential.get_token()
        url = self.capacity_url(resource_group, name)
        async with build_async_client(self._settings, token=token, transport=self._transport) as client:
            resp = await client.get(url, params={"api-version": API_VERSION})

        logger.debug("GET %s -> %s", url, resp.status_code)
        if not resp.is_success:
            raise CapacityClientError(resp)
        try:
            return CapacityDetails.model_validate(resp.json())
        except (ValueError, ValidationError) as exc:
            raise CapacityClientError(resp, f"unexpected capacity body: {exc}") from exc
