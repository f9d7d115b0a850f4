"""Token OAuth2 (client credentials) para Azure Resource Manager."""

from __future__ import annotations

import logging
import time

import httpx

from adapters.http_client import build_async_client
from core.config import AcceptanceSettings

logger = logging.getLogger(__name__)

# Renovar antes de que caduque.
_EXPIRY_MARGIN_SECONDS = 300


class AuthenticationError(Exception):
    """AAD rechazó las credenciales o devolvió una respuesta inválida."""


class ClientSecretCredential:
    """Obtiene y cachea un token de service principal (client id + secret)."""

    def __init__(
        self,
        settings: AcceptanceSettings | None = None,
        *,
        transport: httpx.AsyncBaseTransport | None = None,
        clock=time.monotonic,
    ) -> None:
        self._settings = settings or AcceptanceSettings()
        self._transport = transport
        self._clock = clock
        self._token: str | None = None
        self._expires_at = 0.0

    @property
    def scope(self) -> str:
        return self._settings.resource_manager_endpoint.rstrip("/") + "/.default"

    async def get_token(self) -> str:
        if self._token and self._clock() < self._expires_at - _EXPIRY_MARGIN_SECONDS:
            return self._token

        s = self._settings
        if not (s.tenant_id and s.client_id and s.client_secret):
            raise AuthenticationError("ARM_TENANT_ID, ARM_CLIENT_ID and ARM_CLIENT_SECRET are required")

        url = f"{s.authority_host.rstrip('/')}/{s.tenant_id}/oauth2/v2.0/token"
        form = {
            "grant_type": "client_credentials",
            "client_id": s.client_id,
            "client_secret": s.client_secret,
            "scope": self.scope,
        }
        async with build_async_client(s, transport=self._transport) as client:
            resp = await client.post(url, data=form)

        if resp.status_code != 200:
            raise AuthenticationError(f"token request failed (HTTP {resp.status_code}): {resp.text}")

        data = resp.json()
        token = data.get("access_token")
        if not isinstance(token, str) or not token:
            raise AuthenticationError("token response without access_token")

        self._token = token
        self._expires_at = self._clock() + float(data.get("expires_in") or 0)
        logger.debug("acquired ARM token for tenant %s", s.tenant_id)
        return token
