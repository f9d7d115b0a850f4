"""Wrapper de httpx.

Por qué un wrapper:
- Estandariza timeouts, headers y autenticación para AAD y ARM.
- Facilita testeo: se puede inyectar un `httpx.MockTransport`.
"""

from __future__ import annotations

import httpx

from core.config import AcceptanceSettings


def build_async_client(
    settings: AcceptanceSettings | None = None,
    *,
    token: str | None = None,
    transport: httpx.AsyncBaseTransport | None = None,
) -> httpx.AsyncClient:
    """Crea un `httpx.AsyncClient` con defaults seguros.

    Con `token` añade `Authorization: Bearer ...` (llamadas a ARM).
    """

    settings = settings or AcceptanceSettings()
    headers: dict[str, str] = {
        "User-Agent": settings.user_agent,
        "Accept": "application/json",
    }
    if token:
        headers["Authorization"] = f"Bearer {token}"
    return httpx.AsyncClient(
        timeout=httpx.Timeout(settings.http_timeout_seconds),
        follow_redirects=True,
        headers=headers,
        transport=transport,
    )


def response_was_not_found(response: httpx.Response | None) -> bool:
    """`True` solo si la respuesta es un 404 (el recurso no existe)."""

    return response is not None and response.status_code == httpx.codes.NOT_FOUND
