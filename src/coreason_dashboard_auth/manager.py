# Copyright (c) 2025 CoReason, Inc.
#
# This software is proprietary and dual-licensed.
# Licensed under the Prosperity Public License 3.0 (the "License").
# A copy of the license is available at https://prosperitylicense.com/versions/3.0.0
# For details, see the LICENSE file.
# Commercial use beyond a 30-day trial requires a separate license.
#
# Source Code: https://github.com/CoReason-AI/coreason_dashboard_auth

"""
AuthManager component wiring the configured OIDC providers into routes.
"""

from typing import Any

import anyio
import httpx
from opentelemetry.instrumentation.httpx import HTTPXClientInstrumentor
from starlette.routing import Route

from coreason_dashboard_auth.config import DashboardAuthConfig
from coreason_dashboard_auth.exceptions import DiscoveryError
from coreason_dashboard_auth.oidc_provider import OIDCRelyingParty
from coreason_dashboard_auth.routes import logout_routes


class AuthManager:
    """
    Owns the HTTP client and one relying party per configured provider.
    Handles resources via async context manager.
    """

    def __init__(self, config: DashboardAuthConfig, client: httpx.AsyncClient | None = None) -> None:
        """
        Initialize the AuthManager.

        Args:
            config: The configuration object.
            client: External async client (optional). If not provided, one is created with the configured timeout.
        """
        self.config = config
        self._internal_client = client is None
        self._client = client or httpx.AsyncClient(timeout=self.config.http_timeout)

        # Instrument the client for distributed tracing
        HTTPXClientInstrumentor().instrument_client(self._client)

        self.relying_parties: dict[str, OIDCRelyingParty] = {
            provider.slug_id: OIDCRelyingParty(provider, self._client) for provider in self.config.providers
        }

    async def __aenter__(self) -> "AuthManager":
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        if self._internal_client:
            await self._client.aclose()

    async def start(self) -> None:
        """
        Runs discovery for every provider concurrently.

        Raises:
            DiscoveryError: If any provider cannot be discovered.
        """
        errors: list[DiscoveryError] = []

        async def _discover(relying_party: OIDCRelyingParty) -> None:
            try:
                await relying_party.discover()
            except DiscoveryError as e:
                errors.append(e)

        async with anyio.create_task_group() as tg:
            for relying_party in self.relying_parties.values():
                tg.start_soon(_discover, relying_party)

        if errors:
            raise errors[0]

    def routes(self) -> list[Route]:
        """
        Returns the logout routes of the providers with logout enabled.
        """
        pairs = [(rp.provider, rp) for rp in self.relying_parties.values()]
        return logout_routes(pairs, root_override=self.config.root_url)
