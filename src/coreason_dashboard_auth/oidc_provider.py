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
OIDC relying party backed by the provider's discovery document.
"""

import anyio
import httpx
from pydantic import ValidationError

from coreason_dashboard_auth.config import OIDCProviderConfig
from coreason_dashboard_auth.exceptions import DiscoveryError, OversizedResponseError
from coreason_dashboard_auth.models import ClientConfig
from coreason_dashboard_auth.models_internal import OIDCConfig
from coreason_dashboard_auth.transport import safe_json_fetch
from coreason_dashboard_auth.utils.logger import logger


class OIDCRelyingParty:
    """
    Fetches and caches the Identity Provider's discovery document.

    Satisfies `RelyingPartyHandle`. Discovery happens once at startup and the endpoints are
    fixed from then on; only `discover(force_refresh=True)` replaces them. Between refreshes
    the instance is read-only and can be shared across concurrent requests.

    Attributes:
        provider (OIDCProviderConfig): The provider configuration.
    """

    def __init__(self, provider: OIDCProviderConfig, client: httpx.AsyncClient) -> None:
        """
        Initialize the OIDCRelyingParty.

        Args:
            provider: The provider configuration.
            client: The async HTTP client to use for requests.
        """
        self.provider = provider
        self.client = client
        self._oidc_config_cache: OIDCConfig | None = None
        self._lock: anyio.Lock | None = None

    @property
    def discovery_url(self) -> str:
        # Always set by OIDCProviderConfig's validator.
        return self.provider.discovery_url or ""

    async def _fetch_oidc_config(self) -> OIDCConfig:
        """
        Fetches the OIDC discovery document.

        Retries on `httpx.HTTPError` up to 3 times with exponential backoff (initial=0.1s, max=1.0s).

        Returns:
            OIDCConfig: The OIDC configuration object.

        Raises:
            DiscoveryError: If the request fails after retries or returns invalid data.
        """
        attempts = 3
        wait_initial = 0.1
        wait_max = 1.0

        for attempt in range(attempts):
            try:
                data = await safe_json_fetch(self.client, self.discovery_url)
                return OIDCConfig(**data)
            except OversizedResponseError:
                raise
            except (ValidationError, ValueError, TypeError) as e:
                # Invalid JSON or an invalid document will not get better by retrying
                raise DiscoveryError(f"Invalid OIDC configuration from {self.discovery_url}: {e}") from e
            except httpx.HTTPError as e:
                if attempt == attempts - 1:
                    raise DiscoveryError(
                        f"Failed to fetch OIDC configuration from {self.discovery_url}: {e}"
                    ) from e

                sleep_time = min(wait_initial * (2**attempt), wait_max)
                logger.warning(f"OIDC discovery attempt {attempt + 1} failed for {self.provider.slug_id}: {e}")
                await anyio.sleep(sleep_time)

        raise DiscoveryError(f"Failed to fetch OIDC configuration from {self.discovery_url}")  # pragma: no cover

    async def discover(self, force_refresh: bool = False) -> OIDCConfig:
        """
        Returns the discovery document, fetching it on first use.

        Args:
            force_refresh: If True, fetches the document again and replaces the cached one.

        Returns:
            OIDCConfig: The discovered configuration.

        Raises:
            DiscoveryError: If fetching fails.
        """
        if self._lock is None:
            self._lock = anyio.Lock()

        # Double-checked locking (Check 1: No lock)
        if not force_refresh and self._oidc_config_cache is not None:
            return self._oidc_config_cache

        async with self._lock:
            if not force_refresh and self._oidc_config_cache is not None:
                return self._oidc_config_cache

            oidc_config = await self._fetch_oidc_config()
            self._oidc_config_cache = oidc_config
            logger.info(f"Discovered OIDC provider {self.provider.slug_id} at {oidc_config.issuer}")
            return oidc_config

    def get_end_session_endpoint(self) -> str:
        """
        Returns the provider logout endpoint.

        The configured override wins over the discovered value. Returns "" when neither
        is known; the logout redirect then degrades instead of failing.
        """
        if self.provider.end_session_endpoint:
            return self.provider.end_session_endpoint
        if self._oidc_config_cache is not None and self._oidc_config_cache.end_session_endpoint:
            return self._oidc_config_cache.end_session_endpoint
        return ""

    def oauth_config(self) -> ClientConfig:
        return ClientConfig(client_id=self.provider.client_id)
