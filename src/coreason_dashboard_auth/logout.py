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
OIDC RP-Initiated Logout redirect.

The dashboard sends the browser to the provider's end_session_endpoint with the
post-logout redirect URI and client_id appended. Query parameters the provider already
put on the endpoint are kept.
"""

from typing import Protocol, runtime_checkable
from urllib.parse import parse_qsl, urlencode, urlsplit, urlunsplit

from starlette.requests import Request
from starlette.responses import RedirectResponse

from coreason_dashboard_auth.config import LogoutConfig
from coreason_dashboard_auth.models import ClientConfig
from coreason_dashboard_auth.root_url import RootURLResolver
from coreason_dashboard_auth.utils.logger import logger

__all__ = [
    "DEFAULT_LOGOUT_REDIRECT_PARAM",
    "LogoutRedirectHandler",
    "RelyingPartyHandle",
    "build_logout_handler",
]

DEFAULT_LOGOUT_REDIRECT_PARAM = "post_logout_redirect_uri"
CLIENT_ID_PARAM = "client_id"


@runtime_checkable
class RelyingPartyHandle(Protocol):
    """
    The capabilities of an OIDC relying party that the logout redirect needs.

    Any object providing these two methods can be used, including test doubles.
    Implementations are shared across concurrent requests and must not change once built.
    """

    def get_end_session_endpoint(self) -> str: ...

    def oauth_config(self) -> ClientConfig: ...


class LogoutRedirectHandler:
    """
    Redirects the browser to the Identity Provider's end_session_endpoint.

    Holds no per-request state: identical requests always produce the same Location.

    Attributes:
        client (RelyingPartyHandle): The relying party of the provider.
        redirect_param_name (str): Query parameter carrying the post-logout redirect URI.
        resolver (RootURLResolver): Resolves the dashboard's public URL.
    """

    def __init__(self, client: RelyingPartyHandle, redirect_param_name: str, resolver: RootURLResolver) -> None:
        self.client = client
        self.redirect_param_name = redirect_param_name
        self.resolver = resolver

    def redirect_url(self, request: Request) -> str:
        """
        Builds the logout URL for a request.

        The redirect parameter and client_id are set (overwriting any existing value);
        every other query parameter of the endpoint is preserved. An endpoint that cannot
        be parsed still yields a best-effort URL rather than an error.

        Args:
            request: The incoming logout request.

        Returns:
            str: The provider logout URL.
        """
        root_url = self.resolver.resolve(request)
        endpoint = self.client.get_end_session_endpoint()
        client_id = self.client.oauth_config().client_id

        try:
            parts = urlsplit(endpoint)
        except ValueError as e:
            logger.warning(f"Unable to parse end_session_endpoint {endpoint!r}: {e}")
            parts = None

        params: dict[str, list[str]] = {}
        if parts is not None:
            for key, value in parse_qsl(parts.query, keep_blank_values=True):
                params.setdefault(key, []).append(value)

        params[self.redirect_param_name] = [str(root_url)]
        params[CLIENT_ID_PARAM] = [client_id]
        query = urlencode(sorted(params.items()), doseq=True)

        if parts is None:
            separator = "&" if "?" in endpoint else "?"
            return f"{endpoint}{separator}{query}"
        return urlunsplit(parts._replace(query=query))

    async def handle(self, request: Request) -> RedirectResponse:
        url = self.redirect_url(request)
        logger.debug(f"Redirecting to provider logout: {url}")
        return RedirectResponse(url=url, status_code=302)


def build_logout_handler(
    config: LogoutConfig,
    client: RelyingPartyHandle,
    root_override: str = "",
) -> LogoutRedirectHandler | None:
    """
    Builds the logout redirect handler of a provider.

    Args:
        config: The provider's logout settings.
        client: The provider's relying party.
        root_override: The operator-configured root URL, or "" to derive it from each request.

    Returns:
        LogoutRedirectHandler | None: The handler, or None when logout is disabled.
            Callers must not register a route for None.

    Raises:
        ConfigurationError: If `root_override` is malformed.
    """
    if not config.enabled:
        logger.debug("OIDC logout redirect is disabled")
        return None

    redirect_param_name = config.redirect_param_name or DEFAULT_LOGOUT_REDIRECT_PARAM
    return LogoutRedirectHandler(client, redirect_param_name, RootURLResolver(root_override))
