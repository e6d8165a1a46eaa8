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
Starlette routes for the authentication endpoints.
"""

from collections.abc import Iterable

from starlette.routing import Route

from coreason_dashboard_auth.config import OIDCProviderConfig
from coreason_dashboard_auth.logout import RelyingPartyHandle, build_logout_handler
from coreason_dashboard_auth.utils.logger import logger

LOGOUT_PATH = "/api/auth/providers/oidc/{slug_id}/logout"


def logout_routes(
    providers: Iterable[tuple[OIDCProviderConfig, RelyingPartyHandle]],
    root_override: str = "",
) -> list[Route]:
    """
    Creates one logout route per provider with logout enabled.

    Args:
        providers: Pairs of provider configuration and relying party.
        root_override: The operator-configured root URL, or "".

    Returns:
        list[Route]: The GET routes, one per enabled provider.
    """
    routes: list[Route] = []
    for provider, relying_party in providers:
        handler = build_logout_handler(provider.logout, relying_party, root_override)
        if handler is None:
            continue
        path = LOGOUT_PATH.format(slug_id=provider.slug_id)
        routes.append(Route(path, endpoint=handler.handle, methods=["GET"], name=f"oidc-logout-{provider.slug_id}"))
        logger.info(f"Registered OIDC logout route {path}")
    return routes
