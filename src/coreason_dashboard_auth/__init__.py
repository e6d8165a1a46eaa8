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
Authentication helpers for the dashboard server: proxy-aware root URL resolution and OIDC logout redirects.
"""

__version__ = "0.1.0"
__author__ = "Gowtham A Rao"
__email__ = "gowtham.rao@coreason.ai"

from .config import DashboardAuthConfig, LogoutConfig, OIDCProviderConfig
from .duration import DurationString, parse_duration
from .exceptions import ConfigurationError, DashboardAuthError
from .logout import LogoutRedirectHandler, RelyingPartyHandle, build_logout_handler
from .manager import AuthManager
from .models import ClientConfig, RootURL
from .oidc_provider import OIDCRelyingParty
from .root_url import RootURLResolver, resolve_root_url

__all__ = [
    "AuthManager",
    "ClientConfig",
    "ConfigurationError",
    "DashboardAuthConfig",
    "DashboardAuthError",
    "DurationString",
    "LogoutConfig",
    "LogoutRedirectHandler",
    "OIDCProviderConfig",
    "OIDCRelyingParty",
    "RelyingPartyHandle",
    "RootURL",
    "RootURLResolver",
    "build_logout_handler",
    "parse_duration",
    "resolve_root_url",
]
