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
Custom exceptions for the coreason-dashboard-auth package.
"""


class DashboardAuthError(Exception):
    """Base exception for all coreason-dashboard-auth errors."""


class ConfigurationError(DashboardAuthError, ValueError):
    """
    Raised when the operator configuration is unusable (e.g. a malformed root URL override).
    Subclasses ValueError so pydantic validators report it as a field error at load time.
    """


class DurationFormatError(DashboardAuthError, ValueError):
    """Raised when a duration string does not match the duration grammar."""


class DiscoveryError(DashboardAuthError):
    """Raised when the Identity Provider's discovery document cannot be fetched or is invalid."""


class OversizedResponseError(DiscoveryError):
    """Raised when an HTTP response is too large."""
