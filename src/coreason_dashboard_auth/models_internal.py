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
Internal data models for the coreason-dashboard-auth package.
These are not exposed in the public API.
"""

from pydantic import BaseModel, ConfigDict, Field


class OIDCConfig(BaseModel):
    """
    OIDC Configuration from .well-known/openid-configuration.
    """

    model_config = ConfigDict(frozen=True, extra="ignore")

    issuer: str = Field(..., description="The OIDC issuer URL.")
    authorization_endpoint: str | None = Field(default=None, description="The authorization endpoint URL.")
    token_endpoint: str | None = Field(default=None, description="The token endpoint URL.")
    end_session_endpoint: str | None = Field(
        default=None, description="The RP-initiated logout endpoint URL, when the provider supports it."
    )
