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
Data models for the coreason-dashboard-auth package.
"""

from enum import StrEnum
from urllib.parse import quote

from pydantic import BaseModel, ConfigDict, Field, field_validator


# Characters a URL host keeps verbatim. "%" is kept so that normalizing twice is a no-op.
HOST_SAFE_CHARS = "!$&'()*+,;=:[]%"


class URLScheme(StrEnum):
    HTTP = "http"
    HTTPS = "https"


class RootURL(BaseModel):
    """
    The externally visible base URL of the dashboard (scheme and host only).

    This model is frozen (immutable); a fresh instance is created for every resolution.
    Its string form never carries a path, query, fragment or trailing slash.
    """

    model_config = ConfigDict(
        frozen=True,
        extra="forbid",
        json_schema_extra={"example": {"scheme": "https", "host": "dashboard.example.com:8443"}},
    )

    scheme: URLScheme = Field(..., description="Either 'http' or 'https'.")
    host: str = Field(..., description="Host name, optionally with a port.", examples=["localhost:8080"])

    @field_validator("host")
    @classmethod
    def normalize_host(cls, v: str) -> str:
        # "/", "?" and "#" would start a path, query or fragment; escape them as a URL host does
        return quote(v.rstrip("/"), safe=HOST_SAFE_CHARS)

    def __str__(self) -> str:
        return f"{self.scheme.value}://{self.host}"


class ClientConfig(BaseModel):
    """
    The subset of the OAuth2 client configuration consumed by the logout redirect.

    Attributes:
        client_id (str): The OIDC Client ID registered at the Identity Provider.
    """

    model_config = ConfigDict(frozen=True)

    client_id: str
