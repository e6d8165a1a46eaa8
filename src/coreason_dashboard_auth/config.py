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
Configuration for the coreason-dashboard-auth package.
"""

import re
from pathlib import Path

from pydantic import BaseModel, Field, SecretStr, ValidationInfo, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from coreason_dashboard_auth.duration import DurationString
from coreason_dashboard_auth.root_url import parse_root_url_override
from coreason_dashboard_auth.utils.logger import logger

# Plugin directories. A container image ships them under /etc; a local install uses
# paths relative to the working directory.
DEFAULT_PLUGIN_PATH = "plugins"
DEFAULT_PLUGIN_PATH_IN_CONTAINER = "/etc/coreason/plugins"
DEFAULT_ARCHIVE_PLUGIN_PATH = "plugins-archive"
DEFAULT_ARCHIVE_PLUGIN_PATH_IN_CONTAINER = "/etc/coreason/plugins-archive"

_SLUG_RE = re.compile(r"^[a-zA-Z0-9_-]+$")


def _is_file_exists(path: str) -> bool:
    return Path(path).exists()


class LogoutConfig(BaseModel):
    """
    RP-initiated logout settings for one OIDC provider.

    Attributes:
        enabled (bool): Whether the dashboard exposes a logout redirect for this provider.
        redirect_param_name (str): Query parameter carrying the post-logout URL.
            Empty means "post_logout_redirect_uri"; some providers (e.g. Cognito) expect "logout_uri".
    """

    enabled: bool = False
    redirect_param_name: str = ""


class OIDCProviderConfig(BaseModel):
    """
    Configuration of one OpenID Connect provider.

    Attributes:
        slug_id (str): URL-safe identifier, used in the provider's routes.
        name (str): Display name.
        client_id (str): The OIDC Client ID.
        client_secret (SecretStr | None): The OIDC Client secret, if any.
        issuer (str): The issuer URL. HTTPS unless `unsafe_local_dev` is set.
        discovery_url (str | None): Defaults to {issuer}/.well-known/openid-configuration.
        end_session_endpoint (str | None): Overrides the discovered end_session_endpoint.
        scopes (list[str]): Requested scopes.
        logout (LogoutConfig): Logout redirect settings.
    """

    slug_id: str
    name: str = ""
    client_id: str
    client_secret: SecretStr | None = None
    unsafe_local_dev: bool = False
    issuer: str
    discovery_url: str | None = None
    end_session_endpoint: str | None = None
    scopes: list[str] = Field(default_factory=lambda: ["openid", "profile", "email"])
    logout: LogoutConfig = Field(default_factory=LogoutConfig)

    @field_validator("slug_id")
    @classmethod
    def validate_slug(cls, v: str) -> str:
        if not _SLUG_RE.match(v):
            raise ValueError(f"slug_id must only contain letters, digits, '-' or '_' (got {v!r})")
        return v

    @field_validator("issuer", mode="after")
    @classmethod
    def validate_https(cls, v: str, info: ValidationInfo) -> str:
        """
        Ensures that issuer uses HTTPS, unless strictly opted out for local dev.
        """
        if v.startswith("http://") and not info.data.get("unsafe_local_dev", False):
            raise ValueError("HTTPS is required for production. Set 'unsafe_local_dev=True' only for local testing.")
        return v

    @model_validator(mode="after")
    def set_default_discovery_url(self) -> "OIDCProviderConfig":
        if not self.name:
            self.name = self.slug_id
        if self.discovery_url is None:
            self.discovery_url = f"{self.issuer.rstrip('/')}/.well-known/openid-configuration"
        return self


class PluginConfig(BaseModel):
    """
    Location of the runtime plugins.

    Attributes:
        path (str): Directory containing the runtime plugins.
        archive_path (str): Deprecated single archive directory, use `archive_paths`.
        archive_paths (list[str]): Directories whose archives are extracted into `path` at startup.
        enable_dev (bool): Enables the plugin development mode.
    """

    path: str = ""
    archive_path: str = ""
    archive_paths: list[str] = Field(default_factory=list)
    enable_dev: bool = False

    @model_validator(mode="after")
    def verify(self) -> "PluginConfig":
        """
        Fills in default directories.

        The container paths are used whenever they exist, whether or not the process
        actually runs in a container.
        """
        if not self.path:
            if _is_file_exists(DEFAULT_PLUGIN_PATH_IN_CONTAINER):
                self.path = DEFAULT_PLUGIN_PATH_IN_CONTAINER
            else:
                self.path = DEFAULT_PLUGIN_PATH
        if self.archive_path:
            logger.warning(
                "the 'archive_path' attribute is deprecated and will be removed in a future version. "
                "Please use the 'archive_paths' attribute instead"
            )
            self.archive_paths.append(self.archive_path)
            self.archive_path = ""
        if not self.archive_paths:
            if _is_file_exists(DEFAULT_ARCHIVE_PLUGIN_PATH_IN_CONTAINER):
                self.archive_paths.append(DEFAULT_ARCHIVE_PLUGIN_PATH_IN_CONTAINER)
            else:
                self.archive_paths.append(DEFAULT_ARCHIVE_PLUGIN_PATH)
        return self


class SessionConfig(BaseModel):
    """
    Lifetimes of the tokens issued to dashboard users.

    Durations keep the operator's spelling ("14d" is never rewritten to "2w").
    """

    access_token_ttl: DurationString = "15m"
    refresh_token_ttl: DurationString = "24h"


class DashboardAuthConfig(BaseSettings):
    """
    Configuration settings for coreason-dashboard-auth.

    Attributes:
        root_url (str): Public URL of the dashboard. When set, it replaces the root URL
            derived from the request headers.
        providers (list[OIDCProviderConfig]): Configured OIDC providers.
        plugin (PluginConfig): Plugin directories.
        session (SessionConfig): Token lifetimes.
        http_timeout (float): Timeout in seconds for all IdP network operations.
    """

    model_config = SettingsConfigDict(
        env_prefix="DASHBOARD_AUTH_",
        env_nested_delimiter="__",
        case_sensitive=False,
    )

    root_url: str = ""
    providers: list[OIDCProviderConfig] = Field(default_factory=list)
    plugin: PluginConfig = Field(default_factory=PluginConfig)
    session: SessionConfig = Field(default_factory=SessionConfig)
    http_timeout: float = Field(default=10.0, gt=0, description="Timeout in seconds for all IdP network operations.")

    @field_validator("root_url")
    @classmethod
    def validate_root_url(cls, v: str) -> str:
        """
        Rejects a malformed root URL at load time, before any request is served.
        """
        v = v.strip()
        if v:
            parse_root_url_override(v)
        return v

    @model_validator(mode="after")
    def validate_unique_slugs(self) -> "DashboardAuthConfig":
        seen: set[str] = set()
        for provider in self.providers:
            if provider.slug_id in seen:
                raise ValueError(f"Duplicate OIDC provider slug_id: {provider.slug_id!r}")
            seen.add(provider.slug_id)
        return self
