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
Resolution of the externally visible root URL of an incoming request.

Behind a reverse proxy the server only sees the internal host and scheme, so absolute
URLs pointing back at the dashboard are built from the X-Forwarded-* headers. Those
headers are trusted as-is: this is only safe when the proxy is trusted infrastructure.
"""

from urllib.parse import urlsplit

from starlette.requests import Request

from coreason_dashboard_auth.exceptions import ConfigurationError
from coreason_dashboard_auth.models import RootURL, URLScheme
from coreason_dashboard_auth.utils.logger import logger

__all__ = ["RootURLResolver", "parse_root_url_override", "resolve_root_url"]

FORWARDED_HOST_HEADER = "X-Forwarded-Host"
FORWARDED_PROTO_HEADER = "X-Forwarded-Proto"


def parse_root_url_override(value: str) -> RootURL:
    """
    Parses the operator-configured root URL override.

    Only the scheme and host are kept; any path, query or credentials are dropped.

    Args:
        value: An absolute URL such as "https://dashboard.example.com".

    Returns:
        RootURL: The scheme and host of the override.

    Raises:
        ConfigurationError: If the value is not an absolute http(s) URL with a host.
    """
    try:
        parsed = urlsplit(value.strip())
    except ValueError as e:
        raise ConfigurationError(f"Invalid root URL {value!r}: {e}") from e

    scheme = parsed.scheme.lower()
    host = parsed.netloc.rpartition("@")[2]
    if scheme not in (URLScheme.HTTP, URLScheme.HTTPS) or not host:
        raise ConfigurationError(
            f"Invalid root URL {value!r}: expected an absolute http or https URL such as 'https://example.com'"
        )
    return RootURL(scheme=URLScheme(scheme), host=host)


def _first_header_value(request: Request, name: str) -> str:
    # A proxy chain appends its own entries; the first one is what the browser used.
    raw = request.headers.get(name, "")
    return raw.split(",", 1)[0].strip()


def _has_tls_session(request: Request) -> bool:
    return "tls" in request.scope.get("extensions", {})


def _resolve_scheme(request: Request) -> URLScheme:
    forwarded_proto = _first_header_value(request, FORWARDED_PROTO_HEADER).lower()
    if forwarded_proto:
        if forwarded_proto in (URLScheme.HTTP, URLScheme.HTTPS):
            return URLScheme(forwarded_proto)
        logger.debug(f"Ignoring unsupported {FORWARDED_PROTO_HEADER} value: {forwarded_proto!r}")

    if _has_tls_session(request):
        return URLScheme.HTTPS
    if request.url.scheme in ("https", "wss"):
        return URLScheme.HTTPS
    return URLScheme.HTTP


def _resolve_host(request: Request) -> str:
    forwarded_host = _first_header_value(request, FORWARDED_HOST_HEADER)
    if forwarded_host:
        return forwarded_host
    return request.headers.get("host") or request.url.netloc


def resolve_root_url(request: Request, override: str = "") -> RootURL:
    """
    Computes the canonical external base URL for a request.

    A non-empty override wins over everything else. Otherwise the host comes from
    X-Forwarded-Host (falling back to the Host header) and the scheme from
    X-Forwarded-Proto, then TLS presence, then the request's own scheme.

    Args:
        request: The incoming request. It is never modified.
        override: The operator-configured root URL, or "" when unset.

    Returns:
        RootURL: The resolved scheme and host, without trailing slash.

    Raises:
        ConfigurationError: If the override is malformed. Validate it at startup with
            `parse_root_url_override` (or use `RootURLResolver`) so this never happens per request.
    """
    if override:
        return parse_root_url_override(override)

    return RootURL(scheme=_resolve_scheme(request), host=_resolve_host(request))


class RootURLResolver:
    """
    Resolves root URLs with an explicitly configured override.

    Attributes:
        override (RootURL | None): The parsed override, or None when headers decide.
    """

    def __init__(self, override: str = "") -> None:
        """
        Initialize the RootURLResolver.

        Args:
            override: The operator-configured root URL. Parsed immediately so that a
                malformed value fails at startup.

        Raises:
            ConfigurationError: If the override is malformed.
        """
        self.override: RootURL | None = parse_root_url_override(override) if override else None

    def resolve(self, request: Request) -> RootURL:
        if self.override is not None:
            return self.override
        return resolve_root_url(request)
