# Copyright (c) 2025 CoReason, Inc.
#
# This software is proprietary and dual-licensed.
# Licensed under the Prosperity Public License 3.0 (the "License").
# A copy of the license is available at https://prosperitylicense.com/versions/3.0.0
# For details, see the LICENSE file.
# Commercial use beyond a 30-day trial requires a separate license.
#
# Source Code: https://github.com/CoReason-AI/coreason_dashboard_auth

from collections.abc import Callable
from urllib.parse import urlsplit

import pytest
from pydantic import ValidationError
from starlette.requests import Request

from coreason_dashboard_auth.exceptions import ConfigurationError
from coreason_dashboard_auth.models import RootURL, URLScheme
from coreason_dashboard_auth.root_url import RootURLResolver, parse_root_url_override, resolve_root_url


@pytest.mark.parametrize(
    ("host", "scheme", "headers", "tls", "expected"),
    [
        pytest.param("localhost:8080", "http", {}, False, "http://localhost:8080", id="basic http request"),
        pytest.param("dash.example.com", "https", {}, True, "https://dash.example.com", id="https request with TLS"),
        pytest.param(
            "internal:8080",
            "http",
            {"X-Forwarded-Host": "public.example.com"},
            False,
            "http://public.example.com",
            id="behind proxy with X-Forwarded-Host",
        ),
        pytest.param(
            "localhost:8080",
            "http",
            {"X-Forwarded-Proto": "https"},
            False,
            "https://localhost:8080",
            id="behind proxy with X-Forwarded-Proto",
        ),
        pytest.param(
            "internal:8080",
            "http",
            {"X-Forwarded-Host": "public.example.com", "X-Forwarded-Proto": "https"},
            False,
            "https://public.example.com",
            id="behind proxy with both X-Forwarded headers",
        ),
        pytest.param("example.com", "https", {}, True, "https://example.com", id="no trailing slash on plain domain"),
        pytest.param("example.com:443", "https", {}, True, "https://example.com:443", id="no trailing slash with port"),
    ],
)
def test_resolve_root_url(
    make_request: Callable[..., Request], host: str, scheme: str, headers: dict[str, str], tls: bool, expected: str
) -> None:
    request = make_request(host=host, scheme=scheme, headers=headers, tls=tls)
    assert str(resolve_root_url(request)) == expected


def test_forwarded_proto_overrides_tls(make_request: Callable[..., Request]) -> None:
    """X-Forwarded-Proto wins over TLS presence."""
    request = make_request(host="app.local", scheme="https", headers={"X-Forwarded-Proto": "http"}, tls=True)
    assert str(resolve_root_url(request)) == "http://app.local"


def test_tls_wins_over_reported_scheme(make_request: Callable[..., Request]) -> None:
    request = make_request(host="app.local", scheme="http", tls=True)
    assert resolve_root_url(request).scheme is URLScheme.HTTPS


def test_reported_https_scheme_without_tls(make_request: Callable[..., Request]) -> None:
    request = make_request(host="app.local", scheme="https")
    assert str(resolve_root_url(request)) == "https://app.local"


def test_empty_forwarded_headers_are_ignored(make_request: Callable[..., Request]) -> None:
    request = make_request(host="internal:8080", headers={"X-Forwarded-Host": "", "X-Forwarded-Proto": ""})
    assert str(resolve_root_url(request)) == "http://internal:8080"


def test_forwarded_chain_uses_first_entry(make_request: Callable[..., Request]) -> None:
    request = make_request(
        host="internal:8080",
        headers={"X-Forwarded-Host": "public.example.com, proxy.internal", "X-Forwarded-Proto": "https, http"},
    )
    assert str(resolve_root_url(request)) == "https://public.example.com"


def test_forwarded_proto_is_case_insensitive(make_request: Callable[..., Request]) -> None:
    request = make_request(host="app.local", headers={"X-Forwarded-Proto": "HTTPS"})
    assert str(resolve_root_url(request)) == "https://app.local"


def test_unsupported_forwarded_proto_falls_back_to_inference(make_request: Callable[..., Request]) -> None:
    request = make_request(host="app.local", headers={"X-Forwarded-Proto": "gopher"}, tls=True)
    assert str(resolve_root_url(request)) == "https://app.local"


def test_trailing_slash_is_stripped(make_request: Callable[..., Request]) -> None:
    request = make_request(host="internal", headers={"X-Forwarded-Host": "public.example.com/"})
    assert str(resolve_root_url(request)) == "http://public.example.com"


@pytest.mark.parametrize(
    ("forwarded_host", "expected"),
    [
        ("public.example.com/x", "http://public.example.com%2Fx"),
        ("public.example.com?q=1", "http://public.example.com%3Fq=1"),
        ("public.example.com#f", "http://public.example.com%23f"),
        ("public.example.com:8443/a?b#c", "http://public.example.com:8443%2Fa%3Fb%23c"),
    ],
)
def test_forwarded_host_cannot_inject_url_parts(
    make_request: Callable[..., Request], forwarded_host: str, expected: str
) -> None:
    request = make_request(host="internal", headers={"X-Forwarded-Host": forwarded_host})

    rendered = str(resolve_root_url(request))

    assert rendered == expected
    parts = urlsplit(rendered)
    assert (parts.path, parts.query, parts.fragment) == ("", "", "")


def test_host_header_cannot_inject_url_parts(make_request: Callable[..., Request]) -> None:
    rendered = str(resolve_root_url(make_request(host="app.local/evil")))
    assert rendered == "http://app.local%2Fevil"
    assert urlsplit(rendered).path == ""


def test_host_normalization_is_idempotent() -> None:
    once = RootURL(scheme=URLScheme.HTTP, host="a.example.com/x")
    twice = RootURL(scheme=URLScheme.HTTP, host=once.host)
    assert once == twice


def test_ipv6_host_is_kept(make_request: Callable[..., Request]) -> None:
    request = make_request(headers={"X-Forwarded-Host": "[::1]:8443", "X-Forwarded-Proto": "https"})
    assert str(resolve_root_url(request)) == "https://[::1]:8443"


def test_missing_host_header_uses_server_address(make_request: Callable[..., Request]) -> None:
    request = make_request(host=None)
    assert str(resolve_root_url(request)) == "http://testserver"


def test_override_takes_precedence(make_request: Callable[..., Request]) -> None:
    request = make_request(
        host="internal:8080",
        headers={"X-Forwarded-Host": "proxy.example.com", "X-Forwarded-Proto": "http"},
    )
    root_url = resolve_root_url(request, "https://public.example.com")
    assert str(root_url) == "https://public.example.com"


def test_override_keeps_only_scheme_and_host(make_request: Callable[..., Request]) -> None:
    root_url = resolve_root_url(make_request(), "https://user:pw@public.example.com:8443/dash/?q=1#frag")
    assert root_url == RootURL(scheme=URLScheme.HTTPS, host="public.example.com:8443")
    assert str(root_url) == "https://public.example.com:8443"


def test_request_is_not_modified(make_request: Callable[..., Request]) -> None:
    request = make_request(host="internal:8080", headers={"X-Forwarded-Host": "public.example.com"})
    headers_before = list(request.scope["headers"])
    resolve_root_url(request)
    assert request.scope["headers"] == headers_before


@pytest.mark.parametrize(
    "value",
    ["not a url", "ftp://files.example.com", "https://", "//example.com", "https://[::1"],
)
def test_parse_root_url_override_rejects_malformed(value: str) -> None:
    with pytest.raises(ConfigurationError) as exc:
        parse_root_url_override(value)
    assert "Invalid root URL" in str(exc.value)


def test_parse_root_url_override_normalizes_scheme() -> None:
    assert str(parse_root_url_override(" HTTPS://Public.example.com ")) == "https://Public.example.com"


def test_configuration_error_is_value_error() -> None:
    with pytest.raises(ValueError):
        parse_root_url_override("nope")


def test_resolver_validates_override_eagerly() -> None:
    with pytest.raises(ConfigurationError):
        RootURLResolver("mailto:someone@example.com")


def test_resolver_with_override(make_request: Callable[..., Request]) -> None:
    resolver = RootURLResolver("http://public.example.com:8080/")
    request = make_request(host="internal", headers={"X-Forwarded-Host": "ignored.example.com"}, tls=True)
    assert str(resolver.resolve(request)) == "http://public.example.com:8080"


def test_resolver_without_override(make_request: Callable[..., Request]) -> None:
    resolver = RootURLResolver()
    assert resolver.override is None
    assert str(resolver.resolve(make_request(host="h:8080"))) == "http://h:8080"


def test_root_url_is_frozen() -> None:
    root_url = RootURL(scheme=URLScheme.HTTP, host="h")
    with pytest.raises(ValidationError):
        root_url.host = "other"  # type: ignore[misc]
