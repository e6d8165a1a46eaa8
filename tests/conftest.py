# Copyright (c) 2025 CoReason, Inc.
#
# This software is proprietary and dual-licensed.
# Licensed under the Prosperity Public License 3.0 (the "License").
# A copy of the license is available at https://prosperitylicense.com/versions/3.0.0
# For details, see the LICENSE file.
# Commercial use beyond a 30-day trial requires a separate license.
#
# Source Code: https://github.com/CoReason-AI/coreason_dashboard_auth

import os
from collections.abc import Callable, Generator
from typing import Any
from unittest.mock import patch

import pytest
from starlette.requests import Request

from coreason_dashboard_auth.models import ClientConfig


class FakeRelyingParty:
    """Minimal RelyingPartyHandle double exposing only the two consumed capabilities."""

    def __init__(self, end_session_endpoint: str, client_id: str) -> None:
        self.end_session_endpoint = end_session_endpoint
        self.client_id = client_id

    def get_end_session_endpoint(self) -> str:
        return self.end_session_endpoint

    def oauth_config(self) -> ClientConfig:
        return ClientConfig(client_id=self.client_id)


@pytest.fixture(autouse=True)
def clean_env() -> Generator[None, None, None]:
    """
    Removes DASHBOARD_AUTH_* variables from the environment so settings tests only
    see what they set themselves.
    """
    leaked = {k: v for k, v in os.environ.items() if k.upper().startswith("DASHBOARD_AUTH_")}
    with patch.dict(os.environ):
        for key in leaked:
            del os.environ[key]
        yield


@pytest.fixture
def make_request() -> Callable[..., Request]:
    """
    Builds a Starlette request from a raw ASGI scope.

    `tls=True` adds the ASGI TLS extension, i.e. an established TLS session.
    """

    def _make(
        host: str | None = "localhost:8080",
        scheme: str = "http",
        headers: dict[str, str] | None = None,
        tls: bool = False,
        path: str = "/logout",
    ) -> Request:
        raw_headers: list[tuple[bytes, bytes]] = []
        if host is not None:
            raw_headers.append((b"host", host.encode("latin-1")))
        for name, value in (headers or {}).items():
            raw_headers.append((name.lower().encode("latin-1"), value.encode("latin-1")))

        scope: dict[str, Any] = {
            "type": "http",
            "http_version": "1.1",
            "method": "GET",
            "scheme": scheme,
            "path": path,
            "raw_path": path.encode("ascii"),
            "root_path": "",
            "query_string": b"",
            "headers": raw_headers,
            "server": ("testserver", 80),
            "client": ("127.0.0.1", 51000),
            "extensions": {},
        }
        if tls:
            scope["extensions"]["tls"] = {
                "server_cert": None,
                "client_cert_chain": [],
                "client_cert_name": None,
                "client_cert_error": None,
                "tls_version": 0x0304,
                "cipher_suite": None,
            }
        return Request(scope)

    return _make


@pytest.fixture
def relying_party() -> Callable[[str, str], FakeRelyingParty]:
    def _make(
        end_session_endpoint: str = "https://provider.example.com/logout",
        client_id: str = "client123",
    ) -> FakeRelyingParty:
        return FakeRelyingParty(end_session_endpoint, client_id)

    return _make
