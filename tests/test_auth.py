from __future__ import annotations

import base64

import pytest

from voice_intake.auth import (
    VALID_CREDENTIALS,
    authenticate,
    decode_basic_credentials,
    is_exempt,
)
from voice_intake.errors import AuthError


def test_demo_credentials_open_the_landing_page(client, basic_auth) -> None:
    response = client.get("/", headers=basic_auth("demo", "medical2024"))

    assert response.status_code == 200
    assert "さくら内科クリニック" in response.text
    assert "demo" in response.text


@pytest.mark.parametrize("username,password", VALID_CREDENTIALS)
def test_every_listed_account_is_accepted(client, basic_auth, username, password) -> None:
    response = client.get("/healthz", headers=basic_auth(username, password))

    assert response.status_code == 200
    assert response.json() == {"status": "ok"}


@pytest.mark.parametrize(
    "username,password",
    [
        ("demo", "wrong"),
        ("nobody", "medical2024"),
        ("doctor", "medical2024"),
        ("", ""),
    ],
)
def test_wrong_credentials_are_challenged(client, basic_auth, username, password) -> None:
    response = client.get("/", headers=basic_auth(username, password))

    assert response.status_code == 401
    assert response.headers["WWW-Authenticate"] == 'Basic realm="Medical Voice System"'


def test_missing_header_is_challenged(client) -> None:
    response = client.get("/")

    assert response.status_code == 401
    assert response.headers["WWW-Authenticate"].startswith("Basic")
    assert response.text == "認証が必要です"


def test_garbage_header_is_challenged(client) -> None:
    response = client.get("/", headers={"Authorization": "Basic !!!not-base64!!!"})

    assert response.status_code == 401
    assert "WWW-Authenticate" in response.headers


def test_api_routes_never_challenge(client) -> None:
    response = client.post("/api/summarize", json={"text": "咳が止まりません"})

    assert response.status_code == 200
    assert "WWW-Authenticate" not in response.headers


def test_api_routes_ignore_bad_credentials(client, basic_auth) -> None:
    response = client.post(
        "/api/diagnose",
        json={},
        headers=basic_auth("demo", "wrong"),
    )

    assert response.status_code == 400
    assert "WWW-Authenticate" not in response.headers


@pytest.mark.parametrize(
    "path,expected",
    [
        ("/api", True),
        ("/api/transcribe", True),
        ("/favicon.ico", True),
        ("/", False),
        ("/apix", False),
        ("/healthz", False),
    ],
)
def test_exempt_paths(path, expected) -> None:
    assert is_exempt(path) is expected


def test_password_may_contain_colons() -> None:
    token = base64.b64encode(b"clinic1:pass:word").decode()

    assert decode_basic_credentials(f"Basic {token}") == ("clinic1", "pass:word")


def test_header_without_colon_is_invalid() -> None:
    token = base64.b64encode(b"demo").decode()

    with pytest.raises(AuthError):
        decode_basic_credentials(f"Basic {token}")


def test_authenticate_returns_username() -> None:
    token = base64.b64encode(b"admin:secure456").decode()

    assert authenticate(f"Basic {token}") == "admin"


def test_bearer_scheme_is_rejected() -> None:
    with pytest.raises(AuthError):
        authenticate("Bearer demo")
