# voice_intake/auth.py
from __future__ import annotations

import base64
import binascii
import logging
import secrets
from typing import Iterable, Sequence, Tuple

from fastapi import Request
from fastapi.responses import PlainTextResponse, Response
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.types import ASGIApp

from voice_intake.errors import AuthError

logger = logging.getLogger(__name__)

# Demo accounts; there is no user store behind this gate.
VALID_CREDENTIALS: Tuple[Tuple[str, str], ...] = (
    ("demo", "medical2024"),
    ("doctor", "test123"),
    ("admin", "secure456"),
    ("clinic1", "interview1"),
    ("clinic2", "interview2"),
)

EXEMPT_PATHS = ("/favicon.ico",)
API_PREFIX = "/api"


def is_exempt(path: str) -> bool:
    if path == API_PREFIX or path.startswith(API_PREFIX + "/"):
        return True
    return path in EXEMPT_PATHS


def decode_basic_credentials(header: str | None) -> Tuple[str, str]:
    """
    Parse an `Authorization: Basic ...` header into (username, password).

    The password is everything after the first colon.
    """
    if not header or not header.startswith("Basic "):
        raise AuthError("認証が必要です")

    encoded = header[len("Basic "):].strip()
    try:
        decoded = base64.b64decode(encoded, validate=True).decode("utf-8")
    except (binascii.Error, UnicodeDecodeError) as exc:
        logger.error("Failed to decode credentials: %s", exc)
        raise AuthError("認証情報が無効です") from exc

    username, sep, password = decoded.partition(":")
    if not sep:
        raise AuthError("認証情報が無効です")
    return username, password


def authenticate(
    header: str | None,
    credentials: Iterable[Tuple[str, str]] = VALID_CREDENTIALS,
) -> str:
    username, password = decode_basic_credentials(header)

    matched = False
    for valid_user, valid_password in credentials:
        user_ok = secrets.compare_digest(username.encode(), valid_user.encode())
        password_ok = secrets.compare_digest(password.encode(), valid_password.encode())
        if user_ok and password_ok:
            matched = True

    if not matched:
        logger.warning("Authentication failed for user %r", username)
        raise AuthError("認証に失敗しました")

    logger.info("Authentication succeeded for user %r", username)
    return username


def challenge(message: str, realm: str) -> Response:
    return PlainTextResponse(
        message,
        status_code=401,
        headers={"WWW-Authenticate": f'Basic realm="{realm}"'},
        media_type="text/plain; charset=utf-8",
    )


class BasicAuthMiddleware(BaseHTTPMiddleware):
    """
    HTTP Basic Auth in front of every page; /api routes always bypass it.
    """

    def __init__(
        self,
        app: ASGIApp,
        realm: str = "Medical Voice System",
        credentials: Sequence[Tuple[str, str]] = VALID_CREDENTIALS,
    ):
        super().__init__(app)
        self.realm = realm
        self.credentials = tuple(credentials)

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        if is_exempt(request.url.path):
            return await call_next(request)

        try:
            username = authenticate(request.headers.get("Authorization"), self.credentials)
        except AuthError as exc:
            return challenge(exc.message, self.realm)

        request.state.username = username
        return await call_next(request)
