"""Shared-token access gate.

A token arrives once as a query parameter, is remembered in a cookie, and
every later request is checked against the configured token set.
"""

from __future__ import annotations

import hmac
import logging
from dataclasses import dataclass
from typing import AbstractSet

from starlette.requests import Request
from starlette.responses import Response

from mdtree.config import PUBLIC_TOKEN

logger = logging.getLogger(__name__)

TOKEN_PARAM = "token"
COOKIE_NAME = "mdtree_token"
COOKIE_MAX_AGE = 30 * 24 * 60 * 60


@dataclass(frozen=True, slots=True)
class Credentials:
    """Outcome of :func:`authenticate`."""

    token: str | None
    authorized: bool
    issue_cookie: bool = False


def _is_member(token: str, tokens: AbstractSet[str]) -> bool:
    # Constant-time comparison against every configured token
    found = False
    for candidate in tokens:
        if hmac.compare_digest(token.encode(), candidate.encode()):
            found = True
    return found


def authenticate(tokens: AbstractSet[str], request: Request) -> Credentials:
    """Check the request's token against the configured set.

    Args:
        tokens: Configured tokens; containing ``public`` opens everything.
        request: Incoming request, read for the cookie and query parameter.

    Returns:
        Credentials with the effective token. ``issue_cookie`` is set when a
        query token replaced the cookie token and should be remembered.
    """
    if PUBLIC_TOKEN in tokens:
        return Credentials(token=None, authorized=True)

    token = request.cookies.get(COOKIE_NAME) or None
    issue_cookie = False
    query_token = request.query_params.get(TOKEN_PARAM)
    if query_token and query_token != token:
        token = query_token
        issue_cookie = True

    if not token:
        return Credentials(token=None, authorized=False)

    authorized = _is_member(token, tokens)
    if not authorized:
        logger.warning("Invalid authentication token")
        return Credentials(token=token, authorized=False)
    return Credentials(token=token, authorized=True, issue_cookie=issue_cookie)


def remember_token(response: Response, credentials: Credentials) -> None:
    """Store an accepted query token in a long-lived session cookie."""
    if not (credentials.authorized and credentials.issue_cookie and credentials.token):
        return
    response.set_cookie(
        COOKIE_NAME,
        credentials.token,
        max_age=COOKIE_MAX_AGE,
        secure=True,
        httponly=True,
        samesite="strict",
    )
