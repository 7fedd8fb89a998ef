"""
Request utilities for extracting client information.

Covers the client IP used for rate limiting, the presented access
credential, and the referrer handling behind the access guard redirect.
"""

from typing import Iterable, Optional
from urllib.parse import urlsplit

from fastapi import Request, Response

ACCESS_TOKEN_COOKIE = "access_token"


def get_client_ip(request: Request) -> Optional[str]:
    """
    Extract the client's real IP address from the request.

    Handles common proxy headers in order of precedence:
    1. X-Real-IP (nginx)
    2. X-Forwarded-For (standard proxy header, first IP)
    3. Direct client.host
    """
    real_ip = request.headers.get("X-Real-IP")
    if real_ip:
        return real_ip.strip()

    forwarded_for = request.headers.get("X-Forwarded-For")
    if forwarded_for:
        first_ip = forwarded_for.split(",")[0].strip()
        if first_ip:
            return first_ip

    if request.client:
        return request.client.host

    return None


# ============================================================================
# Credential Helpers
# ============================================================================


def get_presented_credential(request: Request) -> Optional[str]:
    """
    Extract the access credential a client presented, without validating it.

    Checks, in order:
    1. Authorization: Bearer header (API clients)
    2. access_token cookie (browser page navigation)

    Returns:
        The raw token string, or None if the client presented nothing
    """
    authorization = request.headers.get("Authorization")
    if authorization:
        scheme, _, token = authorization.partition(" ")
        if scheme.lower() == "bearer" and token.strip():
            return token.strip()

    cookie_token = request.cookies.get(ACCESS_TOKEN_COOKIE)
    if cookie_token:
        return cookie_token.strip()

    return None


def set_access_token_cookie(
    response: Response,
    token: str,
    max_age_seconds: int,
    is_production: bool = True,
) -> None:
    """
    Store the access token in an httpOnly cookie so page navigations carry it.

    Args:
        response: FastAPI response object
        token: Encoded access token
        max_age_seconds: Cookie lifetime, aligned with the token expiry
        is_production: Whether to enforce HTTPS-only
    """
    response.set_cookie(
        key=ACCESS_TOKEN_COOKIE,
        value=token,
        max_age=max_age_seconds,
        path="/",
        httponly=True,
        secure=is_production,
        samesite="lax",
    )


def clear_access_token_cookie(response: Response) -> None:
    """Clear the access token cookie (logout)."""
    response.delete_cookie(key=ACCESS_TOKEN_COOKIE, path="/", httponly=True)


# ============================================================================
# Redirect Helpers
# ============================================================================


def _origin(url: str) -> Optional[str]:
    parts = urlsplit(url)
    if not parts.scheme or not parts.netloc:
        return None
    return f"{parts.scheme.lower()}://{parts.netloc.lower()}"


def resolve_redirect_target(
    referrer: Optional[str],
    request_url: str,
    trusted_origins: Iterable[str],
    default: str = "/",
) -> str:
    """
    Pick where a client denied access should be sent.

    The referring page is used when it is present and trustworthy: an
    absolute http(s) URL on the request's own origin or on one of the
    trusted origins, and not the restricted page itself. Everything else
    falls back to ``default``.

    Args:
        referrer: Value of the Referer header, if any
        request_url: Full URL of the restricted resource
        trusted_origins: Extra origins (scheme://host[:port]) allowed as targets
        default: Fallback location

    Returns:
        Redirect target
    """
    if not referrer:
        return default

    referrer = referrer.strip()
    ref_parts = urlsplit(referrer)
    if ref_parts.scheme.lower() not in ("http", "https"):
        return default

    ref_origin = _origin(referrer)
    allowed = {_origin(request_url)}
    allowed.update(_origin(origin) for origin in trusted_origins)
    allowed.discard(None)
    if ref_origin not in allowed:
        return default

    restricted = urlsplit(request_url)
    if ref_origin == _origin(request_url) and ref_parts.path.rstrip(
        "/"
    ) == restricted.path.rstrip("/"):
        return default

    return referrer
