"""
Authentication helpers for the DAVClient.

The actual Basic and Digest protocols are implemented by the requests
library; this module only decides which one to use, based on what the
server announces in the WWW-Authenticate header.
"""

from __future__ import annotations

from requests.auth import AuthBase
from requests.auth import HTTPBasicAuth
from requests.auth import HTTPDigestAuth

SUPPORTED_AUTH_TYPES = ("basic", "digest", "bearer")


class HTTPBearerAuth(AuthBase):
    def __init__(self, password: str) -> None:
        self.password = password

    def __eq__(self, other: object) -> bool:
        return self.password == getattr(other, "password", None)

    def __ne__(self, other: object) -> bool:
        return not self == other

    def __call__(self, r):
        r.headers["Authorization"] = f"Bearer {self.password}"
        return r


def extract_auth_types(header: str) -> set[str]:
    """
    Extract authentication types from WWW-Authenticate header.

    Example:
        >>> sorted(extract_auth_types('Basic realm="test", Digest realm="test"'))
        ['basic', 'digest']

    Reference:
        https://developer.mozilla.org/en-US/docs/Web/HTTP/Headers/WWW-Authenticate#syntax
    """
    return {h.split()[0] for h in header.lower().split(",") if h.strip()}


def select_auth_type(
    auth_types: set[str] | list[str],
    has_username: bool,
    has_password: bool,
    prefer_digest: bool = True,
) -> str | None:
    """
    Select the best authentication type from available options.

    Selection logic:
        - If username is set: prefer Digest or Basic
        - If only password is set: use Bearer token auth
        - Otherwise: return None
    """
    auth_types_set = set(auth_types)

    if has_username:
        if prefer_digest and "digest" in auth_types_set:
            return "digest"
        if "basic" in auth_types_set:
            return "basic"
    elif has_password:
        # Password without username suggests bearer token
        if "bearer" in auth_types_set:
            return "bearer"

    return None


def build_auth(auth_type: str, username: str | None, password: str | None) -> AuthBase:
    if auth_type == "digest":
        return HTTPDigestAuth(username, password)
    if auth_type == "basic":
        return HTTPBasicAuth(username, password)
    if auth_type == "bearer":
        return HTTPBearerAuth(password)
    raise ValueError(
        f"unsupported auth type {auth_type!r}, expected one of {SUPPORTED_AUTH_TYPES}"
    )
