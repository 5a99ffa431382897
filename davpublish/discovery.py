#!/usr/bin/env python
"""
RFC 6764 - Locating Services for Calendaring and Contacts (CalDAV/CardDAV)

This module implements the Well-Known URI part of RFC 6764: the
client sends a HEAD request to ``https://domain/.well-known/caldav``
and expects the server to answer with a redirect whose ``Location``
header points to the actual CalDAV service path.

The server given by the user may be a bare hostname
(``cal.example.com``) or a URL (``http://localhost:5232/``).  Without
a scheme, https is assumed.

SECURITY CONSIDERATIONS:
    A redirect may point to a completely different host.  RFC 6764
    section 8 says clients should check that the target is within the
    queried domain.  We log a warning when it isn't, but do not refuse
    it, as the user explicitly asked to talk to this server.

See: https://datatracker.ietf.org/doc/html/rfc6764
"""
import logging
from dataclasses import dataclass
from typing import Optional
from urllib.parse import urljoin
from urllib.parse import urlparse

from davpublish.lib.error import DiscoveryError
from davpublish.lib.error import TransportError

log = logging.getLogger(__name__)

SERVICE_TYPES = ("caldav", "carddav")


@dataclass(frozen=True)
class ServerEndpoint:
    """The server base URL and the CalDAV path found through the well-known URI"""

    base_url: str
    caldav_path: str
    service_type: str = "caldav"

    @property
    def lookup_url(self) -> str:
        return f"{self.base_url}/.well-known/{self.service_type}"

    @property
    def url(self) -> str:
        """The CalDAV root as an absolute URL.  Absolute locations are kept as they are."""
        return urljoin(self.lookup_url, self.caldav_path)

    def __str__(self) -> str:
        return f"ServerEndpoint(url={self.url}, caldav_path={self.caldav_path})"


def _is_subdomain_or_same(discovered_domain: str, original_domain: str) -> bool:
    """
    Check if discovered domain is the same as or a subdomain of the original domain.

    Examples:
        >>> _is_subdomain_or_same('calendar.example.com', 'example.com')
        True
        >>> _is_subdomain_or_same('example.com', 'example.com')
        True
        >>> _is_subdomain_or_same('evil.com', 'example.com')
        False
        >>> _is_subdomain_or_same('exampleXcom.evil.com', 'example.com')
        False
    """
    discovered = discovered_domain.lower().strip(".")
    original = original_domain.lower().strip(".")

    if discovered == original:
        return True

    # Must end with .original_domain to be a valid subdomain
    return discovered.endswith("." + original)


def normalize_server_url(server: str) -> str:
    """
    Reduce whatever the user gave us to ``scheme://host[:port]``.

    Examples:
        >>> normalize_server_url('cal.example.com')
        'https://cal.example.com'
        >>> normalize_server_url('cal.example.com/')
        'https://cal.example.com'
        >>> normalize_server_url('http://localhost:5232/')
        'http://localhost:5232'
        >>> normalize_server_url('https://cal.example.com/dav/')
        'https://cal.example.com'
    """
    if not server or not server.strip():
        raise DiscoveryError(reason="no server given")
    base_url = server.strip()
    if not base_url.startswith("http://") and not base_url.startswith("https://"):
        base_url = "https://" + base_url
    try:
        parsed = urlparse(base_url)
        hostname = parsed.hostname
    except ValueError as exc:
        raise DiscoveryError(url=server, reason=f"not a valid URL: {exc}") from exc
    if not hostname:
        raise DiscoveryError(url=server, reason="could not find a hostname")
    netloc = parsed.netloc.rsplit("@", 1)[-1]
    return f"{parsed.scheme}://{netloc}"


def well_known_url(server: str, service_type: str = "caldav") -> str:
    """
    The URL to look up for the given server, like
    ``https://cal.example.com/.well-known/caldav``
    """
    if service_type not in SERVICE_TYPES:
        raise DiscoveryError(
            reason=f"Invalid service_type: {service_type}. Must be 'caldav' or 'carddav'"
        )
    return f"{normalize_server_url(server)}/.well-known/{service_type}"


def find_well_known_path(
    client, server: str, service_type: str = "caldav"
) -> Optional[str]:
    """
    Send a HEAD request to the well-known URI of the server, without
    following redirects.

    Args:
        client: a DAVClient
        server: hostname or URL of the server
        service_type: Either 'caldav' or 'carddav'

    Returns:
        The Location header, verbatim (it may be relative or absolute),
        if the server answered with a success or redirect status and a
        non-empty Location header.  None otherwise.

    Raises:
        DiscoveryError: if the request could not be sent at all
    """
    url = well_known_url(server, service_type)
    log.info(f"looking for {url}")

    try:
        response = client.head(url)
    except TransportError as e:
        raise DiscoveryError(url=url, reason=f"Well-known URI lookup failed: {e.reason}") from e

    log.debug(f"well-known URI answered {response.status} {response.reason}")
    if 200 <= response.status < 400:
        location = response.location
        if location:
            log.debug(f"Well-known URI redirected to: {location}")
            return location
    return None


def discover_endpoint(
    client, server: str, service_type: str = "caldav"
) -> ServerEndpoint:
    """
    Find the CalDAV root of a server through the well-known URI.

    Raises:
        DiscoveryError: if the server does not point us anywhere
    """
    path = find_well_known_path(client, server, service_type)
    if path is None:
        raise DiscoveryError(
            url=well_known_url(server, service_type),
            reason="could not determine the well-known path, no Location header delivered",
        )

    endpoint = ServerEndpoint(
        base_url=normalize_server_url(server),
        caldav_path=path,
        service_type=service_type,
    )

    ## RFC 6764 Section 8 Security: the redirect target should be in the same domain
    original_host = urlparse(endpoint.base_url).hostname
    try:
        redirect_host = urlparse(endpoint.url).hostname or original_host
    except ValueError as exc:
        raise DiscoveryError(
            url=endpoint.lookup_url,
            reason=f"the well-known Location {path!r} is not a valid URL: {exc}",
        ) from exc
    if not _is_subdomain_or_same(redirect_host, original_host):
        log.warning(
            f"RFC 6764 Security: well-known redirect points to a different domain. "
            f"Queried domain: {original_host}, Redirect target: {redirect_host}."
        )

    log.info(f"Discovered {service_type} service via well-known URI: {endpoint.url}")
    return endpoint
