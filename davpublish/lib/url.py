#!/usr/bin/env python
import sys
from typing import Any
from typing import Optional
from typing import Union
from urllib.parse import ParseResult
from urllib.parse import quote
from urllib.parse import SplitResult
from urllib.parse import unquote
from urllib.parse import urljoin
from urllib.parse import urlparse
from urllib.parse import urlunparse

if sys.version_info < (3, 11):
    from typing_extensions import Self
else:
    from typing import Self

DEFAULT_PORTS = {"https": 443, "http": 80}


class URL:
    """
    Wraps an URL.  Everything in the library that takes an URL accepts
    a URL object, a string or an urllib ParseResult.

    During discovery we meet three kinds of addresses:

    1) a fully qualified URL, like the CALDAV_URL given by the user
    or an absolute href in a multistatus response,

    2) an absolute path, i.e. "/dav/principals/someuser/" as found in
    most hrefs and in the Location header of the well-known redirect,

    3) a relative path, i.e. "calendar/", relative to the URL the
    request was sent to.

    ``resolve`` turns the latter two into the first one.

    Attributes of the parsed URL (scheme, hostname, port, path, ...)
    can be read directly from the object.
    """

    def __init__(self, url: Union[str, bytes, ParseResult, SplitResult]) -> None:
        if isinstance(url, bytes):
            url = url.decode("utf-8")
        if isinstance(url, (ParseResult, SplitResult)):
            self._text = url.geturl()
        else:
            self._text = url
        self._parsed: Optional[ParseResult] = None

    @classmethod
    def objectify(cls, url: Union[Self, str, ParseResult, SplitResult, None]) -> Optional["URL"]:
        if url is None or isinstance(url, URL):
            return url
        return cls(url)

    @property
    def parsed(self) -> ParseResult:
        if self._parsed is None:
            self._parsed = urlparse(self._text)
        return self._parsed

    def __getattr__(self, attr: str) -> Any:
        ## only called for attributes not found the normal way
        if attr.startswith("_"):
            raise AttributeError(attr)
        return getattr(self.parsed, attr)

    def __bool__(self) -> bool:
        return bool(self._text)

    def __str__(self) -> str:
        return self._text

    def __repr__(self) -> str:
        return "URL(%s)" % self._text

    def __eq__(self, other: object) -> bool:
        if str(self) == str(other):
            return True
        ## http://h/a%20b/ and http://h:80/a b/ are the same resource
        if isinstance(other, (str, URL)):
            return str(self.canonical()) == str(URL.objectify(other).canonical())
        return False

    def __hash__(self) -> int:
        return hash(str(self))

    def is_auth(self) -> bool:
        return self.username is not None

    def unauth(self) -> "URL":
        """The same URL without user name and password"""
        if not self.is_auth():
            return self
        ## keeps the brackets of IPv6 hosts, unlike hostname
        netloc = self.netloc.rsplit("@", 1)[-1]
        return URL(self.parsed._replace(netloc=netloc))

    def canonical(self) -> "URL":
        """
        Comparable form: no credentials, explicit port, no double
        slashes and a consistently quoted path.
        """
        parts = self.unauth().parsed
        scheme = parts.scheme or "https"
        netloc = parts.netloc
        if netloc and parts.port is None and scheme in DEFAULT_PORTS:
            netloc = f"{netloc}:{DEFAULT_PORTS[scheme]}"
        path = quote(unquote(parts.path.replace("//", "/")))
        return URL(urlunparse(parts._replace(scheme=scheme, netloc=netloc, path=path)))

    def resolve(self, href: Any) -> "URL":
        """
        Resolve an href (as delivered by the server, absolute or
        relative) against this URL, like a browser would do.  Hrefs
        that are already fully qualified are returned untouched.
        """
        href = str(href).strip()
        if not href:
            raise ValueError("cannot resolve an empty href against %s" % self)
        return URL(urljoin(str(self.unauth()), href))

    def add_path_segment(self, segment: str) -> "URL":
        """
        Append one (quoted) path segment, keeping exactly one slash
        between the collection path and the new segment
        """
        base = self.unauth().parsed
        path = base.path if base.path.endswith("/") else base.path + "/"
        return URL(
            base._replace(path=path + quote(segment, safe=""), params="", query="", fragment="")
        )
