#!/usr/bin/env python
"""
Exceptions, plus a couple of helpers for reporting servers that
behave differently than expected.

Debugging is controlled through the environment (connection
parameters use the ``CALDAV_`` prefix, see davpublish.config):

DAVPUBLISH_COMMDUMP
    dump every request and response to a temporary file
DAVPUBLISH_DEBUGMODE
    PRODUCTION (the default for releases) only logs deviations,
    DEVELOPMENT (the default for dev versions) makes failed
    assertions raise, DEBUG does the same with debug logging on,
    DEBUG_PDB starts the debugger on any deviation.
"""
import logging
import os
from collections import defaultdict
from typing import Dict
from typing import Optional

from davpublish import __version__

debug_dump_communication = bool(os.environ.get("DAVPUBLISH_COMMDUMP", False))
debugmode = os.environ.get("DAVPUBLISH_DEBUGMODE") or (
    "DEVELOPMENT" if "dev" in __version__ else "PRODUCTION"
)

log = logging.getLogger("davpublish")
if debugmode.startswith("DEBUG"):
    log.setLevel(logging.DEBUG)


def _debugger(message: str) -> None:
    log.error(f"{message}, starting the debugger")
    import pdb

    pdb.set_trace()


def errmsg(r) -> str:
    """Status line and body of a DAVResponse, for exception reasons"""
    return f"{r.status} {r.reason}\n\n{r.raw}"


def weirdness(*reasons) -> None:
    """The server did something odd, but we can carry on"""
    reason = " : ".join(str(x) for x in reasons)
    log.warning(f"Unexpected server behaviour: {reason}")
    if debugmode == "DEBUG_PDB":
        _debugger(reason)


def assert_(condition: object) -> None:
    """
    An assertion about the server's behaviour.  Only logged in
    production, since a quirky server shouldn't stop the run.
    """
    if condition:
        return
    if debugmode == "PRODUCTION":
        log.error("Unexpected server behaviour", stack_info=True)
    elif debugmode == "DEBUG_PDB":
        _debugger("Unexpected server behaviour")
    else:
        raise AssertionError("Unexpected server behaviour")


class DAVError(Exception):
    """Base class of everything that went wrong talking to the server"""

    url: Optional[str] = None
    reason: str = "no reason"

    def __init__(self, url: Optional[str] = None, reason: Optional[str] = None) -> None:
        if url:
            self.url = url
        if reason:
            self.reason = reason

    def __str__(self) -> str:
        return f"{type(self).__name__} at '{self.url}', reason {self.reason}"


class AuthorizationError(DAVError):
    """
    401 or 403 from the server, after the auth negotiation.  ``reason``
    holds what the server gave as explanation.
    """


class PropfindError(DAVError):
    pass


class PutError(DAVError):
    pass


class HeadError(DAVError):
    pass


class NotFoundError(DAVError):
    pass


class PropertyNotFoundError(NotFoundError):
    """
    The server answered the PROPFIND, but the property we asked for was
    missing, or came without an href.
    """


class ResponseError(DAVError):
    """The server delivered something we could not make sense of"""


class DiscoveryError(DAVError):
    """The well-known lookup gave no usable answer"""


class TransportError(DAVError):
    """
    The request never got a response (timeout, refused connection, TLS
    trouble ...).  The exception from the requests library is kept in
    ``original``.
    """

    original: Optional[BaseException] = None

    def __init__(
        self,
        url: Optional[str] = None,
        reason: Optional[str] = None,
        original: Optional[BaseException] = None,
    ) -> None:
        super().__init__(url=url, reason=reason)
        self.original = original


class ConfigurationError(Exception):
    pass


## the error to raise when a request with this method gets a bad status
exception_by_method: Dict[str, type] = defaultdict(lambda: DAVError)
exception_by_method.update(head=HeadError, put=PutError, propfind=PropfindError)
