#!/usr/bin/env python
import logging

__version__ = "0.3.0"

from .davclient import DAVClient
from .discovery import discover_endpoint
from .publish import publish_sample_event

# Silence notification of no default logging handler
log = logging.getLogger("davpublish")


class NullHandler(logging.Handler):
    def emit(self, record) -> None:
        pass


log.addHandler(NullHandler())

__all__ = ["__version__", "DAVClient", "discover_endpoint", "publish_sample_event"]
