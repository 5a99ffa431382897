#!/usr/bin/env python
from typing import ClassVar

from .base import BaseElement
from davpublish.lib.namespace import ns


# Properties
class CalendarHomeSet(BaseElement):
    tag: ClassVar[str] = ns("C", "calendar-home-set")


# Resource types
class Calendar(BaseElement):
    tag: ClassVar[str] = ns("C", "calendar")
