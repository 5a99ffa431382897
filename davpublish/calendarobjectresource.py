#!/usr/bin/env python
"""
An Event is a calendar object resource; one .ics file inside a
calendar collection.  We only ever create new ones.
"""
import logging
import uuid
from typing import Optional
from typing import TYPE_CHECKING

import icalendar

from .davobject import DAVObject
from .lib import error
from .lib.error import errmsg
from .lib.python_utilities import to_normal_str
from .lib.python_utilities import to_wire

if TYPE_CHECKING:
    from .collection import Calendar

log = logging.getLogger("davpublish")

ICALENDAR_CONTENT_TYPE = "text/calendar; charset=utf-8"


class Event(DAVObject):
    """
    One VEVENT (wrapped in a VCALENDAR) stored as a resource in a
    calendar.  The resource name is the UID with ``.ics`` appended.
    """

    _data: Optional[str] = None
    id: Optional[str] = None

    def __init__(
        self,
        client=None,
        url=None,
        data=None,
        parent: Optional["Calendar"] = None,
        id: Optional[str] = None,
    ) -> None:
        super(Event, self).__init__(client=client, url=url, parent=parent)
        self.data = data
        if id is None and data is not None:
            id = self._uid_from_data()
        self.id = id

    @property
    def data(self) -> Optional[str]:
        return self._data

    @data.setter
    def data(self, value) -> None:
        self._data = to_normal_str(value)

    @property
    def wire_data(self) -> Optional[bytes]:
        return to_wire(self._data)

    @property
    def icalendar_instance(self) -> icalendar.Calendar:
        return icalendar.Calendar.from_ical(self.wire_data)

    @property
    def icalendar_component(self) -> icalendar.Event:
        for component in self.icalendar_instance.walk("VEVENT"):
            return component
        raise error.ResponseError(url=str(self.url), reason="no VEVENT in data")

    def _uid_from_data(self) -> Optional[str]:
        try:
            uid = self.icalendar_component.get("uid")
        except (ValueError, error.ResponseError):
            log.debug("could not find a UID in the event data", exc_info=True)
            return None
        return str(uid) if uid else None

    def save(self) -> "Event":
        """
        PUT the event into the parent calendar.  There are no
        If-Match/If-None-Match headers; the resource name is fresh, so
        a new resource is always created.  The server must answer 201.
        """
        if self.client is None:
            raise ValueError("Unexpected value None for self.client")
        if self._data is None:
            raise ValueError("Cannot save an event without data")

        if self.url is None:
            if self.parent is None or self.parent.url is None:
                raise ValueError("Need either an url or a parent calendar")
            if self.id is None:
                self.id = str(uuid.uuid4())
            self.url = self.parent.url.add_path_segment(self.id + ".ics")

        r = self.client.put(
            str(self.url), self.wire_data, {"Content-Type": ICALENDAR_CONTENT_TYPE}
        )
        log.info(f"response when trying to upload the event: {r.status} {r.reason}")
        if r.status != 201:
            raise error.PutError(url=str(self.url), reason=errmsg(r))
        return self
