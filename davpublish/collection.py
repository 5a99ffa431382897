#!/usr/bin/env python
"""
Principal, CalendarSet (the calendar home) and Calendar.

Discovery walks down this hierarchy:

  CalDAV root --current-user-principal--> Principal
  Principal --calendar-home-set--> CalendarSet
  CalendarSet --propfind depth 1, resourcetype--> [Calendar, ...]
"""
import logging
from typing import Any
from typing import List
from typing import Optional
from typing import TYPE_CHECKING
from typing import Union

from .calendarobjectresource import Event
from .davobject import DAVObject
from .elements import cdav
from .elements import dav
from .lib.url import URL
from .lib.vcal import create_ical
from .lib.vcal import create_sample_event
from .lib.vcal import DEFAULT_SUMMARY

if TYPE_CHECKING:
    from .davclient import DAVClient

log = logging.getLogger("davpublish")


class CalendarSet(DAVObject):
    """
    A CalendarSet is a set of calendars, typically the calendar home
    of a principal.
    """

    def calendars(self) -> List["Calendar"]:
        """
        List all calendar collections in this set, in the order the
        server listed them.  An empty list is a valid answer.
        """
        cals = []

        data = self.children(cdav.Calendar.tag)
        for c_url, c_type, c_name in data:
            cals.append(
                Calendar(
                    self.client,
                    url=c_url,
                    parent=self,
                    name=c_name,
                    resource_types=c_type,
                )
            )

        return cals


class Principal(DAVObject):
    """
    The authenticated user, as named by current-user-principal.  Its
    job here is to lead to the calendar-home-set.
    """

    def __init__(
        self,
        client: Optional["DAVClient"] = None,
        url: Union[str, URL, None] = None,
        root_url: Union[str, URL, None] = None,
        calendar_home_set: Union[str, URL, None] = None,
    ) -> None:
        """
        Without ``url``, the principal is looked up with a PROPFIND
        for current-user-principal on ``root_url`` (default: the
        client url).  ``calendar_home_set`` skips the second lookup
        when it is already known.

        Raises:
          PropertyNotFoundError: the server didn't tell us who we are
        """
        self._calendar_home_set = None
        super(Principal, self).__init__(client=client, url=url)
        if url is None:
            if self.client is None:
                raise ValueError("Unexpected value None for self.client")

            ## ask the root who we are, then become that
            self.url = URL.objectify(root_url or self.client.url)
            self.url = self.get_href_property(dav.CurrentUserPrincipal())
            log.info(f"Found current-user-principal: {self.url}")
        if calendar_home_set is not None:
            self.calendar_home_set = calendar_home_set

    @property
    def calendar_home_set(self) -> CalendarSet:
        if not self._calendar_home_set:
            calendar_home_set_url = self.get_href_property(cdav.CalendarHomeSet())
            log.info(f"Found calendar-home-set: {calendar_home_set_url}")
            self.calendar_home_set = calendar_home_set_url
        return self._calendar_home_set

    @calendar_home_set.setter
    def calendar_home_set(self, url: Union[CalendarSet, str, URL]) -> None:
        if isinstance(url, CalendarSet):
            self._calendar_home_set = url
            return
        self._calendar_home_set = CalendarSet(self.client, self.url.resolve(url))

    def calendars(self) -> List["Calendar"]:
        return self.calendar_home_set.calendars()


class Calendar(DAVObject):
    """
    A calendar collection, as found in the calendar home.
    """

    def __init__(
        self,
        client: Optional["DAVClient"] = None,
        url: Union[str, URL, None] = None,
        parent: Optional[DAVObject] = None,
        name: Optional[str] = None,
        resource_types: Optional[List[str]] = None,
        **kwargs: Any,
    ) -> None:
        super(Calendar, self).__init__(
            client=client, url=url, parent=parent, name=name, **kwargs
        )
        self.resource_types = list(resource_types or [])

    def save_event(self, ical: str, uid: Optional[str] = None) -> Event:
        """
        Upload some iCalendar data as a new resource in this calendar.

        Returns:
          the saved Event

        Raises:
          PutError: the server did not answer 201 Created
        """
        e = Event(self.client, data=ical, parent=self, id=uid)
        return e.save()

    def add_sample_event(self, summary: str = DEFAULT_SUMMARY, now=None) -> Event:
        """
        Create the sample appointment (tomorrow 13:00-14:00,
        Europe/Berlin) and save it in this calendar.
        """
        event = create_sample_event(now=now, summary=summary)
        return self.save_event(create_ical(event), uid=event.uid)
