#!/usr/bin/env python
"""
The sample event we publish.

The calendar carries its own VTIMEZONE for Europe/Berlin with the
EU daylight saving rules (last Sunday of March / last Sunday of
October), so that the event can be understood by servers and clients
that don't have a timezone database.
"""
import datetime
import uuid
from dataclasses import dataclass
from dataclasses import field
from typing import Optional
from zoneinfo import ZoneInfo

import icalendar

from davpublish import __version__

DEFAULT_TZID = "Europe/Berlin"
DEFAULT_SUMMARY = "test appointment"
PRODID = f"-//davpublish//davpublish {__version__}//EN"

## start and end of the sample event, local time
EVENT_START = datetime.time(13, 0)
EVENT_DURATION = datetime.timedelta(hours=1)


@dataclass
class SampleEvent:
    start: datetime.datetime
    end: datetime.datetime
    created: datetime.datetime
    summary: str = DEFAULT_SUMMARY
    uid: str = field(default_factory=lambda: str(uuid.uuid4()))

    @property
    def tzid(self) -> str:
        return self.start.tzinfo.key


def create_sample_event(
    now: Optional[datetime.datetime] = None,
    tzid: str = DEFAULT_TZID,
    summary: str = DEFAULT_SUMMARY,
) -> SampleEvent:
    """
    An event tomorrow (seen from the timezone given), 13:00 to 14:00
    local time, created now.
    """
    zone = ZoneInfo(tzid)
    if now is None:
        now = datetime.datetime.now(tz=datetime.timezone.utc)
    elif not now.tzinfo:
        ## We need to have a timezone!  Assume UTC.
        now = now.replace(tzinfo=datetime.timezone.utc)
    created = now.astimezone(datetime.timezone.utc).replace(microsecond=0)

    tomorrow = now.astimezone(zone).date() + datetime.timedelta(days=1)
    start = datetime.datetime.combine(tomorrow, EVENT_START, tzinfo=zone)
    return SampleEvent(
        start=start,
        end=start + EVENT_DURATION,
        created=created,
        summary=summary,
    )


def berlin_timezone() -> icalendar.Timezone:
    """VTIMEZONE for Europe/Berlin, CET/CEST"""
    tz = icalendar.Timezone()
    tz.add("tzid", DEFAULT_TZID)

    daylight = icalendar.TimezoneDaylight()
    daylight.add("tzoffsetfrom", datetime.timedelta(hours=1))
    daylight.add("tzoffsetto", datetime.timedelta(hours=2))
    daylight.add("tzname", "CEST")
    daylight.add("dtstart", datetime.datetime(1970, 3, 29, 2, 0, 0))
    daylight.add("rrule", {"FREQ": "YEARLY", "BYMONTH": 3, "BYDAY": "-1SU"})
    tz.add_component(daylight)

    standard = icalendar.TimezoneStandard()
    standard.add("tzoffsetfrom", datetime.timedelta(hours=2))
    standard.add("tzoffsetto", datetime.timedelta(hours=1))
    standard.add("tzname", "CET")
    standard.add("dtstart", datetime.datetime(1970, 10, 25, 3, 0, 0))
    standard.add("rrule", {"FREQ": "YEARLY", "BYMONTH": 10, "BYDAY": "-1SU"})
    tz.add_component(standard)

    return tz


def create_calendar(event: SampleEvent) -> icalendar.Calendar:
    if event.tzid != DEFAULT_TZID:
        raise ValueError(
            f"only {DEFAULT_TZID} has a VTIMEZONE definition, got {event.tzid}"
        )
    cal = icalendar.Calendar()
    cal.add("prodid", PRODID)
    cal.add("version", "2.0")
    cal.add("calscale", "GREGORIAN")
    cal.add_component(berlin_timezone())

    vevent = icalendar.Event()
    ## CREATED, DTSTAMP and LAST-MODIFIED are UTC, RFC 5545 wants the Z suffix on those
    vevent.add("created", event.created)
    vevent.add("dtstamp", event.created)
    vevent.add("last-modified", event.created)
    vevent.add("sequence", 2)
    vevent.add("uid", event.uid)
    vevent.add("dtstart", event.start)
    vevent.add("dtend", event.end)
    vevent.add("status", "CONFIRMED")
    vevent.add("summary", event.summary)
    cal.add_component(vevent)
    return cal


def create_ical(event: SampleEvent) -> str:
    """The iCalendar text of the event, CRLF line endings"""
    return create_calendar(event).to_ical().decode("utf-8")
