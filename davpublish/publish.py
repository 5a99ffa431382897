#!/usr/bin/env python
"""
The discovery-and-publish run: well-known lookup, current user
principal, calendar home, calendar list and finally the upload of the
sample event into the first calendar found.

Every stage depends on the result of the one before, so the run stops
at the first stage that fails.  The ``PublishResult`` tells how far we
got, what was found on the way and why it stopped.
"""
import enum
import logging
from dataclasses import dataclass
from dataclasses import field
from typing import List
from typing import Optional

from .collection import Calendar
from .collection import Principal
from .davclient import DAVClient
from .discovery import discover_endpoint
from .discovery import ServerEndpoint
from .lib import error
from .lib.url import URL
from .lib.vcal import DEFAULT_SUMMARY

log = logging.getLogger("davpublish")


class Stage(enum.Enum):
    WELL_KNOWN = "well-known"
    PRINCIPAL = "current-user-principal"
    CALENDAR_HOME = "calendar-home-set"
    CALENDARS = "calendars"
    PUBLISH = "publish"
    DONE = "done"


class ExitStatus(enum.IntEnum):
    OK = 0
    CONFIGURATION = 1
    WELL_KNOWN = 3
    PRINCIPAL = 4
    CALENDAR_HOME = 5
    CALENDARS = 6
    NO_CALENDARS = 7
    PUBLISH = 8


_exit_status_by_stage = {
    Stage.WELL_KNOWN: ExitStatus.WELL_KNOWN,
    Stage.PRINCIPAL: ExitStatus.PRINCIPAL,
    Stage.CALENDAR_HOME: ExitStatus.CALENDAR_HOME,
    Stage.CALENDARS: ExitStatus.CALENDARS,
    Stage.PUBLISH: ExitStatus.PUBLISH,
    Stage.DONE: ExitStatus.OK,
}


@dataclass
class PublishResult:
    stage: Stage
    error: Optional[Exception] = None
    endpoint: Optional[ServerEndpoint] = None
    principal_url: Optional[URL] = None
    calendar_home_url: Optional[URL] = None
    calendars: List[Calendar] = field(default_factory=list)
    event_url: Optional[URL] = None

    @property
    def ok(self) -> bool:
        return self.stage is Stage.DONE

    @property
    def exit_status(self) -> ExitStatus:
        if self.stage is Stage.CALENDARS and self.error is None:
            return ExitStatus.NO_CALENDARS
        return _exit_status_by_stage[self.stage]


def publish_sample_event(
    client: DAVClient,
    server: Optional[str] = None,
    summary: str = DEFAULT_SUMMARY,
    now=None,
) -> PublishResult:
    """
    Run the whole discovery and upload the sample event to the first
    calendar found.

    Args:
      client: the DAVClient to use for every request
      server: hostname or URL, defaults to the client url
      summary: SUMMARY of the sample event
      now: creation time of the event, defaults to the current time

    Returns:
      PublishResult.  DAV errors (including timeouts and connection
      problems) are caught and stored in the result; the stage tells
      where it stopped.
    """
    if server is None:
        server = str(client.url)
    result = PublishResult(stage=Stage.WELL_KNOWN)

    try:
        result.endpoint = discover_endpoint(client, server)
        log.info(f"wellknown_path: {result.endpoint.caldav_path}")

        result.stage = Stage.PRINCIPAL
        principal = Principal(client, root_url=result.endpoint.url)
        result.principal_url = principal.url

        result.stage = Stage.CALENDAR_HOME
        calendar_home = principal.calendar_home_set
        result.calendar_home_url = calendar_home.url

        result.stage = Stage.CALENDARS
        result.calendars = calendar_home.calendars()
        for calendar in result.calendars:
            log.info(f"{calendar.url}: {calendar.resource_types}")
        if not result.calendars:
            log.warning(f"no calendars found in {calendar_home.url}")
            return result

        result.stage = Stage.PUBLISH
        event = result.calendars[0].add_sample_event(summary=summary, now=now)
        result.event_url = event.url
        log.info(f"calendar entry successfully created: {event.url}")

        result.stage = Stage.DONE
    except error.DAVError as e:
        log.error(f"{result.stage.value} failed: {e}")
        result.error = e
    return result
