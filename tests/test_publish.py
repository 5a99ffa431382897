#!/usr/bin/env python
"""
The whole discovery and upload against an emulated server.  Every
stage is made to fail once, to check where the run stops and which
exit status it reports.
"""
import datetime
import re
import uuid
from unittest import mock

import icalendar
import pytest
import requests

from .fixture_helpers import collection
from .fixture_helpers import FakeCalDAVServer
from .fixture_helpers import mocked_http_response
from .fixture_helpers import multistatus
from .fixture_helpers import prop_response
from .fixture_helpers import standard_routes
from .fixture_helpers import XML_HEADERS
from davpublish import publish_sample_event
from davpublish.davclient import DAVClient
from davpublish.lib import error
from davpublish.publish import ExitStatus
from davpublish.publish import PublishResult
from davpublish.publish import Stage

CALENDAR = "https://cal.example.com/dav/calendars/alice/work/"
HOME = "https://cal.example.com/dav/calendars/alice/"


def run(server, **kwargs):
    with mock.patch(
        "davpublish.davclient.requests.Session.request",
        new=mock.MagicMock(side_effect=server),
    ):
        with DAVClient(url="https://cal.example.com", username="alice", password="pw") as client:
            return publish_sample_event(client, **kwargs)


def test_publish():
    server = FakeCalDAVServer(standard_routes(), put_prefixes=[CALENDAR])
    now = datetime.datetime(2024, 6, 10, 8, 0, tzinfo=datetime.timezone.utc)
    result = run(server, summary="lunch", now=now)

    assert result.ok
    assert result.stage is Stage.DONE
    assert result.error is None
    assert result.exit_status == ExitStatus.OK
    assert result.endpoint.caldav_path == "/dav/"
    assert result.principal_url == "https://cal.example.com/dav/principals/alice/"
    assert result.calendar_home_url == HOME
    assert [str(c.url) for c in result.calendars] == [CALENDAR]

    assert [r["method"] for r in server.requests] == [
        "HEAD",
        "PROPFIND",
        "PROPFIND",
        "PROPFIND",
        "PUT",
    ]
    assert [r["headers"].get("Depth") for r in server.requests_by_method("PROPFIND")] == [
        "0",
        "0",
        "1",
    ]

    (put,) = server.requests_by_method("PUT")
    match = re.fullmatch(re.escape(CALENDAR) + r"([0-9a-f-]{36})\.ics", put["url"])
    assert match
    assert str(result.event_url) == put["url"]
    assert put["headers"]["Content-Type"] == "text/calendar; charset=utf-8"
    assert "If-None-Match" not in put["headers"]
    assert "If-Match" not in put["headers"]

    cal = icalendar.Calendar.from_ical(put["data"])
    (vevent,) = cal.walk("VEVENT")
    assert str(vevent["uid"]) == match.group(1)
    assert str(uuid.UUID(match.group(1))) == match.group(1)
    assert str(vevent["summary"]) == "lunch"
    assert vevent.decoded("dtstart").date() == datetime.date(2024, 6, 11)


def test_every_request_is_bound_by_the_timeout():
    server = FakeCalDAVServer(standard_routes(), put_prefixes=[CALENDAR])
    run(server)
    assert {r["timeout"] for r in server.requests} == {10}
    assert {r["allow_redirects"] for r in server.requests} == {False}


def test_publish_twice_creates_two_resources():
    server = FakeCalDAVServer(standard_routes(), put_prefixes=[CALENDAR])
    first = run(server)
    second = run(server)
    assert first.event_url != second.event_url


def test_first_calendar_is_used():
    calendars = multistatus(
        collection("/dav/calendars/alice/", "d:collection"),
        collection("/dav/calendars/alice/b/", "d:collection", "cal:calendar"),
        collection("/dav/calendars/alice/a/", "d:collection", "cal:calendar"),
    )
    server = FakeCalDAVServer(standard_routes(calendars), put_prefixes=[HOME])
    result = run(server)
    assert result.ok
    assert [str(c.url) for c in result.calendars] == [HOME + "b/", HOME + "a/"]
    assert str(result.event_url).startswith(HOME + "b/")


def test_well_known_missing():
    routes = standard_routes()
    routes[("HEAD", "https://cal.example.com/.well-known/caldav")] = mocked_http_response(404)
    server = FakeCalDAVServer(routes)
    result = run(server)
    assert result.stage is Stage.WELL_KNOWN
    assert isinstance(result.error, error.DiscoveryError)
    assert result.exit_status == ExitStatus.WELL_KNOWN == 3
    assert len(server.requests) == 1


def test_well_known_unreachable():
    routes = standard_routes()
    routes[("HEAD", "https://cal.example.com/.well-known/caldav")] = (
        requests.exceptions.ConnectionError("refused")
    )
    result = run(FakeCalDAVServer(routes))
    assert result.exit_status == ExitStatus.WELL_KNOWN


def test_principal_missing():
    routes = standard_routes()
    routes[("PROPFIND", "https://cal.example.com/dav/")] = mocked_http_response(
        207,
        multistatus(
            prop_response(
                "/dav/", "<d:current-user-principal/>", "HTTP/1.1 404 Not Found"
            )
        ),
        XML_HEADERS,
    )
    server = FakeCalDAVServer(routes)
    result = run(server)
    assert result.stage is Stage.PRINCIPAL
    assert isinstance(result.error, error.PropertyNotFoundError)
    assert result.exit_status == 4
    assert result.endpoint is not None
    assert result.principal_url is None
    assert len(server.requests) == 2


def test_calendar_home_missing():
    routes = standard_routes()
    routes[
        ("PROPFIND", "https://cal.example.com/dav/principals/alice/")
    ] = mocked_http_response(403)
    result = run(FakeCalDAVServer(routes))
    assert result.stage is Stage.CALENDAR_HOME
    assert isinstance(result.error, error.AuthorizationError)
    assert result.exit_status == 5
    assert result.principal_url is not None
    assert result.calendar_home_url is None


def test_enumeration_fails():
    routes = standard_routes()
    routes[("PROPFIND", HOME)] = mocked_http_response(
        500, "oops", {"Content-Type": "text/plain"}
    )
    result = run(FakeCalDAVServer(routes))
    assert result.stage is Stage.CALENDARS
    assert isinstance(result.error, error.PropfindError)
    assert result.exit_status == 6


def test_no_calendars():
    calendars = multistatus(
        collection("/dav/calendars/alice/", "d:collection"),
        collection("/dav/calendars/alice/files/", "d:collection"),
    )
    server = FakeCalDAVServer(standard_routes(calendars), put_prefixes=[HOME])
    result = run(server)
    assert result.stage is Stage.CALENDARS
    assert result.error is None
    assert not result.ok
    assert result.calendars == []
    assert result.exit_status == ExitStatus.NO_CALENDARS == 7
    assert server.requests_by_method("PUT") == []


@pytest.mark.parametrize("status", [200, 204, 409, 507])
def test_upload_rejected(status):
    server = FakeCalDAVServer(standard_routes(), put_prefixes=[CALENDAR], put_status=status)
    result = run(server)
    assert result.stage is Stage.PUBLISH
    assert isinstance(result.error, error.PutError)
    assert result.exit_status == 8
    assert result.event_url is None
    ## no retry
    assert len(server.requests_by_method("PUT")) == 1


def test_upload_times_out():
    server = FakeCalDAVServer(standard_routes())
    original = server.__call__

    def put_times_out(method, url, **kwargs):
        if method == "PUT":
            raise requests.exceptions.ReadTimeout("slow")
        return original(method, url, **kwargs)

    result = run(put_times_out)
    assert result.stage is Stage.PUBLISH
    assert isinstance(result.error, error.TransportError)
    assert result.exit_status == ExitStatus.PUBLISH


def test_server_defaults_to_client_url():
    server = FakeCalDAVServer(standard_routes(), put_prefixes=[CALENDAR])
    with mock.patch(
        "davpublish.davclient.requests.Session.request",
        new=mock.MagicMock(side_effect=server),
    ):
        client = DAVClient(url="https://alice:pw@cal.example.com/whatever/")
        result = publish_sample_event(client)
    assert result.ok
    assert server.requests[0]["url"] == "https://cal.example.com/.well-known/caldav"


def test_result_defaults():
    result = PublishResult(stage=Stage.WELL_KNOWN)
    assert not result.ok
    assert result.calendars == []
    assert result.exit_status == ExitStatus.WELL_KNOWN


def test_well_known_location_not_a_url():
    routes = standard_routes()
    routes[("HEAD", "https://cal.example.com/.well-known/caldav")] = mocked_http_response(
        301, headers={"Location": "http://[bad/"}
    )
    server = FakeCalDAVServer(routes)
    result = run(server)
    assert result.stage is Stage.WELL_KNOWN
    assert isinstance(result.error, error.DiscoveryError)
    assert result.exit_status == ExitStatus.WELL_KNOWN == 3
    assert len(server.requests) == 1


def test_calendar_href_not_a_url():
    calendars = multistatus(
        collection("/dav/calendars/alice/", "d:collection"),
        collection("http://[bad/", "d:collection", "cal:calendar"),
    )
    result = run(FakeCalDAVServer(standard_routes(calendars)))
    assert result.stage is Stage.CALENDARS
    assert isinstance(result.error, error.ResponseError)
    assert result.exit_status == ExitStatus.CALENDARS == 6
