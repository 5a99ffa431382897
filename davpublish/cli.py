#!/usr/bin/env python
"""
Command line entry point: discover the calendars of the configured
account and publish the sample appointment into the first one.

Connection parameters come from the command line, the CALDAV_*
environment variables or a config file (see davpublish.config).  The
exit status tells which stage failed, see davpublish.publish.ExitStatus.
"""
import argparse
import logging
import sys
from typing import List
from typing import Optional

from davpublish import __version__
from davpublish.config import get_connection_config
from davpublish.davclient import DAVClient
from davpublish.lib.error import ConfigurationError
from davpublish.lib.vcal import DEFAULT_SUMMARY
from davpublish.publish import ExitStatus
from davpublish.publish import publish_sample_event
from davpublish.publish import PublishResult

log = logging.getLogger("davpublish")


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="davpublish",
        description="Discover a CalDAV account through its well-known URI and publish a test appointment",
    )
    parser.add_argument(
        "--url", help="server hostname or URL (default: $CALDAV_URL)"
    )
    parser.add_argument("--username", help="(default: $CALDAV_USERNAME)")
    parser.add_argument("--password", help="(default: $CALDAV_PASSWORD)")
    parser.add_argument("--config-file", help="json or yaml config file")
    parser.add_argument("--config-section", help="section in the config file")
    parser.add_argument(
        "--timeout", type=float, help="seconds to wait for each request (default: 10)"
    )
    parser.add_argument(
        "--no-verify-ssl",
        action="store_true",
        help="do not verify the server certificate",
    )
    parser.add_argument(
        "--ssl-cert",
        help='client certificate, a file or "cert.pem,key.pem" (default: $CALDAV_SSL_CERT)',
    )
    parser.add_argument(
        "--summary", default=DEFAULT_SUMMARY, help="summary of the appointment"
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="count",
        default=0,
        help="more logging, may be given twice",
    )
    parser.add_argument(
        "--version", action="version", version=f"%(prog)s {__version__}"
    )
    return parser.parse_args(argv)


def setup_logging(verbosity: int) -> None:
    if verbosity >= 2:
        level = logging.DEBUG
    elif verbosity == 1:
        level = logging.INFO
    else:
        level = logging.WARNING
    logging.basicConfig(
        level=level, format="%(asctime)s %(levelname)s %(name)s: %(message)s"
    )


def print_result(result: PublishResult, out=None) -> None:
    out = out or sys.stdout
    if result.endpoint is not None:
        print(f"wellknown_path: {result.endpoint.caldav_path}", file=out)
    if result.principal_url is not None:
        print(f"current-user-principal: {result.principal_url}", file=out)
    if result.calendar_home_url is not None:
        print(f"calendar-home-set: {result.calendar_home_url}", file=out)
    for calendar in result.calendars:
        print(f"{calendar.url}: {', '.join(calendar.resource_types)}", file=out)
    if result.event_url is not None:
        print(f"calendar entry successfully created: {result.event_url}", file=out)
    if result.error is not None:
        print(f"{result.stage.value} failed: {result.error}", file=sys.stderr)
    elif result.exit_status == ExitStatus.NO_CALENDARS:
        print("no calendars found", file=sys.stderr)


def main(argv: Optional[List[str]] = None) -> int:
    args = parse_args(argv)
    setup_logging(args.verbose)

    try:
        config = get_connection_config(
            config_file=args.config_file,
            config_section=args.config_section,
            url=args.url,
            username=args.username,
            password=args.password,
            timeout=args.timeout,
            ssl_verify_cert=False if args.no_verify_ssl else None,
            ssl_cert=args.ssl_cert,
        )
    except ConfigurationError as e:
        print(f"configuration error: {e}", file=sys.stderr)
        return int(ExitStatus.CONFIGURATION)

    with DAVClient(**config.client_kwargs()) as client:
        result = publish_sample_event(client, summary=args.summary)

    print_result(result)
    return int(result.exit_status)


if __name__ == "__main__":
    sys.exit(main())
