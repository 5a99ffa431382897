import logging
from collections.abc import Sequence
from typing import Any
from typing import Dict
from typing import List
from typing import Optional
from typing import Tuple
from typing import TYPE_CHECKING
from typing import Union
from urllib.parse import ParseResult
from urllib.parse import SplitResult

if TYPE_CHECKING:
    from .davclient import DAVClient
    from .davclient import DAVResponse

from .elements import dav
from .elements.base import BaseElement
from .lib import error
from .lib.error import errmsg
from .lib.url import URL

log = logging.getLogger("davpublish")

"""
DAVObject, the common ground of Principal, CalendarSet, Calendar and
Event: single property lookups, href properties pointing to other
resources, and depth 1 listings of collections.
"""


class DAVObject:
    """
    Base class for all DAV objects.  Instantiated by a client and an
    absolute URL, or from the parent object.
    """

    url: Optional[URL] = None
    client: Optional["DAVClient"] = None
    parent: Optional["DAVObject"] = None
    name: Optional[str] = None

    def __init__(
        self,
        client: Optional["DAVClient"] = None,
        url: Union[str, ParseResult, SplitResult, URL, None] = None,
        parent: Optional["DAVObject"] = None,
        name: Optional[str] = None,
        props: Optional[Dict[str, Any]] = None,
    ) -> None:
        """
        Args:
          client: the DAVClient, taken from the parent if not given
          url: where the object lives; relative to the parent's url
            if there is a parent
          parent: the collection holding this object
          name: display name
          props: properties already known, by tag
        """
        if client is None and parent is not None:
            client = parent.client
        self.client = client
        self.parent = parent
        self.name = name
        self.props = props or {}
        if url is not None and parent is not None and parent.url is not None:
            self.url = parent.url.resolve(url)
        else:
            self.url = URL.objectify(url)

    def children(self, type: Optional[str] = None) -> List[Tuple[URL, List[str], Any]]:
        """
        ``(url, resource_types, display_name)`` for every member of
        this collection, in server order, from a depth 1 PROPFIND.
        With ``type``, only members having that resource type.
        """
        c = []

        if self.url is None:
            raise ValueError("children() needs an url")

        props = [dav.DisplayName()]
        multiprops = [dav.ResourceType()]
        response = self._query_properties(props + multiprops, depth=1)
        properties = response.expand_simple_props(
            props=props, multi_value_props=multiprops
        )

        for path in properties:
            resource_types = properties[path][dav.ResourceType.tag]
            resource_name = properties[path][dav.DisplayName.tag]

            if type is None or type in resource_types:
                try:
                    url = self.url.resolve(path)
                except ValueError as exc:
                    raise error.ResponseError(
                        url=str(self.url), reason=f"could not resolve {path}: {exc}"
                    ) from exc
                c.append((url, resource_types, resource_name))

        return c

    def _query_properties(
        self, props: Optional[Sequence[BaseElement]] = None, depth: int = 0
    ) -> "DAVResponse":
        """
        Build a propfind request for the given properties and send it
        """
        root = None
        if props is not None and len(props) > 0:
            prop = dav.Prop() + props
            root = dav.Propfind() + prop

        return self._query(root, depth)

    def _query(
        self,
        root: Optional[BaseElement] = None,
        depth: int = 0,
        query_method: str = "propfind",
        url: Optional[URL] = None,
        expected_return_value: Optional[int] = None,
    ) -> "DAVResponse":
        """
        Send a query and check the status of the answer.  Redirects
        are not followed, so a 3xx is treated as an error as well.
        """
        body = ""
        if root is not None:
            body = root.to_wire(pretty_print=error.debug_dump_communication)
        if url is None:
            url = self.url
        ret = getattr(self.client, query_method)(str(url), body, depth)
        if ret.status == 404:
            raise error.NotFoundError(url=str(url), reason=errmsg(ret))
        if (
            expected_return_value is not None and ret.status != expected_return_value
        ) or ret.status >= 300:
            reason = errmsg(ret)
            if 300 <= ret.status < 400 and ret.location:
                reason = f"unexpected redirect to {ret.location}"
            raise error.exception_by_method[query_method](url=str(url), reason=reason)
        return ret

    def _props_for_self(self, response: "DAVResponse") -> Dict[str, Any]:
        """
        Pick the properties belonging to this object from a depth 0
        response.  Servers normally deliver exactly one response, but
        the href may be given in another form than the one we asked for.
        """
        objects = response.find_objects_and_props()
        if not objects:
            return {}
        if len(objects) == 1:
            return next(iter(objects.values()))
        for href in objects:
            if self.url.resolve(href) == self.url:
                return objects[href]
        error.weirdness(
            "depth 0 propfind returned several responses, none matching", self.url
        )
        return next(iter(objects.values()))

    def get_href_property(self, prop: BaseElement) -> URL:
        """
        PROPFIND for a property carrying an href (like
        current-user-principal or calendar-home-set) and return the
        href resolved against the URL the request was sent to.

        Raises:
          PropertyNotFoundError: the property or its href is missing
        """
        response = self._query_properties([prop], depth=0)
        props_found = self._props_for_self(response)
        prop_xml = props_found.get(prop.tag)
        href = None
        if prop_xml is not None:
            href_xml = prop_xml.find(dav.Href.tag)
            if href_xml is not None and href_xml.text and href_xml.text.strip():
                href = href_xml.text.strip()
        if href is None:
            raise error.PropertyNotFoundError(
                url=str(self.url), reason=f"{prop.tag} not found in the response"
            )
        try:
            resolved = self.url.resolve(href)
        except ValueError as exc:
            raise error.PropertyNotFoundError(
                url=str(self.url), reason=f"could not resolve {href}: {exc}"
            ) from exc
        self.props[prop.tag] = resolved
        return resolved

    def __str__(self) -> str:
        return str(self.url)

    def __repr__(self) -> str:
        return "%s(%s)" % (self.__class__.__name__, self.url)
