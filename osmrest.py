# -*- coding: utf-8 -*-
"""
Osmrest is a thin binding for the OpenStreetMap API v0.6.

Every documented endpoint is exposed as a method of API (blocking) and
AsyncAPI (asyncio). All of them funnel into a single dispatcher that builds
the URL, adds authentication and returns the response parsed as XML. No
interpretation of the returned documents is attempted.

Variables:
    API_URL             --- Production API base URL.
    API_DEV_URL         --- Development (sandbox) API base URL.
    MAX_STR_LEN         --- Limit on the length of bodies and free-text values.

Functions:
    prepare_request     --- Validate a call and build the Request for it.
    parse_response      --- Turn a transport Response into an XML element.
    dispatch            --- Perform a blocking API call.
    dispatch_async      --- Perform a non-blocking API call.

Classes:
    Config              --- Immutable client configuration.
    Element             --- Kind of OSM element (node/way/relation).
    BaseHTTPClient      --- Common part of the HTTP transports.
    HTTPClient          --- Blocking HTTP transport.
    AsyncHTTPClient     --- Asyncio HTTP transport.
    BaseAPI             --- Catalog of OSM API endpoints.
    API                 --- Blocking OSM API interface.
    AsyncAPI            --- Asyncio OSM API interface.
    OSMError            --- Base of all exceptions raised by osmrest.

"""

__author__ = "osmrest contributors"
__copyright__ = "Copyright (C) 2018-2026 osmrest contributors"
__license__ = "LGPL 3.0"

__version__ = "0.1.0"

from abc import ABCMeta, abstractmethod
from base64 import b64encode
from collections import namedtuple
from enum import Enum
from http.client import HTTPConnection, HTTPSConnection, HTTPException
import logging
import os
from urllib.parse import quote, urlsplit
import xml.etree.ElementTree as ET

import httpx


__all__ = ["API_URL",
           "API_DEV_URL",
           "MAX_STR_LEN",
           "METHODS",
           "prepare_request",
           "parse_response",
           "dispatch",
           "dispatch_async",
           "Config",
           "Element",
           "Request",
           "Response",
           "BaseHTTPClient",
           "HTTPClient",
           "AsyncHTTPClient",
           "BaseAPI",
           "API",
           "AsyncAPI",
           "OSMError",
           "InvalidMethod",
           "PayloadTooLarge",
           "InvalidEndpoint",
           "InvalidElementKind",
           "TransportFailure",
           "MalformedResponse",
           "APIError"]


logging.getLogger("osmrest").addHandler(logging.NullHandler())

API_VERSION = 0.6
API_URL = "https://api.openstreetmap.org/api/{}/".format(API_VERSION)
API_DEV_URL = "https://master.apis.dev.openstreetmap.org/api/{}/".format(API_VERSION)
METHODS = ("GET", "POST", "PUT", "DELETE")
# The API rejects key and value strings of this length or longer.
MAX_STR_LEN = 255
MIN_ENDPOINT_LEN = 3



############################################################
### Exceptions.                                          ###
############################################################

class OSMError(Exception):
    """ Base of all exceptions raised by osmrest. """


class InvalidMethod(OSMError, ValueError):
    """ HTTP method other than GET, POST, PUT or DELETE was requested. """

    def __init__(self, method):
        self.method = method
        super().__init__("Invalid HTTP method {!r}, expected one of {}.".format(method, ", ".join(METHODS)))


class PayloadTooLarge(OSMError, ValueError):
    """
    Body or free-text value is too long for the API.

    Attributes:
        length      --- Length of the rejected value.

    """

    def __init__(self, length, what="Request body"):
        self.length = length
        super().__init__("{} has {} characters, OpenStreetMap API limits the length of all key "
                         "and value strings to less than {}.".format(what, length, MAX_STR_LEN))


class InvalidEndpoint(OSMError, ValueError):
    """ Endpoint path is empty or malformed. """

    def __init__(self, endpoint):
        self.endpoint = endpoint
        super().__init__("Invalid endpoint {!r}.".format(endpoint))


class InvalidElementKind(OSMError, ValueError):
    """ Element designator is not one of the allowed element kinds. """

    def __init__(self, value, allowed):
        self.value = value
        self.allowed = tuple(allowed)
        super().__init__("OpenStreetMap API element must be one of {}, got {!r}.".format(
            ", ".join("'{}'".format(kind.value) for kind in self.allowed), value))


class TransportFailure(OSMError):
    """
    Network-level failure (DNS, connection, TLS, timeout).

    The original exception is chained as __cause__.

    Attributes:
        url         --- URL of the failed request.
        reason      --- Description of the failure.

    """

    def __init__(self, url, reason):
        self.url = url
        self.reason = reason
        super().__init__("Request to {} failed: {}".format(url, reason))


class MalformedResponse(OSMError):
    """
    Response body could not be parsed as XML.

    Attributes:
        body        --- Raw response body (bytes).
        status      --- HTTP status code of the response.
        reason      --- Parser error message.

    """

    def __init__(self, body, status=None, reason=None):
        self.body = body
        self.status = status
        self.reason = reason
        super().__init__("Response (HTTP {}) is not valid XML: {}".format(status, reason))

    @property
    def text(self):
        """ Response body decoded as UTF-8. """
        return self.body.decode("utf-8", "replace")


class APIError(OSMError):
    """
    OSM API exception, raised for HTTP error statuses when Config.check_status is set.

    Attributes:
        reason      --- The reason of failure (response body).
        payload     --- Data sent to API with request.
        http_reason --- Reason phrase of the HTTP response.
        http_status --- Status code of the HTTP response.

    """

    def __init__(self, reason, payload, http_reason=None, http_status=None):
        """
        Arguments:
            reason      --- The reason of failure.
            payload     --- Data sent to API with request.

        Keyworded arguments:
            http_reason --- Optional reason for HTTP error.
            http_status --- Optional status code for HTTP error.

        """
        super().__init__(reason)
        self.reason = reason
        self.payload = payload
        self.http_reason = http_reason
        self.http_status = http_status

    def __str__(self):
        if None in (self.http_reason, self.http_status):
            msg = "Request failed: {}".format(self.reason)
        else:
            msg = "HTTP error {} ({}).".format(self.http_status, self.http_reason)
            if len(self.reason) > 0:
                msg += " " + self.reason
        return msg



############################################################
### Configuration and value types.                       ###
############################################################

_TRUTHY = ("1", "true", "yes", "on")


def _proxy_url(proxy):
    """ Return proxy as an absolute URL ('host:port' becomes 'http://host:port') or None. """
    if not proxy:
        return None
    proxy = proxy.strip()
    if "://" not in proxy:
        proxy = "http://" + proxy
    return proxy


class Config(namedtuple("Config", "username password timeout proxy sandbox check_status")):
    """
    Immutable client configuration.

    Attributes:
        username        --- Username for API authentication.
        password        --- Password for API authentication.
        timeout         --- Socket timeout in seconds, applied to each
                            connect, send and receive step.
        proxy           --- Outbound proxy URL or None; 'host:port' is
                            read as 'http://host:port'.
        sandbox         --- Use the development server instead of production.
        check_status    --- Raise APIError for HTTP statuses >= 400 instead
                            of parsing the error body.

    Properties:
        base_url        --- API base URL selected by sandbox.
        has_credentials --- Whether Basic authentication will be sent.

    """

    __slots__ = ()

    def __new__(cls, username="", password="", timeout=30, proxy=None, sandbox=False, check_status=False):
        return super().__new__(cls, (username or "").strip(), (password or "").strip(), timeout,
                               _proxy_url(proxy), bool(sandbox), bool(check_status))

    @classmethod
    def from_env(cls, environ=None):
        """
        Create configuration from environment variables.

        Reads OSM_USERNAME, OSM_PASSWORD, OSM_TIMEOUT, OSM_PROXY, OSM_SANDBOX
        and OSM_CHECK_STATUS; missing variables keep the defaults.

        Keyworded arguments:
            environ     --- Mapping to read instead of os.environ.

        """
        if environ is None:
            environ = os.environ
        kwargs = {}
        for key in ("username", "password", "proxy"):
            value = environ.get("OSM_" + key.upper())
            if value:
                kwargs[key] = value
        timeout = environ.get("OSM_TIMEOUT")
        if timeout:
            try:
                kwargs["timeout"] = float(timeout)
            except ValueError:
                raise ValueError("OSM_TIMEOUT must be a number, got {!r}.".format(timeout))
        for key in ("sandbox", "check_status"):
            value = environ.get("OSM_" + key.upper())
            if value is not None:
                kwargs[key] = value.strip().lower() in _TRUTHY
        return cls(**kwargs)

    @property
    def base_url(self):
        return API_DEV_URL if self.sandbox else API_URL

    @property
    def has_credentials(self):
        return bool(self.username or self.password)

    def auth_header(self):
        """ Get value of Authorization header. """
        return "Basic " + b64encode("{}:{}".format(self.username, self.password).encode("utf-8")).decode().strip()

    def __repr__(self):
        # Keep the password out of logs and tracebacks.
        return "Config(username={!r}, password={}, timeout={!r}, proxy={!r}, sandbox={!r}, check_status={!r})".format(
            self.username, "'***'" if self.password else "''", self.timeout, self.proxy,
            self.sandbox, self.check_status)


class Element(Enum):
    """ Kind of OSM element accepted by the element endpoints. """

    NODE = "node"
    WAY = "way"
    RELATION = "relation"

    @classmethod
    def coerce(cls, value, allowed=None):
        """
        Return Element for value or raise InvalidElementKind.

        Arguments:
            value       --- Element member or its string value.

        Keyworded arguments:
            allowed     --- Iterable of permitted members, defaults to all.

        """
        allowed = tuple(cls) if allowed is None else tuple(allowed)
        if isinstance(value, cls):
            kind = value
        else:
            kind = next((member for member in cls if member.value == value), None)
        if kind is None or kind not in allowed:
            raise InvalidElementKind(value, allowed)
        return kind


Request = namedtuple("Request", "method url headers payload")
Request.__doc__ = "Validated request ready for a transport."

Response = namedtuple("Response", "status reason body")
Response.__doc__ = "Buffered transport response; body is bytes."



############################################################
### HTTP transports.                                     ###
############################################################

class BaseHTTPClient(object):
    """
    Common part of the HTTP transports.

    Transports only use the proxy they are given; proxy environment
    variables are ignored.

    Class attributes:
        headers     --- Default headers for HTTP request.

    Class methods:
        prepare     --- Merge headers and encode payload for sending.

    """

    def __new__(cls, *p, **k):
        raise TypeError("This class cannot be instantiated.")

    headers = {}
    headers["User-Agent"] = "osmrest/{0}".format(__version__)
    log = logging.getLogger("osmrest.http")

    @classmethod
    def prepare(cls, method, url, headers, payload):
        """ Return (headers, payload) with default headers and payload as bytes. """
        cls.log.debug("{} {} << payload {}".format(method, url, payload is not None))
        req_headers = dict(cls.headers)
        req_headers.update(headers)
        if payload is not None and not isinstance(payload, bytes):
            payload = payload.encode("utf-8")
        return req_headers, payload


class HTTPClient(BaseHTTPClient):
    """
    Blocking HTTP transport.

    Class methods:
        request     --- Perform a single HTTP request and return Response.

    """

    @classmethod
    def _connect(cls, url, timeout=None, proxy=None):
        """ Return an unopened connection for url, tunnelled through proxy if given. """
        connection_class = HTTPSConnection if url.scheme == "https" else HTTPConnection
        proxy = _proxy_url(proxy)
        if proxy is None:
            return connection_class(url.hostname, url.port, timeout=timeout)
        proxy = urlsplit(proxy)
        connection = connection_class(proxy.hostname, proxy.port or 80, timeout=timeout)
        connection.set_tunnel(url.hostname, url.port)
        return connection

    @classmethod
    def request(cls, method, url, headers={}, payload=None, timeout=None, proxy=None):
        """
        Perform a single HTTP request, without redirection or retry.

        Return Response or raise TransportFailure.

        Arguments:
            method      --- HTTP request method.
            url         --- Absolute URL.

        Keyworded arguments:
            headers     --- Additional HTTP headers.
            payload     --- String or bytes to send with request.
            timeout     --- Socket timeout in seconds.
            proxy       --- Proxy URL or 'host:port'.

        """
        req_headers, payload = cls.prepare(method, url, headers, payload)
        parts = urlsplit(url)
        path = parts.path or "/"
        if parts.query:
            path += "?" + parts.query
        try:
            connection = cls._connect(parts, timeout=timeout, proxy=proxy)
            try:
                connection.connect()
                connection.request(method, path, payload, req_headers)
                response = connection.getresponse()
                body = response.read()
            finally:
                connection.close()
        except (OSError, HTTPException) as error:
            cls.log.error("Could not download {}: {}".format(url, error))
            raise TransportFailure(url, str(error) or type(error).__name__) from error
        cls.log.debug("{} {} >> {} ({} bytes)".format(method, url, response.status, len(body)))
        return Response(response.status, response.reason, body)


class AsyncHTTPClient(BaseHTTPClient):
    """
    Asyncio HTTP transport built on httpx.

    Class methods:
        request     --- Coroutine performing a single HTTP request.

    """

    @classmethod
    async def request(cls, method, url, headers={}, payload=None, timeout=None, proxy=None):
        """
        Perform a single HTTP request, without redirection or retry.

        Return Response or raise TransportFailure. Arguments are the same as
        for HTTPClient.request.

        """
        req_headers, payload = cls.prepare(method, url, headers, payload)
        try:
            async with httpx.AsyncClient(timeout=timeout, proxy=_proxy_url(proxy), trust_env=False,
                                         follow_redirects=False) as client:
                response = await client.request(method, url, headers=req_headers, content=payload)
        except httpx.TransportError as error:
            cls.log.error("Could not download {}: {}".format(url, error))
            raise TransportFailure(url, str(error) or type(error).__name__) from error
        cls.log.debug("{} {} >> {} ({} bytes)".format(method, url, response.status_code, len(response.content)))
        return Response(response.status_code, response.reason_phrase, response.content)



############################################################
### Dispatcher.                                          ###
############################################################

log = logging.getLogger("osmrest.api")


def prepare_request(config, endpoint, method="GET", body=""):
    """
    Validate a call and build the Request for it. No I/O is performed.

    Raise InvalidMethod, PayloadTooLarge or InvalidEndpoint.

    Arguments:
        config      --- Config instance.
        endpoint    --- Path and query relative to the API base URL.

    Keyworded arguments:
        method      --- HTTP method.
        body        --- Request body, empty string for none.

    """
    if method not in METHODS:
        raise InvalidMethod(method)
    if body is None:
        body = ""
    if len(body) >= MAX_STR_LEN:
        raise PayloadTooLarge(len(body))
    if not isinstance(endpoint, str) or len(endpoint.strip()) < MIN_ENDPOINT_LEN:
        raise InvalidEndpoint(endpoint)
    headers = {"DNT": "1"}
    if config.has_credentials:
        headers["Authorization"] = config.auth_header()
    return Request(method, config.base_url + endpoint.strip(), headers, body or None)


def parse_response(config, response, payload=None):
    """
    Parse the body of transport Response as XML and return the root element.

    Raise MalformedResponse, or APIError for statuses >= 400 when
    config.check_status is set.

    Arguments:
        config      --- Config instance.
        response    --- Response returned by a transport.

    Keyworded arguments:
        payload     --- Data sent with the request, for error reporting.

    """
    if config.check_status and response.status >= 400:
        reason = response.body.decode("utf-8", "replace").strip()
        log.error("Got error {} ({}).".format(response.reason, response.status))
        raise APIError(reason, payload, response.reason, response.status)
    try:
        return ET.XML(response.body)
    except ET.ParseError as error:
        log.error("Response (HTTP {}) is not XML: {}".format(response.status, error))
        raise MalformedResponse(response.body, response.status, str(error)) from error


def dispatch(config, endpoint, method="GET", body="", http=HTTPClient):
    """
    Perform a blocking API call and return the response as ET.Element.

    Arguments:
        config      --- Config instance.
        endpoint    --- Path and query relative to the API base URL.

    Keyworded arguments:
        method      --- HTTP method.
        body        --- Request body, empty string for none.
        http        --- Transport with a blocking request method.

    """
    request = prepare_request(config, endpoint, method, body)
    response = http.request(request.method, request.url, headers=request.headers, payload=request.payload,
                            timeout=config.timeout, proxy=config.proxy)
    return parse_response(config, response, request.payload)


async def dispatch_async(config, endpoint, method="GET", body="", http=AsyncHTTPClient):
    """
    Perform a non-blocking API call and return the response as ET.Element.

    Same as dispatch, but http.request must be a coroutine function.

    """
    request = prepare_request(config, endpoint, method, body)
    response = await http.request(request.method, request.url, headers=request.headers, payload=request.payload,
                                  timeout=config.timeout, proxy=config.proxy)
    return parse_response(config, response, request.payload)



############################################################
### API classes                                          ###
############################################################

def _serialize(payload):
    """ Return payload (ET.Element, string or None) as string. """
    if payload is None:
        return ""
    if ET.iselement(payload):
        return ET.tostring(payload, encoding="unicode")
    return payload


def _text(value, what="Text"):
    """ Strip, check length and percent-encode free text for a query string. """
    value = str(value).strip()
    if len(value) >= MAX_STR_LEN:
        raise PayloadTooLarge(len(value), what)
    return quote(value, safe="")


def _bbox(left, bottom, right, top):
    return "{},{},{},{}".format(left, bottom, right, top)


def _ids(ids):
    return ",".join(str(id_) for id_ in ids)


class BaseAPI(metaclass=ABCMeta):
    """
    Catalog of OSM API v0.6 endpoints.

    Every endpoint method formats its path, validates its arguments and hands
    the call to request(). Element designators accept Element members or the
    strings 'node', 'way' and 'relation'; anything else raises
    InvalidElementKind before any request is made. Payloads may be strings or
    ET.Element instances.

    Two endpoints are intentionally missing: GPX trace upload (multipart) and
    version redaction.

    Class attributes:
        http            --- Transport used for requests.

    Attributes:
        config          --- Config instance.

    Abstract methods:
        request         --- Low-level method to retrieve data from server.

    """

    http = None

    def __init__(self, config=None, http=None, **kwargs):
        """
        Keyworded arguments:
            config      --- Config instance, created from kwargs if None.
            http        --- Transport overriding the class default.
            kwargs      --- Config fields, applied on top of config.

        """
        if config is None:
            config = Config(**kwargs)
        elif kwargs:
            config = Config(**dict(config._asdict(), **kwargs))
        self.config = config
        if http is not None:
            self.http = http

    def __repr__(self):
        return "{}({!r})".format(type(self).__name__, self.config)

    ##################################################
    # HTTP methods                                   #
    ##################################################
    @abstractmethod
    def request(self, endpoint, method="GET", body=""):
        """
        Low-level method to retrieve data from server.

        Arguments:
            endpoint    --- Path and query relative to the API base URL.

        Keyworded arguments:
            method      --- HTTP method to use for request.
            body        --- Data to send with the request.

        """
        raise NotImplementedError

    def url(self, endpoint):
        """ Return absolute URL of endpoint. """
        return self.config.base_url + endpoint.strip()

    def get(self, endpoint):
        """ Low-level method for GET request. """
        return self.request(endpoint)

    def put(self, endpoint, payload=None):
        """ Low-level method for PUT request. """
        return self.request(endpoint, "PUT", _serialize(payload))

    def post(self, endpoint, payload=None):
        """ Low-level method for POST request. """
        return self.request(endpoint, "POST", _serialize(payload))

    def delete(self, endpoint, payload=None):
        """ Low-level method for DELETE request. """
        return self.request(endpoint, "DELETE", _serialize(payload))

    ##################################################
    # Miscellaneous                                  #
    ##################################################
    def get_capabilities(self):
        """ Download API capabilities and policy. """
        return self.get("capabilities")

    def get_bounding_box(self, left, bottom, right, top):
        """
        Download map data inside the specified bbox.

        Arguments:
            left        --- Left boundary.
            bottom      --- Bottom boundary.
            right       --- Right boundary.
            top         --- Top boundary.

        """
        return self.get("map?bbox={}".format(_bbox(left, bottom, right, top)))

    def get_permissions(self):
        """ Download permissions granted to the current credentials. """
        return self.get("permissions")

    ##################################################
    # Changesets                                     #
    ##################################################
    def put_changeset_create(self, payload):
        """
        Create changeset.

        The API answers with the bare changeset id, which is not XML; it is
        reported as MalformedResponse with the id in its body.

        Arguments:
            payload     --- <osm><changeset>...</changeset></osm> document.

        """
        return self.put("changeset/create", payload)

    def get_changeset(self, id_, include_discussion=True):
        """
        Download changeset by id.

        Arguments:
            id_                 --- Changeset id.

        Keyworded arguments:
            include_discussion  --- Include the discussion comments.

        """
        return self.get("changeset/{}?include_discussion={}".format(id_, str(bool(include_discussion)).lower()))

    def put_changeset(self, id_, payload):
        """ Update tags of changeset id_. """
        return self.put("changeset/{}".format(id_), payload)

    def put_changeset_close(self, id_):
        """ Close changeset id_. """
        return self.put("changeset/{}/close".format(id_))

    def get_changeset_download(self, id_):
        """ Download osmChange document with the contents of changeset id_. """
        return self.get("changeset/{}/download".format(id_))

    def post_changeset_expand_bbox(self, id_, payload):
        """ Expand bounding box of changeset id_ by the nodes in payload. """
        return self.post("changeset/{}/expand_bbox".format(id_), payload)

    def get_changesets_bbox(self, left, bottom, right, top):
        """ Query changesets intersecting the bbox. """
        return self.get("changesets?bbox={}".format(_bbox(left, bottom, right, top)))

    def get_changesets_user(self, user):
        """ Query changesets by user id. """
        return self.get("changesets?user={}".format(user))

    def get_changesets_display_name(self, display_name):
        """ Query changesets by user display name. """
        return self.get("changesets?display_name={}".format(_text(display_name, "Display name")))

    def get_changesets_time(self, time1, time2=None):
        """
        Query changesets closed after time1, or closed after time1 and created before time2.

        Arguments:
            time1       --- Timestamp string.

        Keyworded arguments:
            time2       --- Optional second timestamp string.

        """
        if not time1:
            raise ValueError("At least one time must be provided.")
        value = quote(time1, safe=":")
        if time2:
            value += "," + quote(time2, safe=":")
        return self.get("changesets?time={}".format(value))

    def get_changesets_open(self, open=True):
        """ Query open changesets, or closed ones if open is False. """
        return self.get("changesets?{}=true".format("open" if open else "closed"))

    def get_changesets_ids(self, ids):
        """ Query changesets by ids. """
        return self.get("changesets?changesets={}".format(_ids(ids)))

    def post_changeset_upload(self, id_, payload):
        """ Upload osmChange diff payload into changeset id_. """
        return self.post("changeset/{}/upload".format(id_), payload)

    ##################################################
    # Changeset discussion                           #
    ##################################################
    def post_changeset_comment(self, id_, comment):
        """ Add comment to the discussion of changeset id_. """
        return self.post("changeset/{}/comment?text={}".format(id_, _text(comment, "Comment")))

    def post_changeset_subscribe(self, id_):
        """ Subscribe to the discussion of changeset id_. """
        return self.post("changeset/{}/subscribe".format(id_))

    def post_changeset_unsubscribe(self, id_):
        """ Unsubscribe from the discussion of changeset id_. """
        return self.post("changeset/{}/unsubscribe".format(id_))

    ##################################################
    # Elements                                       #
    ##################################################
    def put_element_create(self, element, payload):
        """
        Create node/way/relation.

        Arguments:
            element     --- Element kind.
            payload     --- <osm> document with the new element.

        """
        kind = Element.coerce(element)
        return self.put("{}/create".format(kind.value), payload)

    def get_element(self, element, id_):
        """
        Download node/way/relation by id.

        Arguments:
            element     --- Element kind.
            id_         --- Element id.

        """
        kind = Element.coerce(element)
        return self.get("{}/{}".format(kind.value, id_))

    def put_element_update(self, element, id_, payload):
        """ Update node/way/relation id_ with payload. """
        kind = Element.coerce(element)
        return self.put("{}/{}".format(kind.value, id_), payload)

    def delete_element(self, element, id_, payload=None):
        """ Delete node/way/relation id_; payload carries the version and changeset. """
        kind = Element.coerce(element)
        return self.delete("{}/{}".format(kind.value, id_), payload)

    def get_element_history(self, element, id_):
        """ Download all versions of node/way/relation id_. """
        kind = Element.coerce(element)
        return self.get("{}/{}/history".format(kind.value, id_))

    def get_element_version(self, element, id_, version):
        """ Download specific version of node/way/relation id_. """
        kind = Element.coerce(element)
        return self.get("{}/{}/{}".format(kind.value, id_, version))

    def get_elements(self, element, ids):
        """
        Download nodes/ways/relations by ids.

        Arguments:
            element     --- Elements kind.
            ids         --- Iterable with ids, optionally suffixed by 'v<version>'.

        """
        kind = Element.coerce(element)
        return self.get("{0}s?{0}s={1}".format(kind.value, _ids(ids)))

    def get_element_relations(self, element, id_):
        """ Download relations that reference node/way/relation id_. """
        kind = Element.coerce(element)
        return self.get("{}/{}/relations".format(kind.value, id_))

    def get_node_ways(self, id_):
        """ Download ways that reference node id_. """
        return self.get("node/{}/ways".format(id_))

    def get_element_full(self, element, id_):
        """ Download way/relation id_ and all elements it references. """
        kind = Element.coerce(element, (Element.WAY, Element.RELATION))
        return self.get("{}/{}/full".format(kind.value, id_))

    ##################################################
    # GPS traces                                     #
    ##################################################
    def get_trackpoints(self, left, bottom, right, top, page=0):
        """ Download GPS points inside the bbox, page by page. """
        return self.get("trackpoints?bbox={}&page={}".format(_bbox(left, bottom, right, top), page))

    def get_gpx_details(self, id_):
        """ Download metadata of trace id_. """
        return self.get("gpx/{}/details".format(id_))

    def get_gpx_data(self, id_):
        """ Download GPX data of trace id_. """
        return self.get("gpx/{}/data".format(id_))

    def get_gpx_files(self):
        """ List traces of the current user. """
        return self.get("user/gpx_files")

    ##################################################
    # User data                                      #
    ##################################################
    def get_user(self, id_):
        return self.get("user/{}".format(id_))

    def get_users(self, ids):
        return self.get("users?users={}".format(_ids(ids)))

    def get_user_details(self):
        return self.get("user/details")

    def get_user_preferences(self):
        return self.get("user/preferences")

    def get_user_preference(self, key):
        return self.get("user/preferences/{}".format(self._preference_key(key)))

    def put_user_preferences(self, key, value):
        """
        Set preference key of the current user to value.

        Arguments:
            key         --- Preference key.
            value       --- Preference value, sent as request body.

        """
        return self.put("user/preferences/{}".format(self._preference_key(key)), value)

    def delete_user_preference(self, key):
        return self.delete("user/preferences/{}".format(self._preference_key(key)))

    @staticmethod
    def _preference_key(key):
        if len(key) >= MAX_STR_LEN:
            raise PayloadTooLarge(len(key), "Preference key")
        return quote(key, safe="")

    ##################################################
    # Map notes                                      #
    ##################################################
    @staticmethod
    def _notes_query(limit, closed):
        if not 1 <= limit <= 10000:
            raise ValueError("Limit must be between 1 and 10000, got {}.".format(limit))
        return "limit={}&closed={}".format(limit, closed)

    def get_notes(self, left, bottom, right, top, limit=100, closed=7):
        """
        Download notes inside the bbox.

        Arguments:
            left        --- Left boundary.
            bottom      --- Bottom boundary.
            right       --- Right boundary.
            top         --- Top boundary.

        Keyworded arguments:
            limit       --- Maximum number of notes (1 to 10000).
            closed      --- Days a closed note stays listed; 0 for open
                            notes only, -1 for all.

        """
        return self.get("notes?bbox={}&{}".format(_bbox(left, bottom, right, top), self._notes_query(limit, closed)))

    def get_note(self, id_):
        return self.get("notes/{}".format(id_))

    def post_notes(self, lat, lon, text):
        """ Create a new note at lat, lon. """
        return self.post("notes?lat={}&lon={}&text={}".format(lat, lon, _text(text)))

    def post_notes_comment(self, id_, text):
        """ Comment on note id_. """
        return self.post("notes/{}/comment?text={}".format(id_, _text(text)))

    def post_notes_close(self, id_, text):
        """ Close note id_ with a comment. """
        return self.post("notes/{}/close?text={}".format(id_, _text(text)))

    def post_notes_reopen(self, id_, text):
        """ Reopen closed note id_ with a comment. """
        return self.post("notes/{}/reopen?text={}".format(id_, _text(text)))

    def get_notes_search(self, q, limit=100, closed=7):
        """ Search notes by text. """
        return self.get("notes/search?q={}&{}".format(_text(q, "Query"), self._notes_query(limit, closed)))


class API(BaseAPI):
    """
    Blocking OSM API interface.

    Every catalog method returns the response document as ET.Element.

    """

    http = HTTPClient

    def request(self, endpoint, method="GET", body=""):
        return dispatch(self.config, endpoint, method, body, http=self.http)


class AsyncAPI(BaseAPI):
    """
    Asyncio OSM API interface.

    Every catalog method returns a coroutine resolving to ET.Element.
    Arguments are validated when the method is called, before awaiting.

    """

    http = AsyncHTTPClient

    def request(self, endpoint, method="GET", body=""):
        return dispatch_async(self.config, endpoint, method, body, http=self.http)
