"""HTTP client for the AppOptics REST API."""

from __future__ import annotations

import gzip
import json
import logging
import re
from dataclasses import dataclass
from http import HTTPStatus
from typing import Any, Mapping
from urllib.parse import urljoin

import requests

from .errors import ErrorResponse
from .pagination import PaginationParameters, default_pagination_parameters

MEASUREMENT_POST_MAX_BATCH_SIZE = 1000
DEFAULT_PERSISTENCE_ERROR_LIMIT = 5
DEFAULT_BASE_URL = "https://api.appoptics.com/v1/"
DEFAULT_MEDIA_TYPE = "application/json"
CLIENT_IDENTIFIER = "appoptics-api"
REQUEST_TIMEOUT = 30.0
ILLEGAL_NAME_CHARS = re.compile(r"[^A-Za-z0-9.:_-]")

log = logging.getLogger(__name__)


@dataclass
class QueryInfo:
    """Pagination details returned by list actions."""

    found: int = 0
    length: int = 0
    offset: int = 0
    total: int = 0

    @classmethod
    def from_dict(cls, data: Mapping[str, Any] | None) -> QueryInfo:
        """Build from the "query" object of a list response."""
        data = data or {}
        return cls(
            found=data.get("found") or 0,
            length=data.get("length") or 0,
            offset=data.get("offset") or 0,
            total=data.get("total") or 0,
        )


def _encode_body(body: Any) -> bytes:
    payload = body.to_dict() if hasattr(body, "to_dict") else body
    text = json.dumps(payload, separators=(",", ":"), ensure_ascii=False) + "\n"
    return text.encode("utf-8")


def _decode_first_value(content: bytes) -> Any:
    """Decode the first JSON value in content, ignoring anything after it."""
    text = content.decode("utf-8").lstrip()
    value, _ = json.JSONDecoder().raw_decode(text)
    return value


def _status_line(response: requests.Response) -> str:
    reason = response.reason
    if not reason:
        try:
            reason = HTTPStatus(response.status_code).phrase
        except ValueError:
            reason = ""
    return f"{response.status_code} {reason}".rstrip()


def check_error(response: requests.Response) -> None:
    """Raise ErrorResponse if the response carries an error status."""
    if response.status_code < 400:
        return
    status = _status_line(response)
    body = response.content or b""
    if not body:
        raise ErrorResponse(status=status, response=response)
    text = body.decode("utf-8", errors="replace")
    try:
        data = json.loads(text)
    except ValueError:
        data = None
    if isinstance(data, dict):
        error = ErrorResponse.from_dict(data, status)
    else:
        error = ErrorResponse(status=status, errors=json.dumps(text, ensure_ascii=False))
    error.response = response
    log.debug("error: %s", error)
    raise error


def _dump_request(request: requests.PreparedRequest) -> None:
    if request.body is None:
        return
    headers = "\n".join(f"{k}: {v}" for k, v in request.headers.items())
    log.info("request body: %s %s\n%s\n\n%r\n", request.method, request.url, headers, request.body)


def _dump_response(response: requests.Response) -> None:
    log.info("response status: %s", _status_line(response))
    headers = "\n".join(f"{k}: {v}" for k, v in response.headers.items())
    log.info("response body: %s\n\n%s\n", headers, response.text)


class Client:
    """Sends authenticated, gzip-encoded JSON requests to the API."""

    def __init__(
        self,
        token: str,
        *,
        base_url: str = DEFAULT_BASE_URL,
        user_agent: str = "",
        debug: bool = False,
        session: Any = None,
    ) -> None:
        self.token = token
        self.base_url = base_url
        self.user_agent = user_agent
        self.debug = debug
        self.session = session if session is not None else requests.Session()

    @property
    def user_agent_string(self) -> str:
        """The User-Agent header: the caller's fragment, if any, then the client name."""
        if not self.user_agent:
            return CLIENT_IDENTIFIER
        return f"{self.user_agent}:{CLIENT_IDENTIFIER}"

    def new_request(self, method: str, path: str, body: Any = None) -> requests.PreparedRequest:
        """Build a request for path relative to the base URL, with body gzipped as JSON."""
        url = urljoin(self.base_url, path)
        data = gzip.compress(_encode_body(body)) if body is not None else None
        headers = {
            "Accept": DEFAULT_MEDIA_TYPE,
            "Content-Type": DEFAULT_MEDIA_TYPE,
            "User-Agent": self.user_agent_string,
            "Content-Encoding": "gzip",
        }
        request = requests.Request(
            method, url, data=data, headers=headers, auth=("token", self.token)
        )
        return request.prepare()

    def do(self, request: requests.PreparedRequest) -> requests.Response:
        """Send the request; raise ErrorResponse on an error status."""
        if self.debug:
            _dump_request(request)
        response = self.session.send(request, timeout=REQUEST_TIMEOUT)
        if self.debug:
            _dump_response(response)
        check_error(response)
        return response

    def do_json(self, request: requests.PreparedRequest) -> Any:
        """Send the request and return the first JSON value of the response body."""
        response = self.do(request)
        return _decode_first_value(response.content or b"")

    def default_pagination_parameters(self, length: int) -> PaginationParameters:
        """Pagination with the given length, ordered by name ascending."""
        return default_pagination_parameters(length)