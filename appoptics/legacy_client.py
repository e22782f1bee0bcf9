"""A minimal client that posts measurement batches to a fixed URL."""

from __future__ import annotations

import json
import logging
from typing import Any

import requests
from requests.adapters import HTTPAdapter

from .errors import BadStatusError
from .measurements import MeasurementsBatch

REQUEST_TIMEOUT = 30.0
_OK_STATUSES = (200, 202)

log = logging.getLogger(__name__)


def _default_session() -> requests.Session:
    session = requests.Session()
    adapter = HTTPAdapter(pool_maxsize=4)
    session.mount("http://", adapter)
    session.mount("https://", adapter)
    return session


class SimpleClient:
    """Posts measurement batches as plain JSON, authenticating with the token."""

    def __init__(self, url: str, token: str, session: Any = None) -> None:
        self.url = url
        self.token = token
        self.session = session if session is not None else _default_session()

    def post(self, batch: MeasurementsBatch) -> None:
        """Post a batch.

        Raises ValueError without a token and BadStatusError when the
        server answers with a status other than 200 or 202.
        """
        if not self.token:
            raise ValueError("AppOptics httpClient not authenticated")
        body = json.dumps(batch.to_dict(), separators=(",", ":"), ensure_ascii=False)
        log.debug("POSTing measurements to AppOptics: %s", body)
        try:
            response = self.session.post(
                self.url,
                data=body.encode("utf-8"),
                headers={"Content-Type": "application/json"},
                auth=(self.token, ""),
                timeout=REQUEST_TIMEOUT,
            )
        except requests.RequestException:
            log.error("Error sending AppOptics measurements request", exc_info=True)
            raise
        if response.status_code not in _OK_STATUSES:
            log.error(
                "Error POSTing measurements to AppOptics: status %s, body %s",
                response.status_code,
                response.text,
            )
            raise BadStatusError()
        log.debug("Finished uploading AppOptics measurements")