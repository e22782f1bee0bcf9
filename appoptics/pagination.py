"""Pagination query parameters for list requests."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any
from urllib.parse import parse_qsl, urlencode, urlsplit, urlunsplit


@dataclass
class PaginationParameters:
    """Offset, length, ordering and sort direction for list requests.

    Only "asc" and "desc" are valid sorts, but this is not enforced.
    """

    offset: int = 0
    length: int = 0
    orderby: str = ""
    sort: str = ""

    def _params(self) -> list[tuple[str, str]]:
        params: list[tuple[str, str]] = []
        if self.offset > 0:
            params.append(("offset", str(self.offset)))
        if self.orderby:
            params.append(("orderby", self.orderby))
        if self.length > 0:
            params.append(("length", str(self.length)))
        if self.sort:
            params.append(("sort", self.sort))
        return params

    def apply_to_url(self, url: str) -> str:
        """Return url with these parameters added to its query, keys sorted."""
        parts = urlsplit(url)
        query = parse_qsl(parts.query, keep_blank_values=True) + self._params()
        query.sort(key=lambda item: item[0])
        return urlunsplit(parts._replace(query=urlencode(query)))

    def add_to_request(self, request: Any) -> None:
        """Add these parameters to the query of a request that has a url attribute."""
        request.url = self.apply_to_url(request.url)


def default_pagination_parameters(length: int) -> PaginationParameters:
    """Parameters with the given length, ordered by name ascending."""
    return PaginationParameters(length=length, sort="asc", orderby="name")