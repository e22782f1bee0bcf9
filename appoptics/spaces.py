"""Spaces: collections of charts."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Mapping

from .client import Client
from .pagination import PaginationParameters


@dataclass
class Space:
    """A single space."""

    id: int = 0
    name: str = ""

    @classmethod
    def from_dict(cls, data: Mapping[str, Any] | None) -> Space:
        """Build from the API form."""
        data = data or {}
        return cls(id=data.get("id") or 0, name=data.get("name") or "")

    def to_dict(self) -> dict[str, Any]:
        """Serialise to the API form, leaving out empty fields."""
        data: dict[str, Any] = {}
        if self.id:
            data["id"] = self.id
        if self.name:
            data["name"] = self.name
        return data


@dataclass
class RetrieveSpaceResponse(Space):
    """A space together with references to its charts."""

    charts: list[dict[str, int]] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any] | None) -> RetrieveSpaceResponse:
        """Build from the API form."""
        data = data or {}
        return cls(
            id=data.get("id") or 0,
            name=data.get("name") or "",
            charts=[dict(chart) for chart in data.get("charts") or []],
        )


class SpacesService:
    """The spaces part of the API."""

    def __init__(self, client: Client) -> None:
        self.client = client

    def create(self, name: str) -> Space:
        """Create a space with the given name."""
        request = self.client.new_request("POST", "spaces", {"name": name})
        return Space.from_dict(self.client.do_json(request))

    def list(self, pagination: PaginationParameters | None = None) -> list[Space]:
        """List spaces, optionally paginated."""
        request = self.client.new_request("GET", "spaces")
        if pagination is not None:
            pagination.add_to_request(request)
        data = self.client.do_json(request) or {}
        return [Space.from_dict(s) for s in data.get("spaces") or []]

    def retrieve(self, space_id: int) -> RetrieveSpaceResponse:
        """Fetch a space and its chart references."""
        request = self.client.new_request("GET", f"spaces/{space_id}")
        return RetrieveSpaceResponse.from_dict(self.client.do_json(request))

    def update(self, space_id: int, name: str) -> None:
        """Rename a space."""
        request = self.client.new_request("PUT", f"spaces/{space_id}", Space(name=name))
        self.client.do(request)

    def delete(self, space_id: int) -> None:
        """Delete a space."""
        request = self.client.new_request("DELETE", f"spaces/{space_id}")
        self.client.do(request)