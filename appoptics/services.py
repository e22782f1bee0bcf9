"""Notification services that alerts are delivered to."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Mapping

from .client import Client, QueryInfo


@dataclass
class Service:
    """A notification target such as a chat room or a mail list."""

    id: int = 0
    type: str = ""
    settings: dict[str, str] = field(default_factory=dict)
    title: str = ""

    @classmethod
    def from_dict(cls, data: Mapping[str, Any] | None) -> Service:
        """Build from the API form."""
        data = data or {}
        return cls(
            id=data.get("id") or 0,
            type=data.get("type") or "",
            settings=dict(data.get("settings") or {}),
            title=data.get("title") or "",
        )

    def to_dict(self) -> dict[str, Any]:
        """Serialise to the API form, leaving out empty fields."""
        data: dict[str, Any] = {}
        if self.id:
            data["id"] = self.id
        if self.type:
            data["type"] = self.type
        if self.settings:
            data["settings"] = dict(self.settings)
        if self.title:
            data["title"] = self.title
        return data


@dataclass
class ListServicesResponse:
    """A page of services with its pagination details."""

    query: QueryInfo = field(default_factory=QueryInfo)
    services: list[Service] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any] | None) -> ListServicesResponse:
        """Build from the API form."""
        data = data or {}
        return cls(
            query=QueryInfo.from_dict(data.get("query")),
            services=[Service.from_dict(s) for s in data.get("services") or []],
        )


class ServicesService:
    """The services part of the API."""

    def __init__(self, client: Client) -> None:
        self.client = client

    def list(self) -> ListServicesResponse:
        """Fetch all services."""
        request = self.client.new_request("GET", "services")
        return ListServicesResponse.from_dict(self.client.do_json(request))

    def retrieve(self, service_id: int) -> Service:
        """Fetch the service with the given id."""
        request = self.client.new_request("GET", f"services/{service_id}")
        return Service.from_dict(self.client.do_json(request))

    def create(self, service: Service) -> Service:
        """Create a service and return it as stored."""
        request = self.client.new_request("POST", "services", service)
        return Service.from_dict(self.client.do_json(request))

    def update(self, service: Service) -> None:
        """Replace the service identified by service.id."""
        request = self.client.new_request("PUT", f"services/{service.id}", service)
        self.client.do(request)

    def delete(self, service_id: int) -> None:
        """Delete the service with the given id."""
        request = self.client.new_request("DELETE", f"services/{service_id}")
        self.client.do(request)