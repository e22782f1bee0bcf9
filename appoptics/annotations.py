"""Annotations: streams of timestamped events shown on charts."""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Mapping
from urllib.parse import quote, urlencode

from .client import Client, QueryInfo


@dataclass
class AnnotationLink:
    """A link attached to an annotation event."""

    rel: str = ""
    href: str = ""
    label: str = ""

    @classmethod
    def from_dict(cls, data: Mapping[str, Any] | None) -> AnnotationLink:
        """Build from the API form."""
        data = data or {}
        return cls(
            rel=data.get("rel") or "",
            href=data.get("href") or "",
            label=data.get("label") or "",
        )

    def to_dict(self) -> dict[str, Any]:
        """Serialise to the API form; an empty label is left out."""
        data: dict[str, Any] = {"rel": self.rel, "href": self.href}
        if self.label:
            data["label"] = self.label
        return data


@dataclass
class AnnotationEvent:
    """A single occurrence in an annotation stream."""

    id: int = 0
    title: str = ""
    source: str = ""
    description: str = ""
    links: list[AnnotationLink] = field(default_factory=list)
    start_time: int = 0
    end_time: int = 0

    @classmethod
    def from_dict(cls, data: Mapping[str, Any] | None) -> AnnotationEvent:
        """Build from the API form."""
        data = data or {}
        return cls(
            id=data.get("id") or 0,
            title=data.get("title") or "",
            source=data.get("source") or "",
            description=data.get("description") or "",
            links=[AnnotationLink.from_dict(link) for link in data.get("links") or []],
            start_time=data.get("start_time") or 0,
            end_time=data.get("end_time") or 0,
        )

    def to_dict(self) -> dict[str, Any]:
        """Serialise to the API form; id and title are always present."""
        data: dict[str, Any] = {"id": self.id, "title": self.title}
        if self.source:
            data["source"] = self.source
        if self.description:
            data["description"] = self.description
        if self.links:
            data["links"] = [link.to_dict() for link in self.links]
        if self.start_time:
            data["start_time"] = self.start_time
        if self.end_time:
            data["end_time"] = self.end_time
        return data


@dataclass
class AnnotationStream:
    """Events sharing a name; each events entry maps source names to events."""

    name: str = ""
    display_name: str = ""
    events: list[dict[str, list[AnnotationEvent]]] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any] | None) -> AnnotationStream:
        """Build from the API form."""
        data = data or {}
        return cls(
            name=data.get("name") or "",
            display_name=data.get("display_name") or "",
            events=[
                {
                    source: [AnnotationEvent.from_dict(e) for e in events or []]
                    for source, events in (group or {}).items()
                }
                for group in data.get("events") or []
            ],
        )


def _unix(moment: datetime) -> int:
    return math.floor(moment.timestamp())


@dataclass
class RetrieveAnnotationsRequest:
    """Which stream to fetch, optionally limited by time range and sources."""

    name: str = ""
    start_time: datetime | None = None
    end_time: datetime | None = None
    sources: list[str] = field(default_factory=list)

    def query_string(self) -> str:
        """The URL query for this request, keys in sorted order."""
        params: list[tuple[str, str]] = []
        if self.start_time is not None:
            params.append(("start_time", str(_unix(self.start_time))))
        if self.end_time is not None:
            params.append(("end_time", str(_unix(self.end_time))))
        params.extend(("sources[]", source) for source in self.sources)
        params.sort(key=lambda item: item[0])
        return urlencode(params)


@dataclass
class ListAnnotationsResponse:
    """A page of annotation streams with its pagination details."""

    annotation_streams: list[AnnotationStream] = field(default_factory=list)
    query: QueryInfo = field(default_factory=QueryInfo)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any] | None) -> ListAnnotationsResponse:
        """Build from the API form."""
        data = data or {}
        return cls(
            annotation_streams=[
                AnnotationStream.from_dict(s) for s in data.get("annotations") or []
            ],
            query=QueryInfo.from_dict(data.get("query")),
        )


class AnnotationsService:
    """The annotations part of the API."""

    def __init__(self, client: Client) -> None:
        self.client = client

    def list(self, stream_name_search: str | None = None) -> ListAnnotationsResponse:
        """List streams, optionally only those whose name matches the search."""
        path = "annotations"
        if stream_name_search is not None:
            path = f"annotations?name={quote(stream_name_search, safe='')}"
        request = self.client.new_request("GET", path)
        return ListAnnotationsResponse.from_dict(self.client.do_json(request))

    def retrieve(self, request: RetrieveAnnotationsRequest) -> AnnotationStream:
        """Fetch the events of a stream matching the request."""
        path = f"annotations/{request.name}"
        query = request.query_string()
        if query:
            path = f"{path}?{query}"
        http_request = self.client.new_request("GET", path)
        return AnnotationStream.from_dict(self.client.do_json(http_request))

    def retrieve_event(self, stream_name: str, event_id: int) -> AnnotationEvent:
        """Fetch a single event of a stream."""
        request = self.client.new_request("GET", f"annotations/{stream_name}/{event_id}")
        return AnnotationEvent.from_dict(self.client.do_json(request))

    def create(self, event: AnnotationEvent, stream_name: str) -> AnnotationEvent:
        """Add an event to the named stream."""
        request = self.client.new_request("POST", f"annotations/{stream_name}", event)
        return AnnotationEvent.from_dict(self.client.do_json(request))

    def update_stream(self, stream_name: str, display_name: str) -> None:
        """Change the display name of a stream."""
        body = f'{{"display_name": {display_name}}}'
        request = self.client.new_request("POST", f"annotations/{stream_name}", body)
        self.client.do(request)

    def update_event(
        self, stream_name: str, event_id: int, link: AnnotationLink
    ) -> AnnotationLink:
        """Add a link to an event and return it as stored."""
        request = self.client.new_request(
            "POST", f"annotations/{stream_name}/{event_id}/links", link
        )
        return AnnotationLink.from_dict(self.client.do_json(request))

    def delete(self, stream_name: str) -> None:
        """Delete the named stream."""
        request = self.client.new_request("DELETE", f"annotations/{stream_name}")
        self.client.do(request)