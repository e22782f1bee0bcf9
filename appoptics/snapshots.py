"""Snapshots: images of a chart at a point in time."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Mapping

from .client import Client

_ZERO_TIME = "0001-01-01T00:00:00Z"


def _parse_time(value: str | None) -> datetime | None:
    if not value:
        return None
    parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    if parsed.year == 1 and parsed.month == 1 and parsed.day == 1 and parsed.time() == datetime.min.time():
        return None
    return parsed


def _format_time(value: datetime | None) -> str:
    if value is None:
        return _ZERO_TIME
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.isoformat().replace("+00:00", "Z")


@dataclass
class SnapshotChart:
    """The chart a snapshot is taken of."""

    id: int = 0
    sources: list[str] | None = None
    type: str = ""

    @classmethod
    def from_dict(cls, data: Mapping[str, Any] | None) -> SnapshotChart:
        """Build from the API form."""
        data = data or {}
        sources = data.get("sources")
        return cls(
            id=data.get("id") or 0,
            sources=list(sources) if sources is not None else None,
            type=data.get("type") or "",
        )

    def to_dict(self) -> dict[str, Any]:
        """Serialise to the API form."""
        return {
            "id": self.id,
            "sources": list(self.sources) if self.sources is not None else None,
            "type": self.type,
        }


@dataclass
class Snapshot:
    """A picture of a chart at a specific time."""

    href: str = ""
    job_href: str = ""
    image_href: str = ""
    duration: int = 0
    end_time: datetime | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None
    subject: dict[str, SnapshotChart] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any] | None) -> Snapshot:
        """Build from the API form."""
        data = data or {}
        return cls(
            href=data.get("href") or "",
            job_href=data.get("job_href") or "",
            image_href=data.get("image_href") or "",
            duration=data.get("duration") or 0,
            end_time=_parse_time(data.get("end_time")),
            created_at=_parse_time(data.get("created_at")),
            updated_at=_parse_time(data.get("updated_at")),
            subject={
                k: SnapshotChart.from_dict(v) for k, v in (data.get("subject") or {}).items()
            },
        )

    def to_dict(self) -> dict[str, Any]:
        """Serialise to the API form; times are always present."""
        data: dict[str, Any] = {}
        if self.href:
            data["href"] = self.href
        if self.job_href:
            data["job_href"] = self.job_href
        if self.image_href:
            data["image_href"] = self.image_href
        if self.duration:
            data["duration"] = self.duration
        data["end_time"] = _format_time(self.end_time)
        data["created_at"] = _format_time(self.created_at)
        data["updated_at"] = _format_time(self.updated_at)
        data["subject"] = (
            {k: v.to_dict() for k, v in self.subject.items()} if self.subject else None
        )
        return data


class SnapshotsService:
    """The snapshots part of the API."""

    def __init__(self, client: Client) -> None:
        self.client = client

    def create(self, snapshot: Snapshot) -> Snapshot:
        """Request a new snapshot."""
        request = self.client.new_request("POST", "snapshots", snapshot)
        return Snapshot.from_dict(self.client.do_json(request))

    def retrieve(self, snapshot_id: int) -> Snapshot:
        """Fetch a snapshot, including the URL of its image."""
        request = self.client.new_request("GET", f"snapshots/{snapshot_id}")
        return Snapshot.from_dict(self.client.do_json(request))