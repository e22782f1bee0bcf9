"""Jobs: tasks running in the AppOptics service."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Mapping

from .client import Client


@dataclass
class Job:
    """The state and progress of a server-side task."""

    id: int = 0
    state: str = ""
    progress: float = 0.0
    output: str = ""
    errors: dict[str, list[str]] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any] | None) -> Job:
        """Build from the API form."""
        data = data or {}
        return cls(
            id=data.get("id") or 0,
            state=data.get("state") or "",
            progress=float(data.get("progress") or 0.0),
            output=data.get("output") or "",
            errors={k: list(v or []) for k, v in (data.get("errors") or {}).items()},
        )


class JobsService:
    """The jobs part of the API."""

    def __init__(self, client: Client) -> None:
        self.client = client

    def retrieve(self, job_id: int) -> Job:
        """Fetch the job with the given id."""
        request = self.client.new_request("GET", f"jobs/{job_id}")
        return Job.from_dict(self.client.do_json(request))