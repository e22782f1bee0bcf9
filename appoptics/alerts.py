"""Alerts: policies that notify services when conditions are met."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Mapping

from .client import Client, QueryInfo
from .services import Service
from .tags import Tag


@dataclass
class AlertCondition:
    """One condition on a metric that triggers an alert."""

    id: int = 0
    type: str = ""
    metric_name: str = ""
    threshold: float = 0.0
    summary_function: str = ""
    duration: int = 0
    detect_reset: bool = False
    tags: list[Tag] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any] | None) -> AlertCondition:
        """Build from the API form."""
        data = data or {}
        return cls(
            id=data.get("id") or 0,
            type=data.get("type") or "",
            metric_name=data.get("metric_name") or "",
            threshold=float(data.get("threshold") or 0.0),
            summary_function=data.get("summary_function") or "",
            duration=data.get("duration") or 0,
            detect_reset=bool(data.get("detect_reset") or False),
            tags=[Tag.from_dict(t) for t in data.get("tags") or []],
        )

    def to_dict(self) -> dict[str, Any]:
        """Serialise to the API form; the threshold is always present."""
        data: dict[str, Any] = {}
        if self.id:
            data["id"] = self.id
        if self.type:
            data["type"] = self.type
        if self.metric_name:
            data["metric_name"] = self.metric_name
        data["threshold"] = self.threshold
        if self.summary_function:
            data["summary_function"] = self.summary_function
        if self.duration:
            data["duration"] = self.duration
        if self.detect_reset:
            data["detect_reset"] = True
        if self.tags:
            data["tags"] = [t.to_dict() for t in self.tags]
        return data


def _alert_dict(alert: Alert | AlertRequest, services: list[Any]) -> dict[str, Any]:
    data: dict[str, Any] = {}
    if alert.id:
        data["id"] = alert.id
    if alert.name:
        data["name"] = alert.name
    if alert.description:
        data["description"] = alert.description
    if alert.active is not None:
        data["active"] = alert.active
    if alert.rearm_seconds:
        data["rearm_seconds"] = alert.rearm_seconds
    if alert.conditions:
        data["conditions"] = [c.to_dict() for c in alert.conditions]
    if alert.attributes:
        data["attributes"] = dict(alert.attributes)
    if services:
        data["services"] = services
    if alert.created_at:
        data["created_at"] = alert.created_at
    if alert.updated_at:
        data["updated_at"] = alert.updated_at
    return data


@dataclass
class Alert:
    """An alert as returned by the API."""

    id: int = 0
    name: str = ""
    description: str = ""
    active: bool | None = None
    rearm_seconds: int = 0
    conditions: list[AlertCondition] = field(default_factory=list)
    attributes: dict[str, Any] = field(default_factory=dict)
    services: list[Service] = field(default_factory=list)
    created_at: int = 0
    updated_at: int = 0

    @classmethod
    def from_dict(cls, data: Mapping[str, Any] | None) -> Alert:
        """Build from the API form."""
        data = data or {}
        return cls(
            id=data.get("id") or 0,
            name=data.get("name") or "",
            description=data.get("description") or "",
            active=data.get("active"),
            rearm_seconds=data.get("rearm_seconds") or 0,
            conditions=[AlertCondition.from_dict(c) for c in data.get("conditions") or []],
            attributes=dict(data.get("attributes") or {}),
            services=[Service.from_dict(s) for s in data.get("services") or []],
            created_at=data.get("created_at") or 0,
            updated_at=data.get("updated_at") or 0,
        )

    def to_dict(self) -> dict[str, Any]:
        """Serialise to the API form, leaving out empty fields."""
        return _alert_dict(self, [s.to_dict() for s in self.services])


@dataclass
class AlertRequest:
    """An alert to create or update; services are given by id."""

    id: int = 0
    name: str = ""
    description: str = ""
    active: bool | None = None
    rearm_seconds: int = 0
    conditions: list[AlertCondition] = field(default_factory=list)
    attributes: dict[str, Any] = field(default_factory=dict)
    services: list[int] = field(default_factory=list)
    created_at: int = 0
    updated_at: int = 0

    def to_dict(self) -> dict[str, Any]:
        """Serialise to the API form, leaving out empty fields."""
        return _alert_dict(self, list(self.services))


@dataclass
class AlertStatus:
    """The current state of an alert."""

    alert: Alert = field(default_factory=Alert)
    status: str = ""

    @classmethod
    def from_dict(cls, data: Mapping[str, Any] | None) -> AlertStatus:
        """Build from the API form."""
        data = data or {}
        return cls(alert=Alert.from_dict(data.get("alert")), status=data.get("status") or "")


@dataclass
class AlertsListResponse:
    """A page of alerts with its pagination details."""

    query: QueryInfo = field(default_factory=QueryInfo)
    alerts: list[Alert] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any] | None) -> AlertsListResponse:
        """Build from the API form."""
        data = data or {}
        return cls(
            query=QueryInfo.from_dict(data.get("query")),
            alerts=[Alert.from_dict(a) for a in data.get("alerts") or []],
        )


class AlertsService:
    """The alerts part of the API."""

    def __init__(self, client: Client) -> None:
        self.client = client

    def list(self) -> AlertsListResponse:
        """Fetch all alerts."""
        request = self.client.new_request("GET", "alerts")
        return AlertsListResponse.from_dict(self.client.do_json(request))

    def retrieve(self, alert_id: int) -> Alert:
        """Fetch the alert with the given id."""
        request = self.client.new_request("GET", f"alerts/{alert_id}")
        return Alert.from_dict(self.client.do_json(request))

    def create(self, request: AlertRequest) -> Alert:
        """Create an alert and return it as stored."""
        http_request = self.client.new_request("POST", "alerts", request)
        return Alert.from_dict(self.client.do_json(http_request))

    def update(self, request: AlertRequest) -> None:
        """Replace the alert identified by request.id."""
        http_request = self.client.new_request("PUT", f"alerts/{request.id}", request)
        self.client.do(http_request)

    def associate_to_service(self, alert_id: int, service_id: int) -> None:
        """Attach a service to an alert."""
        request = self.client.new_request(
            "POST", f"alerts/{alert_id}/services", {"service": service_id}
        )
        self.client.do(request)

    def disassociate_from_service(self, alert_id: int, service_id: int) -> None:
        """Detach a service from an alert."""
        request = self.client.new_request("DELETE", f"alerts/{alert_id}/services/{service_id}")
        self.client.do(request)

    def delete(self, alert_id: int) -> None:
        """Delete the alert with the given id."""
        request = self.client.new_request("DELETE", f"alerts/{alert_id}")
        self.client.do(request)

    def status(self, alert_id: int) -> AlertStatus:
        """Fetch the status of an alert."""
        request = self.client.new_request("GET", f"alerts/{alert_id}/status")
        return AlertStatus.from_dict(self.client.do_json(request))