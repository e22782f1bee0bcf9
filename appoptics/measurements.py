"""Measurements, batches of them, and the service that posts them."""

from __future__ import annotations

import time
from dataclasses import dataclass, field
from typing import Any

import requests

from .client import Client

AGGREGATION_KEY = "aggregate"


@dataclass
class Measurement:
    """A single timeseries value for a metric."""

    name: str = ""
    tags: dict[str, str] = field(default_factory=dict)
    value: Any = None
    time: int = 0
    count: Any = None
    sum: Any = None
    min: Any = None
    max: Any = None
    last: Any = None
    attributes: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        """Serialise to the API form, leaving out unset fields."""
        data: dict[str, Any] = {"name": self.name}
        if self.tags:
            data["tags"] = dict(self.tags)
        if self.value is not None:
            data["value"] = self.value
        if self.time:
            data["time"] = self.time
        for key in ("count", "sum", "min", "max", "last"):
            val = getattr(self, key)
            if val is not None:
                data[key] = val
        if self.attributes:
            data["attributes"] = dict(self.attributes)
        return data


def new_measurement(name: str) -> Measurement:
    """A Measurement with the given name and an empty attributes map."""
    return Measurement(name=name, attributes={})


@dataclass
class MeasurementsBatch:
    """Measurements posted together, optionally sharing period, time and tags."""

    measurements: list[Measurement] = field(default_factory=list)
    period: int = 0
    time: int = 0
    tags: dict[str, str] | None = None

    def to_dict(self) -> dict[str, Any]:
        """Serialise to the API form."""
        data: dict[str, Any] = {}
        if self.measurements:
            data["measurements"] = [m.to_dict() for m in self.measurements]
        if self.period:
            data["period"] = self.period
        data["time"] = self.time
        if self.tags is not None:
            data["tags"] = dict(self.tags)
        return data


def new_measurements_batch(
    measurements: list[Measurement], tags: dict[str, str] | None = None
) -> MeasurementsBatch:
    """A batch stamped with the current Unix time."""
    return MeasurementsBatch(measurements=measurements, tags=tags, time=int(time.time()))


class MeasurementsService:
    """The measurements part of the API."""

    def __init__(self, client: Client) -> None:
        self.client = client

    def create(self, batch: MeasurementsBatch) -> requests.Response:
        """Post a batch of measurements."""
        request = self.client.new_request("POST", "measurements", batch)
        return self.client.do(request)