"""Tags and the encoding of metric names with tags into a single key."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Mapping

METRIC_TAG_SEPARATOR = "\x00"


@dataclass
class Tag:
    """A tag as used in measurements, charts and alert conditions."""

    name: str = ""
    values: list[str] = field(default_factory=list)
    grouped: bool = False
    dynamic: bool = False

    def to_dict(self) -> dict[str, Any]:
        """Serialise to the API form, leaving out empty fields."""
        data: dict[str, Any] = {}
        if self.name:
            data["name"] = self.name
        if self.values:
            data["values"] = list(self.values)
        if self.grouped:
            data["grouped"] = True
        if self.dynamic:
            data["dynamic"] = True
        return data

    @classmethod
    def from_dict(cls, data: Mapping[str, Any] | None) -> Tag:
        """Build a Tag from its API form."""
        data = data or {}
        return cls(
            name=data.get("name") or "",
            values=list(data.get("values") or []),
            grouped=bool(data.get("grouped") or False),
            dynamic=bool(data.get("dynamic") or False),
        )


def _format_value(value: Any) -> str:
    if value is None:
        return "<nil>"
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float) and value.is_integer() and abs(value) < 1e21:
        return str(int(value))
    return str(value)


def metric_with_tags(name: str, tags: Mapping[str, Any] | None) -> str:
    """Encode a metric name and its tags, sorted by tag name, as one key."""
    if tags is None:
        return name
    parts = [name]
    for key in sorted(tags):
        parts.append(key)
        parts.append(_format_value(tags[key]))
    return METRIC_TAG_SEPARATOR.join(parts)


def parse_measurement_key(key: str) -> tuple[str, dict[str, str] | None]:
    """Split a key made by metric_with_tags back into name and tags."""
    parts = key.split(METRIC_TAG_SEPARATOR)
    name = parts[0]
    if len(parts) < 3:
        return name, None
    rest = parts[1:]
    if len(rest) % 2:
        raise ValueError(f"measurement key has a tag without a value: {key!r}")
    return name, dict(zip(rest[::2], rest[1::2]))