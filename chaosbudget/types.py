"""ChaosBudget resource types and their JSON wire form."""

from __future__ import annotations

import copy
from collections.abc import Mapping
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any

GROUP = "chaos.example.com"
VERSION = "v1"
API_VERSION = f"{GROUP}/{VERSION}"
KIND = "ChaosBudget"
LIST_KIND = "ChaosBudgetList"


def _object(data: Any, what: str) -> Mapping[str, Any]:
    if data is None:
        return {}
    if not isinstance(data, Mapping):
        raise ValueError(f"{what} must be an object, got {type(data).__name__}")
    return data


def _get(data: Mapping[str, Any], key: str, kind: type) -> Any:
    """Read ``key`` as ``kind``; a missing or null value gives the zero value."""
    value = data.get(key)
    if value is None:
        return kind()
    accepted = (int, float) if kind is float else (Mapping if kind is dict else kind)
    if not isinstance(value, accepted) or (kind is not bool and isinstance(value, bool)):
        raise ValueError(f"{key!r} must be a {kind.__name__}, got {type(value).__name__}")
    return float(value) if kind is float else value


def _format_time(moment: datetime | None) -> str | None:
    if moment is None:
        return None
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    return moment.astimezone(timezone.utc).strftime("%Y-%m-%dT%H:%M:%SZ")


def _parse_time(value: str) -> datetime | None:
    if not value:
        return None
    text = value[:-1] + "+00:00" if value.endswith(("Z", "z")) else value
    try:
        moment = datetime.fromisoformat(text)
    except ValueError as exc:
        raise ValueError(f"invalid timestamp: {value!r}") from exc
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    return moment.astimezone(timezone.utc)


@dataclass
class TargetSelector:
    """Selects the workloads a budget applies to."""

    namespace: str = ""
    labels: dict[str, str] = field(default_factory=dict)


@dataclass
class BudgetSpec:
    """Kind of budget ("error-rate", "latency", "availability") and its maximum."""

    type: str = ""
    max: float = 0.0


@dataclass
class Policy:
    """A policy applied on top of the budget: "deny", "throttle" or "noop"."""

    type: str = ""


@dataclass
class ChaosBudgetSpec:
    """Desired state of a ChaosBudget."""

    target: TargetSelector = field(default_factory=TargetSelector)
    budget: BudgetSpec = field(default_factory=BudgetSpec)
    window: str = ""
    policies: list[Policy] = field(default_factory=list)


@dataclass
class ChaosBudgetStatus:
    """Observed state of a ChaosBudget."""

    consumed: float = 0.0
    remaining: float = 0.0
    last_updated: datetime | None = None
    allowed: bool = False


def _spec_from_dict(data: Mapping[str, Any]) -> ChaosBudgetSpec:
    target = _get(data, "target", dict)
    labels = _get(target, "labels", dict)
    if not all(isinstance(k, str) and isinstance(v, str) for k, v in labels.items()):
        raise ValueError("'labels' must map strings to strings")
    budget = _get(data, "budget", dict)
    policies = _get(data, "policies", list)
    return ChaosBudgetSpec(
        target=TargetSelector(namespace=_get(target, "namespace", str), labels=dict(labels)),
        budget=BudgetSpec(type=_get(budget, "type", str), max=_get(budget, "max", float)),
        window=_get(data, "window", str),
        policies=[Policy(type=_get(_object(p, "policy"), "type", str)) for p in policies],
    )


def _status_from_dict(data: Mapping[str, Any]) -> ChaosBudgetStatus:
    return ChaosBudgetStatus(
        consumed=_get(data, "consumed", float),
        remaining=_get(data, "remaining", float),
        last_updated=_parse_time(_get(data, "lastUpdated", str)),
        allowed=_get(data, "allowed", bool),
    )


def _type_meta(api_version: str, kind: str) -> dict[str, Any]:
    return {k: v for k, v in (("apiVersion", api_version), ("kind", kind)) if v}


@dataclass
class ChaosBudget:
    """A ChaosBudget resource."""

    metadata: dict[str, Any] = field(default_factory=dict)
    spec: ChaosBudgetSpec = field(default_factory=ChaosBudgetSpec)
    status: ChaosBudgetStatus = field(default_factory=ChaosBudgetStatus)
    api_version: str = API_VERSION
    kind: str = KIND

    @property
    def name(self) -> str:
        return self.metadata.get("name", "")

    @property
    def namespace(self) -> str:
        return self.metadata.get("namespace", "")

    @classmethod
    def from_dict(cls, data: Any) -> ChaosBudget:
        """Build a ChaosBudget from its decoded JSON form."""
        data = _object(data, "ChaosBudget")
        return cls(
            metadata=copy.deepcopy(dict(_get(data, "metadata", dict))),
            spec=_spec_from_dict(_get(data, "spec", dict)),
            status=_status_from_dict(_get(data, "status", dict)),
            api_version=_get(data, "apiVersion", str),
            kind=_get(data, "kind", str),
        )

    def to_dict(self) -> dict[str, Any]:
        """Return the JSON-ready form of this resource."""
        spec, status = self.spec, self.status
        return {
            **_type_meta(self.api_version, self.kind),
            "metadata": copy.deepcopy(self.metadata),
            "spec": {
                "target": {
                    "namespace": spec.target.namespace,
                    "labels": dict(spec.target.labels),
                },
                "budget": {"type": spec.budget.type, "max": spec.budget.max},
                "window": spec.window,
                "policies": [{"type": p.type} for p in spec.policies],
            },
            "status": {
                "consumed": status.consumed,
                "remaining": status.remaining,
                "lastUpdated": _format_time(status.last_updated),
                "allowed": status.allowed,
            },
        }

    def deep_copy(self) -> ChaosBudget:
        """Return an independent copy."""
        return copy.deepcopy(self)


@dataclass
class ChaosBudgetList:
    """A list of ChaosBudget resources."""

    items: list[ChaosBudget] = field(default_factory=list)
    metadata: dict[str, Any] = field(default_factory=dict)
    api_version: str = API_VERSION
    kind: str = LIST_KIND

    def __iter__(self):
        return iter(self.items)

    def __len__(self) -> int:
        return len(self.items)

    @classmethod
    def from_dict(cls, data: Any) -> ChaosBudgetList:
        """Build a ChaosBudgetList from its decoded JSON form."""
        data = _object(data, "ChaosBudgetList")
        return cls(
            items=[ChaosBudget.from_dict(i) for i in _get(data, "items", list)],
            metadata=copy.deepcopy(dict(_get(data, "metadata", dict))),
            api_version=_get(data, "apiVersion", str),
            kind=_get(data, "kind", str),
        )

    def to_dict(self) -> dict[str, Any]:
        """Return the JSON-ready form of this list."""
        return {
            **_type_meta(self.api_version, self.kind),
            "metadata": copy.deepcopy(self.metadata),
            "items": [item.to_dict() for item in self.items],
        }

    def deep_copy(self) -> ChaosBudgetList:
        """Return an independent copy."""
        return copy.deepcopy(self)