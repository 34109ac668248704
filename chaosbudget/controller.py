"""Reconciliation of ChaosBudget resources."""

from __future__ import annotations

import logging
from collections.abc import Callable, Mapping
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Protocol

from chaosbudget.budget import Calculator
from chaosbudget.policy import Evaluator
from chaosbudget.types import ChaosBudget

log = logging.getLogger(__name__)


class NotFoundError(LookupError):
    """Raised by a store when the requested ChaosBudget does not exist."""


class ChaosBudgetStore(Protocol):
    def get(self, name: str) -> ChaosBudget: ...

    def update_status(self, budget: ChaosBudget) -> None: ...


class MetricsSource(Protocol):
    def fetch_metric(
        self, budget_type: str, window: str, namespace: str, labels: Mapping[str, str]
    ) -> float: ...


@dataclass(frozen=True)
class Result:
    """Outcome of one reconcile: seconds until the next one, 0 for none."""

    requeue_after: float = 0.0


def _now() -> datetime:
    return datetime.now(timezone.utc)


class ChaosBudgetReconciler:
    """Brings a ChaosBudget's status in line with its measured consumption."""

    def __init__(
        self,
        store: ChaosBudgetStore,
        metrics: MetricsSource,
        budget: Calculator | None = None,
        policy: Evaluator | None = None,
        interval: float = 60.0,
        clock: Callable[[], datetime] = _now,
    ) -> None:
        self.store = store
        self.metrics = metrics
        self.budget = budget or Calculator()
        self.policy = policy or Evaluator()
        self.interval = interval
        self._clock = clock

    def reconcile(self, name: str) -> Result:
        """Recompute and store the status of the budget called ``name``."""
        try:
            cb = self.store.get(name)
        except NotFoundError:
            return Result()

        log.info("Reconciling ChaosBudget %s", cb.name)
        spec = cb.spec
        try:
            metric = self.metrics.fetch_metric(
                spec.budget.type, spec.window, spec.target.namespace, spec.target.labels
            )
        except Exception:
            log.exception("Failed to fetch metrics, defaulting to denied")
            cb.status.allowed = False
            cb.status.last_updated = self._clock()
            self.store.update_status(cb)
            return Result(requeue_after=self.interval)

        consumed = self.budget.calculate(spec.budget, metric)
        remaining = spec.budget.max - consumed
        decision = self.policy.evaluate([p.type for p in spec.policies], remaining)

        cb.status.consumed = consumed
        cb.status.remaining = remaining
        cb.status.allowed = decision.allowed
        cb.status.last_updated = self._clock()

        log.info(
            "Updating status consumed=%s remaining=%s allowed=%s reason=%s",
            consumed, remaining, decision.allowed, decision.reason,
        )
        self.store.update_status(cb)
        return Result(requeue_after=self.interval)