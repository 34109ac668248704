"""Budget consumption calculation."""

from __future__ import annotations

from chaosbudget.types import BudgetSpec


class Calculator:
    """Turns a metric reading into consumed budget."""

    def calculate(self, spec: BudgetSpec, metric: float) -> float:
        """Return the metric clamped to [0, 1].

        Values above ``spec.max`` are kept; the caller derives a negative
        remaining budget from them.
        """
        return min(max(metric, 0.0), 1.0)