"""Policy evaluation on top of the remaining budget."""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass


@dataclass(frozen=True)
class Decision:
    """Whether chaos is allowed, and why."""

    allowed: bool
    reason: str


class Evaluator:
    """Applies policies in order to the budget-based decision."""

    def evaluate(self, policies: Iterable[str], remaining: float) -> Decision:
        allowed = remaining > 0
        reason = "within budget" if allowed else "budget exceeded"

        for policy in policies:
            if policy == "deny":
                allowed = False
                reason = "force denied by policy"
            elif policy == "throttle" and allowed:
                reason = "allowed (degraded/throttled)"

        return Decision(allowed=allowed, reason=reason)