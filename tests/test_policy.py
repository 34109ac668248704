import pytest

from chaosbudget.policy import Decision, Evaluator


@pytest.mark.parametrize(
    "policies, remaining, allowed",
    [
        ([], 0.01, True),
        ([], -0.01, False),
        (["deny"], 0.01, False),
        (["throttle"], 0.01, True),
        (["throttle"], -0.01, False),
        (["throttle", "deny"], 0.01, False),
        (["noop"], 0.01, True),
    ],
    ids=[
        "budget-ok",
        "budget-exceeded",
        "deny-policy",
        "throttle-ok",
        "throttle-exceeded",
        "mixed-deny-wins",
        "noop",
    ],
)
def test_evaluate_allowed(policies, remaining, allowed):
    assert Evaluator().evaluate(policies, remaining).allowed is allowed


def test_reasons():
    ev = Evaluator()
    assert ev.evaluate([], 0.01) == Decision(True, "within budget")
    assert ev.evaluate([], -0.01) == Decision(False, "budget exceeded")
    assert ev.evaluate(["deny"], 0.01).reason == "force denied by policy"
    assert ev.evaluate(["throttle"], 0.01).reason == "allowed (degraded/throttled)"
    assert ev.evaluate(["throttle"], -0.01).reason == "budget exceeded"


def test_zero_remaining_is_denied():
    assert Evaluator().evaluate([], 0.0).allowed is False


def test_deny_then_throttle_keeps_denial():
    decision = Evaluator().evaluate(["deny", "throttle"], 0.5)
    assert decision == Decision(False, "force denied by policy")


def test_unknown_policy_ignored():
    assert Evaluator().evaluate(["bogus"], 0.2) == Decision(True, "within budget")