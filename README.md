# chaosbudget

This package tracks **chaos budgets** for services. It answers one question:
may a chaos experiment run against this target right now?

A chaos budget has these parts:

- a target: a namespace and a set of labels;
- a budget type: `error-rate`, `latency` or `availability`;
- the largest value the budget allows;
- a time window, such as `1h`;
- a list of policies: `deny`, `throttle` or `noop`.

The package reads the current value of the metric from Prometheus. From it, it
works out how much of the budget is used and how much is left. It then applies
the policies to reach a decision.

## Installing

```
pip install .
```

The package needs only the standard library. To run the tests:

```
pip install ".[test]"
pytest
```

## Parts

### `chaosbudget.types`

This module holds the resource model: `ChaosBudget` and `ChaosBudgetList`. Both
have these methods:

- `from_dict` reads the JSON form, with camel-case keys such as `lastUpdated`
  and `apiVersion`. Wrongly typed fields raise `ValueError`.
- `to_dict` writes that form back.
- `deep_copy` returns an independent copy.

`ChaosBudget.name` and `ChaosBudget.namespace` read from `metadata`. A
`ChaosBudgetList` can be iterated over and has a length.

The spec and status records are `ChaosBudgetSpec`, `TargetSelector`,
`BudgetSpec`, `Policy` and `ChaosBudgetStatus`. Timestamps are written as UTC,
in the form `YYYY-MM-DDTHH:MM:SSZ`.

### `chaosbudget.budget`

`Calculator.calculate(spec, metric)` returns the metric reading clamped to
`[0, 1]`. A reading above `spec.max` is kept as it is, so the remaining budget
(`max - consumed`) can become negative.

### `chaosbudget.policy`

`Evaluator.evaluate(policies, remaining)` returns a frozen `Decision` with the
fields `allowed` and `reason`:

- Work is allowed only while `remaining > 0`.
- `deny` always refuses.
- `throttle` leaves an allowed decision allowed, and gives the reason
  `"allowed (degraded/throttled)"`.
- `noop` changes nothing.

Policies are applied in the order given.

### `chaosbudget.metrics`

- `build_query(budget_type, window, labels)` writes the PromQL query for a
  budget type.
- `parse_query_result(payload)` reads a Prometheus instant-query response. It
  returns the first sample, or `0.0` for an empty vector.
- `PrometheusClient(address, timeout=30.0)` sends the query as a POST to
  `<address>/api/v1/query`. Its method `fetch_metric(budget_type, window,
  namespace, labels)` runs the query and returns the value.

Only the labels select the series. The namespace is not added to the query.

Every failure raises `MetricsError`. This covers an unsupported budget type, a
transport error, an error response, and a result that is not a vector. An
address that is not an `http` or `https` URL raises `ValueError`.

### `chaosbudget.controller`

`ChaosBudgetReconciler(store, metrics, budget=None, policy=None,
interval=60.0)` refreshes the status of one budget each time
`reconcile(name)` is called. It returns a `Result`, whose `requeue_after`
gives the seconds until the next check.

- If `store.get` raises `NotFoundError`, the result is `Result()`, with
  `requeue_after` of `0`.
- If the metric cannot be read, the budget is marked as not allowed and
  stored.

### `chaosbudget.server`

`CheckServer(list_budgets)` answers `/check?target=<name>`. The budget is
looked up by name, and the answer is JSON of the form
`{"allowed": ..., "remaining": ..., "reason": ...}`.

- A missing target gives HTTP 400.
- A failure to list the budgets gives HTTP 500.
- An unknown name gives `allowed: false` and the reason `"ChaosBudget not found
  for target"`.

`CheckServer.make_http_server(host, port)` returns a `ThreadingHTTPServer` that
is ready to serve. The caller starts it.

## Example

```python
from chaosbudget.budget import Calculator
from chaosbudget.controller import ChaosBudgetReconciler, NotFoundError
from chaosbudget.policy import Evaluator
from chaosbudget.server import CheckServer
from chaosbudget.types import BudgetSpec, ChaosBudget

spec = BudgetSpec(type="error-rate", max=0.05)
consumed = Calculator().calculate(spec, 0.02)
decision = Evaluator().evaluate(["throttle"], spec.max - consumed)
print(decision.allowed, decision.reason)
# True allowed (degraded/throttled)


class MemoryStore:
    def __init__(self, *budgets):
        self.budgets = {cb.name: cb for cb in budgets}

    def get(self, name):
        try:
            return self.budgets[name].deep_copy()
        except KeyError:
            raise NotFoundError(name) from None

    def update_status(self, budget):
        self.budgets[budget.name] = budget


class FixedMetrics:
    def fetch_metric(self, budget_type, window, namespace, labels):
        return 0.01


cb = ChaosBudget.from_dict({
    "metadata": {"name": "checkout"},
    "spec": {"budget": {"type": "error-rate", "max": 0.05}, "window": "1h"},
})
store = MemoryStore(cb)
ChaosBudgetReconciler(store, FixedMetrics()).reconcile("checkout")

server = CheckServer(lambda: store.budgets.values())
print(server.check("checkout").to_dict())
# {'allowed': True, 'remaining': 0.04, 'reason': 'within budget'}
```

## What this package does not do

There is no command to run and no long-running manager. The package does not
connect to a cluster, watch resources, or schedule reconciles. Some pieces are
left to the caller:

- the store that `ChaosBudgetReconciler` reads from and writes to, through
  `get(name)` and `update_status(budget)`;
- the function that lists budgets for `CheckServer`;
- calling `reconcile` again after `requeue_after` seconds;
- running the HTTP server.

Leader election, health and readiness probes, and a metrics endpoint for the
package itself are not provided.