"""Budget metrics read from a Prometheus server."""

from __future__ import annotations

import json
import time
import urllib.error
import urllib.parse
import urllib.request
from collections.abc import Callable, Mapping
from typing import Any

_QUERIES = {
    "error-rate": (
        'sum(rate(http_requests_total{{status=~"5..",{labels}}}[{window}]))'
        " / sum(rate(http_requests_total{{{labels}}}[{window}]))"
    ),
    "latency": (
        "histogram_quantile(0.95, sum(rate("
        "http_request_duration_seconds_bucket{{{labels}}}[{window}])) by (le))"
    ),
    "availability": (
        'sum(rate(http_requests_total{{status!~"5..",{labels}}}[{window}]))'
        " / sum(rate(http_requests_total{{{labels}}}[{window}]))"
    ),
}


class MetricsError(Exception):
    """Raised when a metric cannot be queried or its result understood."""


def build_query(budget_type: str, window: str, labels: Mapping[str, str] | None) -> str:
    """Return the PromQL query measuring ``budget_type`` over ``window``."""
    if budget_type not in _QUERIES:
        raise MetricsError(f"unsupported budget type: {budget_type}")
    selector = ",".join(f'{key}="{value}"' for key, value in (labels or {}).items())
    return _QUERIES[budget_type].format(labels=selector, window=window)


def parse_query_result(payload: Any) -> float:
    """Return the first sample of an instant-query response; an empty vector is 0."""
    if not isinstance(payload, Mapping) or not isinstance(payload.get("data"), Mapping):
        if isinstance(payload, Mapping) and payload.get("status") == "error":
            raise MetricsError(
                f"{payload.get('errorType') or 'error'}: {payload.get('error') or 'query failed'}"
            )
        raise MetricsError("malformed query response")
    if payload.get("status") != "success":
        raise MetricsError(
            f"{payload.get('errorType') or 'error'}: {payload.get('error') or 'query failed'}"
        )
    data = payload["data"]
    if data.get("resultType") != "vector":
        raise MetricsError(f"unexpected metric result type: {data.get('resultType')}")
    result = data.get("result") or []
    if not result:
        return 0.0
    try:
        return float(result[0]["value"][1])
    except (KeyError, IndexError, TypeError, ValueError) as exc:
        raise MetricsError(f"malformed sample in query response: {exc}") from exc


class PrometheusClient:
    """Queries a Prometheus server for budget metrics."""

    def __init__(
        self,
        address: str,
        timeout: float = 30.0,
        clock: Callable[[], float] = time.time,
    ) -> None:
        parts = urllib.parse.urlsplit(address)
        if parts.scheme not in ("http", "https") or not parts.netloc:
            raise ValueError(f"invalid Prometheus address: {address!r}")
        self.address = address.rstrip("/")
        self.timeout = timeout
        self._clock = clock

    def fetch_metric(
        self,
        budget_type: str,
        window: str,
        namespace: str,
        labels: Mapping[str, str] | None,
    ) -> float:
        """Run the query for ``budget_type`` and return its first sample.

        Only ``labels`` select the series; ``namespace`` is not added to the query.
        """
        query = build_query(budget_type, window, labels)
        body = urllib.parse.urlencode({"query": query, "time": f"{self._clock():.3f}"})
        request = urllib.request.Request(
            f"{self.address}/api/v1/query",
            data=body.encode(),
            method="POST",
            headers={"Content-Type": "application/x-www-form-urlencoded"},
        )
        try:
            with urllib.request.urlopen(request, timeout=self.timeout) as response:
                raw = response.read()
        except urllib.error.HTTPError as exc:
            try:
                payload = json.loads(exc.read())
            except ValueError:
                payload = None
            if isinstance(payload, Mapping) and payload.get("status") == "error":
                return parse_query_result(payload)
            raise MetricsError(f"prometheus returned HTTP {exc.code}") from exc
        except OSError as exc:
            raise MetricsError(f"prometheus request failed: {exc}") from exc
        try:
            payload = json.loads(raw)
        except ValueError as exc:
            raise MetricsError("prometheus returned invalid JSON") from exc
        return parse_query_result(payload)