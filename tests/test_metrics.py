import json
import threading
import urllib.parse
from http.server import BaseHTTPRequestHandler, ThreadingHTTPServer

import pytest

from chaosbudget.metrics import (
    MetricsError,
    PrometheusClient,
    build_query,
    parse_query_result,
)


def _vector(*values):
    return {
        "status": "success",
        "data": {
            "resultType": "vector",
            "result": [{"metric": {}, "value": [1.0, v]} for v in values],
        },
    }


@pytest.fixture
def prom_server():
    state = {"status": 200, "payload": _vector("0.25"), "requests": []}

    class Handler(BaseHTTPRequestHandler):
        def do_POST(self):
            length = int(self.headers.get("Content-Length", 0))
            body = self.rfile.read(length).decode()
            state["requests"].append((self.path, urllib.parse.parse_qs(body)))
            data = json.dumps(state["payload"]).encode()
            self.send_response(state["status"])
            self.send_header("Content-Type", "application/json")
            self.send_header("Content-Length", str(len(data)))
            self.end_headers()
            self.wfile.write(data)

        def log_message(self, *args):
            pass

    server = ThreadingHTTPServer(("127.0.0.1", 0), Handler)
    thread = threading.Thread(target=server.serve_forever, daemon=True)
    thread.start()
    host, port = server.server_address[:2]
    try:
        yield f"http://{host}:{port}", state
    finally:
        server.shutdown()
        server.server_close()


def test_build_query_latency():
    query = build_query("latency", "1h", {"app": "foo"})
    assert query == (
        'histogram_quantile(0.95, sum(rate(http_request_duration_seconds_bucket'
        '{app="foo"}[1h])) by (le))'
    )


def test_build_query_error_rate():
    query = build_query("error-rate", "1h", {"app": "foo"})
    assert query == (
        'sum(rate(http_requests_total{status=~"5..",app="foo"}[1h]))'
        ' / sum(rate(http_requests_total{app="foo"}[1h]))'
    )


def test_build_query_availability_uses_success_filter():
    query = build_query("availability", "30m", {"app": "foo"})
    assert query.startswith('sum(rate(http_requests_total{status!~"5..",')
    assert query.count("[30m]") == 2
    assert query.count('app="foo"') == 2


def test_build_query_keeps_label_order():
    query = build_query("latency", "5m", {"app": "foo", "tier": "web"})
    assert 'app="foo",tier="web"' in query


def test_build_query_unsupported_type():
    with pytest.raises(MetricsError, match="unsupported budget type: bogus"):
        build_query("bogus", "1h", {})


def test_parse_first_sample():
    assert parse_query_result(_vector("0.25", "0.75")) == 0.25


def test_parse_empty_vector_is_zero():
    assert parse_query_result(_vector()) == 0.0


def test_parse_rejects_other_result_types():
    payload = {"status": "success", "data": {"resultType": "matrix", "result": []}}
    with pytest.raises(MetricsError, match="unexpected metric result type"):
        parse_query_result(payload)


def test_parse_error_status():
    payload = {"status": "error", "errorType": "bad_data", "error": "parse failure"}
    with pytest.raises(MetricsError, match="parse failure"):
        parse_query_result(payload)


def test_invalid_address():
    with pytest.raises(ValueError):
        PrometheusClient("not a url")


def test_fetch_metric_posts_query(prom_server):
    address, state = prom_server
    client = PrometheusClient(address, clock=lambda: 1700000000.0)
    value = client.fetch_metric("latency", "1h", "default", {"app": "foo"})
    assert value == 0.25
    path, form = state["requests"][0]
    assert path == "/api/v1/query"
    assert form["query"] == [build_query("latency", "1h", {"app": "foo"})]
    assert float(form["time"][0]) == 1700000000.0


def test_fetch_metric_server_error(prom_server):
    address, state = prom_server
    state["status"] = 400
    state["payload"] = {"status": "error", "errorType": "bad_data", "error": "boom"}
    client = PrometheusClient(address)
    with pytest.raises(MetricsError, match="boom"):
        client.fetch_metric("latency", "1h", "default", {"app": "foo"})


def test_fetch_metric_unsupported_type_sends_nothing(prom_server):
    address, state = prom_server
    client = PrometheusClient(address)
    with pytest.raises(MetricsError, match="unsupported budget type"):
        client.fetch_metric("bogus", "1h", "default", {})
    assert state["requests"] == []