"""HTTP decision API that agents query before injecting chaos."""

from __future__ import annotations

import json
import logging
from collections.abc import Callable, Iterable
from dataclasses import asdict, dataclass
from http import HTTPStatus
from http.server import BaseHTTPRequestHandler, ThreadingHTTPServer
from typing import Any
from urllib.parse import parse_qs, urlsplit

from chaosbudget.types import ChaosBudget

log = logging.getLogger(__name__)

_TEXT = "text/plain; charset=utf-8"


@dataclass
class CheckResponse:
    """Answer to a chaos check."""

    allowed: bool
    remaining: float = 0.0
    reason: str = ""

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


class CheckServer:
    """Answers whether chaos may run against a named ChaosBudget."""

    def __init__(self, list_budgets: Callable[[], Iterable[ChaosBudget]]) -> None:
        self.list_budgets = list_budgets

    def check(self, target: str) -> CheckResponse:
        """Look up ``target`` by budget name and report its status."""
        if not target:
            raise ValueError("missing target parameter")
        found = next((cb for cb in self.list_budgets() if cb.name == target), None)
        if found is None:
            return CheckResponse(allowed=False, reason="ChaosBudget not found for target")
        allowed = found.status.allowed
        return CheckResponse(
            allowed=allowed,
            remaining=found.status.remaining,
            reason="within budget" if allowed else "budget exceeded or denied by policy",
        )

    def handle(self, query: str) -> tuple[int, str, bytes]:
        """Serve one check request; return status, content type and body."""
        target = parse_qs(query or "").get("target", [""])[0]
        if not target:
            return HTTPStatus.BAD_REQUEST, _TEXT, b"missing target parameter\n"
        try:
            response = self.check(target)
        except Exception:
            log.exception("failed to list ChaosBudgets")
            return HTTPStatus.INTERNAL_SERVER_ERROR, _TEXT, b"internal error\n"
        body = (json.dumps(response.to_dict()) + "\n").encode()
        return HTTPStatus.OK, "application/json", body

    def make_http_server(self, host: str, port: int) -> ThreadingHTTPServer:
        """Return an HTTP server exposing ``/check``; the caller runs it."""
        api = self

        class Handler(BaseHTTPRequestHandler):
            def _serve(self) -> None:
                parts = urlsplit(self.path)
                if parts.path == "/check":
                    status, content_type, body = api.handle(parts.query)
                else:
                    status, content_type, body = (
                        HTTPStatus.NOT_FOUND, _TEXT, b"404 page not found\n"
                    )
                self.send_response(status)
                self.send_header("Content-Type", content_type)
                self.send_header("Content-Length", str(len(body)))
                self.end_headers()
                self.wfile.write(body)

            do_GET = do_POST = _serve

            def log_message(self, format: str, *args: Any) -> None:
                log.debug(format, *args)

        return ThreadingHTTPServer((host, port), Handler)