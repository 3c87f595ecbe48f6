from __future__ import annotations

import logging
from typing import Any

from opentelemetry import trace
from opentelemetry.sdk.resources import Resource
from opentelemetry.sdk.trace import TracerProvider

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s %(message)s"

_configured = False
_logging_configured = False
_probe_filter_configured = False


class _ProbeAccessLogFilter(logging.Filter):
    def __init__(self, ignored_paths: tuple[str, ...]) -> None:
        super().__init__()
        self._ignored_paths = {self._strip_query(path).rstrip("/") or "/" for path in ignored_paths}

    @staticmethod
    def _strip_query(path: str) -> str:
        return path.split("?", 1)[0]

    def filter(self, record: logging.LogRecord) -> bool:
        # uvicorn access records carry (client, method, path, http_version, status)
        args: Any = record.args
        if not isinstance(args, tuple) or len(args) < 5:
            return True
        path, status = args[2], args[4]
        if not isinstance(path, str):
            return True
        normalized = self._strip_query(path).rstrip("/") or "/"
        return not (str(status) == "200" and normalized in self._ignored_paths)


def configure_logging(level: str = "INFO") -> None:
    global _logging_configured
    if _logging_configured:
        return
    logging.basicConfig(level=level.upper(), format=LOG_FORMAT)
    _logging_configured = True


def configure_otel(service_name: str) -> None:
    global _configured
    if _configured:
        return
    provider = TracerProvider(resource=Resource.create({"service.name": service_name}))
    trace.set_tracer_provider(provider)
    _configured = True


def configure_probe_access_log_filter(ignored_paths: tuple[str, ...] = ("/healthz", "/readyz")) -> None:
    global _probe_filter_configured
    if _probe_filter_configured:
        return
    logging.getLogger("uvicorn.access").addFilter(_ProbeAccessLogFilter(ignored_paths=ignored_paths))
    _probe_filter_configured = True
