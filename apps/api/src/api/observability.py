from __future__ import annotations

from collections import deque
from dataclasses import asdict, dataclass
from typing import Protocol

from prometheus_client import CollectorRegistry, Counter, Gauge, Histogram, generate_latest

from live_location.metrics import InMemoryLiveLocationMetrics


@dataclass(frozen=True)
class ApiRequestMetric:
    method: str
    path: str
    status_code: int
    duration_ms: float
    trace_id: str


class ApiMetricCollector(Protocol):
    def observe(self, metric: ApiRequestMetric) -> None: ...


class InMemoryApiMetricsCollector(ApiMetricCollector):
    def __init__(self, max_entries: int = 1000) -> None:
        self._metrics: deque[ApiRequestMetric] = deque(maxlen=max_entries)

    def observe(self, metric: ApiRequestMetric) -> None:
        self._metrics.append(metric)

    def snapshot(self) -> list[dict]:
        return [asdict(item) for item in self._metrics]


class PrometheusMetricsExporter(ApiMetricCollector):
    """HTTP request metrics plus the live-location pipeline counters."""

    def __init__(self, live_metrics: InMemoryLiveLocationMetrics | None = None) -> None:
        self._live_metrics = live_metrics
        self._registry = CollectorRegistry()
        self._request_counter = Counter(
            "dashboard_http_requests_total",
            "Total dashboard API HTTP requests",
            labelnames=("method", "path", "status_code"),
            registry=self._registry,
        )
        self._latency_histogram = Histogram(
            "dashboard_http_request_duration_ms",
            "Dashboard API HTTP request latency in milliseconds",
            labelnames=("method", "path"),
            buckets=(5, 10, 25, 50, 100, 250, 500, 1000, 3000),
            registry=self._registry,
        )
        self._samples = Gauge(
            "live_location_samples_total",
            "Position samples grouped by result",
            labelnames=("result",),
            registry=self._registry,
        )
        self._location_errors = Gauge(
            "live_location_errors_total",
            "Position source failures grouped by kind",
            labelnames=("kind",),
            registry=self._registry,
        )
        self._searches = Gauge(
            "facility_searches_total",
            "Applied facility searches grouped by outcome",
            labelnames=("outcome",),
            registry=self._registry,
        )
        self._search_duration = Gauge(
            "facility_search_duration_ms_sum",
            "Total time spent in applied facility searches, in milliseconds",
            labelnames=("outcome",),
            registry=self._registry,
        )
        self._stale_results = Gauge(
            "facility_search_stale_results_total",
            "Facility search completions discarded as stale",
            registry=self._registry,
        )

    def observe(self, metric: ApiRequestMetric) -> None:
        self._request_counter.labels(metric.method, metric.path, str(metric.status_code)).inc()
        self._latency_histogram.labels(metric.method, metric.path).observe(metric.duration_ms)

    def render(self) -> str:
        live = self._live_metrics
        if live is not None:
            for result, count in live.samples_total.items():
                self._samples.labels(result=result).set(count)
            for kind, count in live.location_errors_total.items():
                self._location_errors.labels(kind=kind).set(count)
            for outcome, count in live.searches_total.items():
                self._searches.labels(outcome=outcome).set(count)
            for outcome, total in live.search_duration_ms_sum.items():
                self._search_duration.labels(outcome=outcome).set(total)
            self._stale_results.set(live.stale_results_total)
        return generate_latest(self._registry).decode("utf-8")


class CompositeApiMetricsCollector(ApiMetricCollector):
    def __init__(self, collectors: list[ApiMetricCollector]) -> None:
        self._collectors = collectors

    def observe(self, metric: ApiRequestMetric) -> None:
        for collector in self._collectors:
            collector.observe(metric)
