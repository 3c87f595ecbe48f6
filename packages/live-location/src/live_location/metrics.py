from __future__ import annotations

from collections import defaultdict


class InMemoryLiveLocationMetrics:
    def __init__(self) -> None:
        self.samples_total: dict[str, int] = defaultdict(int)
        self.location_errors_total: dict[str, int] = defaultdict(int)
        self.searches_total: dict[str, int] = defaultdict(int)
        self.search_duration_ms_sum: dict[str, float] = defaultdict(float)
        self.stale_results_total = 0

    def record_sample(self, accepted: bool) -> None:
        self.samples_total["accepted" if accepted else "rejected"] += 1

    def record_location_error(self, kind: str) -> None:
        self.location_errors_total[kind] += 1

    def record_search(self, outcome: str, duration_ms: float) -> None:
        self.searches_total[outcome] += 1
        self.search_duration_ms_sum[outcome] += duration_ms

    def record_stale_result(self) -> None:
        self.stale_results_total += 1
