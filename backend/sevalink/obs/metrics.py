"""Central registry for Prometheus metrics used across the backend."""

from __future__ import annotations

from prometheus_client import Counter, Gauge, Histogram, Summary


REQUEST_COUNTER = Counter(
	"sevalink_http_requests_total",
	"Total HTTP requests processed",
	["route", "method", "status"],
)

REQUEST_LATENCY = Histogram(
	"sevalink_http_request_duration_seconds",
	"HTTP request latency in seconds",
	["route", "method"],
	buckets=(0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.0, 5.0),
)

MATCH_QUERIES = Counter(
	"sevalink_match_queries_total",
	"Match queries served",
	["kind", "tagged"],
)

MATCH_DEGENERATE = Counter(
	"sevalink_match_degenerate_total",
	"Match queries short-circuited to an empty result",
	["reason"],
)

MATCH_RESULTS = Summary(
	"sevalink_match_results",
	"Match query result sizes",
)

MATCH_CANDIDATES_DROPPED = Counter(
	"sevalink_match_candidates_dropped_total",
	"Candidates returned by the source but dropped before ranking",
	["reason"],
)

LEADERBOARD_RECOMPUTES = Counter(
	"sevalink_leaderboard_recomputes_total",
	"Leaderboard full recomputes",
	["result"],
)

LEADERBOARD_ENTRIES = Gauge(
	"sevalink_leaderboard_entries",
	"Entries in the current leaderboard snapshot",
)

LEADERBOARD_RECOMPUTE_DURATION = Histogram(
	"sevalink_leaderboard_recompute_duration_seconds",
	"Duration of leaderboard recompute jobs",
	buckets=(0.01, 0.05, 0.1, 0.25, 0.5, 1.0, 2.0, 5.0, 10.0),
)


def observe_request(route: str, method: str, status: int, elapsed_seconds: float) -> None:
	REQUEST_COUNTER.labels(route=route, method=method, status=str(status)).inc()
	REQUEST_LATENCY.labels(route=route, method=method).observe(elapsed_seconds)


def inc_match_query(kind: str, tagged: bool) -> None:
	MATCH_QUERIES.labels(kind=kind, tagged="yes" if tagged else "no").inc()


def inc_match_degenerate(reason: str) -> None:
	MATCH_DEGENERATE.labels(reason=reason).inc()


def observe_match_results(count: int) -> None:
	MATCH_RESULTS.observe(count)


def inc_candidates_dropped(reason: str, count: int) -> None:
	if count > 0:
		MATCH_CANDIDATES_DROPPED.labels(reason=reason).inc(count)


def record_leaderboard_recompute(result: str, *, entries: int | None = None, elapsed_seconds: float | None = None) -> None:
	LEADERBOARD_RECOMPUTES.labels(result=result).inc()
	if entries is not None:
		LEADERBOARD_ENTRIES.set(entries)
	if elapsed_seconds is not None:
		LEADERBOARD_RECOMPUTE_DURATION.observe(elapsed_seconds)
