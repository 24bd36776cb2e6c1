"""Central registry for Prometheus metrics used across the backend."""

from __future__ import annotations

from prometheus_client import Counter, Gauge, Histogram

REQUEST_COUNTER = Counter(
	"ic_http_requests_total",
	"Total HTTP requests processed",
	["route", "method", "status"],
)

REQUEST_LATENCY = Histogram(
	"ic_http_request_duration_seconds",
	"HTTP request latency in seconds",
	["route", "method"],
	buckets=(0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.0, 5.0),
)

SOCKET_CLIENTS = Gauge(
	"ic_socketio_clients",
	"Active Socket.IO clients per namespace",
	["namespace"],
)

SOCKET_EVENTS = Counter(
	"ic_socketio_events_total",
	"Socket.IO events handled or emitted per namespace",
	["namespace", "event"],
)

ONLINE_USERS = Gauge(
	"ic_presence_online_users",
	"Distinct users with at least one live socket",
)

MATCH_QUERIES = Counter(
	"ic_match_queries_total",
	"People match queries served",
)

MATCH_RESULTS = Histogram(
	"ic_match_results",
	"Number of matches returned per query",
	buckets=(0, 1, 2, 5, 10, 20, 50),
)

GROUP_RECOMMENDATION_QUERIES = Counter(
	"ic_group_recommendation_queries_total",
	"Group recommendation queries served",
)

MESSAGES_SENT = Counter(
	"ic_messages_sent_total",
	"Messages persisted",
	["kind"],
)

IDENTITY_EVENTS = Counter(
	"ic_identity_events_total",
	"Identity lifecycle events",
	["event", "result"],
)

MEMBERSHIP_CHANGES = Counter(
	"ic_membership_changes_total",
	"Group and event membership changes",
	["resource", "action"],
)

BACKEND_UP = Gauge(
	"ic_backend_up",
	"Dependency readiness (1 ok, 0 failing)",
	["backend"],
)


def observe_request(route: str, method: str, status: int, elapsed_seconds: float) -> None:
	REQUEST_COUNTER.labels(route=route, method=method, status=str(status)).inc()
	REQUEST_LATENCY.labels(route=route, method=method).observe(elapsed_seconds)


def socket_connected(namespace: str) -> None:
	SOCKET_CLIENTS.labels(namespace=namespace).inc()


def socket_disconnected(namespace: str) -> None:
	SOCKET_CLIENTS.labels(namespace=namespace).dec()


def socket_event(namespace: str, event: str) -> None:
	SOCKET_EVENTS.labels(namespace=namespace, event=event).inc()


def set_online_users(count: int) -> None:
	ONLINE_USERS.set(float(count))


def observe_matches(count: int) -> None:
	MATCH_QUERIES.inc()
	MATCH_RESULTS.observe(count)


def inc_group_recommendations() -> None:
	GROUP_RECOMMENDATION_QUERIES.inc()


def inc_message_sent(kind: str) -> None:
	MESSAGES_SENT.labels(kind=kind).inc()


def inc_identity(event: str, result: str = "ok") -> None:
	IDENTITY_EVENTS.labels(event=event, result=result).inc()


def inc_membership(resource: str, action: str) -> None:
	MEMBERSHIP_CHANGES.labels(resource=resource, action=action).inc()


def mark_backend(backend: str, ok: bool) -> None:
	BACKEND_UP.labels(backend=backend).set(1.0 if ok else 0.0)
