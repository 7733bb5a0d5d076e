"""Prometheus metrics for xdocs.

Counters for the security relevant paths: logins, uploads, download
decisions and release-workflow actions. Exposed at GET /metrics.
"""

from prometheus_client import Counter

logins_total = Counter(
    "xdocs_logins_total",
    "Login attempts by outcome",
    ["outcome"]  # success|invalid_credentials|not_active
)

uploads_total = Counter(
    "xdocs_uploads_total",
    "Document uploads by outcome",
    ["status"]  # success|error
)

download_decisions_total = Counter(
    "xdocs_download_decisions_total",
    "Download gate decisions",
    ["decision"]  # allowed|forbidden|approval_required
)

release_actions_total = Counter(
    "xdocs_release_actions_total",
    "Download request workflow actions",
    ["action"]  # created|conflict|approved|rejected
)


def record_login(outcome: str) -> None:
    logins_total.labels(outcome=outcome).inc()


def record_upload(status: str) -> None:
    uploads_total.labels(status=status).inc()


def record_download_decision(decision: str) -> None:
    download_decisions_total.labels(decision=decision).inc()


def record_release_action(action: str) -> None:
    release_actions_total.labels(action=action).inc()
