"""Counters for requests sent to the NetBox API server."""

from __future__ import annotations

import threading
from collections import Counter

_SUCCESS = "success"
_FAILURE = "failure"

_lock = threading.Lock()
_netbox_requests_total: Counter[str] = Counter()


def increment_netbox_requests(is_success: bool) -> None:
    """Count one NetBox request under the "success" or "failure" status."""
    status = _SUCCESS if is_success else _FAILURE
    with _lock:
        _netbox_requests_total[status] += 1


def netbox_request_counts() -> dict[str, int]:
    """Return a snapshot of the request counts keyed by status."""
    with _lock:
        return dict(_netbox_requests_total)


def reset_netbox_request_counts() -> None:
    """Forget every counted request."""
    with _lock:
        _netbox_requests_total.clear()