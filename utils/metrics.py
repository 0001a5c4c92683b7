"""Prometheus metrics, exported at GET /metrics.

The default registry also carries the process, platform and GC
collectors that prometheus_client registers on import.
"""

from prometheus_client import Counter

JOBS_TOTAL = Counter(
    "shrinkray_jobs_total",
    "Total jobs processed",
    ["type", "status"],
)
