"""Monitoring configuration for the word farm."""
from prometheus_client import Counter, Gauge, start_http_server

# Farm metrics
batches_planted = Counter(
    "wordfarm_batches_planted_total",
    "Total number of batches planted on the farm",
)

planted_plots = Gauge(
    "wordfarm_planted_plots",
    "Number of plots currently holding a batch",
)

# Assessment metrics
assessments_completed = Counter(
    "wordfarm_assessments_completed_total",
    "Total number of assessments scored",
    ["mode"],
)

words_scored = Counter(
    "wordfarm_words_scored_total",
    "Total number of word attempts scored",
    ["outcome"],
)

sessions_abandoned = Counter(
    "wordfarm_sessions_abandoned_total",
    "Total number of sessions abandoned before scoring",
    ["mode"],
)

# Source metrics
source_fetch_errors = Counter(
    "wordfarm_source_fetch_errors_total",
    "Total number of failed word source fetches",
    ["error_type"],
)

# Store metrics
store_errors = Counter(
    "wordfarm_store_errors_total",
    "Total number of persisted state errors",
    ["error_type"],
)


def start_monitoring(port: int = 9090) -> None:
    """Start the Prometheus metrics server."""
    start_http_server(port)
