############################################################
#
# etlive - ET Live Data Server
#
# metrics.py: Prometheus metrics for the collection loop
#
# Luke Sheneman
# Research Computing and Data Services (RCDS)
# Institute for Interdisciplinary Data Sciences (IIDS)
# University of Idaho
# sheneman@uidaho.edu
#
############################################################

"""Prometheus metrics for polling."""

from prometheus_client import Counter, Gauge, Histogram

POLLS_TOTAL = Counter(
    "etlive_polls_total",
    "Completed node polls",
    ["node", "outcome"],  # success, timeout, connection_failed, http_error, decode_error, error
)
POLLS_SKIPPED = Counter(
    "etlive_polls_skipped_total",
    "Ticks skipped because the node's previous poll was still outstanding",
    ["node"],
)
POLL_DURATION = Histogram(
    "etlive_poll_duration_seconds",
    "Wall-clock duration of a node poll",
    ["node"],
    buckets=(0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0),
)
NODES_ONLINE = Gauge(
    "etlive_nodes_online",
    "Nodes with a cached measurement",
)
POLLS_IN_FLIGHT = Gauge(
    "etlive_polls_in_flight",
    "Node polls currently outstanding",
)
