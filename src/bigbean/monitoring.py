"""Monitoring metrics for the scheduler."""
from prometheus_client import Counter, Histogram

# Scheduling metrics
cards_shown = Counter(
    "bigbean_cards_shown_total",
    "Total number of cards selected for display",
)

anchors_started = Counter(
    "bigbean_anchors_started_total",
    "Total number of anchors chosen",
    ["source"],  # chain, cold_start
)

words_learnt = Counter(
    "bigbean_words_learnt_total",
    "Total number of words marked learnt",
)

session_completions = Counter(
    "bigbean_session_completions_total",
    "Total number of times the vocabulary was exhausted",
)

# History metrics
retreats = Counter(
    "bigbean_retreats_total",
    "Total number of advances undone",
)

resets = Counter(
    "bigbean_resets_total",
    "Total number of session resets",
)

# Graph metrics
graph_rebuilds = Counter(
    "bigbean_graph_rebuilds_total",
    "Total number of adjacency index builds",
)

bridge_length = Histogram(
    "bigbean_bridge_length_combos",
    "Number of combos in bridges found between two words",
    buckets=[1, 2, 3, 5, 10],
)

# Error metrics
scheduling_errors = Counter(
    "bigbean_scheduling_errors_total",
    "Total number of anchors selected without any combo",
)
