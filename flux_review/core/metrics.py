from prometheus_client import Counter, Histogram


points_added_total = Counter(
    "flux_points_added_total",
    "Total accepted point submissions",
)

ratings_rejected_total = Counter(
    "flux_ratings_rejected_total",
    "Point submissions rejected, by reason",
    ["reason"],
)

candidates_seeded_total = Counter(
    "flux_candidates_seeded_total",
    "Zero-point score records created by seeding",
)

http_request_duration_seconds = Histogram(
    "flux_http_request_duration_seconds",
    "HTTP request latency",
    ["method", "status"],
)
