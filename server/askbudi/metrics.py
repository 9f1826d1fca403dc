# server/askbudi/metrics.py
from prometheus_client import Counter

gateway_requests = Counter(
    "askbudi_gateway_requests_total",
    "Gateway requests by endpoint and outcome",
    ["endpoint", "outcome"],
)
usage_record_failures = Counter(
    "askbudi_usage_record_failures_total",
    "Usage entries that could not be written",
)
webhook_events = Counter(
    "askbudi_webhook_events_total",
    "Billing webhook events by type and outcome",
    ["event_type", "outcome"],
)
