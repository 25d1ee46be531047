"""Prometheus metrics for ORGanizer.

Defines operational metrics for monitoring and alerting.
"""

from prometheus_client import Counter, Histogram

http_request_duration_seconds = Histogram(
    "organizer_http_request_duration_seconds",
    "HTTP request latency in seconds",
    ["method", "route", "status"],
    buckets=[0.01, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0]
)

# Authentication
login_links_sent_total = Counter(
    "organizer_login_links_sent_total",
    "Login link emails queued"
)

logins_total = Counter(
    "organizer_logins_total",
    "Login attempts",
    ["method", "status"]  # method: link|otp, status: success|failed
)

# Organizations
orgs_created_total = Counter(
    "organizer_orgs_created_total",
    "Organizations created"
)

invite_events_total = Counter(
    "organizer_invite_events_total",
    "Invite lifecycle events",
    ["event"]  # created|revoked|accepted|rejected
)

# Payroll
payroll_changes_total = Counter(
    "organizer_payroll_changes_total",
    "Payroll change log entries written",
    ["change_type"]
)

# Secure access
vendor_events_total = Counter(
    "organizer_vendor_events_total",
    "Secure access activity events",
    ["action"]
)
