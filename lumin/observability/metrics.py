"""
Prometheus metrics definitions for LUMIN.

Metrics are organized by category:
- HTTP/API metrics: Request counts, latency, in-flight requests
- Error metrics: Handled errors by type, unhandled exceptions
- Gamification metrics: XP, badges, streak milestones, challenges
- Journal metrics: Entries and goals created
- AI metrics: Coach calls and fallbacks

Metrics are exposed at the /metrics endpoint for Prometheus scraping.
"""

import logging
from prometheus_client import Counter, Histogram, Info

logger = logging.getLogger(__name__)

# =============================================================================
# HTTP/API Metrics
# =============================================================================

http_requests_total = Counter(
    "lumin_http_requests_total",
    "Total HTTP requests received",
    ["method", "endpoint", "status"],
)

http_request_duration_seconds = Histogram(
    "lumin_http_request_duration_seconds",
    "HTTP request latency in seconds",
    ["method", "endpoint"],
    buckets=[0.01, 0.05, 0.1, 0.5, 1.0, 2.0, 5.0, 10.0],
)

# =============================================================================
# Error Metrics
# =============================================================================

errors_total = Counter(
    "lumin_errors_total",
    "Errors returned to clients, by exception type",
    ["error_type", "status"],
)

exceptions_unhandled_total = Counter(
    "lumin_exceptions_unhandled_total",
    "Exceptions that reached the catch-all handler",
    ["exception_type"],
)

# =============================================================================
# Gamification Metrics
# =============================================================================

xp_awarded_total = Counter(
    "lumin_xp_awarded_total",
    "Total XP awarded",
    ["reason"],
)

level_ups_total = Counter(
    "lumin_level_ups_total",
    "Number of level-ups",
)

badges_awarded_total = Counter(
    "lumin_badges_awarded_total",
    "Badges awarded",
    ["badge"],
)

streak_milestones_total = Counter(
    "lumin_streak_milestones_total",
    "Streak milestones reached",
    ["milestone"],
)

challenges_completed_total = Counter(
    "lumin_challenges_completed_total",
    "Daily challenges completed",
    ["challenge_type", "source"],
)

# =============================================================================
# Journal Metrics
# =============================================================================

entries_created_total = Counter(
    "lumin_entries_created_total",
    "Journal entries created",
    ["mood"],
)

goals_created_total = Counter(
    "lumin_goals_created_total",
    "Goals created",
    ["category"],
)

# =============================================================================
# AI Metrics
# =============================================================================

ai_requests_total = Counter(
    "lumin_ai_requests_total",
    "AI coach requests by operation and outcome",
    ["operation", "outcome"],
)

ai_request_duration_seconds = Histogram(
    "lumin_ai_request_duration_seconds",
    "AI model call latency in seconds",
    ["operation"],
    buckets=[0.5, 1.0, 2.0, 5.0, 10.0, 30.0],
)

# =============================================================================
# Application Info
# =============================================================================

app_info = Info(
    "lumin_app",
    "Application information",
)


def init_metrics(version: str, environment: str) -> None:
    """Record static application info"""
    app_info.info({"version": version, "environment": environment})
    logger.info("Prometheus metrics initialized")
