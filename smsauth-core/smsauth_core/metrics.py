"""
SMS Authorization Metrics
=========================
Prometheus counters for challenge issuance, delivery and verification.
"""

from prometheus_client import CollectorRegistry, Counter, generate_latest

SMSAUTH_REGISTRY = CollectorRegistry()

CHALLENGES_ISSUED = Counter(
    name="smsauth_challenges_issued_total",
    documentation="Issued SMS authorization challenges",
    labelnames=["path"],
    registry=SMSAUTH_REGISTRY,
)

SMS_DELIVERY = Counter(
    name="smsauth_sms_delivery_total",
    documentation="Authorization SMS delivery outcomes",
    labelnames=["result"],
    registry=SMSAUTH_REGISTRY,
)

VERIFICATIONS = Counter(
    name="smsauth_verifications_total",
    documentation="SMS authorization code verifications by outcome",
    labelnames=["outcome"],
    registry=SMSAUTH_REGISTRY,
)

COMBINED_VERIFICATIONS = Counter(
    name="smsauth_combined_verifications_total",
    documentation="Combined SMS code and password verifications by outcome",
    labelnames=["outcome"],
    registry=SMSAUTH_REGISTRY,
)


def get_metrics_text() -> bytes:
    """Export metrics in Prometheus text format."""
    return generate_latest(SMSAUTH_REGISTRY)
