"""
Customer Scoring

RFM scoring, rule-based segmentation, lifetime value prediction and churn
risk for a single customer. Pure functions over already-aggregated order
statistics; see ``analyzer`` for the frame-level batch.
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Optional, Tuple

# Fixed 12 month projection horizon for CLV
CLV_HORIZON_MONTHS = 12


class CustomerSegment(str, Enum):
    VIP = "vip"
    CHAMPION = "champion"
    LOYAL = "loyal"
    AT_RISK = "at_risk"
    CHURNED = "churned"
    NEW = "new"
    REGULAR = "regular"


class RiskLevel(str, Enum):
    VERY_HIGH = "very_high"
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"
    VERY_LOW = "very_low"


class Confidence(str, Enum):
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


@dataclass(frozen=True)
class RFMResult:
    """Recency/frequency/monetary metrics and their 1-5 scores"""
    recency: int = 0  # days since last eligible order
    frequency: int = 0  # eligible orders in the last 12 months
    monetary: float = 0.0  # revenue of those orders
    recency_score: int = 1
    frequency_score: int = 1
    monetary_score: int = 1
    rfm_score: int = 111
    last_purchase_at: Optional[datetime] = None
    total_orders: int = 0
    total_revenue: float = 0.0
    average_order_value: float = 0.0

    @property
    def has_history(self) -> bool:
        return self.total_orders > 0


@dataclass(frozen=True)
class SegmentProfile:
    segment: CustomerSegment
    name: str
    priority: str
    description: str
    recommendations: Tuple[str, ...]
    churn_risk: Optional[RiskLevel] = None


@dataclass(frozen=True)
class CLVPrediction:
    predicted_clv: int
    confidence: Confidence
    method: str
    average_order_value: float = 0.0
    predicted_future_purchases: float = 0.0
    recency_factor: float = 0.0
    customer_age_months: float = 0.0


@dataclass(frozen=True)
class ChurnRisk:
    risk_score: int
    risk_level: RiskLevel
    risk_factors: Tuple[str, ...]
    days_until_churn: int
    recommended_actions: Tuple[str, ...] = field(default_factory=tuple)


SEGMENT_PROFILES = {
    CustomerSegment.VIP: SegmentProfile(
        CustomerSegment.VIP, "VIP Customer", "high",
        "High-value, frequent, recent customers",
        ("Offer exclusive products", "Provide priority support", "Send personalized offers", "Invite to loyalty program"),
    ),
    CustomerSegment.CHAMPION: SegmentProfile(
        CustomerSegment.CHAMPION, "Champion", "high",
        "Best customers - frequent and high value",
        ("Upsell complementary products", "Request testimonials", "Referral program", "Premium support"),
    ),
    CustomerSegment.LOYAL: SegmentProfile(
        CustomerSegment.LOYAL, "Loyal Customer", "medium-high",
        "Regular customers with good purchase history",
        ("Reward loyalty", "Cross-sell products", "Engage regularly", "Special discounts"),
    ),
    CustomerSegment.AT_RISK: SegmentProfile(
        CustomerSegment.AT_RISK, "At-Risk Customer", "high",
        "Previously active but haven't purchased recently",
        ("Re-engagement campaign", "Special comeback offer", "Survey to understand why", "Personal outreach"),
        churn_risk=RiskLevel.HIGH,
    ),
    CustomerSegment.CHURNED: SegmentProfile(
        CustomerSegment.CHURNED, "Churned Customer", "medium",
        "Inactive for a long time",
        ("Win-back campaign", "Deep discount offers", "Survey for feedback", "New product announcements"),
        churn_risk=RiskLevel.VERY_HIGH,
    ),
    CustomerSegment.NEW: SegmentProfile(
        CustomerSegment.NEW, "New Customer", "medium",
        "Recent first-time customers",
        ("Welcome series", "Onboarding support", "First purchase discount", "Educational content"),
    ),
    CustomerSegment.REGULAR: SegmentProfile(
        CustomerSegment.REGULAR, "Regular Customer", "medium",
        "Average customers with moderate activity",
        ("Regular engagement", "Product recommendations", "Seasonal promotions", "Newsletter updates"),
    ),
}


# =============================================================================
# RFM
# =============================================================================

def recency_score(days: int) -> int:
    if days <= 30:
        return 5
    if days <= 60:
        return 4
    if days <= 90:
        return 3
    if days <= 180:
        return 2
    return 1


def frequency_score(frequency: int) -> int:
    if frequency >= 20:
        return 5
    if frequency >= 10:
        return 4
    if frequency >= 5:
        return 3
    if frequency >= 2:
        return 2
    return 1


def monetary_score(monetary: float) -> int:
    if monetary >= 100000:
        return 5
    if monetary >= 50000:
        return 4
    if monetary >= 20000:
        return 3
    if monetary >= 5000:
        return 2
    return 1


def score_rfm(
    recency: int,
    frequency: int,
    monetary: float,
    total_orders: int,
    total_revenue: float,
    last_purchase_at: Optional[datetime] = None,
) -> RFMResult:
    """
    Score aggregated order statistics.

    A customer without eligible orders gets the empty result (scores 1/1/1).
    """
    if total_orders == 0:
        return RFMResult()

    r, f, m = recency_score(recency), frequency_score(frequency), monetary_score(monetary)
    return RFMResult(
        recency=recency,
        frequency=frequency,
        monetary=monetary,
        recency_score=r,
        frequency_score=f,
        monetary_score=m,
        rfm_score=int(f"{r}{f}{m}"),
        last_purchase_at=last_purchase_at,
        total_orders=total_orders,
        total_revenue=total_revenue,
        average_order_value=monetary / frequency if frequency > 0 else 0.0,
    )


def segment_customer(rfm: RFMResult) -> SegmentProfile:
    """First matching segment rule wins"""
    r, f, m = rfm.recency_score, rfm.frequency_score, rfm.monetary_score

    if r >= 4 and f >= 4 and m >= 4:
        segment = CustomerSegment.VIP
    elif f >= 4 and m >= 4 and r >= 3:
        segment = CustomerSegment.CHAMPION
    elif f >= 4 and r >= 3:
        segment = CustomerSegment.LOYAL
    elif r <= 2 and (f >= 3 or m >= 3):
        segment = CustomerSegment.AT_RISK
    elif r <= 1 and f <= 2 and m <= 2:
        segment = CustomerSegment.CHURNED
    elif r >= 4 and f <= 2:
        segment = CustomerSegment.NEW
    else:
        segment = CustomerSegment.REGULAR
    return SEGMENT_PROFILES[segment]


# =============================================================================
# CLV
# =============================================================================

def recency_factor(recency: int) -> float:
    """Likelihood weight that a customer keeps buying"""
    if recency <= 30:
        return 1.0
    if recency <= 60:
        return 0.9
    if recency <= 90:
        return 0.7
    if recency <= 180:
        return 0.5
    return 0.3


def clv_confidence(customer_age_days: int, frequency: int, recency: int) -> Confidence:
    if frequency >= 10 and customer_age_days >= 180:
        confidence = Confidence.HIGH
    elif frequency >= 5 and customer_age_days >= 90:
        confidence = Confidence.MEDIUM
    else:
        confidence = Confidence.LOW

    if recency <= 30 and confidence == Confidence.MEDIUM:
        confidence = Confidence.HIGH
    elif recency > 180 and confidence == Confidence.HIGH:
        confidence = Confidence.MEDIUM
    return confidence


def predict_clv(rfm: RFMResult, customer_age_days: Optional[int]) -> CLVPrediction:
    """
    Twelve month value projection from purchase rate and average order value.

    Args:
        rfm: Scored order statistics
        customer_age_days: Days since the customer's first order, None when
            the customer never ordered
    """
    if customer_age_days is None:
        return CLVPrediction(predicted_clv=0, confidence=Confidence.LOW, method="no_history")

    months_active = max(customer_age_days / 30, 1)
    factor = recency_factor(rfm.recency)
    purchases = rfm.frequency / months_active * CLV_HORIZON_MONTHS * factor

    return CLVPrediction(
        predicted_clv=round(purchases * rfm.average_order_value),
        confidence=clv_confidence(customer_age_days, rfm.frequency, rfm.recency),
        method="rfm_based",
        average_order_value=rfm.average_order_value,
        predicted_future_purchases=round(purchases, 1),
        recency_factor=round(factor, 2),
        customer_age_months=round(months_active, 1),
    )


# =============================================================================
# CHURN
# =============================================================================

def days_until_churn(recency: int, frequency: int) -> int:
    """Days before recency exceeds 1.5x the estimated purchase interval"""
    if frequency == 0:
        return 0
    interval = recency / max(frequency, 1)
    if recency > interval * 2:
        return 0
    return max(0, round(interval * 1.5 - recency))


def churn_actions(level: RiskLevel) -> Tuple[str, ...]:
    if level in (RiskLevel.VERY_HIGH, RiskLevel.HIGH):
        return (
            "Immediate re-engagement campaign",
            "Personal outreach from sales team",
            "Special discount or offer",
            "Survey to understand concerns",
        )
    if level == RiskLevel.MEDIUM:
        return ("Send targeted promotions", "Engage via email/newsletter", "Highlight new products")
    return ("Maintain regular communication", "Continue providing value")


def churn_risk(rfm: RFMResult, segment: SegmentProfile) -> ChurnRisk:
    """Additive 0-100 risk score from recency, frequency and segment"""
    score = 0
    factors = []

    if rfm.recency > 180:
        score += 50
        factors.append("No purchase in last 6 months")
    elif rfm.recency > 90:
        score += 30
        factors.append("No purchase in last 3 months")
    elif rfm.recency > 60:
        score += 15
        factors.append("No purchase in last 2 months")

    if rfm.frequency == 0:
        score += 30
        factors.append("No purchases in last year")
    elif rfm.frequency == 1:
        score += 20
        factors.append("Only one purchase in last year")
    elif rfm.frequency <= 2:
        score += 10
        factors.append("Very few purchases")

    if segment.segment in (CustomerSegment.AT_RISK, CustomerSegment.CHURNED):
        score += 20
        factors.append("Customer segment indicates risk")

    score = min(score, 100)
    if score >= 70:
        level = RiskLevel.VERY_HIGH
    elif score >= 50:
        level = RiskLevel.HIGH
    elif score >= 30:
        level = RiskLevel.MEDIUM
    elif score >= 15:
        level = RiskLevel.LOW
    else:
        level = RiskLevel.VERY_LOW

    return ChurnRisk(
        risk_score=score,
        risk_level=level,
        risk_factors=tuple(factors),
        days_until_churn=days_until_churn(rfm.recency, rfm.frequency),
        recommended_actions=churn_actions(level),
    )
