"""
Customer Analytics Module
"""
from .analyzer import CustomerAnalytics, CustomerAnalyticsReport, CustomerAnalyzer
from .scoring import (
    CustomerSegment,
    RiskLevel,
    churn_risk,
    predict_clv,
    score_rfm,
    segment_customer,
)

__all__ = [
    "CustomerAnalytics",
    "CustomerAnalyticsReport",
    "CustomerAnalyzer",
    "CustomerSegment",
    "RiskLevel",
    "churn_risk",
    "predict_clv",
    "score_rfm",
    "segment_customer",
]
