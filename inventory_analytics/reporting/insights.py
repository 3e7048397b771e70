"""
Insight Generation

Rule-based findings over a period summary. Each rule fires independently when
its count is positive; emission order is fixed: stock levels, turnover, aging,
then overall.
"""

from dataclasses import dataclass
from typing import Callable, List, Tuple

import structlog

from .enums import Impact, InsightCategory, InsightType
from .models import Insight, PeriodSummary

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class InsightRule:
    """Template for one insight, fired when ``value(summary) > 0``"""
    name: str
    value: Callable[[PeriodSummary], float]
    type: InsightType
    category: InsightCategory
    title: str
    description: str  # formatted with {value}
    impact: Impact
    suggested_actions: Tuple[str, ...]

    def apply(self, summary: PeriodSummary) -> Insight:
        return Insight(
            type=self.type,
            category=self.category,
            title=self.title,
            description=self.description.format(value=self.value(summary)),
            impact=self.impact,
            actionable=True,
            suggested_actions=self.suggested_actions,
        )


DEFAULT_RULES: Tuple[InsightRule, ...] = (
    # Stock levels
    InsightRule(
        name="low_stock",
        value=lambda s: s.low_stock_products,
        type=InsightType.WARNING,
        category=InsightCategory.STOCK_LEVELS,
        title="Low Stock Alert",
        description="{value} products are below reorder point and need immediate attention.",
        impact=Impact.HIGH,
        suggested_actions=("Review reorder points", "Place purchase orders", "Check supplier lead times"),
    ),
    InsightRule(
        name="out_of_stock",
        value=lambda s: s.out_of_stock_products,
        type=InsightType.ALERT,
        category=InsightCategory.STOCK_LEVELS,
        title="Out of Stock Alert",
        description="{value} products are completely out of stock.",
        impact=Impact.HIGH,
        suggested_actions=("Emergency reorder", "Check alternative suppliers", "Update product availability"),
    ),
    InsightRule(
        name="overstocked",
        value=lambda s: s.overstocked_products,
        type=InsightType.WARNING,
        category=InsightCategory.STOCK_LEVELS,
        title="Overstocked Products",
        description="{value} products are overstocked and tying up capital.",
        impact=Impact.MEDIUM,
        suggested_actions=("Run promotions", "Bundle with other products", "Review reorder quantities"),
    ),
    # Turnover
    InsightRule(
        name="slow_moving",
        value=lambda s: s.slow_moving_products,
        type=InsightType.OPPORTUNITY,
        category=InsightCategory.TURNOVER,
        title="Slow Moving Inventory",
        description="{value} products have slow turnover rates.",
        impact=Impact.MEDIUM,
        suggested_actions=("Review pricing strategy", "Improve product placement", "Consider bundling"),
    ),
    InsightRule(
        name="dead_stock",
        value=lambda s: s.dead_stock_products,
        type=InsightType.ALERT,
        category=InsightCategory.TURNOVER,
        title="Dead Stock Alert",
        description="{value} products have no movement and may be obsolete.",
        impact=Impact.HIGH,
        suggested_actions=("Liquidate inventory", "Donate to charity", "Write off as loss"),
    ),
    InsightRule(
        name="fast_moving",
        value=lambda s: s.fast_moving_products,
        type=InsightType.ACHIEVEMENT,
        category=InsightCategory.TURNOVER,
        title="Fast Moving Products",
        description="{value} products have excellent turnover rates.",
        impact=Impact.MEDIUM,
        suggested_actions=("Increase stock levels", "Expand product line", "Use as loss leaders"),
    ),
    # Aging
    InsightRule(
        name="very_old",
        value=lambda s: s.very_old_products,
        type=InsightType.ALERT,
        category=InsightCategory.AGING,
        title="Very Old Inventory",
        description="{value} products have been in stock for over a year.",
        impact=Impact.HIGH,
        suggested_actions=("Liquidate immediately", "Check for damage", "Review supplier terms"),
    ),
    # Overall
    InsightRule(
        name="potential_loss",
        value=lambda s: s.total_potential_loss,
        type=InsightType.WARNING,
        category=InsightCategory.OVERALL,
        title="Potential Loss Risk",
        description="Potential loss of ${value:.2f} from aging and dead stock.",
        impact=Impact.HIGH,
        suggested_actions=("Implement FIFO system", "Review aging policies", "Set up automated alerts"),
    ),
)


class InsightGenerator:
    """
    Emits insights for every rule whose summary value is positive.

    Example:
        insights = InsightGenerator().generate(summary)
    """

    def __init__(self, rules: Tuple[InsightRule, ...] = DEFAULT_RULES):
        self.rules = rules

    def generate(self, summary: PeriodSummary) -> List[Insight]:
        insights = [rule.apply(summary) for rule in self.rules if rule.value(summary) > 0]
        logger.debug(f"Generated {len(insights)} insights")
        return insights


def generate_insights(summary: PeriodSummary) -> List[Insight]:
    """Insights for a summary using the default rules"""
    return InsightGenerator().generate(summary)
