from collections.abc import Sequence

from spend_insights.core import settings
from spend_insights.domain.money import round_money, round_percent
from spend_insights.logger import get_logger
from spend_insights.models import CategoryAggregate, Insights, Transaction
from spend_insights.services.aggregation import (
    aggregate_categories,
    aggregate_daily,
    aggregate_monthly,
    distinct_categories,
)

logger = get_logger(__name__)


def total_spending(category_aggregates: Sequence[CategoryAggregate]) -> float:
    """Sum of the already rounded category totals.

    This can differ by a few cents from rounding the sum of raw amounts.
    """
    return round_money(sum(aggregate.total for aggregate in category_aggregates))


def average_transaction(total: float, transaction_count: int) -> float:
    return round_money(total / transaction_count)


def category_shares(
    category_aggregates: Sequence[CategoryAggregate], total: float
) -> dict[str, float]:
    """Percentage of ``total`` per category, one decimal."""
    if total <= 0:
        return {aggregate.name: 0.0 for aggregate in category_aggregates}
    return {
        aggregate.name: round_percent(aggregate.total / total * 100)
        for aggregate in category_aggregates
    }


def build_insights(
    transactions: Sequence[Transaction],
    date_formats: Sequence[str] | None = None,
) -> Insights | None:
    """Run the full aggregation over ``transactions``.

    Returns ``None`` for an empty sequence: there is nothing to show, and the
    average would divide by zero.
    """
    if not transactions:
        return None

    formats = date_formats if date_formats is not None else settings.get_date_formats()
    categories = aggregate_categories(transactions)
    total = total_spending(categories)
    count = len(transactions)

    insights = Insights(
        category_aggregates=categories,
        daily_aggregates=aggregate_daily(transactions, formats),
        monthly_aggregates=aggregate_monthly(transactions, formats),
        distinct_categories=distinct_categories(transactions),
        total_spending=total,
        average_transaction=average_transaction(total, count),
        top_category=categories[0],
        transaction_count=count,
        category_shares=category_shares(categories, total),
    )
    logger.debug(
        "[SUMMARY] %d transactions, total=%.2f, top=%s",
        count,
        total,
        insights.top_category.name,
    )
    return insights
