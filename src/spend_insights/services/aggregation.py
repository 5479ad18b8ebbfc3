"""Group retained transactions into the category, daily and monthly views.

Every function here is a pure function of the ordered transaction sequence.
Totals are accumulated unrounded and rounded once when the aggregate is
built. Where two groups tie, the group seen first in the input comes first.
"""
from collections.abc import Sequence
from dataclasses import dataclass, field
from datetime import datetime

from spend_insights.core import settings
from spend_insights.domain.dates import UNPARSED_MONTH_KEY, month_key, parse_calendar_date
from spend_insights.domain.money import magnitude, round_money
from spend_insights.logger import get_logger
from spend_insights.models import (
    CategoryAggregate,
    DailyAggregate,
    DailyTransaction,
    MonthlyAggregate,
    Transaction,
)

logger = get_logger(__name__)


@dataclass
class _DayGroup:
    date: str
    total: float = 0.0
    categories: dict[str, float] = field(default_factory=dict)
    transactions: list[DailyTransaction] = field(default_factory=list)


def aggregate_categories(transactions: Sequence[Transaction]) -> list[CategoryAggregate]:
    totals: dict[str, float] = {}
    for transaction in transactions:
        totals[transaction.category] = totals.get(transaction.category, 0.0) + magnitude(
            transaction.amount
        )

    aggregates = [
        CategoryAggregate(name=name, total=round_money(total)) for name, total in totals.items()
    ]
    # sorted() is stable with reverse=True, so ties keep first-seen order
    return sorted(aggregates, key=lambda aggregate: aggregate.total, reverse=True)


def _day_sort_key(parsed: datetime | None) -> tuple[bool, datetime]:
    return parsed is None, parsed or datetime.min


def aggregate_daily(
    transactions: Sequence[Transaction],
    date_formats: Sequence[str] | None = None,
) -> list[DailyAggregate]:
    """Build one aggregate per distinct raw ``transaction_date`` string.

    Days are ordered by their parsed calendar date. Keys that parse to the
    same instant (``01/02/2024`` and ``2024-01-02``) stay separate groups and
    keep first-seen order among themselves; unparseable keys go last.
    """
    formats = date_formats if date_formats is not None else settings.get_date_formats()
    groups: dict[str, _DayGroup] = {}
    for transaction in transactions:
        group = groups.get(transaction.transaction_date)
        if group is None:
            group = groups[transaction.transaction_date] = _DayGroup(
                date=transaction.transaction_date
            )
        amount = magnitude(transaction.amount)
        group.total += amount
        group.categories[transaction.category] = (
            group.categories.get(transaction.category, 0.0) + amount
        )
        group.transactions.append(
            DailyTransaction(
                amount=amount,
                category=transaction.category,
                description=transaction.description,
            )
        )

    parsed_dates = {key: parse_calendar_date(key, formats) for key in groups}
    unparsed = [key for key, parsed in parsed_dates.items() if parsed is None]
    if unparsed:
        logger.warning("[AGGREGATE] %d day key(s) not parseable as dates: %s", len(unparsed), unparsed)

    ordered_keys = sorted(groups, key=lambda key: _day_sort_key(parsed_dates[key]))
    return [
        DailyAggregate(
            date=groups[key].date,
            total=round_money(groups[key].total),
            per_category={
                category: round_money(total)
                for category, total in groups[key].categories.items()
            },
            ranked_transactions=sorted(
                groups[key].transactions, key=lambda item: item.amount, reverse=True
            ),
        )
        for key in ordered_keys
    ]


def aggregate_monthly(
    transactions: Sequence[Transaction],
    date_formats: Sequence[str] | None = None,
) -> list[MonthlyAggregate]:
    """Sum magnitudes per ``YYYY-MM``; unparseable dates land in ``UNPARSED_MONTH_KEY``."""
    formats = date_formats if date_formats is not None else settings.get_date_formats()
    totals: dict[str, float] = {}
    unparsed_count = 0
    for transaction in transactions:
        key = month_key(parse_calendar_date(transaction.transaction_date, formats))
        if key == UNPARSED_MONTH_KEY:
            unparsed_count += 1
        totals[key] = totals.get(key, 0.0) + magnitude(transaction.amount)

    if unparsed_count:
        logger.warning(
            "[AGGREGATE] %d transaction(s) with unparseable dates grouped under %s.",
            unparsed_count,
            UNPARSED_MONTH_KEY,
        )

    return [
        MonthlyAggregate(month_key=key, total=round_money(totals[key]))
        for key in sorted(totals)
    ]


def distinct_categories(transactions: Sequence[Transaction]) -> list[str]:
    return sorted({transaction.category for transaction in transactions})
