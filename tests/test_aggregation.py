import re

from spend_insights.domain.dates import UNPARSED_MONTH_KEY
from spend_insights.models import Transaction
from spend_insights.services.aggregation import (
    aggregate_categories,
    aggregate_daily,
    aggregate_monthly,
    distinct_categories,
)

FORMATS = ("%m/%d/%Y",)


def tx(date, category, amount, description=""):
    return Transaction(
        transaction_date=date,
        category=category,
        amount=amount,
        description=description,
    )


SAMPLE = [
    tx("01/02/2024", "Groceries", -10.0, "whole foods"),
    tx("01/15/2024", "Gas", -40.256, "shell"),
    tx("02/01/2024", "Dining", -12.5, "cafe"),
    tx("01/02/2024", "Dining", -7.125, "bakery"),
    tx("02/03/2024", "Groceries", -3.3, "market"),
    tx("01/15/2024", "Groceries", -10.0, "whole foods"),
]


def test_category_totals_are_rounded_and_sorted_descending():
    aggregates = aggregate_categories(SAMPLE)
    assert [(a.name, a.total) for a in aggregates] == [
        ("Gas", 40.26),
        ("Groceries", 23.3),
        ("Dining", 19.63),
    ]


def test_category_ties_keep_first_seen_order():
    transactions = [
        tx("01/01/2024", "Travel", -5),
        tx("01/01/2024", "Books", -5),
        tx("01/01/2024", "Art", -2),
        tx("01/01/2024", "Art", -3),
    ]
    assert [a.name for a in aggregate_categories(transactions)] == ["Travel", "Books", "Art"]


def test_category_totals_round_once_at_output():
    # Rounding each 0.004 first would give 0.0
    transactions = [tx("01/01/2024", "Fees", -0.004)] * 3
    assert aggregate_categories(transactions)[0].total == 0.01


def test_daily_groups_by_raw_date_string():
    days = aggregate_daily(SAMPLE, FORMATS)
    assert [d.date for d in days] == ["01/02/2024", "01/15/2024", "02/01/2024", "02/03/2024"]
    first = days[0]
    assert first.total == 17.13
    assert first.per_category == {"Groceries": 10.0, "Dining": 7.13}
    assert [t.amount for t in first.ranked_transactions] == [10.0, 7.125]


def test_daily_ranked_transactions_are_stable_for_equal_amounts():
    transactions = [
        tx("03/01/2024", "A", -5, "first"),
        tx("03/01/2024", "B", -9, "big"),
        tx("03/01/2024", "C", -5, "second"),
        tx("03/01/2024", "D", -5, "third"),
    ]
    ranked = aggregate_daily(transactions, FORMATS)[0].ranked_transactions
    assert [t.description for t in ranked] == ["big", "first", "second", "third"]


def test_daily_keeps_differently_formatted_dates_separate():
    transactions = [
        tx("01/02/2024", "A", -1),
        tx("2024-01-02", "A", -2),
    ]
    days = aggregate_daily(transactions, FORMATS)
    assert [d.date for d in days] == ["01/02/2024", "2024-01-02"]


def test_daily_sorts_chronologically_not_lexically():
    transactions = [
        tx("12/01/2023", "A", -1),
        tx("02/01/2024", "A", -1),
        tx("01/15/2024", "A", -1),
    ]
    days = aggregate_daily(transactions, FORMATS)
    assert [d.date for d in days] == ["12/01/2023", "01/15/2024", "02/01/2024"]


def test_daily_unparseable_dates_sort_last():
    transactions = [
        tx("soon", "A", -1),
        tx("01/02/2024", "A", -1),
        tx("", "A", -1),
    ]
    days = aggregate_daily(transactions, FORMATS)
    assert [d.date for d in days] == ["01/02/2024", "soon", ""]


def test_chart_row_flattens_categories():
    day = aggregate_daily([tx("01/02/2024", "Food", -2.5, "x")], FORMATS)[0]
    assert day.chart_row() == {
        "Food": 2.5,
        "date": "01/02/2024",
        "total": 2.5,
        "transactions": [{"amount": 2.5, "category": "Food", "description": "x"}],
    }


def test_monthly_totals_sorted_by_key():
    months = aggregate_monthly(SAMPLE, FORMATS)
    assert [(m.month_key, m.total) for m in months] == [("2024-01", 67.38), ("2024-02", 15.8)]
    assert all(re.fullmatch(r"\d{4}-\d{2}", m.month_key) for m in months)


def test_monthly_unparseable_dates_use_sentinel_bucket():
    transactions = [tx("01/02/2024", "A", -1), tx("garbage", "A", -2)]
    months = aggregate_monthly(transactions, FORMATS)
    assert [(m.month_key, m.total) for m in months] == [(UNPARSED_MONTH_KEY, 2.0), ("2024-01", 1.0)]


def test_distinct_categories_sorted():
    assert distinct_categories(SAMPLE) == ["Dining", "Gas", "Groceries"]


def test_daily_totals_match_category_totals():
    days = aggregate_daily(SAMPLE, FORMATS)
    categories = aggregate_categories(SAMPLE)
    assert abs(sum(d.total for d in days) - sum(c.total for c in categories)) < 0.01 * len(days)


def test_aggregates_ignore_row_order():
    shuffled = list(reversed(SAMPLE))
    assert {(a.name, a.total) for a in aggregate_categories(shuffled)} == {
        (a.name, a.total) for a in aggregate_categories(SAMPLE)
    }
    assert [
        (d.date, d.total, d.per_category) for d in aggregate_daily(shuffled, FORMATS)
    ] == [(d.date, d.total, d.per_category) for d in aggregate_daily(SAMPLE, FORMATS)]
    assert aggregate_monthly(shuffled, FORMATS) == aggregate_monthly(SAMPLE, FORMATS)
