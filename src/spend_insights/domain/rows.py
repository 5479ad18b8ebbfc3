import math
import re
from collections.abc import Iterable, Mapping
from typing import Any

from spend_insights.models import Transaction

TRANSACTION_DATE_KEYS = ("Transaction Date", "TransactionDate")
POST_DATE_KEYS = ("Post Date", "PostDate")
DESCRIPTION_KEY = "Description"
CATEGORY_KEY = "Category"
TYPE_KEY = "Type"
AMOUNT_KEY = "Amount"

RECOGNIZED_KEYS = frozenset(
    TRANSACTION_DATE_KEYS
    + POST_DATE_KEYS
    + (DESCRIPTION_KEY, CATEGORY_KEY, TYPE_KEY, AMOUNT_KEY)
)

_LEADING_NUMBER = re.compile(r"[+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?")


def _as_text(value: Any) -> str:
    if value is None:
        return ""
    return value if isinstance(value, str) else str(value)


def resolve_field(row: Mapping[str, Any], keys: Iterable[str]) -> str:
    """Return the first non-empty value among ``keys``, or ``""``."""
    for key in keys:
        value = _as_text(row.get(key))
        if value:
            return value
    return ""


def parse_amount(value: Any) -> float:
    """Read a signed decimal from a cell; anything unreadable is ``0``.

    Strings are read up to the end of their leading number, so ``"-3.20 USD"``
    gives ``-3.2`` and ``"$3.20"`` gives ``0``. NaN and values too large for a
    float count as unreadable.
    """
    if isinstance(value, bool):
        return 0.0
    if isinstance(value, (int, float)):
        raw = value
    else:
        match = _LEADING_NUMBER.match(_as_text(value).strip())
        if not match:
            return 0.0
        raw = match.group(0)
    try:
        number = float(raw)
    except OverflowError:
        return 0.0
    return number if math.isfinite(number) else 0.0


def is_expense(amount: float, category: str) -> bool:
    return amount < 0 and bool(category)


def normalize_row(row: Mapping[str, Any]) -> Transaction | None:
    category = _as_text(row.get(CATEGORY_KEY)).strip()
    amount = parse_amount(row.get(AMOUNT_KEY))
    if not is_expense(amount, category):
        return None

    return Transaction(
        transaction_date=resolve_field(row, TRANSACTION_DATE_KEYS),
        post_date=resolve_field(row, POST_DATE_KEYS),
        description=_as_text(row.get(DESCRIPTION_KEY)),
        category=category,
        type=_as_text(row.get(TYPE_KEY)),
        amount=amount,
        extra={k: v for k, v in row.items() if k not in RECOGNIZED_KEYS},
    )


def normalize_rows(rows: Iterable[Mapping[str, Any]]) -> list[Transaction]:
    transactions: list[Transaction] = []
    for row in rows:
        transaction = normalize_row(row)
        if transaction is not None:
            transactions.append(transaction)
    return transactions
