from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class Transaction(BaseModel):
    model_config = ConfigDict(frozen=True)

    transaction_date: str = ""
    post_date: str = ""
    description: str = ""
    category: str
    type: str = ""
    amount: float
    extra: dict[str, Any] = Field(default_factory=dict)  # unrecognized source columns


class CategoryAggregate(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: str
    total: float


class DailyTransaction(BaseModel):
    model_config = ConfigDict(frozen=True)

    amount: float  # unsigned, unrounded
    category: str
    description: str


class DailyAggregate(BaseModel):
    model_config = ConfigDict(frozen=True)

    date: str
    total: float
    per_category: dict[str, float]
    ranked_transactions: list[DailyTransaction]

    def chart_row(self) -> dict[str, Any]:
        """Flatten into one stacked-bar row keyed by category.

        ``date``, ``total`` and ``transactions`` are reserved and win over a
        category with the same name.
        """
        row: dict[str, Any] = dict(self.per_category)
        row["date"] = self.date
        row["total"] = self.total
        row["transactions"] = [t.model_dump() for t in self.ranked_transactions]
        return row


class MonthlyAggregate(BaseModel):
    model_config = ConfigDict(frozen=True)

    month_key: str
    total: float


class Insights(BaseModel):
    model_config = ConfigDict(frozen=True)

    category_aggregates: list[CategoryAggregate]
    daily_aggregates: list[DailyAggregate]
    monthly_aggregates: list[MonthlyAggregate]
    distinct_categories: list[str]
    total_spending: float
    average_transaction: float
    top_category: CategoryAggregate
    transaction_count: int
    category_shares: dict[str, float]
