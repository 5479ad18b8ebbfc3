from collections.abc import Iterable

from spend_insights.errors import IngestionError
from spend_insights.logger import get_logger
from spend_insights.models import Insights, Transaction
from spend_insights.services.ingestion import RawSource, ingest_sources
from spend_insights.services.summary import build_insights

logger = get_logger(__name__)


class SpendingSession:
    """Holds the transaction set currently on display and its insights.

    State is only ever replaced as a whole: a successful ``load`` swaps in the
    new transactions, a failed one leaves the previous state in place.
    """

    def __init__(self) -> None:
        self.transactions: tuple[Transaction, ...] = ()
        self.insights: Insights | None = None
        self.sources: tuple[str, ...] = ()

    def load(self, sources: Iterable[RawSource]) -> Insights | None:
        sources = list(sources)
        names = tuple(source.name for source in sources)
        try:
            transactions = ingest_sources(sources)
        except IngestionError as exc:
            logger.error("[SESSION] Upload of %s rejected: %s", ", ".join(names), exc)
            raise

        insights = build_insights(transactions)

        self.transactions = tuple(transactions)
        self.insights = insights
        self.sources = names
        logger.info(
            "[SESSION] Loaded %d transactions from %d file(s).",
            len(self.transactions),
            len(names),
        )
        return insights

    def reset(self) -> None:
        self.transactions = ()
        self.insights = None
        self.sources = ()
        logger.info("[SESSION] Cleared.")

    @property
    def is_empty(self) -> bool:
        return not self.transactions
