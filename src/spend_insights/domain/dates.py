from collections.abc import Sequence
from datetime import datetime

from spend_insights.core import settings

# Month bucket for transactions whose date cannot be parsed.
UNPARSED_MONTH_KEY = "0000-00"


def parse_calendar_date(
    value: str | None,
    formats: Sequence[str] | None = None,
) -> datetime | None:
    """Parse a free-form source date token.

    ISO-8601 is tried first, then each strptime format in order. Returns
    ``None`` when nothing matches.
    """
    if not isinstance(value, str):
        return None
    token = value.strip()
    if not token:
        return None

    try:
        parsed = datetime.fromisoformat(token.replace("Z", "+00:00"))
        return parsed.replace(tzinfo=None)
    except ValueError:
        pass

    for fmt in formats if formats is not None else settings.get_date_formats():
        try:
            return datetime.strptime(token, fmt)
        except ValueError:
            continue
    return None


def month_key(parsed: datetime | None) -> str:
    if parsed is None:
        return UNPARSED_MONTH_KEY
    return f"{parsed.year:04d}-{parsed.month:02d}"
