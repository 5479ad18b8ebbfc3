class IngestionError(Exception):
    """Raised when an upload cannot be turned into a transaction set."""

    def __init__(self, message: str, source: str | None = None) -> None:
        super().__init__(message)
        self.source = source


class SourceReadError(IngestionError):
    """The raw content of a source could not be read or decoded."""


class ParseError(IngestionError):
    """The table parser hit a structural failure in a source."""
