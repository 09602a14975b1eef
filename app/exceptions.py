"""Errors raised by the analytics pipeline."""


class AnalyticsFetchError(Exception):
    """A read from the store failed; the whole collection is abandoned."""

    def __init__(self, source: str, cause: BaseException):
        self.source = source
        self.cause = cause
        super().__init__(f"Failed to fetch {source}: {cause}")
