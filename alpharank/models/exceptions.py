"""
Custom exception classes for the data layer.

The analysis core never raises on short or degenerate histories; these
exceptions belong to the collaborators that load and validate candle data
before it reaches the core.
"""


class DataIntegrityError(Exception):
    """
    Raised when candle data fails validation.

    Covers issues such as:
    - Missing required columns
    - Non-positive or non-finite prices
    - Invalid OHLC relationships (e.g., high < low)
    - Negative volume

    Attributes:
        message: Human-readable error description.
        context: Optional dictionary with additional error context.

    Examples:
        >>> raise DataIntegrityError(
        ...     "Invalid OHLC relationship",
        ...     context={"date": "2025-01-02", "high": 99.0, "low": 101.0}
        ... )
        Traceback (most recent call last):
        ...
        DataIntegrityError: Invalid OHLC relationship (date=2025-01-02, high=99.0, low=101.0)
    """

    def __init__(self, message: str, context: dict | None = None):
        """
        Initialize DataIntegrityError.

        Args:
            message: Error description.
            context: Optional dictionary with error details.
        """
        super().__init__(message)
        self.message = message
        self.context = context or {}

    def __str__(self) -> str:
        """Return string representation of the error."""
        if self.context:
            context_str = ", ".join(f"{k}={v}" for k, v in self.context.items())
            return f"{self.message} ({context_str})"
        return self.message


class HistoryNotFoundError(LookupError):
    """
    Raised when a history provider has no data for a ticker.

    Attributes:
        ticker: Requested symbol.
        searched: Locations that were checked.
    """

    def __init__(self, ticker: str, searched: list[str] | None = None):
        """
        Initialize HistoryNotFoundError.

        Args:
            ticker: Requested symbol.
            searched: Locations that were checked, if any.
        """
        self.ticker = ticker
        self.searched = searched or []
        message = f"No price history found for '{ticker}'"
        if self.searched:
            message += f". Searched: {', '.join(self.searched)}"
        super().__init__(message)
