class TickerScoreError(Exception):
    """Base class for errors raised by the analysis backend."""


class ProviderError(TickerScoreError):
    """A data provider could not serve a request."""


class RateLimitError(ProviderError):
    """The upstream API reported that its rate limit was exceeded."""


class AllProvidersFailedError(TickerScoreError):
    def __init__(self, kind: str, ticker: str, errors: list[str]):
        self.kind = kind
        self.ticker = ticker
        self.errors = errors
        detail = "; ".join(errors) if errors else "no provider returned valid data"
        super().__init__(f"All {kind} providers failed for {ticker}. Errors: {detail}")


class NarrativeError(TickerScoreError):
    """The LLM returned no usable narrative."""
