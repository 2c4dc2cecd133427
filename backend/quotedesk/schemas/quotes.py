from __future__ import annotations

from typing import Annotated, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field

FailureReason = Literal["upstream_error", "timeout", "invalid_payload"]

TIMEOUT_MESSAGE = "Request timeout"
NO_PRICE_MESSAGE = "No price data available"


class QuoteData(BaseModel):
    """Finnhub quote fields, kept under their wire names ``c``, ``d``, ``dp``."""

    model_config = ConfigDict(populate_by_name=True)

    price: float = Field(alias="c")
    change: float = Field(default=0.0, alias="d")
    percent_change: float = Field(default=0.0, alias="dp")
    high: Optional[float] = Field(default=None, alias="h")
    low: Optional[float] = Field(default=None, alias="l")
    open: Optional[float] = Field(default=None, alias="o")
    previous_close: Optional[float] = Field(default=None, alias="pc")
    timestamp: Optional[int] = Field(default=None, alias="t")

    def to_wire(self) -> dict:
        return self.model_dump(by_alias=True, exclude_none=True)


class QuoteSuccess(BaseModel):
    status: Literal["ok"] = "ok"
    symbol: str
    data: QuoteData


class QuoteFailure(BaseModel):
    status: Literal["failed"] = "failed"
    symbol: str
    reason: FailureReason
    error: str


QuoteResult = Annotated[Union[QuoteSuccess, QuoteFailure], Field(discriminator="status")]


class QuoteEntry(BaseModel):
    """One ``{symbol, data?, error?}`` item of the batch response."""

    symbol: str
    data: Optional[QuoteData] = None
    error: Optional[str] = None

    @property
    def is_success(self) -> bool:
        return self.data is not None and not self.error and bool(self.data.price)


def timeout_failure(symbol: str) -> QuoteFailure:
    return QuoteFailure(symbol=symbol, reason="timeout", error=TIMEOUT_MESSAGE)


class BatchEnvelope(BaseModel):
    results: list[QuoteResult] = Field(default_factory=list)
    timed_out: bool = False

    def to_entries(self) -> list[QuoteEntry]:
        entries: list[QuoteEntry] = []
        for result in self.results:
            if isinstance(result, QuoteSuccess):
                entries.append(QuoteEntry(symbol=result.symbol, data=result.data))
            else:
                entries.append(QuoteEntry(symbol=result.symbol, error=result.error))
        return entries


class BatchQuotesResponse(BaseModel):
    quotes: list[QuoteEntry] = Field(default_factory=list)
    error: Optional[str] = None
