from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class Holding(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    name: str
    qty: int
    avg: float
    price: float
    net: Optional[str] = None
    day: Optional[str] = None
    is_loss: bool = Field(default=False, alias="isLoss")


class WatchlistItem(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    name: str
    price: float
    percent: str
    is_down: bool = Field(default=False, alias="isDown")


class HoldingRow(BaseModel):
    name: str
    qty: int
    avg: float
    price: float
    current_value: float
    profit_and_loss: float
    is_profit: bool
    net: str
    day: str
    is_day_loss: bool
    is_live: bool


class WatchlistRow(BaseModel):
    name: str
    price: float
    percent: str
    is_down: bool
    is_live: bool


class HoldingsResponse(BaseModel):
    all_holdings: list[Holding] = Field(default_factory=list, serialization_alias="allHoldings")


class WatchlistResponse(BaseModel):
    watchlist: list[WatchlistItem] = Field(default_factory=list)
