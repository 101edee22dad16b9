"""
Price Source contract.

A Price Source supplies historical bars and current prices for an asset.
Venue clients implement the two abstract methods; the helpers are built on
top of ``get_historical_prices``.
"""

from abc import ABC, abstractmethod
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field

from technical_signals.models.bar import Bar


class PriceOptions(BaseModel):
    """Options for a historical price request."""

    limit: Optional[int] = Field(default=None, ge=1, description="Maximum bars returned")
    start_time: Optional[datetime] = None
    end_time: Optional[datetime] = None
    price_kind: Optional[str] = Field(default=None, description="e.g. mark, index, last")


class PriceSource(ABC):
    """Abstract provider of price bars."""

    @abstractmethod
    async def get_historical_prices(
        self,
        identifier: str,
        timeframe: str,
        options: Optional[PriceOptions] = None,
    ) -> list[Bar]:
        """
        Fetch bars for an asset, oldest first.

        Raises:
            PriceSourceError: if the bars cannot be retrieved
        """

    @abstractmethod
    async def get_current_price(
        self,
        identifier: str,
        price_kind: Optional[str] = None,
    ) -> float:
        """Fetch the latest price for an asset."""

    async def get_last_candles(
        self,
        identifier: str,
        n: int,
        timeframe: str = "1h",
    ) -> list[Bar]:
        """Fetch the ``n`` most recent bars."""
        return await self.get_historical_prices(
            identifier, timeframe, PriceOptions(limit=n)
        )

    async def get_prices_in_period(
        self,
        identifier: str,
        timeframe: str,
        start: datetime,
        end: datetime,
    ) -> list[Bar]:
        """Fetch every bar between ``start`` and ``end`` inclusive."""
        return await self.get_historical_prices(
            identifier, timeframe, PriceOptions(start_time=start, end_time=end)
        )

    async def close(self) -> None:
        """Release any held resources."""

    async def __aenter__(self) -> "PriceSource":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()
