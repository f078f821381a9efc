"""
Order representation and cancellation selectors.
"""

import math
import numbers
from enum import Enum
from dataclasses import dataclass
from typing import Any, Dict, Union


class OrderType(Enum):
    """Order types supported by the market."""
    LIMIT_BUY = "Limit Buy Order"
    LIMIT_SELL = "Limit Sell Order"
    STOP_BUY = "Stop Buy Order"
    STOP_SELL = "Stop Sell Order"


class PositionType(Enum):
    """Position an order opens or closes."""
    LONG = "L"
    SHORT = "S"


def is_share_count(value: Any) -> bool:
    """True for a positive whole number of shares (bool excluded)."""
    return (isinstance(value, numbers.Real) and not isinstance(value, bool)
            and math.isfinite(value) and value > 0 and float(value).is_integer())


@dataclass(frozen=True, eq=False)
class Order:
    """A resting limit or stop order.

    Orders compare by identity; two orders with the same fields are still
    different orders.
    """
    symbol: str
    shares: int
    price: float
    type: OrderType
    position: PositionType

    def matches(self, shares: float, price: float, order_type: OrderType,
                position: PositionType) -> bool:
        """Structural equality on everything but the symbol."""
        return (self.shares == shares and self.price == price and
                self.type == order_type and self.position == position)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'symbol': self.symbol,
            'shares': self.shares,
            'price': self.price,
            'type': self.type.name,
            'position': self.position.name,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Order':
        if not is_share_count(data['shares']):
            raise ValueError(f"Invalid share count: {data['shares']!r}")
        return cls(
            symbol=data['symbol'],
            shares=int(data['shares']),
            price=data['price'],
            type=OrderType[data['type']],
            position=PositionType[data['position']],
        )

    def __str__(self) -> str:
        return f"{self.symbol} - {self.shares} @ ${self.price:,.2f}"


@dataclass(frozen=True)
class CancelByIdentity:
    """Cancel exactly this order object."""
    order: Order


@dataclass(frozen=True)
class CancelByAttributes:
    """Cancel the first resting order for ``instrument`` with these fields."""
    instrument: Any
    shares: int
    price: float
    type: OrderType
    position: PositionType


CancelSelector = Union[CancelByIdentity, CancelByAttributes]
