"""
Per-instrument ledger of resting orders for StockSim.

Orders are kept in insertion order, which is also the order in which the
matching engine visits them.
"""

from typing import Any, Dict, Iterable, Iterator, List, Optional

from .order import Order, OrderType, PositionType


class OrderLedger:
    """
    Mapping from instrument symbol to its queue of resting orders.

    Every registered symbol has exactly one (possibly empty) queue.
    """

    def __init__(self, symbols: Iterable[str] = ()):
        self._orders: Dict[str, List[Order]] = {}
        self.reset(symbols)

    def reset(self, symbols: Iterable[str] = ()) -> None:
        """Drop all orders and create an empty queue per symbol."""
        self._orders = {symbol: [] for symbol in symbols}

    def ensure_symbol(self, symbol: str) -> List[Order]:
        return self._orders.setdefault(symbol, [])

    def orders_for(self, symbol: str) -> List[Order]:
        """Live queue for ``symbol``; empty list if the symbol is unknown."""
        return self._orders.get(symbol, [])

    @property
    def symbols(self) -> List[str]:
        return list(self._orders.keys())

    def add(self, order: Order) -> None:
        self.ensure_symbol(order.symbol).append(order)

    def remove(self, order: Order) -> bool:
        """Remove ``order`` by identity. Returns True if it was resting."""
        queue = self._orders.get(order.symbol, [])
        for i, resting in enumerate(queue):
            if resting is order:
                del queue[i]
                return True
        return False

    def find_first(self, symbol: str, shares: float, price: float,
                   order_type: OrderType, position: PositionType) -> Optional[Order]:
        """First resting order for ``symbol`` structurally equal to the fields."""
        for order in self._orders.get(symbol, []):
            if order.matches(shares, price, order_type, position):
                return order
        return None

    def __contains__(self, order: Order) -> bool:
        return any(resting is order for resting in self._orders.get(order.symbol, []))

    def __iter__(self) -> Iterator[Order]:
        for queue in self._orders.values():
            yield from queue

    def __len__(self) -> int:
        return sum(len(queue) for queue in self._orders.values())

    def get_state(self) -> Dict[str, List[Dict[str, Any]]]:
        return {symbol: [order.to_dict() for order in queue]
                for symbol, queue in self._orders.items()}

    @classmethod
    def from_state(cls, state: Dict[str, List[Dict[str, Any]]]) -> 'OrderLedger':
        ledger = cls()
        for symbol, queue in state.items():
            ledger.ensure_symbol(symbol)
            for data in queue:
                order = Order.from_dict(data)
                if order.symbol != symbol:
                    raise ValueError(f"Order for {order.symbol} filed under {symbol}")
                ledger.add(order)
        return ledger

    def get_statistics(self) -> Dict[str, Any]:
        """Get ledger statistics."""
        return {
            'total_orders': len(self),
            'symbols': len(self._orders),
            'orders_per_symbol': {symbol: len(queue) for symbol, queue in self._orders.items()},
        }
