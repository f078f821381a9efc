"""
Market registry for StockSim.

Owns the instruments, the order ledger and the tick bookkeeping, and is
the entry point for placing and cancelling orders and driving the clock.
"""

import json
import logging
import math
import numbers
from typing import Any, Callable, Dict, List, Optional, Sequence

import numpy as np

from ..config import MarketConfig
from ..market.metadata import DEFAULT_METADATA, InstrumentMetadata
from .clock import wall_clock_ms
from .instrument import Instrument
from .order import (CancelByAttributes, CancelByIdentity, CancelSelector, Order,
                    OrderType, PositionType, is_share_count)
from .order_book import OrderLedger
from .order_processing import process_orders
from .portfolio import Portfolio
from .price_driver import PriceDriver

SNAPSHOT_VERSION = 1

Reporter = Callable[[str], None]
UpdateCallback = Callable[[float], None]


def _is_number(value: Any) -> bool:
    return (isinstance(value, numbers.Real) and not isinstance(value, bool)
            and math.isfinite(value))


class StockMarket:
    """
    Complete state of one simulated market.

    Instruments are indexed both by full name and by symbol; the two maps
    and the ledger are always rebuilt together. Randomness, wall-clock
    time and the holder's portfolio are injected so that several markets
    can coexist and tests can run deterministically.
    """

    def __init__(self, config: Optional[MarketConfig] = None,
                 portfolio: Optional[Portfolio] = None,
                 rng: Optional[np.random.Generator] = None,
                 clock: Optional[Callable[[], float]] = None):
        self.config = config or MarketConfig()
        self.portfolio = portfolio or Portfolio()
        self.rng = rng if rng is not None else np.random.default_rng()
        self.clock = clock or wall_clock_ms

        self._by_name: Dict[str, Instrument] = {}
        self._by_symbol: Dict[str, Instrument] = {}
        self.ledger = OrderLedger()

        self.stored_cycles: float = 0
        self.last_update: float = 0
        self.ticks_until_cycle: int = 0
        self.update_callbacks: List[UpdateCallback] = []

        self.price_driver = PriceDriver(self)
        self.logger = logging.getLogger(__name__)

    # Instruments

    @property
    def instruments(self) -> List[Instrument]:
        return list(self._by_name.values())

    def get_instrument(self, symbol: str) -> Optional[Instrument]:
        return self._by_symbol.get(symbol)

    def get_instrument_by_name(self, name: str) -> Optional[Instrument]:
        return self._by_name.get(name)

    def _set_instruments(self, instruments: Sequence[Instrument]) -> None:
        by_name: Dict[str, Instrument] = {}
        by_symbol: Dict[str, Instrument] = {}
        for instrument in instruments:
            if instrument.name in by_name or instrument.symbol in by_symbol:
                raise ValueError(f"Duplicate instrument: {instrument.name} ({instrument.symbol})")
            by_name[instrument.name] = instrument
            by_symbol[instrument.symbol] = instrument
        self._by_name = by_name
        self._by_symbol = by_symbol

    def _is_registered(self, instrument: Any) -> bool:
        return (isinstance(instrument, Instrument) and
                self._by_symbol.get(instrument.symbol) is instrument)

    # Lifecycle

    def init_market(self, metadata: Optional[Sequence[InstrumentMetadata]] = None) -> None:
        """Recreate every instrument and an empty ledger from ``metadata``."""
        if metadata is None:
            metadata = DEFAULT_METADATA

        instruments = [Instrument.from_metadata(m, self.rng) for m in metadata]
        self._set_instruments(instruments)
        self.ledger = OrderLedger(self._by_symbol.keys())

        self.stored_cycles = 0
        self.last_update = 0
        self.ticks_until_cycle = int(self.rng.integers(1, self.config.ticks_per_cycle,
                                                       endpoint=True))
        self.logger.info(f"Initialized market with {len(instruments)} instruments")

    def reset_market(self) -> None:
        """Drop all state, leaving an empty market."""
        self._set_instruments([])
        self.ledger = OrderLedger()
        self.stored_cycles = 0
        self.last_update = 0
        self.ticks_until_cycle = 0

    def to_snapshot(self) -> str:
        """Serialize instruments, ledger and tick counters to JSON text."""
        return json.dumps({
            'version': SNAPSHOT_VERSION,
            'instruments': [instrument.get_state() for instrument in self.instruments],
            'orders': self.ledger.get_state(),
            'stored_cycles': self.stored_cycles,
            'last_update': self.last_update,
            'ticks_until_cycle': self.ticks_until_cycle,
        })

    def load_market(self, snapshot: str) -> None:
        """Replace the whole market state with ``snapshot``.

        An empty snapshot resets the market. A malformed one raises
        ValueError and leaves the current state untouched.
        """
        if not snapshot:
            self.reset_market()
            return

        try:
            data = json.loads(snapshot)
            instruments = [Instrument.from_state(s) for s in data.get('instruments', [])]
            ledger = OrderLedger.from_state(data.get('orders', {}))
            stored_cycles = float(data.get('stored_cycles', 0))
            last_update = float(data.get('last_update', 0))
            ticks_until_cycle = int(data.get('ticks_until_cycle', self.config.ticks_per_cycle))
        except (json.JSONDecodeError, AttributeError, KeyError, TypeError, ValueError) as e:
            raise ValueError(f"Invalid market snapshot: {e}") from e

        symbols = {instrument.symbol for instrument in instruments}
        unknown = set(ledger.symbols) - symbols
        if unknown:
            raise ValueError(f"Invalid market snapshot: orders for unknown symbols {sorted(unknown)}")

        previous = (self._by_name, self._by_symbol)
        try:
            self._set_instruments(instruments)
        except ValueError as e:
            self._by_name, self._by_symbol = previous
            raise ValueError(f"Invalid market snapshot: {e}") from e

        for symbol in symbols:
            ledger.ensure_symbol(symbol)
        self.ledger = ledger
        self.stored_cycles = stored_cycles
        self.last_update = last_update
        self.ticks_until_cycle = ticks_until_cycle

    # Orders

    def _report(self, message: str, reporter: Optional[Reporter]) -> None:
        if reporter is not None:
            reporter(message)
        else:
            self.logger.warning(message)

    def place_order(self, instrument: Instrument, shares: int, price: float,
                    order_type: OrderType, position: PositionType,
                    reporter: Optional[Reporter] = None) -> bool:
        """
        Add a resting order and execute it straight away if it is already
        triggered at the current price.

        Returns:
            bool: False (with a message to ``reporter``) on invalid input
        """
        if not self._is_registered(instrument):
            self._report(f"Invalid stock: '{instrument}'", reporter)
            return False
        if not is_share_count(shares) or not _is_number(price) or price <= 0:
            self._report(f"Invalid arguments: shares='{shares}' price='{price}'", reporter)
            return False
        if not isinstance(order_type, OrderType) or not isinstance(position, PositionType):
            self._report(f"Invalid order type or position: '{order_type}' '{position}'", reporter)
            return False

        order = Order(instrument.symbol, int(shares), price, order_type, position)
        self.ledger.add(order)

        process_orders(instrument, order.type, order.position, self)
        return True

    def cancel_order(self, selector: CancelSelector,
                     reporter: Optional[Reporter] = None) -> bool:
        """Remove one resting order. Returns True if an order was removed."""
        if isinstance(selector, CancelByIdentity):
            if not isinstance(selector.order, Order):
                return False
            return self.ledger.remove(selector.order)

        if isinstance(selector, CancelByAttributes):
            if not self._is_registered(selector.instrument) or not _is_number(selector.price):
                self._report(f"Failed to cancel order: '{selector.instrument}' - "
                             f"{selector.shares} @ {selector.price!r}", reporter)
                return False
            symbol = selector.instrument.symbol
            order_txt = f"{symbol} - {selector.shares} @ ${selector.price:,.2f}"
            if not is_share_count(selector.shares):
                self._report(f"Failed to cancel order: {order_txt}", reporter)
                return False
            order = self.ledger.find_first(symbol, selector.shares, selector.price,
                                           selector.type, selector.position)
            if order is None:
                self._report(f"Failed to cancel order: {order_txt}", reporter)
                return False
            self.ledger.remove(order)
            if reporter is not None:
                reporter(f"Successfully cancelled order: {order_txt}")
            return True

        return False

    # Clock

    def next_update(self, callback: UpdateCallback) -> None:
        """Call ``callback(ms_per_update)`` once, after the next applied tick."""
        self.update_callbacks.append(callback)

    def process_stock_prices(self, num_cycles: float = 1) -> None:
        """Advance the market clock by ``num_cycles`` game cycles."""
        self.price_driver.process(num_cycles)

    def get_statistics(self) -> Dict[str, Any]:
        """Get market statistics."""
        return {
            'instruments': len(self._by_name),
            'ticks': self.price_driver.tick_count,
            'stored_cycles': self.stored_cycles,
            'ticks_until_cycle': self.ticks_until_cycle,
            'resting_orders': len(self.ledger),
            'pending_callbacks': len(self.update_callbacks),
        }
