"""
Tradable instrument with a stochastic price and forecast state.

The price model is driven from outside (see ``price_driver``); this class
only holds the state and applies the bounded mutations a tick or an
executed trade is allowed to make.
"""

import logging
import math
from typing import Any, Dict

from ..market.metadata import InstrumentMetadata, resolve_value

logger = logging.getLogger(__name__)

# Price floor; prices are kept strictly positive
MIN_PRICE = 0.01

# Outlook magnitude is a percentage offset from 50, so it must stay in [0, 50]
MAX_OUTLOOK_MAGNITUDE = 50.0

# Secondary forecast lives on the same 0-100 scale as the absolute forecast
MIN_FORECAST_FORECAST = 0.0
MAX_FORECAST_FORECAST = 100.0
DEFAULT_FORECAST_FORECAST = 50.0

# Bounds on how far the secondary forecast can skew the direction of a forecast change
FORECAST_INCREASE_SKEW_LIMIT = 45.0

# Trade-driven forecast decay
FORECAST_CHANGE_PER_MOVEMENT = 0.006
FORECAST_CHANGE_LIMIT = 6.0
FORECAST_INFLUENCE_FLOOR = 5.0


def _finite(value: float, fallback: float) -> float:
    try:
        value = float(value)
    except (TypeError, ValueError):
        return fallback
    return value if math.isfinite(value) else fallback


class Instrument:
    """
    A single tradable stock.

    Attributes mirror the price model:
    - bias: True for an upward regime, False for a downward one
    - volatility: percentage scale of a tick's price change
    - outlook_magnitude: strength of the current forecast, offset from 50
    - forecast_forecast: slow-moving signal that drags the outlook over time
    - share_tx_for_movement / share_tx_until_movement: traded volume needed
      before trades start weakening the outlook
    """

    def __init__(self, name: str, symbol: str, price: float, cap: float,
                 volatility: float, bias: bool = True, outlook_magnitude: float = 0.0,
                 forecast_forecast: float = None, share_tx_for_movement: int = 100000,
                 share_tx_until_movement: int = None, total_shares: int = 0,
                 max_shares: int = 0):
        self._name = name
        self._symbol = symbol

        self.price = max(_finite(price, MIN_PRICE), MIN_PRICE)
        self.last_price = self.price
        self.cap = cap
        self.volatility = volatility
        self.bias = bias
        self.outlook_magnitude = min(max(_finite(outlook_magnitude, 0.0), 0.0),
                                     MAX_OUTLOOK_MAGNITUDE)

        if forecast_forecast is None:
            forecast_forecast = self.get_absolute_forecast()
        self.forecast_forecast = DEFAULT_FORECAST_FORECAST
        self.change_forecast_forecast(forecast_forecast)

        self.share_tx_for_movement = share_tx_for_movement
        if share_tx_until_movement is None:
            share_tx_until_movement = share_tx_for_movement
        self.share_tx_until_movement = share_tx_until_movement

        self.total_shares = total_shares
        self.max_shares = max_shares

    @property
    def name(self) -> str:
        return self._name

    @property
    def symbol(self) -> str:
        return self._symbol

    @classmethod
    def from_metadata(cls, metadata: InstrumentMetadata, rng) -> 'Instrument':
        """Create an instrument, sampling every ranged value in ``metadata``."""
        price = resolve_value(metadata.init_price, rng)
        volatility = resolve_value(metadata.volatility, rng)
        share_tx = int(resolve_value(metadata.share_tx_for_movement, rng))

        # Soft ceiling, well above the starting price
        cap = float(rng.integers(int(price * 1e3), int(price * 25e3), endpoint=True))

        total_shares = int(round(metadata.market_cap / price / 1e5) * 1e5)
        max_shares = int(round(total_shares * 0.2 / 1e5) * 1e5)

        return cls(
            name=metadata.name,
            symbol=metadata.symbol,
            price=price,
            cap=cap,
            volatility=volatility,
            bias=metadata.bias,
            outlook_magnitude=metadata.outlook_magnitude,
            share_tx_for_movement=share_tx,
            total_shares=total_shares,
            max_shares=max_shares,
        )

    def change_price(self, new_price: float) -> None:
        """Set a new price, remembering the previous one."""
        if not math.isfinite(new_price):
            logger.error(f"Invalid new price for {self.symbol}: {new_price}")
            return

        self.last_price = self.price
        self.price = max(new_price, MIN_PRICE)

    def get_absolute_forecast(self) -> float:
        """Probability (in percent) that the next tick moves the price up."""
        if self.bias:
            return 50 + self.outlook_magnitude
        return 50 - self.outlook_magnitude

    def get_forecast_increase_chance(self) -> float:
        """Chance that a forecast change pushes the absolute forecast upwards.

        The further the secondary forecast sits above the current absolute
        forecast, the more likely the forecast is to move towards it.
        """
        diff = self.forecast_forecast - self.get_absolute_forecast()
        diff = min(max(diff, -FORECAST_INCREASE_SKEW_LIMIT), FORECAST_INCREASE_SKEW_LIMIT)
        return (50 + diff) / 100

    def cycle_forecast(self, change: float, rng) -> None:
        """Move the outlook by ``change`` in a randomly chosen direction.

        Crossing zero flips the bias instead of producing a negative magnitude.
        """
        change = _finite(change, 0.0)

        if rng.random() < self.get_forecast_increase_chance():
            # Absolute forecast goes up
            if self.bias:
                self.outlook_magnitude += change
            else:
                self.outlook_magnitude -= change
        else:
            if self.bias:
                self.outlook_magnitude -= change
            else:
                self.outlook_magnitude += change

        self.outlook_magnitude = min(self.outlook_magnitude, MAX_OUTLOOK_MAGNITUDE)

        if self.outlook_magnitude < 0:
            self.outlook_magnitude *= -1
            self.bias = not self.bias

        self.outlook_magnitude = _finite(self.outlook_magnitude, 0.0)

    def change_forecast_forecast(self, value: float) -> None:
        value = _finite(value, DEFAULT_FORECAST_FORECAST)
        self.forecast_forecast = min(max(value, MIN_FORECAST_FORECAST), MAX_FORECAST_FORECAST)

    def cycle_forecast_forecast(self, change: float, rng) -> None:
        """Random walk the secondary forecast by ``change``."""
        change = _finite(change, 0.0)
        if rng.random() < 0.5:
            self.change_forecast_forecast(self.forecast_forecast + change)
        else:
            self.change_forecast_forecast(self.forecast_forecast - change)

    def flip_forecast_forecast(self) -> None:
        """Mirror the secondary forecast around 50."""
        diff = self.forecast_forecast - 50
        self.change_forecast_forecast(50 - diff)

    def influence_forecast(self, change: float) -> None:
        """Weaken a strong outlook, never below the influence floor."""
        if self.outlook_magnitude > FORECAST_INFLUENCE_FLOOR:
            self.outlook_magnitude = max(FORECAST_INFLUENCE_FLOOR,
                                         self.outlook_magnitude - _finite(change, 0.0))

    def process_transaction_forecast_movement(self, shares: float) -> None:
        """Account for traded volume.

        Every time the cumulative volume uses up ``share_tx_until_movement``
        the counter restarts from ``share_tx_for_movement`` and the outlook
        is weakened a little.
        """
        total = _finite(shares, 0.0)
        total = round(total)
        if total <= 0 or self.share_tx_for_movement <= 0:
            return

        remaining = self.share_tx_until_movement - total
        movements = 0
        if remaining <= 0:
            overflow = -remaining
            movements = 1 + int(overflow // self.share_tx_for_movement)
            remaining = self.share_tx_for_movement - (overflow % self.share_tx_for_movement)

        self.share_tx_until_movement = remaining

        if movements:
            self.influence_forecast(min(FORECAST_CHANGE_LIMIT,
                                        FORECAST_CHANGE_PER_MOVEMENT * movements))

    def get_state(self) -> Dict[str, Any]:
        """Get instrument state for serialization."""
        return {
            'name': self.name,
            'symbol': self.symbol,
            'price': self.price,
            'last_price': self.last_price,
            'cap': self.cap,
            'volatility': self.volatility,
            'bias': self.bias,
            'outlook_magnitude': self.outlook_magnitude,
            'forecast_forecast': self.forecast_forecast,
            'share_tx_for_movement': self.share_tx_for_movement,
            'share_tx_until_movement': self.share_tx_until_movement,
            'total_shares': self.total_shares,
            'max_shares': self.max_shares,
        }

    @classmethod
    def from_state(cls, state: Dict[str, Any]) -> 'Instrument':
        """Rebuild an instrument from ``get_state()`` output."""
        instrument = cls(
            name=state['name'],
            symbol=state['symbol'],
            price=state['price'],
            cap=state['cap'],
            volatility=state['volatility'],
            bias=bool(state.get('bias', True)),
            outlook_magnitude=state.get('outlook_magnitude', 0.0),
            forecast_forecast=state.get('forecast_forecast'),
            share_tx_for_movement=state.get('share_tx_for_movement', 100000),
            share_tx_until_movement=state.get('share_tx_until_movement'),
            total_shares=state.get('total_shares', 0),
            max_shares=state.get('max_shares', 0),
        )
        instrument.last_price = state.get('last_price', instrument.price)
        return instrument

    def __repr__(self) -> str:
        return f"Instrument({self.symbol!r}, price={self.price:.2f})"
