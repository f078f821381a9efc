"""
Cash and position book that executed orders settle against.

Orders are always filled in full at the instrument's current price by a
single synthetic counterparty; this module decides whether the holder is
allowed to take the trade and records the result.
"""

import logging
from enum import Enum
from dataclasses import dataclass, field
from datetime import datetime
from typing import Dict, List, Optional

from .instrument import Instrument
from .order import OrderType, PositionType


class ExecutionPolicy(Enum):
    """What to do when a buy or short costs more than the available cash."""
    ENFORCE_FUNDS = "enforce_funds"
    ALLOW_NEGATIVE_CASH = "allow_negative_cash"


@dataclass
class Position:
    """Holder's long and short exposure in one instrument."""
    symbol: str
    shares: float = 0.0
    average_price: float = 0.0
    short_shares: float = 0.0
    average_short_price: float = 0.0

    @property
    def total_shares(self) -> float:
        return self.shares + self.short_shares


@dataclass
class Fill:
    """Executed trade record."""
    symbol: str
    side: str  # "buy", "sell", "short", "sell_short"
    position: PositionType
    shares: float
    price: float
    commission: float = 0.0
    order_type: Optional[OrderType] = None
    timestamp: datetime = field(default_factory=datetime.now)

    @property
    def notional(self) -> float:
        return abs(self.shares * self.price)


class Portfolio:
    """
    Holder's account: cash, positions and fill history.

    Every operation trades the full share count or nothing and returns
    whether the trade happened.
    """

    def __init__(self, starting_cash: float = 1000000.0, commission: float = 0.0,
                 policy: ExecutionPolicy = ExecutionPolicy.ENFORCE_FUNDS):
        self.cash = starting_cash
        self.commission = commission
        self.policy = ExecutionPolicy(policy)

        self.positions: Dict[str, Position] = {}
        self.fills: List[Fill] = []

        self.logger = logging.getLogger(__name__)

    @classmethod
    def from_config(cls, config) -> 'Portfolio':
        """Create from an ``ExecutionConfig``."""
        return cls(starting_cash=config.starting_cash,
                   commission=config.commission,
                   policy=ExecutionPolicy(config.policy))

    def get_position(self, symbol: str) -> Position:
        if symbol not in self.positions:
            self.positions[symbol] = Position(symbol=symbol)
        return self.positions[symbol]

    def _can_afford(self, cost: float) -> bool:
        return self.policy == ExecutionPolicy.ALLOW_NEGATIVE_CASH or cost <= self.cash

    def _within_share_limit(self, instrument: Instrument, position: Position,
                            shares: float) -> bool:
        if instrument.max_shares <= 0:
            return True
        return position.total_shares + shares <= instrument.max_shares

    def _record(self, instrument: Instrument, side: str, position_type: PositionType,
                shares: float, price: float, order_type: Optional[OrderType]) -> None:
        self.fills.append(Fill(
            symbol=instrument.symbol,
            side=side,
            position=position_type,
            shares=shares,
            price=price,
            commission=self.commission,
            order_type=order_type,
        ))
        instrument.process_transaction_forecast_movement(shares)

    def buy(self, instrument: Instrument, shares: float,
            order_type: Optional[OrderType] = None) -> bool:
        """Open or add to a long position."""
        if shares <= 0:
            return False

        position = self.get_position(instrument.symbol)
        price = instrument.price
        cost = shares * price + self.commission

        if not self._within_share_limit(instrument, position, shares):
            self.logger.warning(
                f"Buying {shares} {instrument.symbol} would exceed the maximum of "
                f"{instrument.max_shares} shares")
            return False
        if not self._can_afford(cost):
            self.logger.warning(
                f"Insufficient funds to buy {shares} {instrument.symbol}: "
                f"need ${cost:,.2f}, have ${self.cash:,.2f}")
            return False

        total_value = position.shares * position.average_price + shares * price
        position.shares += shares
        position.average_price = total_value / position.shares
        self.cash -= cost

        self._record(instrument, "buy", PositionType.LONG, shares, price, order_type)
        return True

    def sell(self, instrument: Instrument, shares: float,
             order_type: Optional[OrderType] = None) -> bool:
        """Reduce a long position."""
        position = self.get_position(instrument.symbol)
        if shares <= 0 or shares > position.shares:
            self.logger.warning(
                f"Cannot sell {shares} {instrument.symbol}: holding {position.shares}")
            return False

        price = instrument.price
        self.cash += shares * price - self.commission
        position.shares -= shares
        if position.shares == 0:
            position.average_price = 0.0

        self._record(instrument, "sell", PositionType.LONG, shares, price, order_type)
        return True

    def short(self, instrument: Instrument, shares: float,
              order_type: Optional[OrderType] = None) -> bool:
        """Open or add to a short position (the full notional is set aside)."""
        if shares <= 0:
            return False

        position = self.get_position(instrument.symbol)
        price = instrument.price
        cost = shares * price + self.commission

        if not self._within_share_limit(instrument, position, shares):
            self.logger.warning(
                f"Shorting {shares} {instrument.symbol} would exceed the maximum of "
                f"{instrument.max_shares} shares")
            return False
        if not self._can_afford(cost):
            self.logger.warning(
                f"Insufficient funds to short {shares} {instrument.symbol}: "
                f"need ${cost:,.2f}, have ${self.cash:,.2f}")
            return False

        total_value = position.short_shares * position.average_short_price + shares * price
        position.short_shares += shares
        position.average_short_price = total_value / position.short_shares
        self.cash -= cost

        self._record(instrument, "short", PositionType.SHORT, shares, price, order_type)
        return True

    def sell_short(self, instrument: Instrument, shares: float,
                   order_type: Optional[OrderType] = None) -> bool:
        """Close part of a short position, returning the set-aside notional plus profit."""
        position = self.get_position(instrument.symbol)
        if shares <= 0 or shares > position.short_shares:
            self.logger.warning(
                f"Cannot close {shares} short {instrument.symbol}: short {position.short_shares}")
            return False

        price = instrument.price
        original_value = shares * position.average_short_price
        profit = (position.average_short_price - price) * shares - self.commission
        self.cash += original_value + profit
        position.short_shares -= shares
        if position.short_shares == 0:
            position.average_short_price = 0.0

        self._record(instrument, "sell_short", PositionType.SHORT, shares, price, order_type)
        return True

    def get_statistics(self) -> Dict[str, float]:
        """Get account statistics."""
        return {
            'cash': self.cash,
            'fills': len(self.fills),
            'volume': sum(fill.shares for fill in self.fills),
            'notional': sum(fill.notional for fill in self.fills),
            'commission_paid': sum(fill.commission for fill in self.fills),
        }
