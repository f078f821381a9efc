"""
Core market simulation for StockSim.

This module contains the market components:
- Instrument: Stock with price and forecast state
- OrderLedger: Resting orders per instrument
- process_orders: Order matching against the current price
- PriceDriver: Tick engine moving prices and forecasts
- StockMarket: Registry owning all of the above
- Portfolio: Holder account executed orders settle against
"""

from .instrument import Instrument
from .order import (Order, OrderType, PositionType, CancelByIdentity,
                    CancelByAttributes, CancelSelector)
from .order_book import OrderLedger
from .order_processing import process_orders, execute_order
from .portfolio import Portfolio, Position, Fill, ExecutionPolicy
from .price_driver import PriceDriver, TickState
from .stock_market import StockMarket
from .clock import SimulatedClock, wall_clock_ms

__all__ = [
    'Instrument',
    'Order', 'OrderType', 'PositionType',
    'CancelByIdentity', 'CancelByAttributes', 'CancelSelector',
    'OrderLedger', 'process_orders', 'execute_order',
    'Portfolio', 'Position', 'Fill', 'ExecutionPolicy',
    'PriceDriver', 'TickState', 'StockMarket',
    'SimulatedClock', 'wall_clock_ms',
]
