"""
Order matching for StockSim.

Resting orders are checked against the current price of their instrument
and executed against the holder's portfolio when their trigger holds.
"""

import logging
import operator
from typing import TYPE_CHECKING

from .instrument import Instrument
from .order import Order, OrderType, PositionType

if TYPE_CHECKING:
    from .stock_market import StockMarket

logger = logging.getLogger(__name__)

# (type, position) -> comparison of current price against order price that fires the order
TRIGGERS = {
    (OrderType.LIMIT_BUY, PositionType.LONG): operator.le,
    (OrderType.LIMIT_BUY, PositionType.SHORT): operator.ge,
    (OrderType.LIMIT_SELL, PositionType.LONG): operator.ge,
    (OrderType.LIMIT_SELL, PositionType.SHORT): operator.le,
    (OrderType.STOP_BUY, PositionType.LONG): operator.ge,
    (OrderType.STOP_BUY, PositionType.SHORT): operator.le,
    (OrderType.STOP_SELL, PositionType.LONG): operator.le,
    (OrderType.STOP_SELL, PositionType.SHORT): operator.ge,
}

# Combinations that become eligible after a rise / a fall of the price
RISE_TRIGGERS = (
    (OrderType.LIMIT_BUY, PositionType.SHORT),
    (OrderType.LIMIT_SELL, PositionType.LONG),
    (OrderType.STOP_BUY, PositionType.LONG),
    (OrderType.STOP_SELL, PositionType.SHORT),
)
FALL_TRIGGERS = (
    (OrderType.LIMIT_BUY, PositionType.LONG),
    (OrderType.LIMIT_SELL, PositionType.SHORT),
    (OrderType.STOP_BUY, PositionType.SHORT),
    (OrderType.STOP_SELL, PositionType.LONG),
)


def is_triggered(order: Order, price: float) -> bool:
    return TRIGGERS[(order.type, order.position)](price, order.price)


def process_orders(instrument: Instrument, order_type: OrderType,
                   position: PositionType, market: 'StockMarket') -> int:
    """
    Execute every resting ``(order_type, position)`` order of ``instrument``
    whose trigger holds at the current price.

    Orders are visited front to back over a snapshot of the queue, so
    executions or cancellations made while scanning never disturb the scan.

    Returns:
        int: number of orders executed
    """
    queue = market.ledger.orders_for(instrument.symbol)
    executed = 0

    for order in list(queue):
        if order.type != order_type or order.position != position:
            continue
        if order not in market.ledger:
            # Removed earlier in this pass
            continue
        if is_triggered(order, instrument.price) and execute_order(order, instrument, market):
            executed += 1

    return executed


def execute_order(order: Order, instrument: Instrument, market: 'StockMarket') -> bool:
    """Settle ``order`` in full and remove it from the ledger.

    If the portfolio refuses the trade the order keeps resting.
    """
    portfolio = market.portfolio

    if order.type in (OrderType.LIMIT_BUY, OrderType.STOP_BUY):
        if order.position == PositionType.LONG:
            filled = portfolio.buy(instrument, order.shares, order.type)
        else:
            filled = portfolio.short(instrument, order.shares, order.type)
    else:
        if order.position == PositionType.LONG:
            filled = portfolio.sell(instrument, order.shares, order.type)
        else:
            filled = portfolio.sell_short(instrument, order.shares, order.type)

    pos = "Long" if order.position == PositionType.LONG else "Short"

    if not filled:
        logger.warning(
            f"Failed to execute {order.type.value} for {instrument.symbol} @ "
            f"${order.price:,.2f} ({pos})")
        return False

    if not market.ledger.remove(order):
        logger.error(f"Could not find filled order in ledger: {order}")
    logger.info(
        f"{order.type.value} for {instrument.symbol} @ ${order.price:,.2f} ({pos}) "
        f"was filled ({order.shares} shares at ${instrument.price:,.2f})")
    return True
