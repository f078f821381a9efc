"""
Tests for matching resting orders against the current price.
"""

from stocksim.core import (CancelByIdentity, Order, OrderType, PositionType,
                           process_orders)
from stocksim.core.order_processing import FALL_TRIGGERS, RISE_TRIGGERS, TRIGGERS, is_triggered


def rest(market, instrument, shares, price, order_type, position):
    """Put an order on the ledger without the instant-execution check."""
    order = Order(instrument.symbol, shares, price, order_type, position)
    market.ledger.add(order)
    return order


def test_rise_and_fall_cover_every_combination_once():
    combos = list(RISE_TRIGGERS) + list(FALL_TRIGGERS)
    assert len(combos) == len(set(combos)) == len(TRIGGERS)


def test_trigger_directions():
    def order(order_type, position):
        return Order("ALF", 1, 10.0, order_type, position)

    assert is_triggered(order(OrderType.LIMIT_BUY, PositionType.LONG), 9.0)
    assert not is_triggered(order(OrderType.LIMIT_BUY, PositionType.LONG), 11.0)
    assert is_triggered(order(OrderType.LIMIT_SELL, PositionType.LONG), 11.0)
    assert is_triggered(order(OrderType.LIMIT_SELL, PositionType.SHORT), 9.0)
    assert is_triggered(order(OrderType.STOP_BUY, PositionType.LONG), 11.0)
    assert is_triggered(order(OrderType.STOP_SELL, PositionType.LONG), 9.0)
    assert is_triggered(order(OrderType.STOP_SELL, PositionType.SHORT), 11.0)
    assert is_triggered(order(OrderType.LIMIT_BUY, PositionType.SHORT), 10.0)


def test_eligible_limit_buy_executes_and_leaves_ledger(market, alpha):
    order = rest(market, alpha, 100, 10.5, OrderType.LIMIT_BUY, PositionType.LONG)

    executed = process_orders(alpha, OrderType.LIMIT_BUY, PositionType.LONG, market)

    assert executed == 1
    assert order not in market.ledger
    assert market.portfolio.get_position("ALF").shares == 100
    assert market.portfolio.fills[0].price == alpha.price


def test_no_eligible_order_is_a_no_op(market, alpha):
    rest(market, alpha, 100, 9.0, OrderType.LIMIT_BUY, PositionType.LONG)
    before = market.ledger.get_state()
    cash = market.portfolio.cash

    assert process_orders(alpha, OrderType.LIMIT_BUY, PositionType.LONG, market) == 0
    assert market.ledger.get_state() == before
    assert market.portfolio.cash == cash


def test_only_triggered_type_and_position_are_visited(market, alpha):
    stop = rest(market, alpha, 100, 5.0, OrderType.STOP_BUY, PositionType.SHORT)
    limit_short = rest(market, alpha, 100, 5.0, OrderType.LIMIT_BUY, PositionType.SHORT)

    process_orders(alpha, OrderType.LIMIT_BUY, PositionType.LONG, market)

    assert stop in market.ledger
    assert limit_short in market.ledger


def test_all_eligible_orders_execute_in_queue_order(market, alpha):
    first = rest(market, alpha, 10, 11.0, OrderType.LIMIT_BUY, PositionType.LONG)
    skipped = rest(market, alpha, 20, 9.0, OrderType.LIMIT_BUY, PositionType.LONG)
    third = rest(market, alpha, 30, 12.0, OrderType.LIMIT_BUY, PositionType.LONG)

    assert process_orders(alpha, OrderType.LIMIT_BUY, PositionType.LONG, market) == 2

    assert [fill.shares for fill in market.portfolio.fills] == [10, 30]
    assert market.ledger.orders_for("ALF") == [skipped]
    assert first not in market.ledger and third not in market.ledger


def test_other_instruments_are_untouched(market, alpha, beta):
    other = rest(market, beta, 10, 1000.0, OrderType.LIMIT_BUY, PositionType.LONG)

    process_orders(alpha, OrderType.LIMIT_BUY, PositionType.LONG, market)

    assert other in market.ledger
    assert market.portfolio.fills == []


def test_refused_execution_keeps_order_resting(market, alpha):
    order = rest(market, alpha, 1000000, 11.0, OrderType.LIMIT_BUY, PositionType.LONG)

    assert process_orders(alpha, OrderType.LIMIT_BUY, PositionType.LONG, market) == 0
    assert order in market.ledger


def test_order_cancelled_during_scan_is_skipped(market, alpha):
    first = rest(market, alpha, 10, 11.0, OrderType.LIMIT_BUY, PositionType.LONG)
    second = rest(market, alpha, 20, 11.0, OrderType.LIMIT_BUY, PositionType.LONG)
    third = rest(market, alpha, 30, 11.0, OrderType.LIMIT_BUY, PositionType.LONG)

    original_buy = market.portfolio.buy

    def buy_and_cancel(instrument, shares, order_type=None):
        market.cancel_order(CancelByIdentity(second))
        return original_buy(instrument, shares, order_type)

    market.portfolio.buy = buy_and_cancel
    executed = process_orders(alpha, OrderType.LIMIT_BUY, PositionType.LONG, market)

    assert executed == 2
    assert [fill.shares for fill in market.portfolio.fills] == [10, 30]
    assert len(market.ledger.orders_for("ALF")) == 0
    assert first not in market.ledger and third not in market.ledger


def test_sell_side_orders_close_positions(market, alpha):
    market.portfolio.buy(alpha, 100)
    market.portfolio.short(alpha, 50)
    sell = rest(market, alpha, 100, 9.0, OrderType.LIMIT_SELL, PositionType.LONG)
    cover = rest(market, alpha, 50, 11.0, OrderType.LIMIT_SELL, PositionType.SHORT)

    process_orders(alpha, OrderType.LIMIT_SELL, PositionType.LONG, market)
    process_orders(alpha, OrderType.LIMIT_SELL, PositionType.SHORT, market)

    position = market.portfolio.get_position("ALF")
    assert position.shares == 0
    assert position.short_shares == 0
    assert sell not in market.ledger and cover not in market.ledger
