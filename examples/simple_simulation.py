#!/usr/bin/env python3
"""
Simple StockSim simulation example.

This example demonstrates:
- Initialising a market from the default instrument table
- Placing limit and stop orders around the current price
- Driving the market clock and watching orders fill
- Saving and restoring a market snapshot
"""

import sys
import os
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

import logging

# Configure logging
logging.basicConfig(level=logging.INFO, format='%(asctime)s - %(name)s - %(levelname)s - %(message)s')


def main():
    """Run simple simulation example."""
    print("=" * 60)
    print("StockSim - Simple Simulation Example")
    print("=" * 60)

    from stocksim import create_market, SimulatedClock, PriceHistory, OrderType, PositionType
    from stocksim.config import create_default_config

    config = create_default_config()
    config.execution.starting_cash = 50e9

    clock = SimulatedClock()
    market = create_market(config, seed=7, clock=clock)
    print(f"Market initialised with {len(market.instruments)} instruments")

    stock = market.get_instrument("ECP")
    print(f"{stock.symbol}: ${stock.price:,.2f}")

    # Buy on a 2% dip, take profit 5% above today's price, stop out 5% below
    market.place_order(stock, 10000, stock.price * 0.98, OrderType.LIMIT_BUY, PositionType.LONG)
    market.place_order(stock, 10000, stock.price * 1.05, OrderType.LIMIT_SELL, PositionType.LONG)
    market.place_order(stock, 10000, stock.price * 0.95, OrderType.STOP_SELL, PositionType.LONG)
    print(f"Resting orders: {len(market.ledger)}")

    history = PriceHistory(market)
    history.attach()

    for _ in range(200):
        clock.advance(market.config.ms_per_update)
        market.process_stock_prices(market.config.cycles_per_update)

    print(f"\nAfter {market.price_driver.tick_count} ticks:")
    print(f"  {stock.symbol}: ${stock.price:,.2f}")
    print(f"  Resting orders: {len(market.ledger)}")
    for fill in market.portfolio.fills:
        print(f"  Filled {fill.side} {fill.shares} {fill.symbol} @ ${fill.price:,.2f}")
    print(f"  Cash: ${market.portfolio.cash:,.2f}")

    df = history.to_dataframe()
    print(f"\nRecorded {len(df)} history rows")

    snapshot = market.to_snapshot()
    restored = create_market(config, clock=clock, initialize=False)
    restored.load_market(snapshot)
    print(f"Snapshot restored: {len(restored.instruments)} instruments, "
          f"{len(restored.ledger)} resting orders")


if __name__ == "__main__":
    main()
