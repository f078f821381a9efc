"""
Shared fixtures for the StockSim test suite.
"""

import pytest

from stocksim.config import MarketConfig
from stocksim.core import Portfolio, SimulatedClock, StockMarket
from stocksim.market import InstrumentMetadata


class ScriptedRandom:
    """Stand-in for ``numpy.random.Generator`` returning scripted draws.

    ``random()`` pops queued values and falls back to ``default`` once the
    queue is empty; ``integers()`` always returns the lower bound.
    """

    def __init__(self, values=(), default=0.5):
        self.values = list(values)
        self.default = default

    def queue(self, *values):
        self.values.extend(values)

    def random(self):
        if self.values:
            return self.values.pop(0)
        return self.default

    def integers(self, low, high=None, endpoint=False):
        return low


ALPHA = InstrumentMetadata(
    name="Alpha", symbol="ALF", bias=True, init_price=10.0, market_cap=1e9,
    volatility=20.0, outlook_magnitude=10, share_tx_for_movement=100000)

BETA = InstrumentMetadata(
    name="Beta", symbol="BET", bias=False, init_price=50.0, market_cap=5e9,
    volatility=10.0, outlook_magnitude=5, share_tx_for_movement=50000)


def force_tick(market, clock):
    """Advance time and cycles enough for exactly one tick."""
    clock.advance(market.config.ms_per_update)
    market.process_stock_prices(market.config.cycles_per_update)


@pytest.fixture
def rng():
    return ScriptedRandom(default=0.4)


@pytest.fixture
def clock():
    return SimulatedClock()


@pytest.fixture
def portfolio():
    return Portfolio(starting_cash=100000.0)


@pytest.fixture
def market(rng, clock, portfolio):
    """Two-instrument market; no cycle event fires for the next 75 ticks."""
    market = StockMarket(config=MarketConfig(), portfolio=portfolio, rng=rng, clock=clock)
    market.init_market([ALPHA, BETA])
    market.get_instrument("ALF").cap = 1000.0
    market.ticks_until_cycle = market.config.ticks_per_cycle
    return market


@pytest.fixture
def alpha(market):
    return market.get_instrument("ALF")


@pytest.fixture
def beta(market):
    return market.get_instrument("BET")
