"""
StockSim - Virtual Stock Market Simulator

Simulates stochastic price movement for a fixed set of instruments, keeps
a ledger of resting limit and stop orders, and executes them automatically
as prices move.
"""

__version__ = "0.1.0"
__author__ = "StockSim Team"
__license__ = "Apache 2.0"

# Core imports
from .core import (StockMarket, Instrument, Order, OrderType, PositionType,
                   CancelByIdentity, CancelByAttributes, Portfolio, ExecutionPolicy,
                   SimulatedClock)
from .market import PriceHistory, InstrumentMetadata, load_metadata


# Convenience functions
def create_market(config=None, seed=None, clock=None, initialize=True):
    """Create a market (and its portfolio) from a ``Config``."""
    import numpy as np
    from .config import create_default_config

    config = config or create_default_config()
    if seed is None:
        seed = config.simulation.random_seed

    metadata = None
    if config.market.metadata_path:
        metadata = load_metadata(config.market.metadata_path)

    market = StockMarket(
        config=config.market,
        portfolio=Portfolio.from_config(config.execution),
        rng=np.random.default_rng(seed),
        clock=clock,
    )
    if initialize:
        market.init_market(metadata)
    return market


__all__ = [
    # Version info
    '__version__', '__author__', '__license__',

    # Core components
    'StockMarket', 'Instrument', 'Order', 'OrderType', 'PositionType',
    'CancelByIdentity', 'CancelByAttributes', 'Portfolio', 'ExecutionPolicy',
    'SimulatedClock', 'PriceHistory', 'InstrumentMetadata', 'load_metadata',

    # Convenience functions
    'create_market',
]
