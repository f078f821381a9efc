"""
Static market data and recording for StockSim.

This module handles:
- Instrument definitions used to initialise a market
- Loading instrument tables from YAML/JSON
- Tick-by-tick price history recording and export
"""

from .metadata import (InstrumentMetadata, ValueRange, DEFAULT_METADATA,
                       load_metadata, metadata_from_dict)
from .history import PriceHistory

__all__ = [
    'InstrumentMetadata', 'ValueRange', 'DEFAULT_METADATA',
    'load_metadata', 'metadata_from_dict',
    'PriceHistory',
]
