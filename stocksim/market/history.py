"""
Price history recording for StockSim.

Subscribes to tick completion on a market and keeps one row per
instrument per applied tick for later analysis or export.
"""

import logging
from pathlib import Path
from typing import Any, Dict, List, Union

import numpy as np
import pandas as pd


class PriceHistory:
    """
    Tick-by-tick recorder of instrument prices and forecast state.

    ``attach`` registers a one-shot completion callback on the market and
    re-registers itself after every tick, so recording continues until
    ``detach`` is called.
    """

    COLUMNS = ['tick', 'elapsed_ms', 'symbol', 'price', 'bias',
               'outlook_magnitude', 'forecast_forecast']

    def __init__(self, market):
        self.market = market
        self.rows: List[Dict[str, Any]] = []
        self.tick = 0
        self.elapsed_ms = 0.0
        self._attached = False
        self._generation = 0
        self.logger = logging.getLogger(__name__)

    def attach(self) -> None:
        if not self._attached:
            self._attached = True
            self._generation += 1
            self._subscribe()

    def detach(self) -> None:
        if self._attached:
            self._attached = False
            self._generation += 1

    def _subscribe(self) -> None:
        generation = self._generation
        self.market.next_update(lambda ms: self._on_update(ms, generation))

    def _on_update(self, ms_processed: float, generation: int) -> None:
        # Callbacks queued before a detach belong to an older generation
        if generation != self._generation:
            return
        self.tick += 1
        self.elapsed_ms += ms_processed
        self.record()
        # Completion callbacks fire once, so re-subscribe for the next tick
        self._subscribe()

    def record(self) -> None:
        """Append the current state of every instrument."""
        for instrument in self.market.instruments:
            self.rows.append({
                'tick': self.tick,
                'elapsed_ms': self.elapsed_ms,
                'symbol': instrument.symbol,
                'price': instrument.price,
                'bias': instrument.bias,
                'outlook_magnitude': instrument.outlook_magnitude,
                'forecast_forecast': instrument.forecast_forecast,
            })

    def to_dataframe(self) -> pd.DataFrame:
        return pd.DataFrame(self.rows, columns=self.COLUMNS)

    def summary(self) -> Dict[str, Dict[str, float]]:
        """Per-symbol price statistics over the recorded ticks."""
        prices: Dict[str, List[float]] = {}
        for row in self.rows:
            prices.setdefault(row['symbol'], []).append(row['price'])

        stats = {}
        for symbol, series in prices.items():
            series = np.asarray(series, dtype=float)
            returns = np.diff(np.log(series)) if len(series) > 1 else np.array([0.0])
            stats[symbol] = {
                'first': float(series[0]),
                'last': float(series[-1]),
                'min': float(np.min(series)),
                'max': float(np.max(series)),
                'return_pct': float((series[-1] / series[0] - 1) * 100),
                'volatility': float(np.std(returns)),
            }
        return stats

    def save(self, output_path: Union[str, Path]) -> None:
        """Save recorded history to file."""
        df = self.to_dataframe()

        output_path = Path(output_path)
        output_path.parent.mkdir(parents=True, exist_ok=True)
        if output_path.suffix == '.parquet':
            df.to_parquet(output_path)
        else:
            df.to_csv(output_path, index=False)

        self.logger.info(f"Price history saved to {output_path}")
