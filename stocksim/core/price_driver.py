"""
Market clock and price driver for StockSim.

Converts elapsed game cycles into discrete market ticks. Each tick moves
every instrument's price up or down, evolves its forecast and triggers
the resting orders the move made eligible.
"""

import logging
import math
from enum import Enum
from typing import TYPE_CHECKING

from .instrument import Instrument
from .order_processing import FALL_TRIGGERS, RISE_TRIGGERS, process_orders

if TYPE_CHECKING:
    from .stock_market import StockMarket

# Fallbacks for degenerate price-model arithmetic
DEFAULT_AV = 0.02
DEFAULT_CHANCE = 0.5

# Up-probability forced on an instrument that reached its soft ceiling
CAPPED_CHANCE = 0.1

# Below this outlook the forecast change is boosted so it cannot stall
WEAK_OUTLOOK_THRESHOLD = 5
STALLED_OUTLOOK_THRESHOLD = 1
WEAK_OUTLOOK_MULTIPLIER = 10


class TickState(Enum):
    """Tick processing states."""
    IDLE = "idle"
    TICK_READY = "tick_ready"
    APPLYING = "applying"


class PriceDriver:
    """
    Tick engine bound to a single market.

    Cycles are accumulated on every call; a tick is applied only when a
    full update worth of cycles is stored and enough wall-clock time has
    passed since the previous tick. Left-over cycles carry over, which is
    how offline time is caught up one tick per call.
    """

    def __init__(self, market: 'StockMarket'):
        self.market = market
        self.state = TickState.IDLE
        self.tick_count = 0
        self.logger = logging.getLogger(__name__)

    @property
    def config(self):
        return self.market.config

    def process(self, num_cycles: float = 1) -> None:
        """Store ``num_cycles`` and apply a tick if one is due."""
        market = self.market

        if market.stored_cycles is None or not math.isfinite(market.stored_cycles):
            market.stored_cycles = 0
        if num_cycles is not None and math.isfinite(num_cycles):
            market.stored_cycles += num_cycles

        if self.state != TickState.IDLE:
            # Called back from within a tick; the cycles wait for the next call
            return

        if market.stored_cycles < self.config.cycles_per_update:
            return

        now = market.clock()
        if now - market.last_update >= self.config.ms_per_update_min:
            self.state = TickState.TICK_READY
        self._apply_tick(now)

    def _apply_tick(self, now: float) -> None:
        """Apply one tick; a no-op unless the driver is TICK_READY."""
        if self.state != TickState.TICK_READY:
            return

        market = self.market
        self.state = TickState.APPLYING
        try:
            market.last_update = now
            market.stored_cycles -= self.config.cycles_per_update

            if not isinstance(market.ticks_until_cycle, int):
                market.ticks_until_cycle = self.config.ticks_per_cycle
            market.ticks_until_cycle -= 1
            if market.ticks_until_cycle <= 0:
                self.cycle()

            # One draw shared by every instrument this tick
            v = market.rng.random()
            for instrument in market.instruments:
                self._update_instrument(instrument, v)

            self.tick_count += 1
            self.logger.debug(f"Applied tick {self.tick_count} "
                              f"({market.stored_cycles:.1f} cycles stored)")

            self._resolve_callbacks()
        finally:
            self.state = TickState.IDLE

    def cycle(self) -> None:
        """Cycle event: each instrument may flip its bias."""
        market = self.market
        for instrument in market.instruments:
            if market.rng.random() < self.config.cycle_flip_probability:
                instrument.bias = not instrument.bias
                instrument.flip_forecast_forecast()

        market.ticks_until_cycle = self.config.ticks_per_cycle

    def _update_instrument(self, instrument: Instrument, v: float) -> None:
        market = self.market
        rng = market.rng

        av = v * instrument.volatility / 100
        if not math.isfinite(av):
            av = DEFAULT_AV

        chc = 50
        if instrument.bias:
            chc = (chc + instrument.outlook_magnitude) / 100
        else:
            chc = (chc - instrument.outlook_magnitude) / 100
        if instrument.price >= instrument.cap:
            # Soft ceiling: a rise is still possible but unlikely
            chc = CAPPED_CHANCE
            instrument.bias = False
        if not math.isfinite(chc):
            chc = DEFAULT_CHANCE

        c = rng.random()
        if c < chc:
            instrument.change_price(instrument.price * (1 + av))
            triggers = RISE_TRIGGERS
        else:
            instrument.change_price(instrument.price / (1 + av))
            triggers = FALL_TRIGGERS

        for order_type, position in triggers:
            process_orders(instrument, order_type, position, market)

        outlook_change = instrument.outlook_magnitude * av
        if instrument.outlook_magnitude < WEAK_OUTLOOK_THRESHOLD:
            if instrument.outlook_magnitude <= STALLED_OUTLOOK_THRESHOLD:
                outlook_change = 1
            else:
                outlook_change *= WEAK_OUTLOOK_MULTIPLIER
        instrument.cycle_forecast(outlook_change, rng)
        instrument.cycle_forecast_forecast(outlook_change / 2, rng)

        # Liquidity recovers towards the full movement threshold over time
        instrument.share_tx_until_movement = min(
            instrument.share_tx_until_movement + self.config.share_tx_heal,
            instrument.share_tx_for_movement)

    def _resolve_callbacks(self) -> None:
        market = self.market
        pending, market.update_callbacks = market.update_callbacks, []
        for callback in pending:
            callback(self.config.ms_per_update)
