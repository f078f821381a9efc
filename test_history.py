"""
Tests for price history recording and export.
"""

import numpy as np
import pandas as pd
import pytest

from conftest import force_tick
from stocksim import create_market
from stocksim.config import create_default_config
from stocksim.core import SimulatedClock
from stocksim.market import DEFAULT_METADATA, PriceHistory


def test_attached_history_records_every_tick(market, clock):
    history = PriceHistory(market)
    history.attach()

    for _ in range(3):
        force_tick(market, clock)

    df = history.to_dataframe()
    assert list(df.columns) == PriceHistory.COLUMNS
    assert len(df) == 3 * len(market.instruments)
    assert sorted(df['tick'].unique()) == [1, 2, 3]
    assert df['elapsed_ms'].max() == 3 * market.config.ms_per_update

    last_alf = df[(df['tick'] == 3) & (df['symbol'] == 'ALF')]['price'].iloc[0]
    assert last_alf == market.get_instrument("ALF").price


def test_attach_twice_registers_once(market, clock):
    history = PriceHistory(market)
    history.attach()
    history.attach()
    force_tick(market, clock)
    assert len(history.rows) == len(market.instruments)


def test_detach_stops_recording(market, clock):
    history = PriceHistory(market)
    history.attach()
    force_tick(market, clock)
    history.detach()
    force_tick(market, clock)
    force_tick(market, clock)

    assert history.tick == 1
    assert len(history.rows) == len(market.instruments)


def test_summary(market, clock):
    history = PriceHistory(market)
    history.attach()
    for _ in range(4):
        force_tick(market, clock)

    stats = history.summary()
    assert set(stats) == {"ALF", "BET"}

    df = history.to_dataframe()
    alf = df[df['symbol'] == 'ALF']['price'].to_numpy()
    assert stats['ALF']['first'] == pytest.approx(alf[0])
    assert stats['ALF']['last'] == pytest.approx(alf[-1])
    assert stats['ALF']['min'] == pytest.approx(alf.min())
    assert stats['ALF']['return_pct'] == pytest.approx((alf[-1] / alf[0] - 1) * 100)
    assert stats['ALF']['volatility'] == pytest.approx(np.std(np.diff(np.log(alf))))


def test_summary_of_empty_history(market):
    assert PriceHistory(market).summary() == {}


def test_save_csv(market, clock, tmp_path):
    history = PriceHistory(market)
    history.attach()
    force_tick(market, clock)
    force_tick(market, clock)

    output = tmp_path / "nested" / "prices.csv"
    history.save(output)

    loaded = pd.read_csv(output)
    assert len(loaded) == len(history.rows)
    assert set(loaded['symbol']) == {"ALF", "BET"}


def test_create_market_is_reproducible_per_seed():
    first = create_market(seed=11, clock=SimulatedClock())
    second = create_market(seed=11, clock=SimulatedClock())

    assert [i.symbol for i in first.instruments] == [m.symbol for m in DEFAULT_METADATA]
    assert first.to_snapshot() == second.to_snapshot()
    assert first.portfolio.cash == create_default_config().execution.starting_cash


def test_create_market_uninitialised():
    market = create_market(initialize=False)
    assert market.instruments == []


def test_reattach_after_detach_records_each_tick_once(market, clock):
    history = PriceHistory(market)
    history.attach()
    history.detach()
    history.attach()

    force_tick(market, clock)
    force_tick(market, clock)

    assert history.tick == 2
    assert len(history.rows) == 2 * len(market.instruments)
    assert history.elapsed_ms == 2 * market.config.ms_per_update
    assert len(market.update_callbacks) == 1


def test_save_parquet(market, clock, tmp_path):
    history = PriceHistory(market)
    history.attach()
    force_tick(market, clock)
    force_tick(market, clock)

    output = tmp_path / "prices.parquet"
    history.save(output)

    loaded = pd.read_parquet(output)
    expected = history.to_dataframe()
    assert list(loaded.columns) == PriceHistory.COLUMNS
    assert loaded['symbol'].tolist() == expected['symbol'].tolist()
    assert loaded['tick'].tolist() == [1, 1, 2, 2]
    assert loaded['price'].tolist() == pytest.approx(expected['price'].tolist())
