"""
Tests for the command-line interface.
"""

import json

import pandas as pd
from click.testing import CliRunner

from stocksim.cli import main
from stocksim.config import load_config
from stocksim.market import DEFAULT_METADATA


def test_run_writes_history_and_snapshot(tmp_path):
    history = tmp_path / "prices.csv"
    snapshot = tmp_path / "market.json"

    result = CliRunner().invoke(main, ['run', '--ticks', '5', '--seed', '3',
                                       '--history-out', str(history),
                                       '--snapshot-out', str(snapshot)])

    assert result.exit_code == 0, result.output
    assert "SIMULATION COMPLETE" in result.output
    assert "Ticks applied: 5" in result.output

    df = pd.read_csv(history)
    assert len(df) == 5 * len(DEFAULT_METADATA)

    state = json.loads(snapshot.read_text())
    assert len(state['instruments']) == len(DEFAULT_METADATA)


def test_run_resumes_from_snapshot(tmp_path):
    first = tmp_path / "first.json"
    second = tmp_path / "second.json"
    runner = CliRunner()

    result = runner.invoke(main, ['run', '--ticks', '2', '--snapshot-out', str(first)])
    assert result.exit_code == 0, result.output

    result = runner.invoke(main, ['run', '--ticks', '3', '--snapshot-in', str(first),
                                  '--snapshot-out', str(second)])
    assert result.exit_code == 0, result.output
    assert "Ticks applied: 3" in result.output

    before = json.loads(first.read_text())
    after = json.loads(second.read_text())
    assert after['last_update'] == before['last_update'] + 3 * 6000


def test_run_with_bad_snapshot_fails(tmp_path):
    snapshot = tmp_path / "broken.json"
    snapshot.write_text("{not json")

    result = CliRunner().invoke(main, ['run', '--ticks', '1', '--snapshot-in', str(snapshot)])

    assert result.exit_code == 1
    assert "Simulation failed" in result.output


def test_info_lists_instruments():
    result = CliRunner().invoke(main, ['info', '--seed', '1'])

    assert result.exit_code == 0, result.output
    for metadata in DEFAULT_METADATA:
        assert metadata.symbol in result.output


def test_create_config(tmp_path):
    output = tmp_path / "config.yaml"

    result = CliRunner().invoke(main, ['create-config', '--output', str(output)])

    assert result.exit_code == 0, result.output
    config = load_config(output)
    assert config.simulation.num_ticks == 1000
    assert config.simulation.history_path == "results/prices.csv"
