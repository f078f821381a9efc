"""
Command-line interface for StockSim.

Provides commands for:
- Running a batch market simulation
- Inspecting the instrument table
- Configuration management
"""

import click
import sys
import logging
from pathlib import Path

logger = logging.getLogger(__name__)


def setup_logging(logging_config) -> None:
    """Setup logging from a ``LoggingConfig``."""
    logging.basicConfig(
        level=getattr(logging, logging_config.level.upper(), logging.INFO),
        format=logging_config.format,
        force=True
    )


def _load_config(config_path):
    from .config import load_config, create_default_config, merge_configs, load_config_from_env

    config = load_config(config_path) if config_path else create_default_config()
    return merge_configs(config, load_config_from_env())


@click.group()
@click.version_option(version="0.1.0")
def main():
    """StockSim - Virtual Stock Market Simulator"""
    pass


@main.command()
@click.option('--config', '-c', type=click.Path(exists=True),
              help='Configuration file path')
@click.option('--ticks', '-t', type=int,
              help='Number of market ticks to simulate')
@click.option('--seed', type=int,
              help='Random seed')
@click.option('--snapshot-in', type=click.Path(exists=True),
              help='Resume from a saved market snapshot')
@click.option('--snapshot-out', type=click.Path(),
              help='Write the final market snapshot here')
@click.option('--history-out', '-o', type=click.Path(),
              help='Write the price history here (.csv or .parquet)')
def run(config, ticks, seed, snapshot_in, snapshot_out, history_out):
    """Run a batch market simulation."""

    try:
        from . import create_market
        from .core import SimulatedClock
        from .market import PriceHistory

        config_obj = _load_config(config)
        setup_logging(config_obj.logging)

        # Override with command line options
        if ticks is not None:
            config_obj.simulation.num_ticks = ticks
        if seed is not None:
            config_obj.simulation.random_seed = seed
        snapshot_out = snapshot_out or config_obj.simulation.snapshot_path
        history_out = history_out or config_obj.simulation.history_path

        clock = SimulatedClock()
        market = create_market(config_obj, clock=clock, initialize=snapshot_in is None)
        if snapshot_in:
            click.echo(f"Loading market snapshot from: {snapshot_in}")
            market.load_market(Path(snapshot_in).read_text())
            clock.now_ms = market.last_update

        history = PriceHistory(market)
        history.attach()

        num_ticks = config_obj.simulation.num_ticks
        cycles = market.config.cycles_per_update
        with click.progressbar(range(num_ticks), label='Ticks') as bar:
            for _ in bar:
                clock.advance(market.config.ms_per_update)
                market.process_stock_prices(cycles)
        history.detach()

        # Print summary
        click.echo("\n" + "=" * 60)
        click.echo("SIMULATION COMPLETE")
        click.echo("=" * 60)

        stats = market.get_statistics()
        click.echo(f"Ticks applied: {stats['ticks']}")
        click.echo(f"Instruments: {stats['instruments']}")
        click.echo(f"Resting orders: {stats['resting_orders']}")

        summary = history.summary()
        if summary:
            click.echo("\nPrice Summary:")
            for symbol, s in summary.items():
                click.echo(f"  {symbol:<6} ${s['first']:>12,.2f} -> ${s['last']:>12,.2f} "
                           f"({s['return_pct']:+.2f}%)")

        if history_out:
            history.save(history_out)
            click.echo(f"\nPrice history saved to: {history_out}")
        if snapshot_out:
            Path(snapshot_out).write_text(market.to_snapshot())
            click.echo(f"Market snapshot saved to: {snapshot_out}")

        click.echo("=" * 60)

    except Exception as e:
        click.echo(f"❌ Simulation failed: {e}", err=True)
        logger.exception("Simulation error")
        sys.exit(1)


@main.command()
@click.option('--config', '-c', type=click.Path(exists=True),
              help='Configuration file path')
@click.option('--seed', type=int,
              help='Random seed')
def info(config, seed):
    """Display the instrument table of a freshly initialised market."""

    try:
        from . import create_market

        config_obj = _load_config(config)
        if seed is not None:
            config_obj.simulation.random_seed = seed

        market = create_market(config_obj)

        click.echo("StockSim Instruments")
        click.echo("=" * 78)
        click.echo(f"{'Symbol':<7}{'Name':<26}{'Price':>14}{'Vol':>7}{'Bias':>6}"
                   f"{'Outlook':>9}{'Max shares':>13}")
        click.echo("-" * 78)
        for instrument in market.instruments:
            click.echo(f"{instrument.symbol:<7}{instrument.name[:25]:<26}"
                       f"{instrument.price:>14,.2f}{instrument.volatility:>7.2f}"
                       f"{'up' if instrument.bias else 'down':>6}"
                       f"{instrument.outlook_magnitude:>9.1f}{instrument.max_shares:>13,}")
        click.echo("=" * 78)

    except Exception as e:
        click.echo(f"❌ Failed to list instruments: {e}", err=True)
        sys.exit(1)


@main.command()
@click.option('--output', '-o', type=click.Path(), default='config.yaml',
              help='Output configuration file path')
def create_config(output):
    """Create a sample configuration file."""

    try:
        from .config import create_default_config, save_config

        config = create_default_config()
        config.simulation.num_ticks = 1000
        config.simulation.history_path = "results/prices.csv"

        save_config(config, output)

        click.echo(f"✅ Sample configuration created: {output}")
        click.echo("Edit the file to customize your simulation parameters.")

    except Exception as e:
        click.echo(f"❌ Failed to create configuration: {e}", err=True)
        sys.exit(1)


if __name__ == '__main__':
    main()
