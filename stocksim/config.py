"""
Configuration management for StockSim.

Handles loading and validation of market timing, order execution,
simulation run and logging settings.
"""

import os
import copy
import json
import yaml
from pathlib import Path
from typing import Dict, Any, Optional, Union
from dataclasses import dataclass, asdict


@dataclass
class MarketConfig:
    """Market clock and price model configuration."""
    # Clock
    ms_per_update: int = 6000  # Simulated time covered by one tick
    ms_per_update_min: int = 4000  # Minimum wall-clock spacing between ticks
    ms_per_cycle: int = 200  # Length of one game cycle

    # Cycle events
    ticks_per_cycle: int = 75
    cycle_flip_probability: float = 0.45

    # Liquidity
    share_tx_heal: int = 10

    # Instrument table (None = built-in defaults)
    metadata_path: Optional[str] = None

    @property
    def cycles_per_update(self) -> float:
        return self.ms_per_update / self.ms_per_cycle


@dataclass
class ExecutionConfig:
    """Settlement of executed orders against the holder's account."""
    starting_cash: float = 1000000.0
    commission: float = 0.0
    policy: str = "enforce_funds"  # enforce_funds, allow_negative_cash


@dataclass
class SimulationConfig:
    """Batch run configuration used by the CLI."""
    num_ticks: int = 100
    random_seed: int = 42
    history_path: Optional[str] = None
    snapshot_path: Optional[str] = None


@dataclass
class LoggingConfig:
    level: str = "INFO"
    format: str = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'


@dataclass
class Config:
    """Main configuration container."""
    market: MarketConfig
    execution: ExecutionConfig
    simulation: SimulationConfig
    logging: LoggingConfig


def _config_from_dict(data: Dict[str, Any]) -> Config:
    data = data or {}
    return Config(
        market=MarketConfig(**data.get('market', {})),
        execution=ExecutionConfig(**data.get('execution', {})),
        simulation=SimulationConfig(**data.get('simulation', {})),
        logging=LoggingConfig(**data.get('logging', {}))
    )


def load_config(config_path: Union[str, Path]) -> Config:
    """Load configuration from file."""
    config_path = Path(config_path)

    if not config_path.exists():
        raise FileNotFoundError(f"Configuration file not found: {config_path}")

    # Determine file format
    suffix = config_path.suffix.lower()

    if suffix == '.json':
        with open(config_path, 'r') as f:
            data = json.load(f)
    elif suffix in ['.yml', '.yaml']:
        with open(config_path, 'r') as f:
            data = yaml.safe_load(f)
    else:
        raise ValueError(f"Unsupported configuration format: {suffix}")

    if data is not None and not isinstance(data, dict):
        raise ValueError(f"Configuration root must be a mapping: {config_path}")

    try:
        return _config_from_dict(data)
    except TypeError as e:
        raise ValueError(f"Invalid configuration in {config_path}: {e}") from e


def save_config(config: Config, config_path: Union[str, Path]) -> None:
    """Save configuration to file."""
    config_path = Path(config_path)

    # Convert to dictionary
    data = {
        'market': asdict(config.market),
        'execution': asdict(config.execution),
        'simulation': asdict(config.simulation),
        'logging': asdict(config.logging)
    }

    # Determine file format
    suffix = config_path.suffix.lower()

    if suffix == '.json':
        with open(config_path, 'w') as f:
            json.dump(data, f, indent=2)
    elif suffix in ['.yml', '.yaml']:
        with open(config_path, 'w') as f:
            yaml.dump(data, f, default_flow_style=False, indent=2)
    else:
        raise ValueError(f"Unsupported configuration format: {suffix}")


def create_default_config() -> Config:
    """Create default configuration."""
    return Config(
        market=MarketConfig(),
        execution=ExecutionConfig(),
        simulation=SimulationConfig(),
        logging=LoggingConfig()
    )


def merge_configs(base_config: Config, override_config: dict) -> Config:
    """Merge configuration with overrides.

    Unknown sections and keys are ignored.
    """
    merged_config = copy.deepcopy(base_config)

    for section, values in override_config.items():
        if hasattr(merged_config, section):
            section_obj = getattr(merged_config, section)
            for key, value in values.items():
                if hasattr(section_obj, key):
                    setattr(section_obj, key, value)

    return merged_config


# Environment-based configuration
def load_config_from_env() -> Dict[str, Any]:
    """Load configuration overrides from environment variables."""
    env_config = {}

    # Simulation settings
    if 'STOCKSIM_SEED' in os.environ:
        env_config['simulation'] = {'random_seed': int(os.environ['STOCKSIM_SEED'])}

    if 'STOCKSIM_TICKS' in os.environ:
        if 'simulation' not in env_config:
            env_config['simulation'] = {}
        env_config['simulation']['num_ticks'] = int(os.environ['STOCKSIM_TICKS'])

    # Execution settings
    if 'STOCKSIM_COMMISSION' in os.environ:
        env_config['execution'] = {'commission': float(os.environ['STOCKSIM_COMMISSION'])}

    if 'STOCKSIM_LOG_LEVEL' in os.environ:
        env_config['logging'] = {'level': os.environ['STOCKSIM_LOG_LEVEL'].upper()}

    return env_config
