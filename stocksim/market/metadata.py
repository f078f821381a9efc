"""
Static instrument definitions for StockSim.

Each entry describes how to create an instrument when the market is
initialised: fixed identity and outlook, plus value ranges that are
sampled once at creation time.
"""

import json
import yaml
from dataclasses import dataclass, asdict
from pathlib import Path
from typing import Any, Dict, List, Optional, Union


@dataclass(frozen=True)
class ValueRange:
    """Inclusive integer range, optionally scaled down by ``divisor``."""
    min: int
    max: int
    divisor: Optional[float] = None

    def sample(self, rng) -> float:
        value = float(rng.integers(self.min, self.max, endpoint=True))
        if self.divisor:
            return value / self.divisor
        return value


RangeLike = Union[float, ValueRange]


def resolve_value(value: RangeLike, rng) -> float:
    """Return ``value`` itself or a draw from it when it is a range."""
    if isinstance(value, ValueRange):
        return value.sample(rng)
    return float(value)


@dataclass(frozen=True)
class InstrumentMetadata:
    """Creation parameters for a single instrument."""
    name: str
    symbol: str
    bias: bool
    init_price: RangeLike
    market_cap: float
    volatility: RangeLike
    outlook_magnitude: float
    share_tx_for_movement: RangeLike

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


DEFAULT_METADATA: List[InstrumentMetadata] = [
    InstrumentMetadata("ECorp", "ECP", True, ValueRange(17000, 28000), 2.4e12,
                       ValueRange(40, 50, 100), 19, ValueRange(30000, 90000)),
    InstrumentMetadata("MegaCorp", "MGCP", True, ValueRange(24000, 34000), 2.4e12,
                       ValueRange(40, 50, 100), 19, ValueRange(30000, 90000)),
    InstrumentMetadata("Blade Industries", "BLD", True, ValueRange(12000, 25000), 1.6e12,
                       ValueRange(70, 80, 100), 13, ValueRange(20000, 70000)),
    InstrumentMetadata("Clarke Incorporated", "CLRK", True, ValueRange(10000, 25000), 1.5e12,
                       ValueRange(65, 75, 100), 12, ValueRange(20000, 70000)),
    InstrumentMetadata("OmniTek Incorporated", "OMTK", True, ValueRange(32000, 43000), 1.8e12,
                       ValueRange(60, 70, 100), 12, ValueRange(20000, 70000)),
    InstrumentMetadata("Four Sigma", "FSIG", True, ValueRange(50000, 80000), 2e12,
                       ValueRange(110, 125, 100), 17, ValueRange(10000, 40000)),
    InstrumentMetadata("KuaiGong International", "KGI", True, ValueRange(16000, 28000), 1.9e12,
                       ValueRange(75, 85, 100), 10, ValueRange(20000, 70000)),
    InstrumentMetadata("Fulcrum Technologies", "FLCM", True, ValueRange(29000, 36000), 2e12,
                       ValueRange(125, 135, 100), 16, ValueRange(10000, 40000)),
    InstrumentMetadata("Storm Technologies", "STM", True, ValueRange(20000, 29000), 1.2e12,
                       ValueRange(65, 75, 100), 10, ValueRange(30000, 90000)),
    InstrumentMetadata("DefComm", "DCOMM", True, ValueRange(6000, 19000), 900e9,
                       ValueRange(70, 80, 100), 10, ValueRange(10000, 40000)),
    InstrumentMetadata("Sigma Cosmetics", "SGC", True, ValueRange(2000, 5000), 220e9,
                       ValueRange(100, 120, 100), 2, ValueRange(5000, 20000)),
    InstrumentMetadata("Joes Guns", "JGN", True, ValueRange(400, 600), 35e6,
                       ValueRange(400, 600, 100), 1, ValueRange(5000, 10000)),
    InstrumentMetadata("Catalyst Ventures", "CTYS", True, ValueRange(1000, 1500), 70e9,
                       ValueRange(250, 300, 100), 13.5, ValueRange(5000, 15000)),
    InstrumentMetadata("Microdyne Technologies", "MDYN", True, ValueRange(20000, 25000), 600e9,
                       ValueRange(70, 80, 100), 8, ValueRange(10000, 40000)),
    InstrumentMetadata("Titan Laboratories", "TITN", True, ValueRange(15000, 24000), 900e9,
                       ValueRange(60, 80, 100), 15, ValueRange(10000, 40000)),
    InstrumentMetadata("Noodle Bar", "FNS", False, ValueRange(20000, 33000), 100e9,
                       ValueRange(60, 70, 100), 5, ValueRange(15000, 40000)),
]


def _parse_range(value: Any) -> RangeLike:
    if isinstance(value, dict):
        return ValueRange(int(value['min']), int(value['max']), value.get('divisor'))
    return float(value)


def metadata_from_dict(data: Dict[str, Any]) -> InstrumentMetadata:
    """Build metadata from a plain mapping (as found in YAML/JSON files)."""
    try:
        return InstrumentMetadata(
            name=str(data['name']),
            symbol=str(data['symbol']),
            bias=bool(data.get('bias', True)),
            init_price=_parse_range(data['init_price']),
            market_cap=float(data['market_cap']),
            volatility=_parse_range(data['volatility']),
            outlook_magnitude=float(data.get('outlook_magnitude', 0.0)),
            share_tx_for_movement=_parse_range(data['share_tx_for_movement']),
        )
    except (KeyError, TypeError, ValueError) as e:
        raise ValueError(f"Invalid instrument definition {data!r}: {e}") from e


def load_metadata(path: Union[str, Path]) -> List[InstrumentMetadata]:
    """Load an instrument table from a YAML or JSON file."""
    path = Path(path)

    if not path.exists():
        raise FileNotFoundError(f"Instrument metadata file not found: {path}")

    suffix = path.suffix.lower()
    with open(path, 'r') as f:
        if suffix == '.json':
            data = json.load(f)
        elif suffix in ['.yml', '.yaml']:
            data = yaml.safe_load(f)
        else:
            raise ValueError(f"Unsupported metadata format: {suffix}")

    if isinstance(data, dict):
        data = data.get('instruments', [])
    if not isinstance(data, list):
        raise ValueError(f"Instrument metadata must be a list: {path}")

    metadata = [metadata_from_dict(entry) for entry in data]

    for field_name in ('name', 'symbol'):
        values = [getattr(m, field_name) for m in metadata]
        duplicates = {v for v in values if values.count(v) > 1}
        if duplicates:
            raise ValueError(f"Duplicate instrument {field_name}s: {sorted(duplicates)}")

    return metadata
