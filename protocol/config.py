"""
Protocol configuration loader.

Goals
-----
- Zero external deps (stdlib only).
- Layered config with clear precedence:
    1) Explicit overrides passed to `load()` (highest)
    2) Environment variables (LEDGER_*)
    3) Config file (TOML or JSON)
    4) Built-in defaults (lowest)
- Frozen, typed dataclasses validated at construction.

This module configures only the network constants the admission rules read:

  - account-name length bounds
  - the 100%-equivalent constant used for referrer percentages
  - the maximum share supply (upper bound for every fee amount)
  - the location of the fee schedule file

Environment variables (all optional):
  LEDGER_CONFIG             -> path to a TOML/JSON config file
  LEDGER_NAME_MIN_LENGTH    -> int (default: 3, must be >= 3)
  LEDGER_NAME_MAX_LENGTH    -> int (default: 63)
  LEDGER_FULL_PERCENT       -> int (default: 10000)
  LEDGER_MAX_SHARE_SUPPLY   -> int (default: 1000000000000000)
  LEDGER_FEE_SCHEDULE       -> path to a fee schedule (YAML/JSON)

Programmatic usage:
    from protocol.config import get_config
    cfg = get_config()
    cfg.names.max_length
"""

from __future__ import annotations

import json
import os
from dataclasses import asdict, dataclass, field
from functools import lru_cache
from pathlib import Path
from typing import Any, Dict, Mapping, Optional

from protocol.errors import ConfigError

# -- Optional TOML support (Python 3.11+ has tomllib).
try:  # py311+
    import tomllib as _toml  # type: ignore[attr-defined]
except ImportError:  # py310
    _toml = None  # type: ignore[assignment]


# ------------------------------
# Defaults
# ------------------------------

# Every label is at least three characters long.
GRAMMAR_MIN_NAME_LENGTH = 3

DEFAULT_MIN_NAME_LENGTH = 3
DEFAULT_MAX_NAME_LENGTH = 63

FULL_PERCENT = 10_000  # 100.00%
MAX_SHARE_SUPPLY = 1_000_000_000_000_000


def _expand(p: str | Path) -> Path:
    return Path(p).expanduser().resolve()


def _env_int(env: Mapping[str, str], name: str) -> Optional[int]:
    v = env.get(name)
    if v is None or v.strip() == "":
        return None
    try:
        return int(v, 0)
    except ValueError as e:
        raise ConfigError(f"{name} must be int, got {v!r}", variable=name) from e


# ------------------------------
# Typed configuration model
# ------------------------------


@dataclass(frozen=True)
class NameLimits:
    """Inclusive length bounds for account names."""

    min_length: int = DEFAULT_MIN_NAME_LENGTH
    max_length: int = DEFAULT_MAX_NAME_LENGTH

    def __post_init__(self) -> None:
        if self.min_length < GRAMMAR_MIN_NAME_LENGTH:
            raise ConfigError(
                f"names.min_length must be >= {GRAMMAR_MIN_NAME_LENGTH}",
                min_length=self.min_length,
            )
        if self.max_length < self.min_length:
            raise ConfigError(
                "names.max_length must be >= names.min_length",
                min_length=self.min_length,
                max_length=self.max_length,
            )


@dataclass(frozen=True)
class ProtocolConfig:
    names: NameLimits = field(default_factory=NameLimits)
    full_percent: int = FULL_PERCENT
    max_share_supply: int = MAX_SHARE_SUPPLY
    fee_schedule_path: Optional[Path] = None

    def __post_init__(self) -> None:
        if self.full_percent <= 0:
            raise ConfigError("full_percent must be > 0", full_percent=self.full_percent)
        if self.max_share_supply <= 0:
            raise ConfigError(
                "max_share_supply must be > 0", max_share_supply=self.max_share_supply
            )

    def to_dict(self) -> Dict[str, Any]:
        d = asdict(self)
        if self.fee_schedule_path is not None:
            d["fee_schedule_path"] = str(self.fee_schedule_path)
        return d


# ------------------------------
# File loader (TOML / JSON)
# ------------------------------


def _load_file(path: Path) -> Dict[str, Any]:
    if not path.exists():
        raise ConfigError(f"config file not found: {path}", path=str(path))
    suffix = path.suffix.lower()
    with path.open("rb") as f:
        if suffix in {".toml", ".tml"}:
            if not _toml:
                raise ConfigError(
                    "tomllib is unavailable (Python < 3.11). Use a JSON config or upgrade Python.",
                    path=str(path),
                )
            return _toml.load(f)  # type: ignore[no-any-return]
        if suffix == ".json":
            return json.load(f)
    raise ConfigError(f"unsupported config format: {suffix}. Use .toml or .json", path=str(path))


def _merge_dict(a: Dict[str, Any], b: Mapping[str, Any]) -> Dict[str, Any]:
    """Shallow + nested dict merge: values in b override a."""
    out = dict(a)
    for k, v in b.items():
        if isinstance(v, Mapping) and isinstance(out.get(k), dict):
            out[k] = _merge_dict(out[k], v)
        else:
            out[k] = v
    return out


# ------------------------------
# Main loader
# ------------------------------


def load(
    config_file: Optional[str | Path] = None,
    *,
    env: Optional[Mapping[str, str]] = None,
    **overrides: Any,
) -> ProtocolConfig:
    """
    Load the protocol configuration.

    Precedence: overrides > env > file > defaults.

    Parameters
    ----------
    config_file : str | Path | None
        Optional TOML or JSON file with keys:
          names: { min_length, max_length }
          full_percent, max_share_supply, fee_schedule_path
        Falls back to LEDGER_CONFIG when omitted.
    env : Mapping | None
        Environment to read (defaults to os.environ).
    overrides : Any
        Keyword overrides, e.g. load(names={"max_length": 32}).
    """
    env = os.environ if env is None else env

    # 1) Defaults
    base: Dict[str, Any] = {
        "names": {
            "min_length": DEFAULT_MIN_NAME_LENGTH,
            "max_length": DEFAULT_MAX_NAME_LENGTH,
        },
        "full_percent": FULL_PERCENT,
        "max_share_supply": MAX_SHARE_SUPPLY,
        "fee_schedule_path": None,
    }

    # 2) File
    path = config_file or env.get("LEDGER_CONFIG")
    if path:
        base = _merge_dict(base, _load_file(_expand(path)))

    # 3) Env
    v = _env_int(env, "LEDGER_NAME_MIN_LENGTH")
    if v is not None:
        base["names"]["min_length"] = v
    v = _env_int(env, "LEDGER_NAME_MAX_LENGTH")
    if v is not None:
        base["names"]["max_length"] = v
    v = _env_int(env, "LEDGER_FULL_PERCENT")
    if v is not None:
        base["full_percent"] = v
    v = _env_int(env, "LEDGER_MAX_SHARE_SUPPLY")
    if v is not None:
        base["max_share_supply"] = v
    if env.get("LEDGER_FEE_SCHEDULE"):
        base["fee_schedule_path"] = env["LEDGER_FEE_SCHEDULE"].strip()

    # 4) Overrides (highest)
    if overrides:
        base = _merge_dict(base, overrides)

    try:
        names = NameLimits(
            min_length=int(base["names"]["min_length"]),
            max_length=int(base["names"]["max_length"]),
        )
        schedule = base.get("fee_schedule_path")
        return ProtocolConfig(
            names=names,
            full_percent=int(base["full_percent"]),
            max_share_supply=int(base["max_share_supply"]),
            fee_schedule_path=_expand(schedule) if schedule else None,
        )
    except (KeyError, TypeError, ValueError) as e:
        raise ConfigError(f"malformed configuration: {e}") from e


@lru_cache(maxsize=1)
def get_config() -> ProtocolConfig:
    """Process-wide configuration, resolved once from file/env/defaults."""
    return load()


def reset_config() -> None:
    """Drop the cached configuration (tests, hot reload)."""
    get_config.cache_clear()


__all__ = [
    "GRAMMAR_MIN_NAME_LENGTH",
    "DEFAULT_MIN_NAME_LENGTH",
    "DEFAULT_MAX_NAME_LENGTH",
    "FULL_PERCENT",
    "MAX_SHARE_SUPPLY",
    "NameLimits",
    "ProtocolConfig",
    "load",
    "get_config",
    "reset_config",
]
