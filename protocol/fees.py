"""
protocol.fees: fee schedule and per-operation fee calculation

Overview
--------
Computes the fee an account operation must pay, in the core asset's smallest
unit. Each operation kind has its own parameter record:

* account_create:   basic_fee / premium_fee by name cheapness, plus a data
                    fee over the packed operation size.
* account_update:   flat fee, plus the data fee only when new options are set.
* account_upgrade:  annual or lifetime membership fee; no data fee.
* account_transfer: flat fee.

The data fee is ``packed_size * price_per_kbyte // 1024``.

Notes
-----
* Every function here is pure: same operation + same parameters → same fee.
* All sums are overflow-checked against the maximum share supply and raise
  `FeeOverflow`; nothing saturates or wraps.
* The size function and the data-fee function are injectable so an engine
  with a different wire format can reuse the schedule.
* Network values live in a YAML/JSON fee schedule; this module ships the
  chain's defaults and `resolve_fee_schedule(...)` to override them.

API
---
    schedule = resolve_fee_schedule("fees.yaml")
    fee = calculate_fee(op, schedule)
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field, fields, replace
from functools import lru_cache
from pathlib import Path
from typing import Any, Callable, Dict, Mapping, Optional

import yaml

from protocol import encoding
from protocol.config import get_config
from protocol.errors import ConfigError, FeeOverflow
from protocol.logging import get_logger
from protocol.names import is_cheap_name
from protocol.types.asset import ShareAmount, ensure_amount, safe_add
from protocol.types.operations import (
    AccountCreateOperation,
    AccountOperation,
    AccountTransferOperation,
    AccountUpdateOperation,
    AccountUpgradeOperation,
)

log = get_logger(__name__)

PRECISION = 100_000  # smallest units per whole core-asset unit

PackedSizeFn = Callable[[Any], int]
DataFeeFn = Callable[[int, int], int]


# --------------------------- parameter model ---------------------------------


class _FeeParams:
    def validate(self, cap: Optional[int] = None) -> "_FeeParams":
        limit = cap if cap is not None else get_config().max_share_supply
        for f in fields(self):  # type: ignore[arg-type]
            value = getattr(self, f.name)
            if isinstance(value, bool) or not isinstance(value, int):
                raise ConfigError(
                    f"{f.name} must be int (got {type(value).__name__})", field=f.name
                )
            if value < 0:
                raise ConfigError(f"{f.name} must be non-negative", field=f.name, value=value)
            if value > limit:
                raise ConfigError(f"{f.name} exceeds max share supply", field=f.name, value=value)
        return self


@dataclass(frozen=True)
class AccountCreateFeeParameters(_FeeParams):
    basic_fee: int = 5 * PRECISION
    premium_fee: int = 2000 * PRECISION
    price_per_kbyte: int = PRECISION


@dataclass(frozen=True)
class AccountUpdateFeeParameters(_FeeParams):
    fee: int = 20 * PRECISION
    price_per_kbyte: int = PRECISION


@dataclass(frozen=True)
class AccountUpgradeFeeParameters(_FeeParams):
    membership_annual_fee: int = 2000 * PRECISION
    membership_lifetime_fee: int = 10000 * PRECISION


@dataclass(frozen=True)
class AccountTransferFeeParameters(_FeeParams):
    fee: int = 500 * PRECISION


@dataclass(frozen=True)
class FeeSchedule:
    account_create: AccountCreateFeeParameters = field(default_factory=AccountCreateFeeParameters)
    account_update: AccountUpdateFeeParameters = field(default_factory=AccountUpdateFeeParameters)
    account_upgrade: AccountUpgradeFeeParameters = field(default_factory=AccountUpgradeFeeParameters)
    account_transfer: AccountTransferFeeParameters = field(
        default_factory=AccountTransferFeeParameters
    )

    def validate(self, cap: Optional[int] = None) -> "FeeSchedule":
        for f in fields(self):
            getattr(self, f.name).validate(cap)
        return self

    def for_kind(self, kind: str) -> _FeeParams:
        try:
            return getattr(self, kind)
        except AttributeError:
            raise KeyError(f"no fee parameters for {kind!r}") from None


# --------------------------- schedule loading --------------------------------


def _load_schedule_file(path: Path) -> Mapping[str, Any]:
    txt = path.read_text(encoding="utf-8")
    if path.suffix.lower() == ".json":
        data = json.loads(txt)
    else:
        data = yaml.safe_load(txt)
    if not isinstance(data, dict):
        raise ConfigError(f"{path}: expected mapping at root", path=str(path))
    return data


def _merge_maps(*maps: Mapping[str, Any]) -> Dict[str, Dict[str, Any]]:
    out: Dict[str, Dict[str, Any]] = {}
    for m in maps:
        for kind, params in m.items():
            if isinstance(params, Mapping):
                out.setdefault(str(kind), {}).update({str(k): v for k, v in params.items()})
    return out


def resolve_fee_schedule(
    path: Optional[str | Path] = None,
    *,
    overrides: Optional[Mapping[str, Mapping[str, Any]]] = None,
    cap: Optional[int] = None,
) -> FeeSchedule:
    """
    Build a validated `FeeSchedule` from defaults, an optional file, then overrides.

    The file (YAML or JSON) may nest the kinds under a ``fees`` key or put them
    at the top level:

        fees:
          account_create:
            basic_fee: 500000
            premium_fee: 200000000
            price_per_kbyte: 100000
          account_upgrade:
            membership_lifetime_fee: 1000000000

    Only kinds and keys that match the parameter records are applied.
    """
    base = FeeSchedule()
    merged: Dict[str, Dict[str, Any]] = {}

    if path is not None:
        p = Path(path)
        if not p.exists():
            raise ConfigError(f"fee schedule not found: {p}", path=str(p))
        data = _load_schedule_file(p)
        src = data["fees"] if isinstance(data.get("fees"), Mapping) else data
        merged = _merge_maps(merged, src)
        log.debug("fee schedule loaded", extra={"path": str(p), "kinds": sorted(merged)})

    if overrides:
        merged = _merge_maps(merged, overrides)

    schedule = base
    for f in fields(base):
        kind_overrides = merged.get(f.name)
        if not kind_overrides:
            continue
        current = getattr(schedule, f.name)
        names = {pf.name for pf in fields(current)}
        known = {k: v for k, v in kind_overrides.items() if k in names}
        schedule = replace(schedule, **{f.name: replace(current, **known)})

    return schedule.validate(cap)


@lru_cache(maxsize=1)
def default_fee_schedule() -> FeeSchedule:
    """Schedule from the configured fee schedule file, or the built-in defaults."""
    return resolve_fee_schedule(get_config().fee_schedule_path)


# --------------------------- computation -------------------------------------


def calculate_data_fee(size: int, price_per_kbyte: int, *, cap: Optional[int] = None) -> ShareAmount:
    """Fee for `size` bytes at `price_per_kbyte` per 1024 bytes, rounded down."""
    limit = cap if cap is not None else get_config().max_share_supply
    if size < 0 or price_per_kbyte < 0:
        raise ValueError("size and price_per_kbyte must be non-negative")
    result = size * price_per_kbyte // 1024
    if result > limit:
        raise FeeOverflow(result, limit, what="data fee")
    return ShareAmount(result)


def _data_fee(
    op: AccountOperation,
    price_per_kbyte: int,
    packed_size: Optional[PackedSizeFn],
    data_fee: Optional[DataFeeFn],
    cap: int,
) -> int:
    size = (packed_size or encoding.packed_size)(op)
    if data_fee is None:
        return calculate_data_fee(size, price_per_kbyte, cap=cap)
    return ensure_amount(data_fee(size, price_per_kbyte), cap=cap, what="data fee")


def calculate_account_create_fee(
    op: AccountCreateOperation,
    params: AccountCreateFeeParameters,
    *,
    packed_size: Optional[PackedSizeFn] = None,
    data_fee: Optional[DataFeeFn] = None,
    cap: Optional[int] = None,
) -> ShareAmount:
    limit = cap if cap is not None else get_config().max_share_supply
    base = params.basic_fee if is_cheap_name(op.name) else params.premium_fee
    extra = _data_fee(op, params.price_per_kbyte, packed_size, data_fee, limit)
    return safe_add(base, extra, cap=limit)


def calculate_account_update_fee(
    op: AccountUpdateOperation,
    params: AccountUpdateFeeParameters,
    *,
    packed_size: Optional[PackedSizeFn] = None,
    data_fee: Optional[DataFeeFn] = None,
    cap: Optional[int] = None,
) -> ShareAmount:
    limit = cap if cap is not None else get_config().max_share_supply
    if op.new_options is None:
        return ensure_amount(params.fee, cap=limit, what="fee")
    extra = _data_fee(op, params.price_per_kbyte, packed_size, data_fee, limit)
    return safe_add(params.fee, extra, cap=limit)


def calculate_account_upgrade_fee(
    op: AccountUpgradeOperation,
    params: AccountUpgradeFeeParameters,
    *,
    cap: Optional[int] = None,
    **_: Any,
) -> ShareAmount:
    limit = cap if cap is not None else get_config().max_share_supply
    if op.upgrade_to_lifetime_member:
        return ensure_amount(params.membership_lifetime_fee, cap=limit, what="fee")
    return ensure_amount(params.membership_annual_fee, cap=limit, what="fee")


def calculate_account_transfer_fee(
    op: AccountTransferOperation,
    params: AccountTransferFeeParameters,
    *,
    cap: Optional[int] = None,
    **_: Any,
) -> ShareAmount:
    limit = cap if cap is not None else get_config().max_share_supply
    return ensure_amount(params.fee, cap=limit, what="fee")


_CALCULATORS: Dict[type, Callable[..., ShareAmount]] = {
    AccountCreateOperation: calculate_account_create_fee,
    AccountUpdateOperation: calculate_account_update_fee,
    AccountUpgradeOperation: calculate_account_upgrade_fee,
    AccountTransferOperation: calculate_account_transfer_fee,
}


def calculate_fee(
    op: AccountOperation,
    schedule: Optional[FeeSchedule] = None,
    *,
    packed_size: Optional[PackedSizeFn] = None,
    data_fee: Optional[DataFeeFn] = None,
) -> ShareAmount:
    """Required fee for any account operation under `schedule` (defaults apply)."""
    calc = _CALCULATORS.get(type(op))
    if calc is None:
        raise TypeError(f"no fee calculator for {type(op).__name__}")
    sched = schedule or default_fee_schedule()
    return calc(op, sched.for_kind(op.KIND), packed_size=packed_size, data_fee=data_fee)


__all__ = [
    "PRECISION",
    "AccountCreateFeeParameters",
    "AccountUpdateFeeParameters",
    "AccountUpgradeFeeParameters",
    "AccountTransferFeeParameters",
    "FeeSchedule",
    "resolve_fee_schedule",
    "default_fee_schedule",
    "calculate_data_fee",
    "calculate_account_create_fee",
    "calculate_account_update_fee",
    "calculate_account_upgrade_fee",
    "calculate_account_transfer_fee",
    "calculate_fee",
]
