"""
protocol.types.asset: fee amounts and overflow-checked arithmetic.

Amounts are plain Python ints. Python's ints are unbounded, so every sum that
feeds a fee decision is checked against the maximum share supply and raises
`FeeOverflow` instead of silently growing or wrapping.

Exports
-------
* Types: `ShareAmount`, `Asset`
* Constants: `CORE_ASSET_ID`
* Arithmetic:
    - `safe_add(a, b, cap=...)`  → raises FeeOverflow on cap breach
    - `ensure_amount(n, cap=...)` → validates 0 <= n <= cap
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping, NewType

from protocol.config import MAX_SHARE_SUPPLY
from protocol.errors import FeeOverflow

ShareAmount = NewType("ShareAmount", int)

CORE_ASSET_ID = 0


def _ensure_int(n: int) -> int:
    if isinstance(n, bool) or not isinstance(n, int):
        raise TypeError(f"expected int, got {type(n).__name__}")
    return n


def ensure_amount(n: int, *, cap: int = MAX_SHARE_SUPPLY, what: str = "amount") -> ShareAmount:
    """Validate and coerce an int into a `ShareAmount` (0 <= n <= cap)."""
    _ensure_int(n)
    if n < 0:
        raise ValueError(f"{what} must be non-negative")
    if n > cap:
        raise FeeOverflow(n, cap, what=what)
    return ShareAmount(n)


def safe_add(a: int, b: int, *, cap: int = MAX_SHARE_SUPPLY) -> ShareAmount:
    """Checked addition. Raises FeeOverflow if the result exceeds `cap`."""
    ensure_amount(a, cap=cap)
    ensure_amount(b, cap=cap)
    s = a + b
    if s > cap:
        raise FeeOverflow(s, cap)
    return ShareAmount(s)


@dataclass(frozen=True)
class Asset:
    """
    An amount of some asset. Operations carry their declared fee as an Asset.

    The amount is *not* validated here: a negative fee is representable so
    that admission can reject it with a precise error.
    """

    amount: int
    asset_id: int = CORE_ASSET_ID

    def __post_init__(self) -> None:
        _ensure_int(self.amount)
        _ensure_int(self.asset_id)

    def to_obj(self) -> Mapping[str, Any]:
        return {"amount": self.amount, "asset": self.asset_id}

    @staticmethod
    def from_obj(o: Mapping[str, Any]) -> "Asset":
        return Asset(amount=int(o["amount"]), asset_id=int(o.get("asset", CORE_ASSET_ID)))


__all__ = ["ShareAmount", "Asset", "CORE_ASSET_ID", "ensure_amount", "safe_add"]
