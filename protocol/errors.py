"""
protocol.errors
---------------

A small, consistent error system for the account-operation admission rules.

Design goals
------------
- One root `ProtocolError` with machine-friendly `code` and optional `data`.
- One concrete subclass per rejection reason so the evaluation engine can map
  failures without parsing messages.
- Safe JSON representation (`to_dict`) suitable for logs and RPC bridges.

Hierarchy:

    ProtocolError (base)
    ├── ValidationError
    │   ├── InvalidIdentifier
    │   ├── InvalidAuthority
    │   ├── InvalidVoteTally
    │   ├── InvalidExtension
    │   ├── InvalidReferrerPercent
    │   ├── NegativeFee
    │   ├── NoOpUpdate
    │   └── ReservedAccount
    ├── FeeError
    │   └── FeeOverflow
    └── ConfigError

Every admission check is a local, non-recoverable assertion: the first failing
condition raises and nothing is retried.

This module uses only stdlib to avoid import cycles.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Mapping, Optional

__all__ = [
    "ProtocolErrorCode",
    "ProtocolError",
    "ValidationError",
    "InvalidIdentifier",
    "InvalidAuthority",
    "InvalidVoteTally",
    "InvalidExtension",
    "InvalidReferrerPercent",
    "NegativeFee",
    "NoOpUpdate",
    "ReservedAccount",
    "FeeError",
    "FeeOverflow",
    "ConfigError",
]


class ProtocolErrorCode(str, Enum):
    # Admission (validation)
    VALIDATION = "PROTOCOL/VALIDATION"
    INVALID_IDENTIFIER = "PROTOCOL/INVALID_IDENTIFIER"
    INVALID_AUTHORITY = "PROTOCOL/INVALID_AUTHORITY"
    INVALID_VOTE_TALLY = "PROTOCOL/INVALID_VOTE_TALLY"
    INVALID_EXTENSION = "PROTOCOL/INVALID_EXTENSION"
    INVALID_REFERRER_PERCENT = "PROTOCOL/INVALID_REFERRER_PERCENT"
    NEGATIVE_FEE = "PROTOCOL/NEGATIVE_FEE"
    NO_OP_UPDATE = "PROTOCOL/NO_OP_UPDATE"
    RESERVED_ACCOUNT = "PROTOCOL/RESERVED_ACCOUNT"

    # Fees
    FEE = "PROTOCOL/FEE"
    FEE_OVERFLOW = "PROTOCOL/FEE_OVERFLOW"

    # Config / environment
    CONFIG = "PROTOCOL/CONFIG"


@dataclass(eq=False)
class ProtocolError(Exception):
    """
    Root error for the protocol package.

    Attributes
    ----------
    code: str
        Machine-stable error code (see ProtocolErrorCode).
    message: str
        Human hint suitable for logs.
    data: dict
        Optional machine data (field names, limits, offending values).
        Must be JSON-serializable.
    """

    code: str
    message: str
    data: Dict[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        super().__init__(f"{_code_str(self.code)}: {self.message}")

    def with_context(self, **ctx: Any) -> "ProtocolError":
        """Return a *new* error with extra context merged (does not mutate)."""
        out = type(self).__new__(type(self))
        out.__dict__.update(self.__dict__)
        out.args = self.args
        out.data = {**self.data, **_jsonmap(ctx)}
        return out

    def to_dict(self) -> Dict[str, Any]:
        """JSON-safe shape suitable for logs/RPC bridges."""
        return {
            "code": _code_str(self.code),
            "message": self.message,
            "data": _jsonmap(self.data),
        }

    def __str__(self) -> str:
        parts = [f"{_code_str(self.code)}: {self.message}"]
        if self.data:
            preview = ", ".join(f"{k}={_preview(v)}" for k, v in self.data.items())
            parts.append(f"[{preview}]")
        return " ".join(parts)


# ---------------------------------------------------------------------------
# Validation failures
# ---------------------------------------------------------------------------


class ValidationError(ProtocolError):
    """Parent for every admission rejection."""

    def __init__(
        self,
        message: str = "invalid operation",
        *,
        code: str = ProtocolErrorCode.VALIDATION,
        **data: Any,
    ) -> None:
        super().__init__(code=code, message=message, data=_jsonmap(data))


class InvalidIdentifier(ValidationError):
    def __init__(self, name: str, message: str = "invalid account name", **data: Any) -> None:
        super().__init__(message, code=ProtocolErrorCode.INVALID_IDENTIFIER, name=name, **data)


class InvalidAuthority(ValidationError):
    """Wrong auth-entry composition or an unsatisfiable threshold."""

    def __init__(self, role: str, message: str, **data: Any) -> None:
        super().__init__(message, code=ProtocolErrorCode.INVALID_AUTHORITY, role=role, **data)


class InvalidVoteTally(ValidationError):
    def __init__(
        self,
        *,
        num_witness: int,
        witness_votes: int,
        num_committee: int,
        committee_votes: int,
    ) -> None:
        super().__init__(
            "witness/committee targets do not match the votes cast",
            code=ProtocolErrorCode.INVALID_VOTE_TALLY,
            num_witness=num_witness,
            witness_votes=witness_votes,
            num_committee=num_committee,
            committee_votes=committee_votes,
        )


class InvalidExtension(ValidationError):
    """Unrecognized tag under a reject default, or a malformed known payload."""

    def __init__(self, context: str, tag: Optional[int], message: str, **data: Any) -> None:
        super().__init__(
            message, code=ProtocolErrorCode.INVALID_EXTENSION, context=context, tag=tag, **data
        )


class InvalidReferrerPercent(ValidationError):
    def __init__(self, referrer_percent: int, limit: int) -> None:
        super().__init__(
            f"referrer_percent {referrer_percent} exceeds {limit}",
            code=ProtocolErrorCode.INVALID_REFERRER_PERCENT,
            referrer_percent=referrer_percent,
            limit=limit,
        )


class NegativeFee(ValidationError):
    def __init__(self, amount: int) -> None:
        super().__init__(
            "fee amount must be non-negative", code=ProtocolErrorCode.NEGATIVE_FEE, amount=amount
        )


class NoOpUpdate(ValidationError):
    def __init__(self) -> None:
        super().__init__(
            "update must set at least one of owner, active or new_options",
            code=ProtocolErrorCode.NO_OP_UPDATE,
        )


class ReservedAccount(ValidationError):
    def __init__(self, account: str, message: str = "operation targets a reserved account") -> None:
        super().__init__(message, code=ProtocolErrorCode.RESERVED_ACCOUNT, account=account)


# ---------------------------------------------------------------------------
# Fees / config
# ---------------------------------------------------------------------------


class FeeError(ProtocolError):
    def __init__(
        self, message: str = "fee computation failed", *, code: str = ProtocolErrorCode.FEE, **data: Any
    ) -> None:
        super().__init__(code=code, message=message, data=_jsonmap(data))


class FeeOverflow(FeeError):
    """An amount left the [0, max_share_supply] range; fees never wrap."""

    def __init__(self, value: int, cap: int, *, what: str = "fee") -> None:
        super().__init__(
            f"{what} overflow: {value} > {cap}",
            code=ProtocolErrorCode.FEE_OVERFLOW,
            value=str(value),
            cap=cap,
            what=what,
        )


class ConfigError(ProtocolError):
    def __init__(self, message: str = "invalid configuration", **data: Any) -> None:
        super().__init__(code=ProtocolErrorCode.CONFIG, message=message, data=_jsonmap(data))


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _code_str(code: Any) -> str:
    return code.value if isinstance(code, Enum) else str(code)


def _jsonmap(data: Mapping[str, Any]) -> Dict[str, Any]:
    return {k: _coerce_json(v) for k, v in data.items()}


def _coerce_json(v: Any) -> Any:
    # Keep JSON primitives; stringify the rest; hex-encode bytes.
    if v is None or isinstance(v, (bool, int, float, str, list, dict)):
        return v
    if isinstance(v, (bytes, bytearray)):
        return v.hex()
    return str(v)


def _preview(v: Any, limit: int = 96) -> str:
    s = str(_coerce_json(v))
    return s if len(s) <= limit else s[:limit] + "…"
