"""
Authorities (weighted threshold permissions).

The admission rules only *query* an authority; they never build or mutate
one. Anything exposing the three `AuthorityLike` methods can be validated.
`Authority` is the concrete record used by the chain's own operations:

    weight_threshold     total weight needed to satisfy the authority
    account_auths        account id → weight
    key_auths            public key bytes → weight
    address_auths        address bytes → weight (legacy plain-address entries)

An authority is *impossible* when the sum of every entry's weight is below
its threshold: no combination of signatures could ever satisfy it.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Mapping, Protocol, runtime_checkable

from protocol.types.ids import AccountId

WEIGHT_MAX = 0xFFFF  # weights are uint16 on the wire


@runtime_checkable
class AuthorityLike(Protocol):
    def num_auths(self) -> int: ...

    def address_auths_count(self) -> int: ...

    def is_impossible(self) -> bool: ...


def _check_weights(name: str, m: Mapping[Any, int]) -> Dict[Any, int]:
    out = dict(m)
    for k, w in out.items():
        if not isinstance(w, int) or not 0 <= w <= WEIGHT_MAX:
            raise ValueError(f"Authority.{name}[{k!r}] weight must be uint16, got {w!r}")
    return out


@dataclass(frozen=True)
class Authority:
    weight_threshold: int = 1
    account_auths: Mapping[AccountId, int] = field(default_factory=dict)
    key_auths: Mapping[bytes, int] = field(default_factory=dict)
    address_auths: Mapping[bytes, int] = field(default_factory=dict)

    def __post_init__(self) -> None:
        if not isinstance(self.weight_threshold, int) or self.weight_threshold < 0:
            raise ValueError("Authority.weight_threshold must be a non-negative int")
        object.__setattr__(self, "account_auths", _check_weights("account_auths", self.account_auths))
        object.__setattr__(self, "key_auths", _check_weights("key_auths", self.key_auths))
        object.__setattr__(self, "address_auths", _check_weights("address_auths", self.address_auths))

    # -- AuthorityLike --

    def num_auths(self) -> int:
        return len(self.account_auths) + len(self.key_auths) + len(self.address_auths)

    def address_auths_count(self) -> int:
        return len(self.address_auths)

    def is_impossible(self) -> bool:
        total = (
            sum(self.account_auths.values())
            + sum(self.key_auths.values())
            + sum(self.address_auths.values())
        )
        return total < self.weight_threshold

    # -- builders --

    @staticmethod
    def single_key(key: bytes, weight: int = 1) -> "Authority":
        return Authority(weight_threshold=weight, key_auths={bytes(key): weight})

    @staticmethod
    def single_account(account: AccountId, weight: int = 1) -> "Authority":
        return Authority(weight_threshold=weight, account_auths={account: weight})

    # -- canonical object --

    def to_obj(self) -> Mapping[str, Any]:
        return {
            "threshold": self.weight_threshold,
            "accounts": [[a.instance, w] for a, w in sorted(self.account_auths.items())],
            "keys": [[k, w] for k, w in sorted(self.key_auths.items())],
            "addresses": [[a, w] for a, w in sorted(self.address_auths.items())],
        }

    @staticmethod
    def from_obj(o: Mapping[str, Any]) -> "Authority":
        return Authority(
            weight_threshold=int(o["threshold"]),
            account_auths={AccountId(int(a)): int(w) for a, w in o.get("accounts", [])},
            key_auths={bytes(k): int(w) for k, w in o.get("keys", [])},
            address_auths={bytes(a): int(w) for a, w in o.get("addresses", [])},
        )


__all__ = ["AuthorityLike", "Authority", "WEIGHT_MAX"]
