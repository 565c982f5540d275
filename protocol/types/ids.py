"""
Object identifiers used by account operations.

* `AccountId`: protocol object id `1.2.<instance>`; a handful of low
  instances are reserved by the chain.
* `VoteId`: a (type, instance) pair naming a witness, committee member or
  worker that an account votes for. Packs into a single uint32 with the type
  in the low 8 bits and the instance in the upper 24 bits.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import IntEnum

ACCOUNT_SPACE = 1
ACCOUNT_TYPE = 2

VOTE_INSTANCE_MAX = (1 << 24) - 1


@dataclass(frozen=True, order=True)
class AccountId:
    instance: int = 0

    def __post_init__(self) -> None:
        if isinstance(self.instance, bool) or not isinstance(self.instance, int):
            raise TypeError("AccountId.instance must be int")
        if self.instance < 0:
            raise ValueError("AccountId.instance must be >= 0")

    def __str__(self) -> str:
        return f"{ACCOUNT_SPACE}.{ACCOUNT_TYPE}.{self.instance}"

    @staticmethod
    def parse(s: str) -> "AccountId":
        parts = s.strip().split(".")
        if len(parts) != 3 or parts[:2] != [str(ACCOUNT_SPACE), str(ACCOUNT_TYPE)]:
            raise ValueError(f"not an account id: {s!r}")
        return AccountId(int(parts[2]))


# Reserved accounts. The default-constructed id is the committee account.
COMMITTEE_ACCOUNT = AccountId(0)
NULL_ACCOUNT = AccountId(3)
TEMP_ACCOUNT = AccountId(4)
PROXY_TO_SELF_ACCOUNT = AccountId(5)


class VoteType(IntEnum):
    COMMITTEE = 0
    WITNESS = 1
    WORKER = 2


@dataclass(frozen=True)
class VoteId:
    type: VoteType
    instance: int = 0

    def __post_init__(self) -> None:
        object.__setattr__(self, "type", VoteType(self.type))
        if not 0 <= self.instance <= VOTE_INSTANCE_MAX:
            raise ValueError(f"VoteId.instance must fit in 24 bits, got {self.instance}")

    def to_int(self) -> int:
        return (self.instance << 8) | int(self.type)

    @staticmethod
    def from_int(n: int) -> "VoteId":
        return VoteId(type=VoteType(n & 0xFF), instance=n >> 8)

    def __str__(self) -> str:
        return f"{int(self.type)}:{self.instance}"

    @staticmethod
    def parse(s: str) -> "VoteId":
        t, _, inst = s.partition(":")
        if not inst:
            raise ValueError(f"not a vote id: {s!r}")
        return VoteId(type=VoteType(int(t)), instance=int(inst))


__all__ = [
    "AccountId",
    "COMMITTEE_ACCOUNT",
    "NULL_ACCOUNT",
    "TEMP_ACCOUNT",
    "PROXY_TO_SELF_ACCOUNT",
    "VoteType",
    "VoteId",
]
