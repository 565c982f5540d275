from __future__ import annotations

"""
protocol/types/operations.py
============================

Account-management operations and the account options record they carry.

Kinds
-----
- account_create    (op id 5)  register a new named account
- account_update    (op id 6)  replace owner/active authorities and/or options
- account_upgrade   (op id 8)  buy annual or lifetime membership
- account_transfer  (op id 9)  hand an account to a new owner

Every operation is a frozen dataclass: constructed once by the decoding layer,
passed read-only into validation and fee computation, then discarded.

`to_obj()` returns the canonical map used for packing (see protocol.encoding);
`from_obj()` is its inverse. Extension lists decode against their context
registry, so unknown future variants survive as `UnknownExtension`.
"""

from dataclasses import dataclass, field
from typing import Any, ClassVar, Mapping, Optional, Tuple

from protocol.extensions import (
    OPTIONS_EXTENSIONS,
    UPDATE_EXTENSIONS,
    OptionsExtension,
    UpdateExtension,
    decode_extension,
    encode_extension,
)
from protocol.types.asset import Asset
from protocol.types.authority import Authority
from protocol.types.ids import PROXY_TO_SELF_ACCOUNT, AccountId, VoteId, VoteType


# ---- account options ----

@dataclass(frozen=True)
class AccountOptions:
    memo_key: bytes = b""
    voting_account: AccountId = PROXY_TO_SELF_ACCOUNT
    num_witness: int = 0
    num_committee: int = 0
    votes: Tuple[VoteId, ...] = field(default_factory=tuple)
    extensions: Tuple[OptionsExtension, ...] = field(default_factory=tuple)

    def __post_init__(self) -> None:
        object.__setattr__(self, "votes", tuple(self.votes))
        object.__setattr__(self, "extensions", tuple(self.extensions))
        if not isinstance(self.memo_key, (bytes, bytearray)):
            raise TypeError("AccountOptions.memo_key must be bytes")
        if self.num_witness < 0 or self.num_committee < 0:
            raise ValueError("AccountOptions.{num_witness,num_committee} must be >= 0")
        for v in self.votes:
            if not isinstance(v, VoteId):
                raise TypeError("AccountOptions.votes elements must be VoteId")

    def count_votes(self, vote_type: VoteType) -> int:
        return sum(1 for v in self.votes if v.type == vote_type)

    def to_obj(self) -> Mapping[str, Any]:
        return {
            "memoKey": bytes(self.memo_key),
            "votingAccount": self.voting_account.instance,
            "numWitness": self.num_witness,
            "numCommittee": self.num_committee,
            "votes": sorted(v.to_int() for v in self.votes),
            "ext": [encode_extension(e) for e in self.extensions],
        }

    @staticmethod
    def from_obj(o: Mapping[str, Any]) -> "AccountOptions":
        return AccountOptions(
            memo_key=bytes(o.get("memoKey", b"")),
            voting_account=AccountId(int(o["votingAccount"])),
            num_witness=int(o["numWitness"]),
            num_committee=int(o["numCommittee"]),
            votes=tuple(VoteId.from_int(int(v)) for v in o.get("votes", [])),
            extensions=tuple(decode_extension(e, OPTIONS_EXTENSIONS) for e in o.get("ext", [])),
        )


# ---- operations ----

@dataclass(frozen=True)
class AccountCreateOperation:
    KIND: ClassVar[str] = "account_create"
    OP_ID: ClassVar[int] = 5

    fee: Asset
    registrar: AccountId
    referrer: AccountId
    referrer_percent: int
    name: str
    owner: Authority
    active: Authority
    options: AccountOptions = field(default_factory=AccountOptions)

    def to_obj(self) -> Mapping[str, Any]:
        return {
            "fee": self.fee.to_obj(),
            "registrar": self.registrar.instance,
            "referrer": self.referrer.instance,
            "referrerPercent": self.referrer_percent,
            "name": self.name,
            "owner": self.owner.to_obj(),
            "active": self.active.to_obj(),
            "options": self.options.to_obj(),
        }

    @staticmethod
    def from_obj(o: Mapping[str, Any]) -> "AccountCreateOperation":
        return AccountCreateOperation(
            fee=Asset.from_obj(o["fee"]),
            registrar=AccountId(int(o["registrar"])),
            referrer=AccountId(int(o["referrer"])),
            referrer_percent=int(o["referrerPercent"]),
            name=str(o["name"]),
            owner=Authority.from_obj(o["owner"]),
            active=Authority.from_obj(o["active"]),
            options=AccountOptions.from_obj(o["options"]),
        )


@dataclass(frozen=True)
class AccountUpdateOperation:
    KIND: ClassVar[str] = "account_update"
    OP_ID: ClassVar[int] = 6

    fee: Asset
    account: AccountId
    owner: Optional[Authority] = None
    active: Optional[Authority] = None
    new_options: Optional[AccountOptions] = None
    extensions: Tuple[UpdateExtension, ...] = field(default_factory=tuple)

    def __post_init__(self) -> None:
        object.__setattr__(self, "extensions", tuple(self.extensions))

    def to_obj(self) -> Mapping[str, Any]:
        return {
            "fee": self.fee.to_obj(),
            "account": self.account.instance,
            "owner": None if self.owner is None else self.owner.to_obj(),
            "active": None if self.active is None else self.active.to_obj(),
            "newOptions": None if self.new_options is None else self.new_options.to_obj(),
            "ext": [encode_extension(e) for e in self.extensions],
        }

    @staticmethod
    def from_obj(o: Mapping[str, Any]) -> "AccountUpdateOperation":
        owner = o.get("owner")
        active = o.get("active")
        opts = o.get("newOptions")
        return AccountUpdateOperation(
            fee=Asset.from_obj(o["fee"]),
            account=AccountId(int(o["account"])),
            owner=None if owner is None else Authority.from_obj(owner),
            active=None if active is None else Authority.from_obj(active),
            new_options=None if opts is None else AccountOptions.from_obj(opts),
            extensions=tuple(decode_extension(e, UPDATE_EXTENSIONS) for e in o.get("ext", [])),
        )


@dataclass(frozen=True)
class AccountUpgradeOperation:
    KIND: ClassVar[str] = "account_upgrade"
    OP_ID: ClassVar[int] = 8

    fee: Asset
    account_to_upgrade: AccountId
    upgrade_to_lifetime_member: bool = False

    def to_obj(self) -> Mapping[str, Any]:
        return {
            "fee": self.fee.to_obj(),
            "account": self.account_to_upgrade.instance,
            "lifetime": bool(self.upgrade_to_lifetime_member),
        }

    @staticmethod
    def from_obj(o: Mapping[str, Any]) -> "AccountUpgradeOperation":
        return AccountUpgradeOperation(
            fee=Asset.from_obj(o["fee"]),
            account_to_upgrade=AccountId(int(o["account"])),
            upgrade_to_lifetime_member=bool(o.get("lifetime", False)),
        )


@dataclass(frozen=True)
class AccountTransferOperation:
    KIND: ClassVar[str] = "account_transfer"
    OP_ID: ClassVar[int] = 9

    fee: Asset
    account_id: AccountId
    new_owner: AccountId

    def to_obj(self) -> Mapping[str, Any]:
        return {
            "fee": self.fee.to_obj(),
            "account": self.account_id.instance,
            "newOwner": self.new_owner.instance,
        }

    @staticmethod
    def from_obj(o: Mapping[str, Any]) -> "AccountTransferOperation":
        return AccountTransferOperation(
            fee=Asset.from_obj(o["fee"]),
            account_id=AccountId(int(o["account"])),
            new_owner=AccountId(int(o["newOwner"])),
        )


AccountOperation = (
    AccountCreateOperation
    | AccountUpdateOperation
    | AccountUpgradeOperation
    | AccountTransferOperation
)

OPERATIONS_BY_ID = {
    cls.OP_ID: cls
    for cls in (
        AccountCreateOperation,
        AccountUpdateOperation,
        AccountUpgradeOperation,
        AccountTransferOperation,
    )
}


def operation_to_obj(op: AccountOperation) -> Mapping[str, Any]:
    """Tagged envelope ``{"t": op_id, "v": body}`` (like a tx payload union)."""
    return {"t": op.OP_ID, "v": op.to_obj()}


def operation_from_obj(o: Mapping[str, Any]) -> AccountOperation:
    cls = OPERATIONS_BY_ID.get(int(o["t"]))
    if cls is None:
        raise ValueError(f"unknown account operation id {o['t']!r}")
    return cls.from_obj(o["v"])


__all__ = [
    "AccountOptions",
    "AccountCreateOperation",
    "AccountUpdateOperation",
    "AccountUpgradeOperation",
    "AccountTransferOperation",
    "AccountOperation",
    "OPERATIONS_BY_ID",
    "operation_to_obj",
    "operation_from_obj",
]
