"""
protocol.types
==============

Canonical dataclasses for account-management operations:

- asset:       Asset (fee amounts) and overflow-checked arithmetic
- ids:         AccountId, VoteId/VoteType and reserved account ids
- authority:   AuthorityLike interface and the concrete Authority record
- operations:  AccountOptions and the create/update/upgrade/transfer operations
"""

from __future__ import annotations

from protocol.types.asset import Asset, safe_add
from protocol.types.authority import Authority, AuthorityLike
from protocol.types.ids import (
    COMMITTEE_ACCOUNT,
    NULL_ACCOUNT,
    PROXY_TO_SELF_ACCOUNT,
    TEMP_ACCOUNT,
    AccountId,
    VoteId,
    VoteType,
)
from protocol.types.operations import (
    AccountCreateOperation,
    AccountOperation,
    AccountOptions,
    AccountTransferOperation,
    AccountUpdateOperation,
    AccountUpgradeOperation,
)

__all__ = [
    "Asset",
    "safe_add",
    "Authority",
    "AuthorityLike",
    "AccountId",
    "VoteId",
    "VoteType",
    "COMMITTEE_ACCOUNT",
    "NULL_ACCOUNT",
    "PROXY_TO_SELF_ACCOUNT",
    "TEMP_ACCOUNT",
    "AccountOptions",
    "AccountOperation",
    "AccountCreateOperation",
    "AccountUpdateOperation",
    "AccountUpgradeOperation",
    "AccountTransferOperation",
]
