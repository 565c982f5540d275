"""
protocol.validate
=================

Stateless admission checks for account operations:

  • Fee sign (every kind)
  • Account-name grammar (create)
  • Referrer percent bound (create)
  • Owner/active authority composition and satisfiability
  • Witness/committee vote tally of account options
  • Extension values, per call site (see protocol.extensions)

Nothing here looks at chain state: account existence, balances and membership
are the evaluation engine's business. Every check is a local assertion; the
first failing condition raises a `ValidationError` subclass and the remaining
checks are skipped, so check ORDER is part of the contract.

Callers:
  - protocol.admission (validate, then price)
  - evaluation engines that want the raw exception
"""

from __future__ import annotations

from typing import Any, Callable, Dict, Optional

from protocol.config import get_config
from protocol.errors import (
    InvalidAuthority,
    InvalidIdentifier,
    InvalidReferrerPercent,
    InvalidVoteTally,
    NegativeFee,
    NoOpUpdate,
    ReservedAccount,
)
from protocol.extensions import (
    CreateCommittee,
    DefaultPolicy,
    ExtensionRules,
    UpdateCommittee,
    VoidExtension,
    VoteCommitteeSize,
    accept,
    reject,
)
from protocol.names import is_valid_name
from protocol.types.asset import Asset
from protocol.types.authority import AuthorityLike
from protocol.types.ids import COMMITTEE_ACCOUNT, TEMP_ACCOUNT, VoteType
from protocol.types.operations import (
    AccountCreateOperation,
    AccountOperation,
    AccountOptions,
    AccountTransferOperation,
    AccountUpdateOperation,
    AccountUpgradeOperation,
)

# -----------------------------
# Extension rule sets
# -----------------------------


def _check_create_committee(ext: CreateCommittee) -> Optional[str]:
    if ext.min_committee_size <= 0:
        return "min_committee_size must be positive"
    if ext.max_committee_size <= 0:
        return "max_committee_size must be positive"
    if ext.min_committee_size > ext.max_committee_size:
        return "min_committee_size exceeds max_committee_size"
    return None


def _check_update_committee(ext: UpdateCommittee) -> Optional[str]:
    lo, hi = ext.min_committee_size, ext.max_committee_size
    if lo is not None and lo <= 0:
        return "min_committee_size must be positive"
    if hi is not None and hi <= 0:
        return "max_committee_size must be positive"
    if lo is not None and hi is not None and lo > hi:
        return "min_committee_size exceeds max_committee_size"
    return None


CREATE_OPTIONS_RULES = ExtensionRules(
    context="account_create.options",
    rules={
        VoidExtension: accept,
        VoteCommitteeSize: reject("committee size votes are not allowed at account creation"),
    },
    default=DefaultPolicy.REJECT,
)

UPDATE_OPTIONS_RULES = ExtensionRules(
    context="account_update.new_options",
    rules={
        VoidExtension: accept,
        VoteCommitteeSize: accept,
    },
    default=DefaultPolicy.ACCEPT,
)

UPDATE_OPERATION_RULES = ExtensionRules(
    context="account_update",
    rules={
        VoidExtension: accept,
        CreateCommittee: _check_create_committee,
        UpdateCommittee: _check_update_committee,
    },
    default=DefaultPolicy.REJECT,
)


# -----------------------------
# Shared checks
# -----------------------------


def _check_fee(fee: Asset) -> None:
    if fee.amount < 0:
        raise NegativeFee(fee.amount)


def _check_auth_composition(role: str, auth: AuthorityLike) -> None:
    if auth.num_auths() == 0:
        raise InvalidAuthority(role, f"{role} authority has no entries")
    if auth.address_auths_count() != 0:
        raise InvalidAuthority(
            role,
            f"{role} authority may not contain address entries",
            address_auths=auth.address_auths_count(),
        )


def _check_auth_satisfiable(role: str, auth: AuthorityLike) -> None:
    if auth.is_impossible():
        raise InvalidAuthority(role, f"{role} authority can never be satisfied")


def validate_vote_tally(options: AccountOptions) -> None:
    """
    The tally must be exact: as many witness votes as `num_witness` and as
    many committee votes as `num_committee`. Worker votes are not counted.

    Consensus note: nodes that only require *at least* that many votes of
    each type accept surplus votes; this check rejects them on purpose.
    """
    witness_votes = options.count_votes(VoteType.WITNESS)
    committee_votes = options.count_votes(VoteType.COMMITTEE)
    if witness_votes != options.num_witness or committee_votes != options.num_committee:
        raise InvalidVoteTally(
            num_witness=options.num_witness,
            witness_votes=witness_votes,
            num_committee=options.num_committee,
            committee_votes=committee_votes,
        )


def validate_account_options(options: AccountOptions, *, rules: ExtensionRules) -> None:
    """Vote tally, then the options extensions under the caller's rule set."""
    validate_vote_tally(options)
    rules.check(options.extensions)


# -----------------------------
# Per-kind validators
# -----------------------------


def validate_account_create(op: AccountCreateOperation) -> None:
    cfg = get_config()
    _check_fee(op.fee)
    if not is_valid_name(op.name, cfg.names):
        raise InvalidIdentifier(op.name)
    if op.referrer_percent > cfg.full_percent:
        raise InvalidReferrerPercent(op.referrer_percent, cfg.full_percent)

    _check_auth_composition("owner", op.owner)
    _check_auth_composition("active", op.active)
    _check_auth_satisfiable("owner", op.owner)
    _check_auth_satisfiable("active", op.active)

    validate_account_options(op.options, rules=CREATE_OPTIONS_RULES)


def validate_account_update(op: AccountUpdateOperation) -> None:
    if op.account == TEMP_ACCOUNT:
        raise ReservedAccount(str(op.account), "the temp account cannot be updated")
    _check_fee(op.fee)
    if op.account == COMMITTEE_ACCOUNT:
        raise ReservedAccount(str(op.account), "the default account id cannot be updated")
    if op.owner is None and op.active is None and op.new_options is None:
        raise NoOpUpdate()

    for role, auth in (("owner", op.owner), ("active", op.active)):
        if auth is None:
            continue
        _check_auth_composition(role, auth)
        _check_auth_satisfiable(role, auth)

    if op.new_options is not None:
        validate_account_options(op.new_options, rules=UPDATE_OPTIONS_RULES)

    UPDATE_OPERATION_RULES.check(op.extensions)


def validate_account_upgrade(op: AccountUpgradeOperation) -> None:
    _check_fee(op.fee)


def validate_account_transfer(op: AccountTransferOperation) -> None:
    _check_fee(op.fee)


_VALIDATORS: Dict[type, Callable[[Any], None]] = {
    AccountCreateOperation: validate_account_create,
    AccountUpdateOperation: validate_account_update,
    AccountUpgradeOperation: validate_account_upgrade,
    AccountTransferOperation: validate_account_transfer,
}


def validate_operation(op: AccountOperation) -> None:
    """Run the stateless checks for `op`; raises on the first failure."""
    fn = _VALIDATORS.get(type(op))
    if fn is None:
        raise TypeError(f"not an account operation: {type(op).__name__}")
    fn(op)


__all__ = [
    "CREATE_OPTIONS_RULES",
    "UPDATE_OPTIONS_RULES",
    "UPDATE_OPERATION_RULES",
    "validate_vote_tally",
    "validate_account_options",
    "validate_account_create",
    "validate_account_update",
    "validate_account_upgrade",
    "validate_account_transfer",
    "validate_operation",
]
