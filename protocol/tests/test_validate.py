import pytest

from protocol.errors import (
    InvalidAuthority,
    InvalidExtension,
    InvalidIdentifier,
    InvalidReferrerPercent,
    InvalidVoteTally,
    NegativeFee,
    NoOpUpdate,
    ReservedAccount,
    ValidationError,
)
from protocol.extensions import (
    CreateCommittee,
    UnknownExtension,
    UpdateCommittee,
    VoidExtension,
    VoteCommitteeSize,
)
from protocol.types import (
    COMMITTEE_ACCOUNT,
    TEMP_ACCOUNT,
    AccountId,
    AccountOptions,
    AccountTransferOperation,
    AccountUpgradeOperation,
    Asset,
    Authority,
    VoteId,
    VoteType,
)
from protocol.validate import (
    CREATE_OPTIONS_RULES,
    UPDATE_OPTIONS_RULES,
    validate_account_create,
    validate_account_options,
    validate_account_transfer,
    validate_account_update,
    validate_account_upgrade,
    validate_operation,
    validate_vote_tally,
)

from .conftest import KEY_A, KEY_B, make_create, make_update

EMPTY = Authority()
IMPOSSIBLE = Authority(weight_threshold=5, key_auths={KEY_A: 1, KEY_B: 1})
WITH_ADDRESS = Authority(key_auths={KEY_A: 1}, address_auths={b"\x01" * 20: 1})


def _votes(witness: int = 0, committee: int = 0):
    out = [VoteId(VoteType.WITNESS, i) for i in range(witness)]
    out += [VoteId(VoteType.COMMITTEE, 100 + i) for i in range(committee)]
    return tuple(out)


# -----------------------------
# Account options / vote tally
# -----------------------------


def test_tally_exact_match_passes() -> None:
    opts = AccountOptions(num_witness=3, num_committee=2, votes=_votes(3, 2))
    validate_vote_tally(opts)


@pytest.mark.parametrize("witness, committee", [(4, 2), (2, 2), (3, 3), (3, 1)])
def test_tally_mismatch_fails(witness: int, committee: int) -> None:
    opts = AccountOptions(num_witness=3, num_committee=2, votes=_votes(witness, committee))
    with pytest.raises(InvalidVoteTally) as ei:
        validate_vote_tally(opts)
    assert ei.value.data["witness_votes"] == witness
    assert ei.value.data["committee_votes"] == committee


def test_worker_votes_do_not_count() -> None:
    votes = _votes(1, 0) + (VoteId(VoteType.WORKER, 7),)
    validate_vote_tally(AccountOptions(num_witness=1, votes=votes))


def test_options_extension_policy_must_be_named() -> None:
    opts = AccountOptions(extensions=(VoteCommitteeSize(size=3), UnknownExtension(tag=9)))
    with pytest.raises(TypeError):
        validate_account_options(opts)  # type: ignore[call-arg]
    with pytest.raises(TypeError):
        validate_account_options(opts, UPDATE_OPTIONS_RULES)  # type: ignore[misc]

    validate_account_options(opts, rules=UPDATE_OPTIONS_RULES)
    with pytest.raises(InvalidExtension):
        validate_account_options(opts, rules=CREATE_OPTIONS_RULES)


def test_options_tally_checked_before_extensions() -> None:
    opts = AccountOptions(num_witness=1, extensions=(UnknownExtension(tag=9),))
    with pytest.raises(InvalidVoteTally):
        validate_account_options(opts, rules=CREATE_OPTIONS_RULES)


# -----------------------------
# account_create
# -----------------------------


def test_create_happy_path() -> None:
    validate_account_create(make_create())


def test_create_negative_fee_checked_first() -> None:
    with pytest.raises(NegativeFee):
        validate_account_create(make_create(fee=Asset(-1), name="Bad Name"))


@pytest.mark.parametrize("name", ["ab", "My.Name", "abc..def", "x" * 64])
def test_create_bad_name(name: str) -> None:
    with pytest.raises(InvalidIdentifier) as ei:
        validate_account_create(make_create(name=name))
    assert ei.value.data["name"] == name


def test_create_referrer_percent_bound() -> None:
    validate_account_create(make_create(referrer_percent=10_000))
    with pytest.raises(InvalidReferrerPercent):
        validate_account_create(make_create(referrer_percent=10_001))


@pytest.mark.parametrize(
    "owner, active, role",
    [
        (EMPTY, Authority.single_key(KEY_B), "owner"),
        (Authority.single_key(KEY_A), EMPTY, "active"),
        (WITH_ADDRESS, Authority.single_key(KEY_B), "owner"),
        (Authority.single_key(KEY_A), WITH_ADDRESS, "active"),
        (IMPOSSIBLE, Authority.single_key(KEY_B), "owner"),
        (Authority.single_key(KEY_A), IMPOSSIBLE, "active"),
    ],
)
def test_create_authority_checks(owner, active, role) -> None:
    with pytest.raises(InvalidAuthority) as ei:
        validate_account_create(make_create(owner=owner, active=active))
    assert ei.value.data["role"] == role


def test_create_composition_checked_before_satisfiability() -> None:
    # owner is impossible, active is empty: active's composition fails first
    with pytest.raises(InvalidAuthority) as ei:
        validate_account_create(make_create(owner=IMPOSSIBLE, active=EMPTY))
    assert ei.value.data["role"] == "active"


def test_create_options_tally() -> None:
    opts = AccountOptions(num_witness=1, votes=_votes(2, 0))
    with pytest.raises(InvalidVoteTally):
        validate_account_create(make_create(options=opts))


def test_create_options_extensions() -> None:
    validate_account_create(make_create(options=AccountOptions(extensions=(VoidExtension(),))))
    for ext in (VoteCommitteeSize(size=5), UnknownExtension(tag=42)):
        with pytest.raises(InvalidExtension) as ei:
            validate_account_create(make_create(options=AccountOptions(extensions=(ext,))))
        assert ei.value.data["context"] == "account_create.options"


def test_create_account_ids_are_not_checked() -> None:
    validate_account_create(make_create(registrar=COMMITTEE_ACCOUNT, referrer=TEMP_ACCOUNT))


# -----------------------------
# account_update
# -----------------------------


def test_update_happy_path() -> None:
    validate_account_update(make_update())
    validate_account_update(make_update(active=None, new_options=AccountOptions()))


def test_update_temp_account_checked_before_fee() -> None:
    with pytest.raises(ReservedAccount) as ei:
        validate_account_update(make_update(account=TEMP_ACCOUNT, fee=Asset(-5)))
    assert ei.value.data["account"] == "1.2.4"


def test_update_fee_checked_before_default_account() -> None:
    with pytest.raises(NegativeFee):
        validate_account_update(make_update(account=COMMITTEE_ACCOUNT, fee=Asset(-5)))
    with pytest.raises(ReservedAccount):
        validate_account_update(make_update(account=COMMITTEE_ACCOUNT))


def test_update_with_nothing_to_change() -> None:
    with pytest.raises(NoOpUpdate):
        validate_account_update(make_update(active=None))


def test_update_extensions_alone_are_a_no_op() -> None:
    op = make_update(active=None, extensions=(CreateCommittee(1, 3),))
    with pytest.raises(NoOpUpdate):
        validate_account_update(op)


@pytest.mark.parametrize("auth", [EMPTY, WITH_ADDRESS, IMPOSSIBLE])
def test_update_present_authorities_are_checked(auth) -> None:
    with pytest.raises(InvalidAuthority) as ei:
        validate_account_update(make_update(owner=auth))
    assert ei.value.data["role"] == "owner"
    with pytest.raises(InvalidAuthority) as ei:
        validate_account_update(make_update(active=auth))
    assert ei.value.data["role"] == "active"


def test_update_new_options_tally_and_extensions() -> None:
    bad = AccountOptions(num_committee=1)
    with pytest.raises(InvalidVoteTally):
        validate_account_update(make_update(new_options=bad))

    # update options accept committee-size votes and unknown future variants
    exts = (VoidExtension(), VoteCommitteeSize(size=7), UnknownExtension(tag=99))
    validate_account_update(make_update(new_options=AccountOptions(extensions=exts)))


@pytest.mark.parametrize(
    "ext",
    [
        VoidExtension(),
        CreateCommittee(1, 1),
        CreateCommittee(2, 9),
        UpdateCommittee(),
        UpdateCommittee(min_committee_size=3),
        UpdateCommittee(max_committee_size=3),
        UpdateCommittee(3, 3),
    ],
)
def test_update_top_level_extensions_accepted(ext) -> None:
    validate_account_update(make_update(extensions=(ext,)))


@pytest.mark.parametrize(
    "ext",
    [
        CreateCommittee(0, 5),
        CreateCommittee(5, 0),
        CreateCommittee(6, 5),
        UpdateCommittee(min_committee_size=0),
        UpdateCommittee(max_committee_size=-1),
        UpdateCommittee(6, 5),
        UnknownExtension(tag=3),
    ],
)
def test_update_top_level_extensions_rejected(ext) -> None:
    with pytest.raises(InvalidExtension) as ei:
        validate_account_update(make_update(extensions=(ext,)))
    assert ei.value.data["context"] == "account_update"


# -----------------------------
# account_upgrade / account_transfer / dispatch
# -----------------------------


def test_upgrade_and_transfer_only_check_fee() -> None:
    validate_account_upgrade(AccountUpgradeOperation(fee=Asset(0), account_to_upgrade=TEMP_ACCOUNT))
    validate_account_transfer(
        AccountTransferOperation(fee=Asset(0), account_id=AccountId(9), new_owner=AccountId(9))
    )
    with pytest.raises(NegativeFee):
        validate_account_upgrade(AccountUpgradeOperation(fee=Asset(-1), account_to_upgrade=AccountId(9)))
    with pytest.raises(NegativeFee):
        validate_account_transfer(
            AccountTransferOperation(fee=Asset(-1), account_id=AccountId(9), new_owner=AccountId(10))
        )


def test_validate_operation_dispatch() -> None:
    validate_operation(make_create())
    with pytest.raises(ValidationError):
        validate_operation(make_update(active=None))
    with pytest.raises(TypeError):
        validate_operation(object())  # type: ignore[arg-type]


def test_validation_does_not_mutate_operation() -> None:
    op = make_create()
    before = op.to_obj()
    validate_operation(op)
    assert op.to_obj() == before
