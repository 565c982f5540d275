from __future__ import annotations

import pytest

from protocol.config import reset_config
from protocol.fees import default_fee_schedule
from protocol.types import (
    AccountCreateOperation,
    AccountId,
    AccountOptions,
    AccountUpdateOperation,
    Asset,
    Authority,
)

KEY_A = b"\x02" + b"\xaa" * 32
KEY_B = b"\x03" + b"\xbb" * 32


@pytest.fixture(autouse=True)
def _clean_config(monkeypatch):
    """Every test starts from built-in defaults, whatever the shell exports."""
    for var in (
        "LEDGER_CONFIG",
        "LEDGER_NAME_MIN_LENGTH",
        "LEDGER_NAME_MAX_LENGTH",
        "LEDGER_FULL_PERCENT",
        "LEDGER_MAX_SHARE_SUPPLY",
        "LEDGER_FEE_SCHEDULE",
    ):
        monkeypatch.delenv(var, raising=False)
    reset_config()
    default_fee_schedule.cache_clear()
    yield
    reset_config()
    default_fee_schedule.cache_clear()


def make_create(**kw) -> AccountCreateOperation:
    fields = dict(
        fee=Asset(0),
        registrar=AccountId(17),
        referrer=AccountId(17),
        referrer_percent=0,
        name="alice",
        owner=Authority.single_key(KEY_A),
        active=Authority.single_key(KEY_B),
        options=AccountOptions(),
    )
    fields.update(kw)
    return AccountCreateOperation(**fields)


def make_update(**kw) -> AccountUpdateOperation:
    fields = dict(
        fee=Asset(0),
        account=AccountId(42),
        active=Authority.single_key(KEY_B),
    )
    fields.update(kw)
    return AccountUpdateOperation(**fields)
