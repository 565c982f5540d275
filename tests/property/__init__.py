# -*- coding: utf-8 -*-
"""
Property-test package bootstrap.

Registers the Hypothesis profiles used by the admission-rule property tests
and picks one on import:

- HYPOTHESIS_PROFILE=dev|ci|fast  (explicit choice)
- otherwise "ci" when the CI env var is truthy, "dev" locally

Also exports the strategies shared by several test modules (legal name
labels, account names, fee parameters).
"""
from __future__ import annotations

import os
from typing import Final, Tuple

from hypothesis import HealthCheck, Verbosity, given, settings
from hypothesis import strategies as st

# ---- profile registry --------------------------------------------------------


def _hc(*items: HealthCheck) -> Tuple[HealthCheck, ...]:
    return items


settings.register_profile(
    "dev",
    settings(
        max_examples=100,
        deadline=None,
        suppress_health_check=_hc(HealthCheck.too_slow, HealthCheck.filter_too_much),
        verbosity=Verbosity.normal,
    ),
)

settings.register_profile(
    "ci",
    settings(
        max_examples=300,
        deadline=None,
        suppress_health_check=_hc(HealthCheck.too_slow, HealthCheck.filter_too_much),
        verbosity=Verbosity.verbose,
        derandomize=True,
    ),
)

settings.register_profile(
    "fast",
    settings(max_examples=25, deadline=None, suppress_health_check=_hc(HealthCheck.too_slow)),
)


def _env_truthy(name: str) -> bool:
    v = os.getenv(name)
    return (v or "").lower() not in ("", "0", "false", "no", "off")


_active: Final[str] = os.getenv("HYPOTHESIS_PROFILE") or ("ci" if _env_truthy("CI") else "dev")
settings.load_profile(_active)

# ---- shared strategies -------------------------------------------------------

_LETTERS = "abcdefghijklmnopqrstuvwxyz"
_LET_DIG = _LETTERS + "0123456789"


@st.composite
def labels(draw, min_size: int = 3, max_size: int = 12) -> str:
    """One grammatical label: letter, then letters/digits/hyphens, ending in letter or digit."""
    n = draw(st.integers(min_value=min_size, max_value=max_size))
    first = draw(st.sampled_from(_LETTERS))
    inner = draw(st.text(alphabet=_LET_DIG + "-", min_size=n - 2, max_size=n - 2))
    last = draw(st.sampled_from(_LET_DIG))
    return first + inner + last


@st.composite
def valid_names(draw, max_length: int = 63) -> str:
    parts = draw(st.lists(labels(), min_size=1, max_size=4))
    name = ".".join(parts)
    # trim whole labels until the name fits
    while len(name) > max_length and len(parts) > 1:
        parts = parts[:-1]
        name = ".".join(parts)
    return name


def fee_values(max_value: int = 10**12):
    return st.integers(min_value=0, max_value=max_value)


def active_profile() -> str:
    return _active


__all__ = ["st", "given", "labels", "valid_names", "fee_values", "active_profile"]
