"""
protocol.names
==============

Account-name grammar and the cheap-name pricing heuristic.

Grammar
-------
A name is a dot-separated sequence of one or more labels (RFC 1035 style):

    <name>        ::= <label> ("." <label>)*
    <label>       ::= <letter> [ [ <let-dig-hyp>+ ] <let-dig> ]
    <let-dig-hyp> ::= <let-dig> | "-"
    <let-dig>     ::= <letter> | <digit>

with the extra requirements that

  - each label is three characters or more,
  - letters are lowercase ASCII only,
  - the whole name is between the configured min and max length (inclusive).

Only ASCII `a-z`, `0-9`, `-` and `.` can ever appear in a valid name; any
other code point (uppercase, unicode, whitespace) falls outside the character
classes and fails.

Cheap names
-----------
`is_cheap_name` flags low-effort names (digits, punctuation, or no vowel at
all). It is a coarse pricing heuristic, not a security boundary; the exact
rule is consensus-critical and must not be "improved".
"""

from __future__ import annotations

from typing import Optional

from protocol.config import NameLimits, get_config

LETTERS = frozenset("abcdefghijklmnopqrstuvwxyz")
DIGITS = frozenset("0123456789")
LABEL_FIRST = LETTERS
LABEL_LAST = LETTERS | DIGITS
LABEL_INNER = LETTERS | DIGITS | frozenset("-")

MIN_LABEL_LENGTH = 3

CHEAP_PUNCTUATION = frozenset("./-")
VOWELS = frozenset("aeiouy")


def is_valid_name(name: str, limits: Optional[NameLimits] = None) -> bool:
    """
    Return True iff `name` is a syntactically legal account name.

    `limits` defaults to the process configuration (see protocol.config).
    The configured minimum is always >= 3; shorter names could never satisfy
    the per-label rule anyway.
    """
    lim = limits or get_config().names
    n = len(name)
    if n < lim.min_length or n > lim.max_length:
        return False

    begin = 0
    while True:
        end = name.find(".", begin)
        if end == -1:
            end = n
        if end - begin < MIN_LABEL_LENGTH:
            return False
        if name[begin] not in LABEL_FIRST:
            return False
        if name[end - 1] not in LABEL_LAST:
            return False
        for i in range(begin + 1, end - 1):
            if name[i] not in LABEL_INNER:
                return False
        if end == n:
            return True
        begin = end + 1


def is_cheap_name(name: str) -> bool:
    """
    cheap ⇔ any digit or one of ``. - /`` present, OR no vowel anywhere.

    Vowels are ``a e i o u y``. Non-cheap names pay the premium fee.
    """
    has_vowel = False
    for c in name:
        if c in DIGITS or c in CHEAP_PUNCTUATION:
            return True
        if c in VOWELS:
            has_vowel = True
    return not has_vowel


__all__ = ["is_valid_name", "is_cheap_name", "MIN_LABEL_LENGTH"]
