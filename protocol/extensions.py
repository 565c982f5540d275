"""
protocol.extensions
===================

Forward-compatible extension values and the dispatcher that validates them.

Extensions are tagged variants attached to an operation (or to its account
options). A validator built for this protocol version recognizes a fixed set
of tags per context; every other tag decodes to `UnknownExtension`, so an
operation carrying a variant from a newer protocol version still decodes and
reaches validation, where the call site's declared default decides its fate.

Contexts and their known tags
-----------------------------
account options:
    0  VoidExtension
    1  VoteCommitteeSize
account update operation:
    0  VoidExtension
    1  CreateCommittee
    2  UpdateCommittee

Dispatch
--------
`ExtensionRules` maps known variant types to rules. A rule returns ``None``
to accept or a short reason string to reject. Values whose type is not in the
mapping take the explicit `DefaultPolicy` of that call site: ACCEPT lets them
through untouched, REJECT refuses the whole operation.

    rules = ExtensionRules("account_update", {CreateCommittee: check}, DefaultPolicy.REJECT)
    rules.check(op.extensions)   # raises InvalidExtension on the first failure
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, ClassVar, Dict, Iterable, List, Mapping, Optional, Type

from protocol.errors import InvalidExtension

# ---------------------------------------------------------------------------
# Variants
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class VoidExtension:
    """Empty placeholder variant; carries no payload."""

    TAG: ClassVar[int] = 0

    def to_value(self) -> Mapping[str, Any]:
        return {}

    @staticmethod
    def from_value(v: Mapping[str, Any]) -> "VoidExtension":
        return VoidExtension()


@dataclass(frozen=True)
class VoteCommitteeSize:
    """Account-options vote on the preferred committee size."""

    TAG: ClassVar[int] = 1
    size: int

    def to_value(self) -> Mapping[str, Any]:
        return {"size": self.size}

    @staticmethod
    def from_value(v: Mapping[str, Any]) -> "VoteCommitteeSize":
        return VoteCommitteeSize(size=int(v["size"]))


@dataclass(frozen=True)
class CreateCommittee:
    """Create a committee for the updated account; both bounds are mandatory."""

    TAG: ClassVar[int] = 1
    min_committee_size: int
    max_committee_size: int

    def to_value(self) -> Mapping[str, Any]:
        return {"min": self.min_committee_size, "max": self.max_committee_size}

    @staticmethod
    def from_value(v: Mapping[str, Any]) -> "CreateCommittee":
        return CreateCommittee(min_committee_size=int(v["min"]), max_committee_size=int(v["max"]))


@dataclass(frozen=True)
class UpdateCommittee:
    """Adjust committee bounds; either bound may be left unchanged (None)."""

    TAG: ClassVar[int] = 2
    min_committee_size: Optional[int] = None
    max_committee_size: Optional[int] = None

    def to_value(self) -> Mapping[str, Any]:
        out: Dict[str, Any] = {}
        if self.min_committee_size is not None:
            out["min"] = self.min_committee_size
        if self.max_committee_size is not None:
            out["max"] = self.max_committee_size
        return out

    @staticmethod
    def from_value(v: Mapping[str, Any]) -> "UpdateCommittee":
        lo = v.get("min")
        hi = v.get("max")
        return UpdateCommittee(
            min_committee_size=None if lo is None else int(lo),
            max_committee_size=None if hi is None else int(hi),
        )


@dataclass(frozen=True)
class UnknownExtension:
    """A variant this protocol version cannot interpret, kept verbatim."""

    tag: int
    value: Any = None

    def to_value(self) -> Any:
        return self.value


OptionsExtension = VoidExtension | VoteCommitteeSize | UnknownExtension
UpdateExtension = VoidExtension | CreateCommittee | UpdateCommittee | UnknownExtension

OPTIONS_EXTENSIONS: Mapping[int, Type[Any]] = {
    VoidExtension.TAG: VoidExtension,
    VoteCommitteeSize.TAG: VoteCommitteeSize,
}

UPDATE_EXTENSIONS: Mapping[int, Type[Any]] = {
    VoidExtension.TAG: VoidExtension,
    CreateCommittee.TAG: CreateCommittee,
    UpdateCommittee.TAG: UpdateCommittee,
}


def extension_tag(ext: Any) -> Optional[int]:
    if isinstance(ext, UnknownExtension):
        return ext.tag
    return getattr(ext, "TAG", None)


def encode_extension(ext: Any) -> List[Any]:
    """Encode as the canonical ``[tag, value]`` pair."""
    tag = extension_tag(ext)
    if tag is None:
        raise TypeError(f"not an extension value: {type(ext).__name__}")
    return [tag, ext.to_value()]


def decode_extension(obj: Any, registry: Mapping[int, Type[Any]]) -> Any:
    """
    Decode a ``[tag, value]`` pair against a context registry. Unknown tags
    become `UnknownExtension` so validation can apply the call-site default.
    """
    if not isinstance(obj, (list, tuple)) or len(obj) != 2:
        raise ValueError("extension must be a [tag, value] pair")
    tag, value = int(obj[0]), obj[1]
    cls = registry.get(tag)
    if cls is None:
        return UnknownExtension(tag=tag, value=value)
    if value is None:
        value = {}
    if not isinstance(value, Mapping):
        raise ValueError(f"extension {cls.__name__} payload must be a map")
    try:
        return cls.from_value(value)
    except (KeyError, TypeError) as e:
        raise ValueError(f"malformed {cls.__name__} payload: {e}") from e


# ---------------------------------------------------------------------------
# Dispatcher
# ---------------------------------------------------------------------------

Rule = Callable[[Any], Optional[str]]


class DefaultPolicy(str, Enum):
    """What a call site does with variants it has no rule for."""

    ACCEPT = "accept"  # forward compatible: unknown variants are a no-op
    REJECT = "reject"  # refuse operations this version cannot fully validate


def accept(ext: Any) -> Optional[str]:
    return None


def reject(reason: str) -> Rule:
    def _rule(ext: Any) -> Optional[str]:
        return reason

    return _rule


@dataclass(frozen=True)
class ExtensionRules:
    context: str
    rules: Mapping[Type[Any], Rule]
    default: DefaultPolicy

    def check(self, extensions: Iterable[Any]) -> None:
        for ext in extensions:
            rule = self.rules.get(type(ext))
            if rule is not None:
                reason = rule(ext)
                if reason is not None:
                    raise InvalidExtension(
                        self.context, extension_tag(ext), reason, variant=type(ext).__name__
                    )
            elif self.default is DefaultPolicy.ACCEPT:
                continue
            elif self.default is DefaultPolicy.REJECT:
                raise InvalidExtension(
                    self.context,
                    extension_tag(ext),
                    f"extension not accepted in {self.context}",
                    variant=type(ext).__name__,
                )
            else:  # pragma: no cover - enum is closed
                raise AssertionError(f"unhandled default policy {self.default!r}")


__all__ = [
    "VoidExtension",
    "VoteCommitteeSize",
    "CreateCommittee",
    "UpdateCommittee",
    "UnknownExtension",
    "OptionsExtension",
    "UpdateExtension",
    "OPTIONS_EXTENSIONS",
    "UPDATE_EXTENSIONS",
    "extension_tag",
    "encode_extension",
    "decode_extension",
    "Rule",
    "DefaultPolicy",
    "accept",
    "reject",
    "ExtensionRules",
]
