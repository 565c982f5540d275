import pytest

from protocol.errors import InvalidExtension
from protocol.extensions import (
    OPTIONS_EXTENSIONS,
    UPDATE_EXTENSIONS,
    CreateCommittee,
    DefaultPolicy,
    ExtensionRules,
    UnknownExtension,
    UpdateCommittee,
    VoidExtension,
    VoteCommitteeSize,
    accept,
    decode_extension,
    encode_extension,
    reject,
)


def test_known_rule_accepts_and_rejects() -> None:
    rules = ExtensionRules(
        "ctx",
        {VoidExtension: accept, VoteCommitteeSize: reject("no votes here")},
        DefaultPolicy.ACCEPT,
    )
    rules.check([VoidExtension()])
    with pytest.raises(InvalidExtension) as ei:
        rules.check([VoidExtension(), VoteCommitteeSize(size=11)])
    assert ei.value.data["context"] == "ctx"
    assert ei.value.data["tag"] == VoteCommitteeSize.TAG
    assert "no votes here" in ei.value.message


def test_default_accept_passes_unknown_variants() -> None:
    rules = ExtensionRules("ctx", {VoidExtension: accept}, DefaultPolicy.ACCEPT)
    rules.check([UnknownExtension(tag=9, value={"x": 1}), VoteCommitteeSize(size=3)])


def test_default_reject_refuses_unknown_variants() -> None:
    rules = ExtensionRules("ctx", {VoidExtension: accept}, DefaultPolicy.REJECT)
    with pytest.raises(InvalidExtension) as ei:
        rules.check([UnknownExtension(tag=9)])
    assert ei.value.data["tag"] == 9
    assert ei.value.data["variant"] == "UnknownExtension"


def test_empty_extension_list_is_always_fine() -> None:
    ExtensionRules("ctx", {}, DefaultPolicy.REJECT).check([])


def test_first_failure_wins() -> None:
    rules = ExtensionRules(
        "ctx",
        {VoteCommitteeSize: reject("first"), CreateCommittee: reject("second")},
        DefaultPolicy.REJECT,
    )
    with pytest.raises(InvalidExtension) as ei:
        rules.check([VoteCommitteeSize(size=1), CreateCommittee(1, 2)])
    assert ei.value.message == "first"


def test_decode_unknown_tag_is_preserved() -> None:
    ext = decode_extension([7, {"future": True}], OPTIONS_EXTENSIONS)
    assert ext == UnknownExtension(tag=7, value={"future": True})
    assert encode_extension(ext) == [7, {"future": True}]


def test_same_tag_means_different_variants_per_context() -> None:
    assert isinstance(decode_extension([1, {"size": 5}], OPTIONS_EXTENSIONS), VoteCommitteeSize)
    assert decode_extension([1, {"min": 2, "max": 4}], UPDATE_EXTENSIONS) == CreateCommittee(2, 4)


def test_update_committee_optional_bounds() -> None:
    ext = decode_extension([2, {"max": 9}], UPDATE_EXTENSIONS)
    assert ext == UpdateCommittee(min_committee_size=None, max_committee_size=9)
    assert encode_extension(ext) == [2, {"max": 9}]
    assert decode_extension([0, None], UPDATE_EXTENSIONS) == VoidExtension()


def test_decode_rejects_malformed_pairs() -> None:
    with pytest.raises(ValueError):
        decode_extension({"tag": 1}, UPDATE_EXTENSIONS)
    with pytest.raises(ValueError):
        decode_extension([1, 2, 3], UPDATE_EXTENSIONS)


@pytest.mark.parametrize(
    "obj, registry",
    [
        ([1, [5]], OPTIONS_EXTENSIONS),
        ([1, "size"], OPTIONS_EXTENSIONS),
        ([1, {}], OPTIONS_EXTENSIONS),  # size missing
        ([1, {"min": 2}], UPDATE_EXTENSIONS),  # max missing
        ([2, [1, 2]], UPDATE_EXTENSIONS),
    ],
)
def test_decode_rejects_malformed_known_payloads(obj, registry) -> None:
    with pytest.raises(ValueError):
        decode_extension(obj, registry)


def test_encode_rejects_non_extensions() -> None:
    with pytest.raises(TypeError):
        encode_extension(object())
