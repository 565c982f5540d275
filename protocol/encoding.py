"""
protocol.encoding

Canonical CBOR packing for account operations.

The fee calculator charges a data fee proportional to the packed byte size of
an operation, so the packing must be deterministic across nodes:

- maps are emitted in canonical order (RFC 8949 §4.2.1, cbor2 canonical mode);
- integers use their shortest form;
- floats never appear in operation objects.

Public API
----------
- dumps_canonical(obj) -> bytes
- loads(data) -> Any
- encode_operation(op) -> bytes         tagged envelope {"t": op_id, "v": body}
- decode_operation(data) -> operation
- packed_size(op) -> int                byte length of encode_operation(op)

`packed_size` is the default size collaborator for protocol.fees; callers with
their own wire format can pass a different callable to the fee functions.
"""

from __future__ import annotations

from typing import Any

import cbor2

from protocol.types.operations import AccountOperation, operation_from_obj, operation_to_obj


def dumps_canonical(obj: Any) -> bytes:
    return cbor2.dumps(obj, canonical=True)


def loads(data: bytes) -> Any:
    return cbor2.loads(data)


def encode_operation(op: AccountOperation) -> bytes:
    return dumps_canonical(operation_to_obj(op))


def decode_operation(data: bytes) -> AccountOperation:
    obj = loads(data)
    if not isinstance(obj, dict) or "t" not in obj or "v" not in obj:
        raise ValueError("not an account operation envelope")
    return operation_from_obj(obj)


def packed_size(op: AccountOperation) -> int:
    return len(encode_operation(op))


__all__ = ["dumps_canonical", "loads", "encode_operation", "decode_operation", "packed_size"]
