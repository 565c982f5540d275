"""
protocol.admission
==================

Engine-facing helper: validate an account operation, then price it.

`admit` never raises for a bad operation. Any `ProtocolError` (a validation
rejection, a fee overflow) comes back as a failed `AdmissionResult` carrying
the error, so an evaluation engine can collect outcomes for a whole batch.
Programming errors (TypeError for a non-operation, etc.) still propagate.

`admit_batch` evaluates independent operations on a thread pool. Every check
is pure, so results do not depend on scheduling; they are returned in input
order.
"""

from __future__ import annotations

import os
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Sequence

from protocol.errors import ProtocolError
from protocol.fees import FeeSchedule, PackedSizeFn, calculate_fee, default_fee_schedule
from protocol.logging import get_logger
from protocol.types.operations import AccountOperation
from protocol.validate import validate_operation

log = get_logger(__name__)


@dataclass(frozen=True)
class AdmissionResult:
    kind: str
    ok: bool
    fee: Optional[int] = None
    error: Optional[ProtocolError] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "kind": self.kind,
            "ok": self.ok,
            "fee": self.fee,
            "error": None if self.error is None else self.error.to_dict(),
        }


def admit(
    op: AccountOperation,
    schedule: Optional[FeeSchedule] = None,
    *,
    packed_size: Optional[PackedSizeFn] = None,
) -> AdmissionResult:
    kind = getattr(op, "KIND", type(op).__name__)
    try:
        validate_operation(op)
        fee = calculate_fee(op, schedule or default_fee_schedule(), packed_size=packed_size)
    except ProtocolError as e:
        log.debug("operation rejected", extra={"kind": kind, "error": e.to_dict()})
        return AdmissionResult(kind=kind, ok=False, error=e)
    log.debug("operation admitted", extra={"kind": kind, "fee": int(fee)})
    return AdmissionResult(kind=kind, ok=True, fee=int(fee))


def admit_batch(
    ops: Sequence[AccountOperation],
    schedule: Optional[FeeSchedule] = None,
    *,
    max_workers: Optional[int] = None,
) -> List[AdmissionResult]:
    """Admit every operation in `ops`; results line up with the input."""
    if not ops:
        return []
    sched = schedule or default_fee_schedule()
    workers = max_workers or min(8, max(2, os.cpu_count() or 4))
    with ThreadPoolExecutor(max_workers=workers) as ex:
        futs = [ex.submit(admit, op, sched) for op in ops]
        results = [fut.result() for fut in futs]

    rejected = sum(1 for r in results if not r.ok)
    log.debug("batch admitted", extra={"total": len(results), "rejected": rejected})
    return results


__all__ = ["AdmissionResult", "admit", "admit_batch"]
