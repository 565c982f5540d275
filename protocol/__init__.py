"""
Ledger protocol package.

Admission rules for account-management operations (create, update, upgrade,
transfer of ownership): account-name grammar, cheap-name pricing heuristic,
per-operation fees and per-operation validation, including dispatch over
forward-compatible extension variants.

Only re-exports the version here to keep import-time side effects near zero.
Import the working surface from the submodules:

    from protocol.names import is_valid_name, is_cheap_name
    from protocol.validate import validate_operation
    from protocol.fees import calculate_fee, default_fee_schedule
    from protocol.admission import admit, admit_batch
"""

from __future__ import annotations

try:
    from .version import __version__  # type: ignore
except Exception:  # pragma: no cover - fallback path
    __version__ = "0.0.0+local"


def get_version() -> str:
    """Return the semantic version string for this package."""
    return __version__


__all__ = ["__version__", "get_version"]
