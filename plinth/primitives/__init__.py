"""
Plinth — Shared Primitives

Severity flags and base models used by every other module.
"""

from plinth.primitives.common import (
    ALL_SOFT,
    NO_SEVERITIES,
    Identified,
    PlinthBaseModel,
    Severity,
    Timestamped,
    mask_from_names,
    names_from_mask,
    new_id,
    severity_from_code,
    utc_now,
)

__all__ = [
    "ALL_SOFT",
    "NO_SEVERITIES",
    "Identified",
    "PlinthBaseModel",
    "Severity",
    "Timestamped",
    "mask_from_names",
    "names_from_mask",
    "new_id",
    "severity_from_code",
    "utc_now",
]
