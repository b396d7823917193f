"""Cleansing building blocks.

Handles:
- Field normalization
- Record validation and silver audits
- Deduplication
- Sales consistency repair
- Validity interval derivation
"""

from .normalize import (
    trim,
    code_to_label,
    strip_prefix,
    strip_separator,
    rewrite_separator,
    split_key,
    parse_int_date,
    to_date,
    future_date_guard,
)
from .validate import (
    EntityRules,
    Finding,
    ValidationReport,
    validate_batch,
    audit_silver,
)
from .dedupe import dedupe_latest
from .repair import repair_sales
from .intervals import derive_end_dates

__all__ = [
    # Normalization
    "trim",
    "code_to_label",
    "strip_prefix",
    "strip_separator",
    "rewrite_separator",
    "split_key",
    "parse_int_date",
    "to_date",
    "future_date_guard",
    # Validation
    "EntityRules",
    "Finding",
    "ValidationReport",
    "validate_batch",
    "audit_silver",
    # Deduplication
    "dedupe_latest",
    # Repair
    "repair_sales",
    "derive_end_dates",
]
