"""Advisory record validation.

Checks classify problems in a batch without changing it. The same rule set
audits bronze input before cleansing and silver output after it, where every
check is expected to come back empty.
"""

import logging
from collections import defaultdict
from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Any, Callable, Mapping, Optional

logger = logging.getLogger(__name__)

DUPLICATE_KEY = "duplicate_key"
NULL_KEY = "null_key"
OUT_OF_RANGE = "out_of_range"
MALFORMED_DATE = "malformed_date"
PADDED_TEXT = "padded_text"
INVALID_DATE_ORDER = "invalid_date_order"
UNEXPECTED_LABEL = "unexpected_label"
DATE_OUT_OF_RANGE = "date_out_of_range"
INCONSISTENT_SALES = "inconsistent_sales"

# Range accepted for YYYYMMDD integer dates
MIN_INT_DATE = 19000101
MAX_INT_DATE = 20500101


@dataclass(frozen=True)
class EntityRules:
    """Which checks apply to which fields of an entity."""

    key_field: Optional[str] = None
    unique_key: bool = True
    text_fields: tuple[str, ...] = ()
    non_negative_fields: tuple[str, ...] = ()
    int_date_fields: tuple[str, ...] = ()
    date_order: tuple[tuple[str, str], ...] = ()
    labels: Mapping[str, frozenset] = field(default_factory=dict)
    date_ranges: Mapping[str, tuple[Optional[date], Optional[date]]] = field(default_factory=dict)
    sales_fields: Optional[tuple[str, str, str]] = None


@dataclass
class Finding:
    """A single validation finding."""

    rule: str
    column: str
    value: Any = None
    rows: list[int] = field(default_factory=list)
    message: str = ""

    def to_dict(self) -> dict:
        return {
            "rule": self.rule,
            "column": self.column,
            "value": self.value,
            "rows": self.rows,
            "message": self.message,
        }


@dataclass
class ValidationReport:
    """Findings for one batch."""

    entity: str
    row_count: int = 0
    findings: list[Finding] = field(default_factory=list)

    @property
    def is_clean(self) -> bool:
        return not self.findings

    def add(self, rule: str, field_name: str, value: Any, rows: list[int], message: str) -> None:
        self.findings.append(Finding(rule, field_name, value, rows, message))

    def count(self, rule: str) -> int:
        """Number of findings for a rule."""
        return sum(1 for f in self.findings if f.rule == rule)

    def by_rule(self) -> dict[str, list[Finding]]:
        grouped: dict[str, list[Finding]] = defaultdict(list)
        for finding in self.findings:
            grouped[finding.rule].append(finding)
        return dict(grouped)

    def summary(self) -> dict[str, int]:
        return {rule: len(items) for rule, items in self.by_rule().items()}

    def to_dict(self) -> dict:
        return {
            "entity": self.entity,
            "row_count": self.row_count,
            "is_clean": self.is_clean,
            "summary": self.summary(),
            "findings": [f.to_dict() for f in self.findings],
        }


# ============================================
# Individual checks
# ============================================

def check_keys(records: list[dict], rules: EntityRules, report: ValidationReport) -> None:
    """Null keys and duplicate key groups."""
    key_field = rules.key_field
    if not key_field:
        return

    groups: dict[Any, list[int]] = defaultdict(list)
    for i, record in enumerate(records):
        key = record.get(key_field)
        if key is None:
            report.add(NULL_KEY, key_field, None, [i], f"Null value for key field: {key_field}")
        else:
            groups[key].append(i)

    if not rules.unique_key:
        return

    for key, rows in groups.items():
        if len(rows) > 1:
            report.add(
                DUPLICATE_KEY, key_field, key, rows,
                f"Key {key!r} appears {len(rows)} times",
            )


def check_padded_text(records: list[dict], rules: EntityRules, report: ValidationReport) -> None:
    for i, record in enumerate(records):
        for field_name in rules.text_fields:
            value = record.get(field_name)
            if isinstance(value, str) and value != value.strip():
                report.add(PADDED_TEXT, field_name, value, [i], f"Unwanted spaces in {field_name}")


def check_non_negative(records: list[dict], rules: EntityRules, report: ValidationReport) -> None:
    for i, record in enumerate(records):
        for field_name in rules.non_negative_fields:
            value = record.get(field_name)
            if isinstance(value, (int, float)) and value < 0:
                report.add(OUT_OF_RANGE, field_name, value, [i], f"Negative value in {field_name}")


def check_int_dates(records: list[dict], rules: EntityRules, report: ValidationReport) -> None:
    for i, record in enumerate(records):
        for field_name in rules.int_date_fields:
            value = record.get(field_name)
            if value is None:
                continue
            if not isinstance(value, int) or value <= 0 or len(str(value)) != 8:
                report.add(
                    MALFORMED_DATE, field_name, value, [i],
                    f"{field_name} is not a positive 8-digit date",
                )
            elif not MIN_INT_DATE <= value <= MAX_INT_DATE:
                report.add(
                    DATE_OUT_OF_RANGE, field_name, value, [i],
                    f"{field_name} outside {MIN_INT_DATE}..{MAX_INT_DATE}",
                )


def check_date_order(records: list[dict], rules: EntityRules, report: ValidationReport) -> None:
    for i, record in enumerate(records):
        for earlier, later in rules.date_order:
            first, second = record.get(earlier), record.get(later)
            if first is not None and second is not None and first > second:
                report.add(
                    INVALID_DATE_ORDER, f"{earlier}>{later}", (first, second), [i],
                    f"{earlier} is after {later}",
                )


def check_labels(records: list[dict], rules: EntityRules, report: ValidationReport) -> None:
    for i, record in enumerate(records):
        for field_name, allowed in rules.labels.items():
            value = record.get(field_name)
            if value not in allowed:
                report.add(
                    UNEXPECTED_LABEL, field_name, value, [i],
                    f"{field_name} value {value!r} is not a known label",
                )


def check_date_ranges(records: list[dict], rules: EntityRules, report: ValidationReport) -> None:
    for i, record in enumerate(records):
        for field_name, (low, high) in rules.date_ranges.items():
            value = record.get(field_name)
            if value is None:
                continue
            if isinstance(value, datetime):
                value = value.date()
            if (low is not None and value < low) or (high is not None and value > high):
                report.add(
                    DATE_OUT_OF_RANGE, field_name, value, [i],
                    f"{field_name} outside {low}..{high}",
                )


def check_sales_consistency(records: list[dict], rules: EntityRules, report: ValidationReport) -> None:
    """Flag rows where sales != quantity * price or any of them is missing/non-positive."""
    if not rules.sales_fields:
        return

    sales_field, quantity_field, price_field = rules.sales_fields
    for i, record in enumerate(records):
        sales = record.get(sales_field)
        quantity = record.get(quantity_field)
        price = record.get(price_field)
        values = (sales, quantity, price)
        if any(v is None or v <= 0 for v in values) or sales != quantity * price:
            report.add(
                INCONSISTENT_SALES, sales_field, values, [i],
                f"{sales_field} != {quantity_field} * {price_field}",
            )


BRONZE_CHECKS: list[Callable[[list[dict], EntityRules, ValidationReport], None]] = [
    check_keys,
    check_padded_text,
    check_non_negative,
    check_int_dates,
    check_date_order,
    check_date_ranges,
]

SILVER_CHECKS: list[Callable[[list[dict], EntityRules, ValidationReport], None]] = [
    check_keys,
    check_padded_text,
    check_non_negative,
    check_date_order,
    check_labels,
    check_date_ranges,
    check_sales_consistency,
]


def _run_checks(
    records: list[dict],
    rules: EntityRules,
    entity: str,
    checks: list[Callable[[list[dict], EntityRules, ValidationReport], None]],
) -> ValidationReport:
    report = ValidationReport(entity=entity, row_count=len(records))
    for check in checks:
        check(records, rules, report)

    if report.is_clean:
        logger.debug(f"No findings for {entity} ({len(records)} rows)")
    else:
        logger.warning(
            f"Validation findings for {entity}: {report.summary()}",
            extra={"entity": entity, "row_count": len(records), "findings": report.summary()}
        )
    return report


def validate_batch(records: list[dict], rules: EntityRules, entity: str = "") -> ValidationReport:
    """Audit a raw batch before cleansing.

    Args:
        records: Raw records
        rules: Entity rule set
        entity: Entity name for the report

    Returns:
        ValidationReport (never raises on findings)
    """
    return _run_checks(records, rules, entity, BRONZE_CHECKS)


def audit_silver(records: list[dict], rules: EntityRules, entity: str = "") -> ValidationReport:
    """Audit a cleaned batch. A correct load produces a clean report."""
    return _run_checks(records, rules, entity, SILVER_CHECKS)
