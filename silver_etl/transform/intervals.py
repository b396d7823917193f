"""Open-ended validity interval derivation."""

import logging
from datetime import timedelta
from itertools import groupby
from typing import Any

logger = logging.getLogger(__name__)

ONE_DAY = timedelta(days=1)


def _start_order(value: Any) -> tuple:
    # Null start dates sort first, as in an ascending SQL ORDER BY
    return (0, None) if value is None else (1, value)


def derive_end_dates(
    records: list[dict],
    partition_field: str,
    start_field: str,
    end_field: str,
) -> list[dict]:
    """Set each row's end date to the day before the next row's start.

    Rows are grouped by ``partition_field`` and ordered by ``start_field``
    (stable for equal starts). The last row in each group, and any row whose
    successor has no start date, gets a null end date. Input dicts are
    updated in place and returned in their original order.

    Example:
        >>> from datetime import date
        >>> rows = [
        ...     {"prd_key": "A", "prd_start_dt": date(2011, 7, 1)},
        ...     {"prd_key": "A", "prd_start_dt": date(2012, 7, 1)},
        ... ]
        >>> [r["prd_end_dt"] for r in derive_end_dates(rows, "prd_key", "prd_start_dt", "prd_end_dt")]
        [datetime.date(2012, 6, 30), None]
    """
    def partition(record: dict) -> tuple:
        key = record.get(partition_field)
        return (key is not None, key or "")

    ordered = sorted(
        records,
        key=lambda r: (partition(r), _start_order(r.get(start_field))),
    )

    for _, group in groupby(ordered, key=partition):
        rows = list(group)
        for current, following in zip(rows, rows[1:] + [None]):
            next_start = following.get(start_field) if following else None
            current[end_field] = next_start - ONE_DAY if next_start is not None else None

    logger.debug(f"Derived {end_field} for {len(records)} records")
    return records
