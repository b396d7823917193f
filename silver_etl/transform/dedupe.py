"""Latest-wins deduplication by natural key."""

import logging
from typing import Any

logger = logging.getLogger(__name__)


def dedupe_latest(
    records: list[dict],
    key_field: str,
    recency_field: str,
) -> list[dict]:
    """Keep the most recent record for each natural key.

    - Rows with a null key are dropped.
    - A null recency value loses to any non-null one.
    - Ties on recency keep the row seen first in input order.
    - Output keeps the order in which each key first appeared.

    Args:
        records: Raw records
        key_field: Natural key field
        recency_field: Field whose maximum marks the latest row

    Returns:
        One record per key

    Example:
        >>> records = [
        ...     {"cst_id": 1, "cst_create_date": "2021-01-01", "name": "old"},
        ...     {"cst_id": 1, "cst_create_date": "2022-01-01", "name": "new"},
        ... ]
        >>> dedupe_latest(records, "cst_id", "cst_create_date")
        [{'cst_id': 1, 'cst_create_date': '2022-01-01', 'name': 'new'}]
    """
    if not records:
        return []

    latest: dict[Any, dict] = {}
    null_keys = 0

    for record in records:
        key = record.get(key_field)

        if key is None:
            null_keys += 1
            continue

        current = latest.get(key)
        if current is None or _is_newer(record.get(recency_field), current.get(recency_field)):
            latest[key] = record

    if null_keys:
        logger.warning(
            f"Skipped {null_keys} records with null {key_field}",
            extra={"key_field": key_field, "null_key_count": null_keys}
        )

    deduped = list(latest.values())

    duplicate_count = len(records) - null_keys - len(deduped)
    if duplicate_count > 0:
        logger.info(
            f"Removed {duplicate_count} duplicate records",
            extra={
                "original_count": len(records),
                "deduped_count": len(deduped),
                "duplicate_count": duplicate_count,
            }
        )

    return deduped


def _is_newer(candidate: Any, current: Any) -> bool:
    """Strictly-greater comparison where None sorts lowest."""
    if candidate is None:
        return False
    if current is None:
        return True
    return candidate > current
