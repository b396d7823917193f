"""Base entity pipeline with the common transform flow."""

import logging
from abc import ABC, abstractmethod
from datetime import date, datetime, timezone
from typing import Optional

from silver_etl.config import CleansingConfig, DEFAULT_CONFIG
from silver_etl.schemas import LOAD_TIMESTAMP_FIELD
from silver_etl.transform.validate import (
    EntityRules,
    ValidationReport,
    audit_silver,
    validate_batch,
)

logger = logging.getLogger(__name__)


class BaseEntityPipeline(ABC):
    """Maps one bronze record batch to its silver batch.

    Subclasses set ``entity``, ``key_field`` and implement ``clean``.
    Pipelines hold no state between runs, so the same input always yields
    the same output for a fixed load timestamp and ``today``.
    """

    entity: str = ""
    key_field: Optional[str] = None

    def __init__(
        self,
        config: CleansingConfig = DEFAULT_CONFIG,
        today: Optional[date] = None,
    ):
        """Initialize pipeline.

        Args:
            config: Label tables and fallback constants
            today: Reference date for future-date checks (defaults to UTC today)
        """
        self.config = config
        self._today = today

    @property
    def today(self) -> date:
        return self._today or datetime.now(timezone.utc).date()

    @property
    @abstractmethod
    def bronze_rules(self) -> EntityRules:
        """Checks applied to raw input."""

    @property
    @abstractmethod
    def silver_rules(self) -> EntityRules:
        """Checks applied to cleaned output."""

    @abstractmethod
    def clean(self, records: list[dict]) -> list[dict]:
        """Entity-specific cleansing. Must not mutate the input dicts."""

    def transform(
        self,
        records: list[dict],
        loaded_at: Optional[datetime] = None,
    ) -> list[dict]:
        """Clean a bronze batch and stamp each row with the load timestamp.

        Args:
            records: Bronze records
            loaded_at: Load timestamp (defaults to UTC now)

        Returns:
            Silver records
        """
        if loaded_at is None:
            loaded_at = datetime.now(timezone.utc)

        cleaned = self.clean(records)
        for record in cleaned:
            record[LOAD_TIMESTAMP_FIELD] = loaded_at

        logger.info(
            f"Transformed {self.entity}: {len(records)} in, {len(cleaned)} out",
            extra={
                "entity": self.entity,
                "input_count": len(records),
                "output_count": len(cleaned),
            }
        )
        return cleaned

    def validate(self, records: list[dict]) -> ValidationReport:
        """Advisory audit of a bronze batch."""
        return validate_batch(records, self.bronze_rules, entity=self.entity)

    def audit(self, records: list[dict]) -> ValidationReport:
        """Audit a silver batch; a clean run has no findings."""
        return audit_silver(records, self.silver_rules, entity=self.entity)

    def __repr__(self) -> str:
        return f"{type(self).__name__}(entity={self.entity!r})"
