"""Cleansing rules and runtime settings.

The label tables and fallback constants are plain immutable data so each
normalizer receives them as arguments instead of hard-coding literals.
"""

import os
from dataclasses import dataclass, field
from datetime import date
from types import MappingProxyType
from typing import Mapping, Optional


def _frozen(table: dict) -> Mapping[str, str]:
    return MappingProxyType(dict(table))


MARITAL_STATUS_LABELS = _frozen({
    "S": "Single",
    "M": "Married",
})

GENDER_LABELS = _frozen({
    "F": "Female",
    "FEMALE": "Female",
    "M": "Male",
    "MALE": "Male",
})

PRODUCT_LINE_LABELS = _frozen({
    "M": "Mountain",
    "R": "Road",
    "S": "Other Sales",
    "T": "Touring",
})

COUNTRY_LABELS = _frozen({
    "DE": "Germany",
    "US": "United States",
    "USA": "United States",
})


@dataclass(frozen=True)
class CleansingConfig:
    """Immutable rule data shared by the entity pipelines."""

    marital_status_labels: Mapping[str, str] = field(default_factory=lambda: MARITAL_STATUS_LABELS)
    crm_gender_labels: Mapping[str, str] = field(default_factory=lambda: GENDER_LABELS)
    erp_gender_labels: Mapping[str, str] = field(default_factory=lambda: GENDER_LABELS)
    product_line_labels: Mapping[str, str] = field(default_factory=lambda: PRODUCT_LINE_LABELS)
    country_labels: Mapping[str, str] = field(default_factory=lambda: COUNTRY_LABELS)

    unknown_label: str = "n/a"
    unknown_gender: str = "Other"

    demographic_id_prefix: str = "NAS"
    location_id_separator: str = "-"
    default_product_cost: int = 0

    # Compound product key: "CO-RF-FR-R92B-58" -> cat_id "CO_RF", prd_key "FR-R92B-58"
    category_id_length: int = 5
    product_key_offset: int = 6
    category_separator: str = "-"
    category_id_separator: str = "_"

    min_birthdate: date = date(1924, 1, 1)


DEFAULT_CONFIG = CleansingConfig()


SILVER_FORMATS = ("parquet", "jsonl")


@dataclass
class Settings:
    """Runtime settings for a silver load run."""

    bronze_dir: str = "datasets"
    silver_dir: str = "data/silver"
    silver_format: str = "parquet"
    log_level: str = "INFO"
    workers: int = 1
    aws_region: Optional[str] = None
    cleansing: CleansingConfig = field(default_factory=CleansingConfig)

    def __post_init__(self):
        if self.silver_format not in SILVER_FORMATS:
            raise ValueError(
                f"SILVER_FORMAT must be one of {SILVER_FORMATS}, got {self.silver_format!r}"
            )
        if self.workers < 1:
            raise ValueError("SILVER_WORKERS must be at least 1")

    @classmethod
    def from_env(cls, **overrides) -> "Settings":
        """Build settings from environment variables (load .env first).

        Keyword overrides that are not None take precedence over the
        environment and are applied before validation.
        """
        values = {
            "bronze_dir": os.getenv("BRONZE_DIR", "datasets"),
            "silver_dir": os.getenv("SILVER_DIR", "data/silver"),
            "silver_format": os.getenv("SILVER_FORMAT", "parquet").lower(),
            "log_level": os.getenv("LOG_LEVEL", "INFO").upper(),
            "workers": os.getenv("SILVER_WORKERS", "1"),
            "aws_region": os.getenv("AWS_REGION"),
        }
        values.update({k: v for k, v in overrides.items() if v is not None})

        try:
            values["workers"] = int(values["workers"])
        except ValueError:
            raise ValueError(f"SILVER_WORKERS must be an integer, got {values['workers']!r}") from None

        return cls(**values)

    @property
    def is_s3_target(self) -> bool:
        return self.silver_dir.startswith("s3://")
