"""ERP source pipelines: customer demographics, locations, categories."""

import logging

from silver_etl.entities.base import BaseEntityPipeline
from silver_etl.transform.normalize import (
    code_to_label,
    future_date_guard,
    strip_prefix,
    strip_separator,
    to_date,
    trim,
)
from silver_etl.transform.validate import EntityRules

logger = logging.getLogger(__name__)


class CustomerDemographicsPipeline(BaseEntityPipeline):
    """erp_cust_az12: align ids with CRM keys, drop impossible birthdates."""

    entity = "erp_cust_az12"
    key_field = "cid"

    @property
    def bronze_rules(self) -> EntityRules:
        return EntityRules(
            key_field=self.key_field,
            text_fields=("cid", "gen"),
            date_ranges={"bdate": (self.config.min_birthdate, self.today)},
        )

    @property
    def silver_rules(self) -> EntityRules:
        cfg = self.config
        return EntityRules(
            key_field=self.key_field,
            text_fields=("cid", "gen"),
            labels={"gen": frozenset(cfg.erp_gender_labels.values()) | {cfg.unknown_gender}},
            date_ranges={"bdate": (None, self.today)},
        )

    def clean(self, records: list[dict]) -> list[dict]:
        cfg = self.config
        today = self.today

        return [
            {
                "cid": strip_prefix(trim(r.get("cid")), cfg.demographic_id_prefix),
                "bdate": future_date_guard(to_date(r.get("bdate")), today),
                "gen": code_to_label(r.get("gen"), cfg.erp_gender_labels, cfg.unknown_gender),
            }
            for r in records
        ]


class LocationPipeline(BaseEntityPipeline):
    """erp_loc_a101: strip id separators, canonical country names."""

    entity = "erp_loc_a101"
    key_field = "cid"

    @property
    def bronze_rules(self) -> EntityRules:
        return EntityRules(key_field=self.key_field, text_fields=("cid", "cntry"))

    @property
    def silver_rules(self) -> EntityRules:
        return EntityRules(key_field=self.key_field, text_fields=("cid", "cntry"))

    def clean(self, records: list[dict]) -> list[dict]:
        cfg = self.config

        return [
            {
                "cid": strip_separator(trim(r.get("cid")), cfg.location_id_separator),
                "cntry": code_to_label(
                    r.get("cntry"), cfg.country_labels, cfg.unknown_label, passthrough=True
                ),
            }
            for r in records
        ]


class CategoryPipeline(BaseEntityPipeline):
    """erp_px_cat_g1v2: trimmed category attributes."""

    entity = "erp_px_cat_g1v2"
    key_field = "id"

    text_fields = ("id", "cat", "subcat", "maintenance")

    @property
    def bronze_rules(self) -> EntityRules:
        return EntityRules(key_field=self.key_field, text_fields=self.text_fields)

    @property
    def silver_rules(self) -> EntityRules:
        return EntityRules(key_field=self.key_field, text_fields=self.text_fields)

    def clean(self, records: list[dict]) -> list[dict]:
        return [
            {
                "id": trim(r.get("id")),
                "cat": trim(r.get("cat")),
                "subcat": trim(r.get("subcat")),
                "maintenance": trim(r.get("maintenance")),
            }
            for r in records
        ]
