"""CRM source pipelines: customers, products, sales details."""

import logging

from silver_etl.entities.base import BaseEntityPipeline
from silver_etl.transform.dedupe import dedupe_latest
from silver_etl.transform.intervals import derive_end_dates
from silver_etl.transform.normalize import (
    code_to_label,
    parse_int_date,
    rewrite_separator,
    split_key,
    to_date,
    trim,
)
from silver_etl.transform.repair import repair_sales
from silver_etl.transform.validate import EntityRules

logger = logging.getLogger(__name__)


class CustomerPipeline(BaseEntityPipeline):
    """crm_cust_info: latest row per customer, trimmed names, decoded flags."""

    entity = "crm_cust_info"
    key_field = "cst_id"
    recency_field = "cst_create_date"

    text_fields = ("cst_key", "cst_firstname", "cst_lastname", "cst_marital_status", "cst_gndr")

    @property
    def bronze_rules(self) -> EntityRules:
        return EntityRules(
            key_field=self.key_field,
            text_fields=self.text_fields,
        )

    @property
    def silver_rules(self) -> EntityRules:
        cfg = self.config
        return EntityRules(
            key_field=self.key_field,
            text_fields=self.text_fields,
            labels={
                "cst_marital_status": frozenset(cfg.marital_status_labels.values()) | {cfg.unknown_label},
                "cst_gndr": frozenset(cfg.crm_gender_labels.values()) | {cfg.unknown_gender},
            },
        )

    def clean(self, records: list[dict]) -> list[dict]:
        cfg = self.config
        latest = dedupe_latest(records, self.key_field, self.recency_field)

        return [
            {
                "cst_id": r.get("cst_id"),
                "cst_key": trim(r.get("cst_key")),
                "cst_firstname": trim(r.get("cst_firstname")),
                "cst_lastname": trim(r.get("cst_lastname")),
                "cst_marital_status": code_to_label(
                    r.get("cst_marital_status"), cfg.marital_status_labels, cfg.unknown_label
                ),
                "cst_gndr": code_to_label(
                    r.get("cst_gndr"), cfg.crm_gender_labels, cfg.unknown_gender
                ),
                "cst_create_date": to_date(r.get("cst_create_date")),
            }
            for r in latest
        ]


class ProductPipeline(BaseEntityPipeline):
    """crm_prd_info: split compound key, default cost, derive validity ranges."""

    entity = "crm_prd_info"
    key_field = "prd_id"
    recency_field = "prd_start_dt"

    @property
    def bronze_rules(self) -> EntityRules:
        return EntityRules(
            key_field=self.key_field,
            text_fields=("prd_key", "prd_nm", "prd_line"),
            non_negative_fields=("prd_cost",),
            date_order=(("prd_start_dt", "prd_end_dt"),),
        )

    @property
    def silver_rules(self) -> EntityRules:
        cfg = self.config
        return EntityRules(
            key_field=self.key_field,
            text_fields=("cat_id", "prd_key", "prd_nm", "prd_line"),
            non_negative_fields=("prd_cost",),
            date_order=(("prd_start_dt", "prd_end_dt"),),
            labels={
                "prd_line": frozenset(cfg.product_line_labels.values()) | {cfg.unknown_label},
            },
        )

    def split_product_key(self, compound):
        """Return ``(cat_id, prd_key)`` for a compound bronze product key."""
        cfg = self.config
        compound = trim(compound)
        prefix, local_key = split_key(
            compound, cfg.product_key_offset, prefix_length=cfg.category_id_length
        )
        cat_id = rewrite_separator(
            prefix, cfg.category_separator, cfg.category_id_separator, cfg.category_id_length
        )
        return cat_id, local_key

    def clean(self, records: list[dict]) -> list[dict]:
        cfg = self.config
        latest = dedupe_latest(records, self.key_field, self.recency_field)

        cleaned = []
        for r in latest:
            cat_id, prd_key = self.split_product_key(r.get("prd_key"))
            cost = r.get("prd_cost")
            cleaned.append({
                "prd_id": r.get("prd_id"),
                "cat_id": cat_id,
                "prd_key": prd_key,
                "prd_nm": trim(r.get("prd_nm")),
                "prd_cost": cfg.default_product_cost if cost is None else cost,
                "prd_line": code_to_label(
                    r.get("prd_line"), cfg.product_line_labels, cfg.unknown_label
                ),
                "prd_start_dt": to_date(r.get("prd_start_dt")),
                "prd_end_dt": None,
            })

        return derive_end_dates(cleaned, "prd_key", "prd_start_dt", "prd_end_dt")


class SalesPipeline(BaseEntityPipeline):
    """crm_sales_details: decode integer dates, repair sales and price."""

    entity = "crm_sales_details"
    key_field = "sls_ord_num"

    date_fields = ("sls_order_dt", "sls_ship_dt", "sls_due_dt")

    @property
    def bronze_rules(self) -> EntityRules:
        return EntityRules(
            key_field=self.key_field,
            unique_key=False,
            text_fields=("sls_ord_num", "sls_prd_key"),
            non_negative_fields=("sls_sales", "sls_quantity", "sls_price"),
            int_date_fields=self.date_fields,
            date_order=(("sls_order_dt", "sls_ship_dt"), ("sls_order_dt", "sls_due_dt")),
        )

    @property
    def silver_rules(self) -> EntityRules:
        return EntityRules(
            key_field=self.key_field,
            unique_key=False,
            text_fields=("sls_ord_num", "sls_prd_key"),
            non_negative_fields=("sls_sales", "sls_quantity", "sls_price"),
            date_order=(("sls_order_dt", "sls_ship_dt"), ("sls_order_dt", "sls_due_dt")),
            sales_fields=("sls_sales", "sls_quantity", "sls_price"),
        )

    def clean(self, records: list[dict]) -> list[dict]:
        cleaned = []
        for r in records:
            quantity = r.get("sls_quantity")
            sales, price = repair_sales(r.get("sls_sales"), quantity, r.get("sls_price"))
            row = {
                "sls_ord_num": trim(r.get("sls_ord_num")),
                "sls_prd_key": trim(r.get("sls_prd_key")),
                "sls_cust_id": r.get("sls_cust_id"),
            }
            for field_name in self.date_fields:
                row[field_name] = parse_int_date(r.get(field_name))
            row["sls_sales"] = sales
            row["sls_quantity"] = quantity
            row["sls_price"] = price
            cleaned.append(row)

        return cleaned
