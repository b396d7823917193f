"""Tests for entity transform pipelines."""

import copy
from datetime import date

import pytest

from silver_etl.config import CleansingConfig
from silver_etl.entities import (
    ENTITY_PIPELINES,
    CategoryPipeline,
    CustomerDemographicsPipeline,
    CustomerPipeline,
    LocationPipeline,
    ProductPipeline,
    SalesPipeline,
)
from silver_etl.schemas import ENTITIES, LOAD_TIMESTAMP_FIELD


class TestRegistry:
    """Tests for the pipeline registry."""

    def test_every_entity_has_a_pipeline(self):
        """Test registry covers all six entities."""
        assert set(ENTITY_PIPELINES) == set(ENTITIES)


class TestCustomerPipeline:
    """Tests for crm_cust_info cleansing."""

    def test_latest_row_wins(self, customer_records, loaded_at):
        """Test duplicates collapse to the most recent, cleaned row."""
        result = CustomerPipeline().transform(customer_records, loaded_at=loaded_at)

        assert len(result) == 1
        row = result[0]
        assert row["cst_id"] == 1
        assert row["cst_firstname"] == "Joe"
        assert row["cst_marital_status"] == "Married"
        assert row["cst_gndr"] == "Male"
        assert row[LOAD_TIMESTAMP_FIELD] == loaded_at

    def test_trim_and_fallbacks(self, loaded_at):
        """Test names are trimmed and unknown codes fall back."""
        records = [{
            "cst_id": 7,
            "cst_key": " AW7 ",
            "cst_firstname": "  Ann",
            "cst_lastname": "Lee  ",
            "cst_marital_status": None,
            "cst_gndr": "x",
            "cst_create_date": date(2020, 1, 1),
        }]
        row = CustomerPipeline().transform(records, loaded_at=loaded_at)[0]

        assert row["cst_key"] == "AW7"
        assert row["cst_firstname"] == "Ann"
        assert row["cst_lastname"] == "Lee"
        assert row["cst_marital_status"] == "n/a"
        assert row["cst_gndr"] == "Other"

    def test_does_not_mutate_input(self, customer_records, loaded_at):
        """Test bronze records are left untouched."""
        before = copy.deepcopy(customer_records)
        CustomerPipeline().transform(customer_records, loaded_at=loaded_at)

        assert customer_records == before

    def test_silver_audit_clean(self, customer_records, loaded_at):
        """Test the cleaned output passes its own audit."""
        pipeline = CustomerPipeline()
        result = pipeline.transform(customer_records, loaded_at=loaded_at)

        assert pipeline.audit(result).is_clean

    def test_custom_tables(self, customer_records, loaded_at):
        """Test label tables come from the injected config."""
        config = CleansingConfig(marital_status_labels={"M": "Wed", "S": "Solo"})
        row = CustomerPipeline(config=config).transform(customer_records, loaded_at=loaded_at)[0]

        assert row["cst_marital_status"] == "Wed"


class TestProductPipeline:
    """Tests for crm_prd_info cleansing."""

    def test_key_split_and_defaults(self, product_records, loaded_at):
        """Test compound key split, cost default and line mapping."""
        result = ProductPipeline().transform(product_records, loaded_at=loaded_at)
        frame = next(r for r in result if r["prd_id"] == 210)

        assert frame["cat_id"] == "CO_RF"
        assert frame["prd_key"] == "FR-R92B-58"
        assert frame["prd_nm"] == "HL Road Frame - Black- 58"
        assert frame["prd_cost"] == 0
        assert frame["prd_line"] == "Road"
        assert frame["prd_start_dt"] == date(2003, 7, 1)
        assert frame["prd_end_dt"] is None

    def test_end_dates_replace_source_values(self, product_records, loaded_at):
        """Test bronze end dates are ignored and derived from the next start."""
        result = ProductPipeline().transform(product_records, loaded_at=loaded_at)
        ends = {r["prd_id"]: r["prd_end_dt"] for r in result}

        assert ends[212] == date(2012, 6, 30)
        assert ends[213] == date(2013, 6, 30)
        assert ends[214] is None

    def test_product_line_other_sales(self, product_records, loaded_at):
        """Test padded line code maps to its label."""
        result = ProductPipeline().transform(product_records, loaded_at=loaded_at)

        assert {r["prd_line"] for r in result if r["cat_id"] == "AC_HE"} == {"Other Sales"}

    def test_unique_product_ids(self, product_records, loaded_at):
        """Test prd_id stays unique even when bronze repeats it."""
        records = product_records + [dict(product_records[0], prd_cost=99)]
        result = ProductPipeline().transform(records, loaded_at=loaded_at)

        ids = [r["prd_id"] for r in result]
        assert len(ids) == len(set(ids))

    def test_silver_audit_clean(self, product_records, loaded_at):
        """Test cleaned products pass the audit, including date order."""
        pipeline = ProductPipeline()
        result = pipeline.transform(product_records, loaded_at=loaded_at)

        assert pipeline.audit(result).is_clean


class TestSalesPipeline:
    """Tests for crm_sales_details cleansing."""

    def test_sales_recomputed(self, sales_records, loaded_at):
        """Test sales=0 with quantity 5 and price 20 becomes 100."""
        row = SalesPipeline().transform(sales_records, loaded_at=loaded_at)[0]

        assert (row["sls_sales"], row["sls_quantity"], row["sls_price"]) == (100, 5, 20)
        assert row["sls_order_dt"] == date(2010, 12, 29)
        assert row["sls_ship_dt"] == date(2011, 1, 5)
        assert row["sls_due_dt"] == date(2011, 1, 10)

    def test_price_derived_and_bad_dates_nulled(self, sales_records, loaded_at):
        """Test null price derivation and rejected integer dates."""
        row = SalesPipeline().transform(sales_records, loaded_at=loaded_at)[1]

        assert (row["sls_sales"], row["sls_quantity"], row["sls_price"]) == (100, 5, 20)
        assert row["sls_order_dt"] is None
        assert row["sls_ship_dt"] is None
        assert row["sls_due_dt"] is None

    def test_passthrough_fields(self, sales_records, loaded_at):
        """Test identifiers are carried over."""
        row = SalesPipeline().transform(sales_records, loaded_at=loaded_at)[0]

        assert row["sls_ord_num"] == "SO1"
        assert row["sls_prd_key"] == "BK-R93R-62"
        assert row["sls_cust_id"] == 21768

    def test_keeps_every_row(self, sales_records, loaded_at):
        """Test fact rows are never deduplicated."""
        records = sales_records + [dict(sales_records[0])]
        result = SalesPipeline().transform(records, loaded_at=loaded_at)

        assert len(result) == 3

    def test_sales_invariant(self, sales_records, loaded_at):
        """Test sales == quantity * price after repair."""
        pipeline = SalesPipeline()
        result = pipeline.transform(sales_records, loaded_at=loaded_at)

        for row in result:
            assert row["sls_sales"] == row["sls_quantity"] * row["sls_price"]
        assert pipeline.audit(result).is_clean


class TestCustomerDemographicsPipeline:
    """Tests for erp_cust_az12 cleansing."""

    def test_scenario(self, today, loaded_at):
        """Test prefix strip, future birthdate and gender synonym."""
        records = [{"cid": "NAS12345", "bdate": date(2999, 1, 1), "gen": "f"}]
        row = CustomerDemographicsPipeline(today=today).transform(records, loaded_at=loaded_at)[0]

        assert row["cid"] == "12345"
        assert row["bdate"] is None
        assert row["gen"] == "Female"

    @pytest.mark.parametrize("gen,expected", [
        ("Male", "Male"),
        (" MALE ", "Male"),
        ("F", "Female"),
        ("", "Other"),
        (None, "Other"),
    ])
    def test_gender_labels(self, gen, expected, today, loaded_at):
        """Test gender synonyms and fallback."""
        records = [{"cid": "AW1", "bdate": date(1980, 1, 1), "gen": gen}]
        row = CustomerDemographicsPipeline(today=today).transform(records, loaded_at=loaded_at)[0]

        assert row["gen"] == expected

    def test_past_birthdate_kept(self, today, loaded_at):
        """Test valid birthdates and unprefixed ids pass through."""
        records = [{"cid": "AW00011001", "bdate": date(1971, 10, 6), "gen": "M"}]
        row = CustomerDemographicsPipeline(today=today).transform(records, loaded_at=loaded_at)[0]

        assert row["cid"] == "AW00011001"
        assert row["bdate"] == date(1971, 10, 6)

    def test_bronze_audit_flags_future_birthdate(self, today):
        """Test the bronze audit reports the out-of-range birthdate."""
        records = [{"cid": "NAS1", "bdate": date(2999, 1, 1), "gen": "F"}]
        report = CustomerDemographicsPipeline(today=today).validate(records)

        assert report.summary() == {"date_out_of_range": 1}


class TestLocationPipeline:
    """Tests for erp_loc_a101 cleansing."""

    def test_scenario(self, loaded_at):
        """Test separator strip and empty country fallback."""
        row = LocationPipeline().transform([{"cid": "AW-123", "cntry": ""}], loaded_at=loaded_at)[0]

        assert row["cid"] == "AW123"
        assert row["cntry"] == "n/a"

    @pytest.mark.parametrize("cntry,expected", [
        ("DE", "Germany"),
        ("USA", "United States"),
        (" US", "United States"),
        ("France ", "France"),
        (None, "n/a"),
    ])
    def test_country_names(self, cntry, expected, loaded_at):
        """Test country aliases and passthrough."""
        row = LocationPipeline().transform([{"cid": "AW-1", "cntry": cntry}], loaded_at=loaded_at)[0]

        assert row["cntry"] == expected


class TestCategoryPipeline:
    """Tests for erp_px_cat_g1v2 cleansing."""

    def test_trim(self, loaded_at):
        """Test category attributes are trimmed and id kept."""
        records = [{"id": "CO_RF", "cat": "Components ", "subcat": " Road Frames", "maintenance": "No "}]
        row = CategoryPipeline().transform(records, loaded_at=loaded_at)[0]

        assert row["id"] == "CO_RF"
        assert row["cat"] == "Components"
        assert row["subcat"] == "Road Frames"
        assert row["maintenance"] == "No"


class TestIdempotence:
    """Tests that pipelines are deterministic."""

    @pytest.mark.parametrize("pipeline_cls,fixture_name", [
        (CustomerPipeline, "customer_records"),
        (ProductPipeline, "product_records"),
        (SalesPipeline, "sales_records"),
    ])
    def test_same_input_same_output(self, pipeline_cls, fixture_name, request, today, loaded_at):
        """Test two runs over the same bronze batch are identical."""
        records = request.getfixturevalue(fixture_name)
        pipeline = pipeline_cls(today=today)

        first = pipeline.transform(records, loaded_at=loaded_at)
        second = pipeline.transform(records, loaded_at=loaded_at)

        assert first == second
