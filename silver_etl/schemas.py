"""Bronze and silver column schemas for the six CRM/ERP entities."""

import pyarrow as pa

LOAD_TIMESTAMP_FIELD = "dwh_create_date"

_LOAD_TS = pa.field(LOAD_TIMESTAMP_FIELD, pa.timestamp("us", tz="UTC"))

# Relative bronze file locations, keyed by entity name
BRONZE_FILES = {
    "crm_cust_info": "source_crm/cust_info.csv",
    "crm_prd_info": "source_crm/prd_info.csv",
    "crm_sales_details": "source_crm/sales_details.csv",
    "erp_cust_az12": "source_erp/CUST_AZ12.csv",
    "erp_loc_a101": "source_erp/LOC_A101.csv",
    "erp_px_cat_g1v2": "source_erp/PX_CAT_G1V2.csv",
}

BRONZE_SCHEMAS = {
    "crm_cust_info": pa.schema([
        ("cst_id", pa.int64()),
        ("cst_key", pa.string()),
        ("cst_firstname", pa.string()),
        ("cst_lastname", pa.string()),
        ("cst_marital_status", pa.string()),
        ("cst_gndr", pa.string()),
        ("cst_create_date", pa.date32()),
    ]),
    "crm_prd_info": pa.schema([
        ("prd_id", pa.int64()),
        ("prd_key", pa.string()),
        ("prd_nm", pa.string()),
        ("prd_cost", pa.int64()),
        ("prd_line", pa.string()),
        ("prd_start_dt", pa.timestamp("s")),
        ("prd_end_dt", pa.timestamp("s")),
    ]),
    "crm_sales_details": pa.schema([
        ("sls_ord_num", pa.string()),
        ("sls_prd_key", pa.string()),
        ("sls_cust_id", pa.int64()),
        ("sls_order_dt", pa.int64()),
        ("sls_ship_dt", pa.int64()),
        ("sls_due_dt", pa.int64()),
        ("sls_sales", pa.int64()),
        ("sls_quantity", pa.int64()),
        ("sls_price", pa.int64()),
    ]),
    "erp_cust_az12": pa.schema([
        ("cid", pa.string()),
        ("bdate", pa.date32()),
        ("gen", pa.string()),
    ]),
    "erp_loc_a101": pa.schema([
        ("cid", pa.string()),
        ("cntry", pa.string()),
    ]),
    "erp_px_cat_g1v2": pa.schema([
        ("id", pa.string()),
        ("cat", pa.string()),
        ("subcat", pa.string()),
        ("maintenance", pa.string()),
    ]),
}

SILVER_SCHEMAS = {
    "crm_cust_info": pa.schema([
        pa.field("cst_id", pa.int64(), nullable=False),
        ("cst_key", pa.string()),
        ("cst_firstname", pa.string()),
        ("cst_lastname", pa.string()),
        ("cst_marital_status", pa.string()),
        ("cst_gndr", pa.string()),
        ("cst_create_date", pa.date32()),
        _LOAD_TS,
    ]),
    "crm_prd_info": pa.schema([
        pa.field("prd_id", pa.int64(), nullable=False),
        ("cat_id", pa.string()),
        ("prd_key", pa.string()),
        ("prd_nm", pa.string()),
        ("prd_cost", pa.int64()),
        ("prd_line", pa.string()),
        ("prd_start_dt", pa.date32()),
        ("prd_end_dt", pa.date32()),
        _LOAD_TS,
    ]),
    "crm_sales_details": pa.schema([
        ("sls_ord_num", pa.string()),
        ("sls_prd_key", pa.string()),
        ("sls_cust_id", pa.int64()),
        ("sls_order_dt", pa.date32()),
        ("sls_ship_dt", pa.date32()),
        ("sls_due_dt", pa.date32()),
        ("sls_sales", pa.int64()),
        ("sls_quantity", pa.int64()),
        ("sls_price", pa.int64()),
        _LOAD_TS,
    ]),
    "erp_cust_az12": pa.schema([
        ("cid", pa.string()),
        ("bdate", pa.date32()),
        ("gen", pa.string()),
        _LOAD_TS,
    ]),
    "erp_loc_a101": pa.schema([
        ("cid", pa.string()),
        ("cntry", pa.string()),
        _LOAD_TS,
    ]),
    "erp_px_cat_g1v2": pa.schema([
        ("id", pa.string()),
        ("cat", pa.string()),
        ("subcat", pa.string()),
        ("maintenance", pa.string()),
        _LOAD_TS,
    ]),
}

ENTITIES = tuple(BRONZE_FILES)
