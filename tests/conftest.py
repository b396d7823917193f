"""Pytest configuration and fixtures."""

from datetime import date, datetime, timezone

import pytest

BRONZE_CSV = {
    "source_crm/cust_info.csv": (
        "cst_id,cst_key,cst_firstname,cst_lastname,cst_marital_status,cst_gndr,cst_create_date\n"
        "11000,AW00011000, Jon,Yang ,S,M,2025-10-06\n"
        "11001,AW00011001,Eugene,Huang,S,M,2025-10-06\n"
        "11000,AW00011000,Jon,Yang,M,M,2025-10-07\n"
        ",AW00011002,Ruben,Torres,M,M,2025-10-06\n"
        "11003,AW00011003,Christy,Zhu,s , f,2025-10-06\n"
    ),
    "source_crm/prd_info.csv": (
        "prd_id,prd_key,prd_nm,prd_cost,prd_line,prd_start_dt,prd_end_dt\n"
        "210,CO-RF-FR-R92B-58,HL Road Frame - Black- 58,,R ,2003-07-01,\n"
        "212,AC-HE-HL-U509-R,Sport-100 Helmet- Red,12,S,2011-07-01,2007-12-28\n"
        "213,AC-HE-HL-U509-R,Sport-100 Helmet- Red,14,S,2012-07-01,2008-12-27\n"
        "214,AC-HE-HL-U509-R,Sport-100 Helmet- Red,13,S,2013-07-01,\n"
    ),
    "source_crm/sales_details.csv": (
        "sls_ord_num,sls_prd_key,sls_cust_id,sls_order_dt,sls_ship_dt,sls_due_dt,sls_sales,sls_quantity,sls_price\n"
        "SO43697,BK-R93R-62,21768,20101229,20110105,20110110,3578,1,3578\n"
        "SO43698,BK-M82S-44,28389,0,20110105,20110110,0,5,20\n"
        "SO43699,BK-M82S-44,25863,20101229,20110105,20110110,100,5,\n"
    ),
    "source_erp/CUST_AZ12.csv": (
        "CID,BDATE,GEN\n"
        "NASAW00011000,1971-10-06,Male\n"
        "AW00011001,2999-01-01,f\n"
        "NASAW00011002,1965-01-01,\n"
    ),
    "source_erp/LOC_A101.csv": (
        "CID,CNTRY\n"
        "AW-00011000,Australia\n"
        "AW-00011001,US\n"
        "AW-00011002,\n"
        "AW-00011003, DE\n"
    ),
    "source_erp/PX_CAT_G1V2.csv": (
        "ID,CAT,SUBCAT,MAINTENANCE\n"
        "AC_BR,Accessories,Bike Racks,Yes\n"
        "CO_RF,Components , Road Frames,No\n"
    ),
}


@pytest.fixture
def today():
    """Fixed reference date for future-date checks."""
    return date(2025, 1, 1)


@pytest.fixture
def loaded_at():
    """Fixed load timestamp."""
    return datetime(2025, 1, 2, 3, 0, 0, tzinfo=timezone.utc)


@pytest.fixture
def bronze_dir(tmp_path):
    """Bronze extract directory laid out like the source system export."""
    base = tmp_path / "datasets"
    for relative, content in BRONZE_CSV.items():
        path = base / relative
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content, encoding="utf-8")
    return base


@pytest.fixture
def customer_records():
    """Raw customer rows with a duplicate key and a null key."""
    return [
        {
            "cst_id": 1,
            "cst_key": "AW00000001",
            "cst_firstname": " Jo ",
            "cst_lastname": "Smith",
            "cst_marital_status": "S",
            "cst_gndr": "M",
            "cst_create_date": date(2021, 1, 1),
        },
        {
            "cst_id": 1,
            "cst_key": "AW00000001",
            "cst_firstname": "Joe",
            "cst_lastname": "Smith",
            "cst_marital_status": "M",
            "cst_gndr": "M",
            "cst_create_date": date(2022, 1, 1),
        },
        {
            "cst_id": None,
            "cst_key": "AW00000002",
            "cst_firstname": "Ghost",
            "cst_lastname": "Row",
            "cst_marital_status": "S",
            "cst_gndr": "F",
            "cst_create_date": date(2023, 1, 1),
        },
    ]


@pytest.fixture
def product_records():
    """Raw product rows: one key with three history rows, one with null cost."""
    return [
        {
            "prd_id": 212,
            "prd_key": "AC-HE-HL-U509-R",
            "prd_nm": "Sport-100 Helmet- Red",
            "prd_cost": 12,
            "prd_line": "S ",
            "prd_start_dt": datetime(2011, 7, 1),
            "prd_end_dt": datetime(2007, 12, 28),
        },
        {
            "prd_id": 214,
            "prd_key": "AC-HE-HL-U509-R",
            "prd_nm": "Sport-100 Helmet- Red",
            "prd_cost": 13,
            "prd_line": "S",
            "prd_start_dt": datetime(2013, 7, 1),
            "prd_end_dt": None,
        },
        {
            "prd_id": 213,
            "prd_key": "AC-HE-HL-U509-R",
            "prd_nm": "Sport-100 Helmet- Red",
            "prd_cost": 14,
            "prd_line": "S",
            "prd_start_dt": datetime(2012, 7, 1),
            "prd_end_dt": datetime(2008, 12, 27),
        },
        {
            "prd_id": 210,
            "prd_key": "CO-RF-FR-R92B-58",
            "prd_nm": " HL Road Frame - Black- 58",
            "prd_cost": None,
            "prd_line": "r",
            "prd_start_dt": datetime(2003, 7, 1),
            "prd_end_dt": None,
        },
    ]


@pytest.fixture
def sales_records():
    """Raw sales rows covering each repair rule."""
    return [
        {
            "sls_ord_num": "SO1",
            "sls_prd_key": "BK-R93R-62",
            "sls_cust_id": 21768,
            "sls_order_dt": 20101229,
            "sls_ship_dt": 20110105,
            "sls_due_dt": 20110110,
            "sls_sales": 0,
            "sls_quantity": 5,
            "sls_price": 20,
        },
        {
            "sls_ord_num": "SO2",
            "sls_prd_key": "BK-M82S-44",
            "sls_cust_id": 28389,
            "sls_order_dt": 0,
            "sls_ship_dt": 5489,
            "sls_due_dt": 20230230,
            "sls_sales": 100,
            "sls_quantity": 5,
            "sls_price": None,
        },
    ]
