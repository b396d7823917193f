"""Bronze to Silver DAG.

This DAG runs the full-refresh silver load:
1. Clean and replace each CRM/ERP entity (one task per entity, in parallel)
2. Check the silver audits
3. Publish run metrics

Schedule: Daily (configurable)
"""

import json
import logging
import os
from datetime import datetime, timedelta
from typing import Any

from airflow import DAG
from airflow.operators.empty import EmptyOperator
from airflow.operators.python import PythonOperator
from airflow.utils.trigger_rule import TriggerRule

from silver_etl.schemas import ENTITIES

logger = logging.getLogger(__name__)

# ============================================
# Configuration
# ============================================

DAG_ID = "bronze_to_silver"

default_args = {
    "owner": "data-engineering",
    "depends_on_past": False,
    "email_on_failure": False,
    "email_on_retry": False,
    "retries": 2,
    "retry_delay": timedelta(minutes=5),
}


# ============================================
# Callback Functions
# ============================================

def on_failure_callback(context: dict[str, Any]) -> None:
    """Log task failure with run context."""
    task_instance = context.get("task_instance")

    error_message = {
        "event": "task_failure",
        "dag_id": context.get("dag").dag_id,
        "task_id": task_instance.task_id,
        "try_number": task_instance.try_number,
        "error": str(context.get("exception")),
    }

    logger.error(f"Task failed: {json.dumps(error_message)}")


# ============================================
# Task Functions
# ============================================

def load_silver_entity(entity: str, **context) -> dict:
    """Clean one bronze entity and replace its silver output.

    Returns:
        dict: Load result for the entity
    """
    from silver_etl.config import Settings
    from silver_etl.load_silver import build_store, load_entity
    from silver_etl.utils import setup_logging

    setup_logging(level="INFO", json_format=True)
    settings = Settings.from_env()

    # Every entity of a DAG run shares the run id, load timestamp and reference date
    interval_end = context["data_interval_end"]
    result = load_entity(
        entity,
        settings.bronze_dir,
        build_store(settings),
        run_id=context["run_id"],
        loaded_at=interval_end,
        today=interval_end.date(),
        config=settings.cleansing,
    )

    context["ti"].xcom_push(key="load_result", value=result)

    if result["status"] != "success":
        raise RuntimeError(f"Silver load failed for {entity}: {result.get('error')}")

    return result


def check_silver_audits(**context) -> dict:
    """Collect silver audit findings from every entity task.

    Null or duplicate keys in a deduplicated entity fail the task; other
    findings are logged as warnings.
    """
    ti = context["ti"]
    findings = {}
    critical = []

    for entity in ENTITIES:
        result = ti.xcom_pull(key="load_result", task_ids=f"load_{entity}") or {}
        entity_findings = result.get("silver_findings") or {}
        findings[entity] = entity_findings

        if entity in ("crm_cust_info", "crm_prd_info"):
            for rule in ("null_key", "duplicate_key"):
                if entity_findings.get(rule):
                    critical.append(f"{entity}: {rule}={entity_findings[rule]}")

    ti.xcom_push(key="silver_findings", value=findings)

    if critical:
        raise RuntimeError(f"Critical silver audit failures: {critical}")

    logger.info(f"Silver audits: {json.dumps(findings)}")
    return findings


def publish_pipeline_metrics(**context) -> dict:
    """Log per-entity row counts for monitoring."""
    ti = context["ti"]

    entities = {}
    for entity in ENTITIES:
        result = ti.xcom_pull(key="load_result", task_ids=f"load_{entity}") or {}
        entities[entity] = {
            "status": result.get("status", "missing"),
            "records_read": result.get("records_read", 0),
            "records_written": result.get("records_written", 0),
        }

    metrics = {
        "dag_id": context["dag"].dag_id,
        "run_id": context["run_id"],
        "entities": entities,
        "status": "success" if all(e["status"] == "success" for e in entities.values()) else "partial_failure",
    }

    logger.info(f"Pipeline metrics: {json.dumps(metrics, indent=2)}")
    return metrics


# ============================================
# DAG Definition
# ============================================

with DAG(
    dag_id=DAG_ID,
    default_args=default_args,
    description="Full-refresh load of CRM/ERP bronze extracts into silver",
    schedule_interval=os.getenv("SILVER_SCHEDULE", "@daily"),
    start_date=datetime(2025, 1, 1),
    catchup=False,
    max_active_runs=1,
    tags=["pipeline", "silver", "crm", "erp"],
    on_failure_callback=on_failure_callback,
) as dag:

    start = EmptyOperator(task_id="start")

    load_tasks = [
        PythonOperator(
            task_id=f"load_{entity}",
            python_callable=load_silver_entity,
            op_kwargs={"entity": entity},
            on_failure_callback=on_failure_callback,
        )
        for entity in ENTITIES
    ]

    audits = PythonOperator(
        task_id="check_silver_audits",
        python_callable=check_silver_audits,
        on_failure_callback=on_failure_callback,
    )

    publish_metrics = PythonOperator(
        task_id="publish_metrics",
        python_callable=publish_pipeline_metrics,
        trigger_rule=TriggerRule.ALL_DONE,  # Run even if loads fail
    )

    end = EmptyOperator(
        task_id="end",
        trigger_rule=TriggerRule.ALL_DONE,
    )

    start >> load_tasks >> audits >> publish_metrics >> end
