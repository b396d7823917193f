"""Main load entrypoint: bronze extracts → cleansing → silver outputs.

Usage:
    python -m silver_etl.load_silver
    python -m silver_etl.load_silver --entity crm_cust_info
    python -m silver_etl.load_silver --bronze-dir datasets --silver-dir s3://bucket/silver --workers 6
"""

import argparse
import logging
import sys
import uuid
from concurrent.futures import ThreadPoolExecutor
from datetime import date, datetime, timezone
from pathlib import Path
from typing import Optional, Union

from dotenv import load_dotenv

from silver_etl.config import DEFAULT_CONFIG, SILVER_FORMATS, CleansingConfig, Settings
from silver_etl.entities import ENTITY_PIPELINES
from silver_etl.schemas import BRONZE_FILES, BRONZE_SCHEMAS, ENTITIES, SILVER_SCHEMAS
from silver_etl.utils import (
    LocalSilverStore,
    PipelineLogger,
    S3SilverStore,
    SilverLoadError,
    read_bronze,
    setup_logging,
    timed_operation,
)

logger = logging.getLogger(__name__)


def build_store(settings: Settings):
    """Pick the silver store for the configured target."""
    if settings.is_s3_target:
        return S3SilverStore(
            uri=settings.silver_dir,
            file_format=settings.silver_format,
            region_name=settings.aws_region,
        )
    return LocalSilverStore(settings.silver_dir, file_format=settings.silver_format)


def load_entity(
    entity: str,
    bronze_dir: Union[str, Path],
    store,
    run_id: str,
    loaded_at: Optional[datetime] = None,
    config: CleansingConfig = DEFAULT_CONFIG,
    today: Optional[date] = None,
) -> dict:
    """Clean one bronze entity and replace its silver output.

    Read and write failures are caught here so one entity cannot abort the
    others; the previous silver output stays in place when this returns an
    error status.

    Args:
        entity: Entity name (see ``ENTITY_PIPELINES``)
        bronze_dir: Directory holding the bronze extracts
        store: LocalSilverStore or S3SilverStore
        run_id: Run identifier
        loaded_at: Load timestamp stamped on every row
        config: Cleansing rules
        today: Reference date for future-date checks

    Returns:
        Load result metadata
    """
    plog = PipelineLogger(entity, run_id)
    plog.start("load")

    try:
        pipeline = ENTITY_PIPELINES[entity](config=config, today=today)

        bronze_path = Path(bronze_dir) / BRONZE_FILES[entity]
        raw_records = read_bronze(bronze_path, schema=BRONZE_SCHEMAS[entity])

        bronze_report = pipeline.validate(raw_records)
        plog.log_audit("bronze", bronze_report.summary(), len(raw_records))

        with timed_operation(f"transform_{entity}", logger) as timer:
            silver_records = pipeline.transform(raw_records, loaded_at=loaded_at)
        plog.log_transform(len(raw_records), len(silver_records), timer.duration_ms)

        silver_report = pipeline.audit(silver_records)
        plog.log_audit("silver", silver_report.summary(), len(silver_records))

        with timed_operation(f"write_{entity}", logger) as timer:
            metadata = store.replace(entity, silver_records, schema=SILVER_SCHEMAS[entity])
        plog.log_write(metadata["path"], len(silver_records), metadata["file_size_bytes"], timer.duration_ms)

        result = {
            "entity": entity,
            "run_id": run_id,
            "status": "success",
            "records_read": len(raw_records),
            "records_written": len(silver_records),
            "bronze_findings": bronze_report.summary(),
            "silver_findings": silver_report.summary(),
            "path": metadata["path"],
        }
        plog.success("load", row_count=len(silver_records))
        return result

    except SilverLoadError as e:
        plog.error("load", e)
        logger.error(f"Failed to load {entity}: {e}", exc_info=True)
        return {
            "entity": entity,
            "run_id": run_id,
            "status": "error",
            "error": str(e),
        }


def run_silver_load(
    entities: Optional[list[str]] = None,
    bronze_dir: Union[str, Path] = "datasets",
    store=None,
    run_id: Optional[str] = None,
    workers: int = 1,
    config: CleansingConfig = DEFAULT_CONFIG,
    today: Optional[date] = None,
    loaded_at: Optional[datetime] = None,
) -> dict:
    """Run the silver load for the given entities.

    Entities share no state, so with ``workers > 1`` they run in a thread
    pool. All entities of one run share a single load timestamp.

    Args:
        entities: Entities to load (default: all)
        bronze_dir: Directory holding the bronze extracts
        store: Silver store (default: local ``data/silver``)
        run_id: Run identifier (auto-generated if not provided)
        workers: Number of entities loaded concurrently
        config: Cleansing rules
        today: Reference date for future-date checks
        loaded_at: Load timestamp (defaults to UTC now)

    Returns:
        Combined results for all entities
    """
    if run_id is None:
        run_id = uuid.uuid4().hex[:12]

    if entities is None:
        entities = list(ENTITIES)

    unknown = [e for e in entities if e not in ENTITY_PIPELINES]
    if unknown:
        raise ValueError(f"Unknown entities: {unknown}")

    if store is None:
        store = LocalSilverStore("data/silver")

    start_time = datetime.now(timezone.utc)
    if loaded_at is None:
        loaded_at = start_time

    logger.info(
        "Starting silver load",
        extra={
            "run_id": run_id,
            "entities": entities,
            "bronze_dir": str(bronze_dir),
            "workers": workers,
        }
    )

    def load(entity: str) -> dict:
        return load_entity(
            entity,
            bronze_dir,
            store,
            run_id,
            loaded_at=loaded_at,
            config=config,
            today=today,
        )

    if workers > 1:
        with ThreadPoolExecutor(max_workers=workers) as executor:
            results = dict(zip(entities, executor.map(load, entities)))
    else:
        results = {entity: load(entity) for entity in entities}

    end_time = datetime.now(timezone.utc)
    duration_seconds = (end_time - start_time).total_seconds()

    total_read = sum(r.get("records_read", 0) for r in results.values())
    total_written = sum(r.get("records_written", 0) for r in results.values())
    all_success = all(r.get("status") == "success" for r in results.values())

    summary = {
        "run_id": run_id,
        "status": "success" if all_success else "partial_failure",
        "entities": entities,
        "total_records_read": total_read,
        "total_records_written": total_written,
        "duration_seconds": duration_seconds,
        "started_at": start_time.isoformat(),
        "completed_at": end_time.isoformat(),
        "results": results,
    }

    logger.info(
        f"Silver load complete: {total_written} records written in {duration_seconds:.2f}s",
        extra=summary
    )

    return summary


def _positive_int(value: str) -> int:
    number = int(value)
    if number < 1:
        raise argparse.ArgumentTypeError(f"must be at least 1, got {number}")
    return number


def main():
    """CLI entrypoint.

    Flags override the environment (and .env); settings are validated once
    both are merged.
    """
    load_dotenv()

    parser = argparse.ArgumentParser(
        description="Clean bronze CRM/ERP extracts into silver outputs"
    )
    parser.add_argument(
        "--entity",
        choices=list(ENTITIES) + ["all"],
        default="all",
        help="Entity to load (default: all)",
    )
    parser.add_argument(
        "--bronze-dir",
        default=None,
        help="Directory with bronze extracts (default: BRONZE_DIR or datasets)",
    )
    parser.add_argument(
        "--silver-dir",
        default=None,
        help="Local directory or s3://bucket/prefix for silver outputs",
    )
    parser.add_argument(
        "--format",
        choices=SILVER_FORMATS,
        default=None,
        help="Silver file format (default: SILVER_FORMAT or parquet)",
    )
    parser.add_argument(
        "--workers",
        type=_positive_int,
        default=None,
        help="Entities loaded in parallel (default: SILVER_WORKERS or 1)",
    )
    parser.add_argument(
        "--run-id",
        type=str,
        default=None,
        help="Run ID (auto-generated if not provided)",
    )
    parser.add_argument(
        "--log-level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        default=None,
        help="Log level (default: LOG_LEVEL or INFO)",
    )
    parser.add_argument(
        "--json-logs",
        action="store_true",
        help="Emit JSON log lines",
    )

    args = parser.parse_args()

    try:
        settings = Settings.from_env(
            bronze_dir=args.bronze_dir,
            silver_dir=args.silver_dir,
            silver_format=args.format,
            log_level=args.log_level,
            workers=args.workers,
        )
    except ValueError as e:
        parser.error(str(e))

    setup_logging(level=settings.log_level, json_format=args.json_logs)

    entities = None if args.entity == "all" else [args.entity]

    result = run_silver_load(
        entities=entities,
        bronze_dir=settings.bronze_dir,
        store=build_store(settings),
        run_id=args.run_id,
        workers=settings.workers,
        config=settings.cleansing,
    )

    # Exit with error code if any failures
    if result["status"] != "success":
        sys.exit(1)


if __name__ == "__main__":
    main()
