"""File I/O for bronze extracts and silver outputs.

Silver files are never written in place: rows go to a staging file in the
target directory, which is swapped over the previous file only after the
write completed.
"""

import json
import logging
import os
import uuid
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator, Optional, Union

import pyarrow as pa
import pyarrow.csv as pacsv
import pyarrow.parquet as pq

logger = logging.getLogger(__name__)


class SilverLoadError(Exception):
    """Base error for a failed entity load."""


class BronzeReadError(SilverLoadError):
    """Raised when a bronze extract cannot be read."""

    def __init__(self, path: Union[str, Path], reason: str):
        self.path = str(path)
        super().__init__(f"Cannot read bronze extract {self.path}: {reason}")


class SilverWriteError(SilverLoadError):
    """Raised when a silver output cannot be written."""

    def __init__(self, target: str, reason: str):
        self.target = target
        super().__init__(f"Cannot write silver output {target}: {reason}")


# ============================================
# Bronze
# ============================================

def read_bronze(
    file_path: Union[str, Path],
    schema: Optional[pa.Schema] = None,
) -> list[dict]:
    """Read a bronze CSV or parquet extract into records.

    CSV columns are named and typed from ``schema`` by position (the header
    row is skipped, so ``CID`` and ``cid`` headers load alike). Empty
    numeric and date cells become None while empty strings stay as they are.

    Args:
        file_path: Path to the extract (.csv or .parquet)
        schema: Column types to apply

    Returns:
        List of records

    Raises:
        BronzeReadError: If the file is missing or cannot be parsed
    """
    file_path = Path(file_path)
    if not file_path.exists():
        raise BronzeReadError(file_path, "file not found")

    try:
        if file_path.suffix == ".parquet":
            table = pq.read_table(file_path)
            table = table.rename_columns([c.lower() for c in table.column_names])
            if schema is not None:
                table = table.select(schema.names).cast(schema)
        else:
            read_options = pacsv.ReadOptions(
                column_names=schema.names if schema is not None else None,
                skip_rows=1 if schema is not None else 0,
            )
            convert_options = pacsv.ConvertOptions(
                column_types=schema,
                strings_can_be_null=False,
                timestamp_parsers=["%Y-%m-%d", pacsv.ISO8601],
            )
            table = pacsv.read_csv(
                file_path,
                read_options=read_options,
                convert_options=convert_options,
            )
    except (pa.ArrowException, OSError, KeyError) as e:
        raise BronzeReadError(file_path, str(e)) from e

    records = table.to_pylist()
    logger.debug(f"Read {len(records)} records from {file_path}")
    return records


def read_jsonl(file_path: Union[str, Path]) -> list[dict]:
    """Read records from a JSONL file."""
    records = []

    with open(file_path, "r", encoding="utf-8") as f:
        for line in f:
            if line.strip():
                records.append(json.loads(line))

    logger.debug(f"Read {len(records)} records from {file_path}")
    return records


# ============================================
# Silver
# ============================================

def write_parquet(
    records: list[dict],
    output_path: Union[str, Path],
    schema: Optional[pa.Schema] = None,
) -> int:
    """Write records to a parquet file. Returns the file size in bytes."""
    output_path = Path(output_path)
    if schema is not None:
        table = pa.Table.from_pylist(records, schema=schema)
    else:
        table = pa.Table.from_pylist(records)
    pq.write_table(table, output_path)
    return output_path.stat().st_size


def write_jsonl(
    records: list[dict],
    output_path: Union[str, Path],
    schema: Optional[pa.Schema] = None,
) -> int:
    """Write records to a JSONL file. Returns the file size in bytes."""
    output_path = Path(output_path)
    with open(output_path, "w", encoding="utf-8") as f:
        for record in records:
            f.write(json.dumps(record, default=str) + "\n")
    return output_path.stat().st_size


WRITERS = {
    "parquet": write_parquet,
    "jsonl": write_jsonl,
}


@contextmanager
def staged_file(target: Union[str, Path]) -> Iterator[Path]:
    """Yield a staging path next to ``target`` and swap it in on success.

    On any exception the staging file is removed and ``target`` is left as
    it was.
    """
    target = Path(target)
    target.parent.mkdir(parents=True, exist_ok=True)
    staging = target.with_name(f".{target.name}.{uuid.uuid4().hex[:12]}.tmp")

    try:
        yield staging
        os.replace(staging, target)
    finally:
        if staging.exists():
            staging.unlink()


class LocalSilverStore:
    """Silver outputs as one file per entity in a local directory."""

    def __init__(self, base_dir: Union[str, Path], file_format: str = "parquet"):
        if file_format not in WRITERS:
            raise ValueError(f"Unsupported silver format: {file_format}")
        self.base_dir = Path(base_dir)
        self.file_format = file_format

    def path_for(self, entity: str) -> Path:
        return self.base_dir / f"{entity}.{self.file_format}"

    def replace(
        self,
        entity: str,
        records: list[dict],
        schema: Optional[pa.Schema] = None,
    ) -> dict:
        """Fully replace an entity's silver file.

        Raises:
            SilverWriteError: If staging or swapping fails; the previous
                file is untouched in that case
        """
        target = self.path_for(entity)
        writer = WRITERS[self.file_format]

        try:
            with staged_file(target) as staging:
                file_size = writer(records, staging, schema=schema)
        except (OSError, pa.ArrowException, TypeError, ValueError) as e:
            raise SilverWriteError(str(target), str(e)) from e

        metadata = {
            "entity": entity,
            "path": str(target),
            "record_count": len(records),
            "file_size_bytes": file_size,
        }
        logger.info(f"Replaced {entity} with {len(records)} records at {target}", extra=metadata)
        return metadata

    def read(self, entity: str) -> list[dict]:
        """Read back an entity's current silver rows."""
        path = self.path_for(entity)
        if self.file_format == "parquet":
            return pq.read_table(path).to_pylist()
        return read_jsonl(path)
