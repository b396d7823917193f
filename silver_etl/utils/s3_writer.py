"""S3 target for silver outputs."""

import logging
import os
import tempfile
from pathlib import Path
from typing import Optional
from urllib.parse import urlparse

import boto3
import pyarrow as pa
from botocore.exceptions import BotoCoreError, ClientError

from silver_etl.utils.file_io import WRITERS, SilverWriteError

logger = logging.getLogger(__name__)

CONTENT_TYPES = {
    "parquet": "application/vnd.apache.parquet",
    "jsonl": "application/jsonl",
}


class S3SilverStore:
    """Write one silver object per entity under an S3 prefix.

    Layout: s3://<bucket>/<prefix>/<entity>.<format>

    The file is fully written locally before a single upload, so the object
    readers see is either the previous load or the new one.
    """

    def __init__(
        self,
        uri: Optional[str] = None,
        file_format: str = "parquet",
        aws_access_key_id: Optional[str] = None,
        aws_secret_access_key: Optional[str] = None,
        region_name: Optional[str] = None,
        s3_client=None,
    ):
        """Initialize S3 store.

        Args:
            uri: Target like s3://bucket/silver (or from env: SILVER_DIR)
            file_format: parquet or jsonl
            aws_access_key_id: AWS access key (or from env)
            aws_secret_access_key: AWS secret key (or from env)
            region_name: AWS region (or from env: AWS_REGION)
            s3_client: Pre-built boto3 client
        """
        uri = uri or os.getenv("SILVER_DIR", "")
        parsed = urlparse(uri)
        if parsed.scheme != "s3" or not parsed.netloc:
            raise ValueError(f"An s3://bucket/prefix target is required, got {uri!r}")
        if file_format not in WRITERS:
            raise ValueError(f"Unsupported silver format: {file_format}")

        self.bucket = parsed.netloc
        self.prefix = parsed.path.strip("/")
        self.file_format = file_format

        self.s3_client = s3_client or boto3.client(
            "s3",
            aws_access_key_id=aws_access_key_id or os.getenv("AWS_ACCESS_KEY_ID"),
            aws_secret_access_key=aws_secret_access_key or os.getenv("AWS_SECRET_ACCESS_KEY"),
            region_name=region_name or os.getenv("AWS_REGION", "us-east-1"),
        )

    def key_for(self, entity: str) -> str:
        name = f"{entity}.{self.file_format}"
        return f"{self.prefix}/{name}" if self.prefix else name

    def replace(
        self,
        entity: str,
        records: list[dict],
        schema: Optional[pa.Schema] = None,
    ) -> dict:
        """Fully replace an entity's silver object.

        Raises:
            SilverWriteError: If the local staging write or the upload fails
        """
        s3_key = self.key_for(entity)
        s3_uri = f"s3://{self.bucket}/{s3_key}"
        writer = WRITERS[self.file_format]

        with tempfile.TemporaryDirectory() as tmpdir:
            local_path = Path(tmpdir) / f"{entity}.{self.file_format}"

            try:
                file_size = writer(records, local_path, schema=schema)
                self.s3_client.upload_file(
                    str(local_path),
                    self.bucket,
                    s3_key,
                    ExtraArgs={"ContentType": CONTENT_TYPES[self.file_format]},
                )
            except (ClientError, BotoCoreError, OSError, pa.ArrowException, TypeError, ValueError) as e:
                logger.error(f"Failed to upload to S3: {e}")
                raise SilverWriteError(s3_uri, str(e)) from e

        metadata = {
            "entity": entity,
            "path": s3_uri,
            "record_count": len(records),
            "file_size_bytes": file_size,
        }
        logger.info(f"Replaced {entity} with {len(records)} records at {s3_uri}", extra=metadata)
        return metadata
