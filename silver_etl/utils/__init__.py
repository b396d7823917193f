"""Utility modules for the pipeline.

Includes:
- Logging configuration
- Structured pipeline logging
- Bronze reader and local silver store
- S3 silver store
"""

from .logging_config import setup_logging
from .file_io import (
    read_bronze,
    LocalSilverStore,
    SilverLoadError,
    BronzeReadError,
    SilverWriteError,
)
from .s3_writer import S3SilverStore
from .pipeline_logger import PipelineLogger, timed_operation

__all__ = [
    "setup_logging",
    "read_bronze",
    "LocalSilverStore",
    "SilverLoadError",
    "BronzeReadError",
    "SilverWriteError",
    "S3SilverStore",
    "PipelineLogger",
    "timed_operation",
]
