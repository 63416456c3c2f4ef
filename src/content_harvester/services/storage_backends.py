from __future__ import annotations

from abc import ABC, abstractmethod
from pathlib import Path

import pandas as pd

RECORDS_BASENAME = "harvested"


def write_records(df: pd.DataFrame, out_file: Path, format: str) -> None:
    if format == "csv":
        df.to_csv(out_file, index=False)
    elif format == "jsonl":
        df.to_json(out_file, orient="records", lines=True, force_ascii=False)
    else:
        df.to_parquet(out_file, index=False)


class Storage(ABC):
    """Abstract storage backend interface for harvested record tables."""

    @abstractmethod
    def upload(
        self, df: pd.DataFrame, bucket: str, path: str, format: str = "jsonl"
    ) -> str:
        """Upload records and return the remote path (or local path)."""
        raise NotImplementedError()


class LocalStorage(Storage):
    """Save records locally under `<bucket>/<path>/harvested.<format>`."""

    def upload(
        self, df: pd.DataFrame, bucket: str, path: str, format: str = "jsonl"
    ) -> str:
        out_dir = Path(bucket) / path
        out_dir.mkdir(parents=True, exist_ok=True)
        out_file = out_dir / f"{RECORDS_BASENAME}.{format}"
        write_records(df, out_file, format)
        return str(out_file)


def _load_gcs_module():
    try:
        from google.cloud import storage
    except ImportError as exc:  # pragma: no cover - requires external lib
        raise RuntimeError("google-cloud-storage not available") from exc
    return storage


class GCSStorage(Storage):
    """GCS-backed storage implementation (requires google-cloud-storage).

    This class is intentionally small: for production you'd add retry/backoff
    and chunked uploads.
    """

    def __init__(self, tmp_dir: str = ".tmp_storage"):
        self.tmp_dir = Path(tmp_dir)

    def upload(
        self, df: pd.DataFrame, bucket: str, path: str, format: str = "jsonl"
    ) -> str:
        storage = _load_gcs_module()
        client = storage.Client()
        bucket_obj = client.bucket(bucket)
        blob_name = f"{path}/{RECORDS_BASENAME}.{format}"
        blob = bucket_obj.blob(blob_name)

        # write to temp file then upload
        self.tmp_dir.mkdir(parents=True, exist_ok=True)
        tmp_file = self.tmp_dir / f"{RECORDS_BASENAME}.{format}"
        write_records(df, tmp_file, format)
        try:
            blob.upload_from_filename(str(tmp_file))
        finally:
            tmp_file.unlink(missing_ok=True)
        return f"gs://{bucket}/{blob_name}"


def get_storage(bucket: str) -> Storage:
    """`local` (or any plain directory) -> LocalStorage, `gs://name` -> GCSStorage."""
    if bucket.startswith("gs://"):
        return GCSStorage()
    return LocalStorage()


def bucket_name(bucket: str) -> str:
    return bucket[len("gs://"):] if bucket.startswith("gs://") else bucket
