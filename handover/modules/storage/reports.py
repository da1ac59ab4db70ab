"""
Report storage: writes every handover report to the local reports directory and,
when a bucket is configured, keeps a copy in S3-compatible storage.
"""

import logging
from pathlib import Path

import boto3
from botocore.config import Config
from botocore.exceptions import BotoCoreError, ClientError

from handover.config import get_settings
from handover.models.report import HandoverReport
from handover.modules.reports.generator import render_report, report_filename

logger = logging.getLogger(__name__)

_s3_client = None


def _get_s3_client():
    global _s3_client
    if _s3_client is None:
        settings = get_settings()
        _s3_client = boto3.client(
            "s3",
            endpoint_url=settings.s3_endpoint_url or None,
            aws_access_key_id=settings.s3_access_key_id or None,
            aws_secret_access_key=settings.s3_secret_access_key or None,
            region_name=settings.s3_region or "us-east-1",
            config=Config(signature_version="s3v4"),
        )
    return _s3_client


class ReportStore:
    def __init__(self, reports_dir: str | Path | None = None, bucket: str | None = None, s3_client=None):
        settings = get_settings()
        self.reports_dir = Path(reports_dir or settings.reports_dir)
        self.bucket = settings.s3_bucket_name if bucket is None else bucket
        self.prefix = settings.s3_reports_prefix.strip("/")
        self._s3_client = s3_client

    def save(self, report: HandoverReport) -> Path:
        """Write the report file and return its path. An existing file is never overwritten."""
        self.reports_dir.mkdir(parents=True, exist_ok=True)
        path = self._free_path(report_filename(report))
        path.write_text(render_report(report), encoding="utf-8")
        logger.info("Handover report saved: %s", path)

        if self.bucket:
            self._upload(path)
        return path

    def _free_path(self, filename: str) -> Path:
        path = self.reports_dir / filename
        n = 2
        while path.exists():
            path = self.reports_dir / f"{Path(filename).stem}_{n}.txt"
            n += 1
        return path

    def _upload(self, path: Path) -> None:
        key = f"{self.prefix}/{path.name}" if self.prefix else path.name
        client = self._s3_client or _get_s3_client()
        try:
            client.put_object(
                Bucket=self.bucket,
                Key=key,
                Body=path.read_bytes(),
                ContentType="text/plain",
            )
            logger.info("Uploaded report %s to s3://%s/%s", path.name, self.bucket, key)
        except (BotoCoreError, ClientError) as e:
            logger.warning("Report %s kept locally only, S3 upload failed: %s", path.name, e)
