# invoice_engine/services/storage_service.py

import logging
from functools import lru_cache
from io import BytesIO

from minio import Minio
from minio.error import S3Error

from invoice_engine.config import MINIO_ENDPOINT, MINIO_ACCESS_KEY, MINIO_SECRET_KEY, MINIO_SECURE, MINIO_PDF_BUCKET

logger = logging.getLogger(__name__)


class MinIOStorageService:
    """
    Archive for generated invoice PDFs in MinIO (S3-compatible) storage.
    Handles uploading, downloading, and checking existence of objects in the PDF bucket.
    """
    def __init__(self, client: Minio = None, bucket_name: str = MINIO_PDF_BUCKET):
        """
        Initializes the MinIO client (unless one is given) and ensures the PDF bucket exists.
        """
        self.bucket_name = bucket_name
        self.client = client or Minio(
            endpoint=MINIO_ENDPOINT,
            access_key=MINIO_ACCESS_KEY,
            secret_key=MINIO_SECRET_KEY,
            secure=MINIO_SECURE,
        )
        logger.info("MinIO client initialized for endpoint: %s, secure: %s", MINIO_ENDPOINT, MINIO_SECURE)
        self._ensure_bucket_exists()

    def _ensure_bucket_exists(self):
        try:
            if not self.client.bucket_exists(self.bucket_name):
                self.client.make_bucket(self.bucket_name)
                logger.info("MinIO bucket '%s' created.", self.bucket_name)
        except S3Error as e:
            logger.error("S3 error ensuring bucket '%s': %s", self.bucket_name, e)
            raise

    def upload_pdf(self, object_name: str, content: bytes) -> str:
        """
        Uploads PDF bytes to the archive bucket.

        Args:
            object_name (str): The desired name of the object in the bucket.
            content (bytes): The PDF document.

        Returns:
            str: The logical path of the uploaded object (bucket_name/object_name).
        """
        try:
            self.client.put_object(
                bucket_name=self.bucket_name,
                object_name=object_name,
                data=BytesIO(content),
                length=len(content),
                content_type="application/pdf",
            )
        except S3Error as e:
            logger.error("S3 error uploading %s to %s: %s", object_name, self.bucket_name, e)
            raise
        logger.info("Uploaded %s to bucket %s", object_name, self.bucket_name)
        return f"{self.bucket_name}/{object_name}"

    def download_pdf(self, object_name: str) -> bytes:
        """
        Downloads an archived PDF.

        Raises:
            FileNotFoundError: if the object does not exist.
        """
        try:
            response = self.client.get_object(self.bucket_name, object_name)
        except S3Error as e:
            if e.code == "NoSuchKey":
                raise FileNotFoundError(f"Object '{object_name}' not found in bucket '{self.bucket_name}'.")
            logger.error("S3 error downloading %s from %s: %s", object_name, self.bucket_name, e)
            raise
        try:
            return response.read()
        finally:
            response.close()
            response.release_conn()

    def object_exists(self, object_name: str) -> bool:
        try:
            self.client.stat_object(self.bucket_name, object_name)
            return True
        except S3Error as e:
            if e.code == "NoSuchKey":
                return False
            logger.error("S3 error checking existence of %s in %s: %s", object_name, self.bucket_name, e)
            raise


@lru_cache(maxsize=1)
def get_pdf_archive() -> MinIOStorageService:
    """
    The shared archive service, created on first use so that importing the
    application never needs a reachable MinIO server.
    """
    return MinIOStorageService()
