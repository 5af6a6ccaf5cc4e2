"""Object storage for profile assets (avatars and resumes)."""
import logging
from typing import Optional

import boto3
from botocore.exceptions import ClientError
from fastapi import Depends
from supabase import Client

from app.config.settings import settings
from app.database.supabase_client import get_supabase

logger = logging.getLogger(__name__)


class SupabaseStorage:
    def __init__(self, supabase: Client, bucket_name: str):
        self.supabase = supabase
        self.bucket_name = bucket_name

    def _bucket(self):
        return self.supabase.storage.from_(self.bucket_name)

    def upload_file(self, file_content: bytes, path: str, content_type: str) -> str:
        """Upload file to the bucket and return its object path"""
        self._bucket().upload(
            path,
            file_content,
            file_options={"content-type": content_type, "cache-control": "3600", "upsert": "true"}
        )
        return path

    def delete_file(self, path: str) -> None:
        self._bucket().remove([path])

    def public_url(self, path: str) -> str:
        return self._bucket().get_public_url(path)

    def signed_url(self, path: str, expires_in: int) -> str:
        signed = self._bucket().create_signed_url(path, expires_in)
        url = signed.get("signedURL") or signed.get("signedUrl")
        if not url:
            raise RuntimeError(f"Supabase Storage returned no signed URL for {path}")
        return url


class S3Storage:
    def __init__(
        self,
        bucket_name: Optional[str],
        aws_access_key_id: Optional[str],
        aws_secret_access_key: Optional[str],
        region: str = "us-east-1",
    ):
        if not all([aws_access_key_id, aws_secret_access_key, bucket_name]):
            raise ValueError("AWS S3 credentials and bucket name must be configured")

        self.s3_client = boto3.client(
            's3',
            aws_access_key_id=aws_access_key_id,
            aws_secret_access_key=aws_secret_access_key,
            region_name=region
        )
        self.bucket_name = bucket_name
        self.region = region

    def upload_file(self, file_content: bytes, path: str, content_type: str) -> str:
        """Upload file to S3 and return its key"""
        try:
            self.s3_client.put_object(
                Bucket=self.bucket_name,
                Key=path,
                Body=file_content,
                ContentType=content_type,
                CacheControl="max-age=3600"
            )
            return path
        except ClientError as e:
            logger.error(f"Failed to upload file to S3: {str(e)}")
            raise

    def delete_file(self, path: str) -> None:
        """Delete file from S3"""
        self.s3_client.delete_object(Bucket=self.bucket_name, Key=path)

    def public_url(self, path: str) -> str:
        return f"https://{self.bucket_name}.s3.{self.region}.amazonaws.com/{path}"

    def signed_url(self, path: str, expires_in: int) -> str:
        return self.s3_client.generate_presigned_url(
            "get_object",
            Params={"Bucket": self.bucket_name, "Key": path},
            ExpiresIn=expires_in
        )


def get_object_storage(supabase: Client = Depends(get_supabase)):
    """S3 when fully configured, otherwise Supabase Storage"""
    if settings.s3_configured:
        try:
            return S3Storage(
                bucket_name=settings.s3_bucket_name,
                aws_access_key_id=settings.aws_access_key_id,
                aws_secret_access_key=settings.aws_secret_access_key,
                region=settings.aws_region,
            )
        except Exception as e:
            logger.warning(f"S3 storage initialization failed ({str(e)}), will use Supabase Storage")
    return SupabaseStorage(supabase, settings.asset_bucket)
