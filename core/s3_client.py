# core/s3_client.py

import uuid
from typing import Tuple

import boto3

from core.config import settings
from core.errors import ApiError


def get_s3() -> Tuple[object, str, str]:
    """
    Get the R2 (S3-compatible) client, bucket name, and public base URL.
    Raises ApiError if R2 credentials are missing.
    """
    account = settings.R2_ACCOUNT_ID
    key = settings.R2_ACCESS_KEY_ID
    secret = settings.R2_SECRET_ACCESS_KEY
    bucket = settings.R2_BUCKET_NAME

    if not all([account, key, secret, bucket]):
        raise ApiError(500, "Image storage not configured")

    client = boto3.client(
        "s3",
        endpoint_url=f"https://{account}.r2.cloudflarestorage.com",
        aws_access_key_id=key,
        aws_secret_access_key=secret,
        region_name="auto",
    )

    public_url = (settings.R2_PUBLIC_URL or f"https://{bucket}.r2.dev").rstrip("/")
    return client, bucket, public_url


def upload_product_image(company_id: str, product_id: str, filename: str, content: bytes, content_type: str) -> str:
    """Store an image under the company's prefix and return its public URL."""
    client, bucket, public_url = get_s3()

    extension = filename.rsplit(".", 1)[-1].lower() if "." in (filename or "") else "jpg"
    key = f"{company_id}/products/{product_id}/{uuid.uuid4().hex}.{extension}"

    client.put_object(
        Bucket=bucket,
        Key=key,
        Body=content,
        ContentType=content_type or "application/octet-stream",
    )

    return f"{public_url}/{key}"
