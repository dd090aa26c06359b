"""Object-store adapter: the S3 operations the persistence core consumes."""
import logging
from typing import TYPE_CHECKING, Dict, Iterable, Iterator, List, Optional, Tuple

from botocore.exceptions import BotoCoreError, ClientError

from files_core.errors import BackendError, BucketNotFoundError, ObjectNotFoundError
from files_core.utils.decorators import log_execution_time

if TYPE_CHECKING:
    from mypy_boto3_s3 import S3Client
    from mypy_boto3_s3.type_defs import ObjectTypeDef, ObjectVersionTypeDef

logger = logging.getLogger(__name__)

NOT_FOUND_CODES = {"NoSuchKey", "NoSuchVersion", "404", "NotFound"}
NO_BUCKET_CODES = {"NoSuchBucket"}


def translate_error(e: Exception, bucket: str, key: Optional[str] = None) -> Exception:
    """Map a boto error onto the files_core error taxonomy."""
    target = f"{bucket}/{key}" if key else bucket
    if isinstance(e, ClientError):
        code = e.response.get('Error', {}).get('Code', '')
        if code in NOT_FOUND_CODES:
            return ObjectNotFoundError(f"Object not found: {target}")
        if code in NO_BUCKET_CODES:
            return BucketNotFoundError(f"Bucket not found: {bucket}")
        return BackendError(f"S3 error on {target} ({code}): {e}")
    return BackendError(f"S3 failure on {target}: {e}")


class S3ObjectStore:
    """Thin wrapper over an S3 client with files_core error semantics."""

    def __init__(self, s3_client: "S3Client"):
        self.s3_client = s3_client

    @log_execution_time
    def put_object(self, bucket: str, key: str, local_file: str) -> Optional[str]:
        """
        Upload a local file to S3.

        :param bucket: The name of the S3 bucket.
        :param key: Path to the object in the S3 bucket.
        :param local_file: Path of the file to upload.
        :return: Version token issued by S3 (None when versioning is disabled).
        """
        try:
            with open(local_file, 'rb') as file_data:
                response = self.s3_client.put_object(Bucket=bucket, Key=key, Body=file_data)
        except FileNotFoundError as e:
            raise BackendError(f"Local file to upload does not exist: {local_file}") from e
        except (ClientError, BotoCoreError) as e:
            raise translate_error(e, bucket, key) from e
        version = response.get('VersionId')
        logger.info(f"Uploaded {local_file} to s3://{bucket}/{key} (version {version})")
        return version

    @log_execution_time
    def get_object(self, bucket: str, key: str, version: Optional[str], dest_file: str) -> None:
        """Download ``key`` (at ``version`` when given) into ``dest_file``."""
        kwargs = {'Bucket': bucket, 'Key': key}
        if version is not None:
            kwargs['VersionId'] = version
        try:
            response = self.s3_client.get_object(**kwargs)
            with open(dest_file, 'wb') as f:
                for chunk in response['Body'].iter_chunks():
                    f.write(chunk)
        except (ClientError, BotoCoreError) as e:
            raise translate_error(e, bucket, key) from e
        logger.info(f"Downloaded s3://{bucket}/{key} (version {version}) to {dest_file}")

    def delete_objects(self, bucket: str, *keys: str) -> None:
        """Delete the current version of each key."""
        self._delete(bucket, [{'Key': key} for key in keys])

    def delete_object_versions(self, bucket: str, pairs: Iterable[Tuple[str, str]]) -> None:
        """Delete specific ``(key, version)`` pairs."""
        self._delete(bucket, [{'Key': key, 'VersionId': version} for key, version in pairs])

    def _delete(self, bucket: str, objects: List[Dict[str, str]]) -> None:
        if not objects:
            return
        try:
            response = self.s3_client.delete_objects(Bucket=bucket, Delete={'Objects': objects})
        except (ClientError, BotoCoreError) as e:
            raise translate_error(e, bucket) from e
        errors = response.get('Errors', [])
        if errors:
            first = errors[0]
            raise BackendError(
                f"Failed to delete {len(errors)} object(s) from {bucket}, "
                f"first: {first.get('Key')} ({first.get('Code')}: {first.get('Message')})"
            )
        logger.info(f"Deleted {len(objects)} object(s) from {bucket}")

    def get_object_tags(self, bucket: str, key: str) -> Dict[str, str]:
        try:
            response = self.s3_client.get_object_tagging(Bucket=bucket, Key=key)
        except (ClientError, BotoCoreError) as e:
            raise translate_error(e, bucket, key) from e
        return {tag['Key']: tag['Value'] for tag in response.get('TagSet', [])}

    def put_object_tags(self, bucket: str, key: str, tags: Dict[str, str]) -> None:
        tag_set = [{'Key': k, 'Value': v} for k, v in tags.items()]
        try:
            self.s3_client.put_object_tagging(Bucket=bucket, Key=key, Tagging={'TagSet': tag_set})
        except (ClientError, BotoCoreError) as e:
            raise translate_error(e, bucket, key) from e

    def list_objects(self, bucket: str) -> List["ObjectTypeDef"]:
        """List the objects of a bucket (first page, as the S3 API returns it)."""
        try:
            response = self.s3_client.list_objects(Bucket=bucket)
        except (ClientError, BotoCoreError) as e:
            raise translate_error(e, bucket) from e
        return response.get('Contents', [])

    def list_object_versions(self, bucket: str, prefix: str) -> Iterator["ObjectVersionTypeDef"]:
        """Lazily iterate over every object version under ``prefix``, page by page."""
        paginator = self.s3_client.get_paginator('list_object_versions')
        try:
            for page in paginator.paginate(Bucket=bucket, Prefix=prefix):
                yield from page.get('Versions', [])
        except (ClientError, BotoCoreError) as e:
            raise translate_error(e, bucket, prefix) from e
