import logging
import time
from pathlib import PurePosixPath
from urllib.parse import urlparse
import boto3
from botocore.exceptions import BotoCoreError, ClientError
from smartlibrary.configs import S3_CONFIG
from smartlibrary.core.exceptions import CoverUploadError

logger = logging.getLogger(__name__)


class CoverStore:

    def __init__(self, config=S3_CONFIG, client=None):
        self.bucket = config['bucket']
        scheme = 'https' if config['secure'] else 'http'
        self.public_url = (
            config.get('public_url') or f"{scheme}://{config['endpoint']}/{self.bucket}"
        ).rstrip('/')
        self.s3 = client or boto3.session.Session().client(
            service_name='s3',
            aws_access_key_id=config['access_key'],
            aws_secret_access_key=config['secret_key'],
            endpoint_url=f"{scheme}://{config['endpoint']}",
            use_ssl=config['secure']
        )
        self._initialize()

    def _initialize(self):
        try:
            self.s3.head_bucket(Bucket=self.bucket)
        except ClientError:
            try:
                self.s3.create_bucket(Bucket=self.bucket)
                logger.info(f"Bucket '{self.bucket}' created successfully.")
            except ClientError as create_error:
                logger.error(f"Error creating bucket '{self.bucket}': {create_error}")

    @staticmethod
    def make_key(filename: str) -> str:
        name = PurePosixPath(filename).name.replace(' ', '_')
        return f"{int(time.time() * 1000)}-{name}"

    def url_for(self, key: str) -> str:
        return f"{self.public_url}/{key}"

    def key_from_url(self, url: str):
        if not url:
            return None
        path = urlparse(url).path
        return PurePosixPath(path).name or None

    def upload(self, fileobj, filename: str, content_type: str = None) -> str:
        """Streams `fileobj` to the covers bucket and returns its public url."""
        key = self.make_key(filename)
        extra_args = {'ContentType': content_type} if content_type else {}
        try:
            fileobj.seek(0)
            self.s3.upload_fileobj(fileobj, self.bucket, key, ExtraArgs=extra_args)
        except ClientError as e:
            raise CoverUploadError(
                f"Failed to upload '{filename}': "
                f"{e.response.get('Error', {}).get('Message', str(e))}."
            ) from e
        except (BotoCoreError, ValueError) as e:
            raise CoverUploadError(f"Failed to upload '{filename}': {e}") from e
        logger.info(f"Cover '{filename}' stored as {key}")
        return self.url_for(key)

    def delete(self, url: str) -> bool:
        """Removes a stored cover. Failures are logged, never raised, since
        the item change they follow has already been committed.
        """
        if not (key := self.key_from_url(url)):
            return False
        try:
            self.s3.delete_object(Bucket=self.bucket, Key=key)
        except (BotoCoreError, ClientError) as e:
            logger.error(f"Failed to delete cover {key}: {e}")
            return False
        logger.info(f"Cover {key} deleted")
        return True
