from __future__ import annotations
import io
import threading
import urllib3
from minio import Minio
from minio.error import MinioException, S3Error
from ecolearn.config import settings
from ecolearn.errors import UpstreamFailure

def _parse_endpoint(ep: str) -> tuple[str, bool]:
    # Return (host:port, secure)
    secure = ep.startswith("https://")
    host = ep.replace("http://", "").replace("https://", "")
    return host, secure


class ImageStore:
    """Thin wrapper over the MinIO client. The client is built on first use."""

    def __init__(self, endpoint: str, access_key: str, secret_key: str, bucket: str, public_base_url: str = ""):
        self.endpoint = endpoint
        self.bucket = bucket
        self._access_key = access_key
        self._secret_key = secret_key
        self._public_base = (public_base_url or f"{endpoint.rstrip('/')}/{bucket}").rstrip("/")
        self._client: Minio | None = None
        self._bucket_ready = False
        self._lock = threading.Lock()

    def _get_client(self) -> Minio:
        with self._lock:
            if self._client is None:
                host, secure = _parse_endpoint(self.endpoint)
                http = urllib3.PoolManager(
                    timeout=urllib3.Timeout(
                        connect=settings.s3_connect_timeout_seconds,
                        read=settings.s3_read_timeout_seconds,
                    ),
                    retries=urllib3.Retry(total=2, backoff_factor=0.2, status_forcelist=[500, 502, 503, 504]),
                )
                self._client = Minio(
                    host, access_key=self._access_key, secret_key=self._secret_key,
                    secure=secure, http_client=http,
                )
            if not self._bucket_ready:
                try:
                    if not self._client.bucket_exists(self.bucket):
                        self._client.make_bucket(self.bucket)
                except S3Error as e:
                    # creation may race with another worker
                    if e.code not in ("BucketAlreadyOwnedByYou", "BucketAlreadyExists"):
                        raise
                self._bucket_ready = True
            return self._client

    def url_for(self, key: str) -> str:
        return f"{self._public_base}/{key}"

    def put(self, key: str, data: bytes, content_type: str) -> str:
        """Upload bytes and return the public URL. Blocking; call from a worker thread."""
        try:
            self._get_client().put_object(
                self.bucket, key, io.BytesIO(data), length=len(data), content_type=content_type
            )
        except (MinioException, urllib3.exceptions.HTTPError, OSError) as e:
            raise UpstreamFailure("Failed to upload photo") from e
        return self.url_for(key)


_store: ImageStore | None = None

def get_image_store() -> ImageStore:
    global _store
    if _store is None:
        _store = ImageStore(
            settings.s3_endpoint,
            settings.s3_access_key,
            settings.s3_secret_key,
            settings.s3_bucket_uploads,
            settings.s3_public_base_url,
        )
    return _store
