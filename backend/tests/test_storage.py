import pytest
from minio.error import ServerError
from ecolearn.errors import UpstreamFailure
from ecolearn.services.storage import ImageStore


class BrokenMinio:
    def __init__(self, error):
        self.error = error
        self.calls = 0

    def put_object(self, *args, **kwargs):
        self.calls += 1
        raise self.error


def _store_with(client) -> ImageStore:
    store = ImageStore("http://minio:9000", "key", "secret", "uploads", "https://cdn.test/uploads")
    store._client = client
    store._bucket_ready = True
    return store


@pytest.mark.parametrize("error", [
    ServerError("server failed with HTTP status code 503", 503),
    ConnectionResetError("peer reset"),
])
def test_client_errors_become_upstream_failure(error):
    client = BrokenMinio(error)
    with pytest.raises(UpstreamFailure, match="Failed to upload photo"):
        _store_with(client).put("challenges/c1/u1/a.png", b"data", "image/png")
    assert client.calls == 1


def test_url_for_uses_public_base():
    store = ImageStore("http://minio:9000", "key", "secret", "uploads")
    assert store.url_for("a/b.png") == "http://minio:9000/uploads/a/b.png"
    assert _store_with(None).url_for("a/b.png") == "https://cdn.test/uploads/a/b.png"
