import pytest
import requests

from app.services import storage_service
from app.services.storage_service import StorageClient, StorageError


class _Response:
    def __init__(self, status_code: int, text: str = ""):
        self.status_code = status_code
        self.text = text


@pytest.fixture()
def client():
    return StorageClient(
        base_url="https://project.supabase.co/",
        service_key="service-key",
        bucket="curriculum-images",
        timeout=5,
    )


def test_upload_posts_to_the_object_endpoint(monkeypatch, client):
    calls = {}

    def fake_post(url, data=None, headers=None, timeout=None):
        calls.update(url=url, data=data, headers=headers, timeout=timeout)
        return _Response(200)

    monkeypatch.setattr(storage_service.requests, "post", fake_post)

    path = client.upload("curriculum-images/abc-1.png", b"png-bytes", "image/png")

    assert path == "curriculum-images/abc-1.png"
    assert calls["url"] == (
        "https://project.supabase.co/storage/v1/object/curriculum-images/curriculum-images/abc-1.png"
    )
    assert calls["data"] == b"png-bytes"
    assert calls["timeout"] == 5
    assert calls["headers"]["Authorization"] == "Bearer service-key"
    assert calls["headers"]["apikey"] == "service-key"
    assert calls["headers"]["Content-Type"] == "image/png"
    assert calls["headers"]["cache-control"] == "max-age=3600"
    assert calls["headers"]["x-upsert"] == "true"


def test_upload_rejected_by_storage(monkeypatch, client):
    monkeypatch.setattr(storage_service.requests, "post", lambda *a, **k: _Response(400, "bad"))
    with pytest.raises(StorageError) as exc:
        client.upload("x.png", b"", "image/png")
    assert exc.value.code == "storage_upload_failed"
    assert exc.value.status_code == 502


def test_upload_network_error(monkeypatch, client):
    def boom(*args, **kwargs):
        raise requests.ConnectionError("down")

    monkeypatch.setattr(storage_service.requests, "post", boom)
    with pytest.raises(StorageError) as exc:
        client.upload("x.png", b"", "image/png")
    assert exc.value.code == "storage_unreachable"


def test_unconfigured_client_refuses_upload(monkeypatch):
    monkeypatch.setattr(storage_service.settings, "SUPABASE_URL", None)
    monkeypatch.setattr(storage_service.settings, "SUPABASE_SERVICE_ROLE_KEY", None)
    client = StorageClient()

    assert client.is_configured is False
    with pytest.raises(StorageError) as exc:
        client.upload("x.png", b"", "image/png")
    assert exc.value.code == "storage_not_configured"
    assert exc.value.status_code == 503


def test_public_url(client):
    assert client.get_public_url("/curriculum-images/a.png") == (
        "https://project.supabase.co/storage/v1/object/public/curriculum-images/curriculum-images/a.png"
    )
