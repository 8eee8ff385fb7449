# tests/test_storage_unit.py
import re

import pytest
from botocore.exceptions import ClientError

import jobboard.services.storage as storage_mod
from jobboard.core.config import settings


class DummyS3Client:
    def __init__(self):
        self.objects = {}
        self.buckets = set()

    def head_bucket(self, Bucket):
        if Bucket not in self.buckets:
            raise ClientError({"Error": {"Code": "404", "Message": "Not Found"}}, "HeadBucket")

    def create_bucket(self, Bucket):
        self.buckets.add(Bucket)
        return {"ResponseMetadata": {"HTTPStatusCode": 200}}

    def put_object(self, Bucket, Key, Body, ContentType=None):
        self.objects[(Bucket, Key)] = (Body, ContentType)
        return {"ETag": '"dummy-etag"'}

    def generate_presigned_url(self, ClientMethod, Params, ExpiresIn):
        return f"https://fake.s3/{Params['Bucket']}/{Params['Key']}?expires_in={ExpiresIn}"


@pytest.fixture
def dummy_s3(monkeypatch):
    dummy = DummyS3Client()
    monkeypatch.setattr(settings, "S3_ENDPOINT", "https://r2.example.test")
    monkeypatch.setattr(settings, "S3_ACCESS_KEY", "key")
    monkeypatch.setattr(settings, "S3_SECRET_KEY", "secret")
    monkeypatch.setattr(settings, "S3_BUCKET", "unit-test-bucket")
    monkeypatch.setattr(settings, "S3_PUBLIC_BASE_URL", None)
    monkeypatch.setattr("jobboard.services.storage.boto3.client", lambda *args, **kwargs: dummy)
    return dummy


def test_key_layout():
    assert re.fullmatch(r"messages/c1/\d+_resume\.png", storage_mod.attachment_key("c1", "resume.png"))
    assert re.fullmatch(r"avatars/u1_\d+", storage_mod.avatar_key("u1"))


async def test_store_bytes_puts_object_and_returns_presigned_url(dummy_s3):
    url = await storage_mod.store_bytes("messages/c1/1_resume.png", b"PNGDATA", "image/png")

    assert "unit-test-bucket" in dummy_s3.buckets
    assert dummy_s3.objects[("unit-test-bucket", "messages/c1/1_resume.png")] == (b"PNGDATA", "image/png")
    assert url.startswith("https://fake.s3/unit-test-bucket/messages/c1/1_resume.png")
    assert f"expires_in={settings.PRESIGNED_URL_EXPIRES}" in url


def test_public_base_url_takes_precedence(dummy_s3, monkeypatch):
    monkeypatch.setattr(settings, "S3_PUBLIC_BASE_URL", "https://cdn.example.test/")
    url = storage_mod.upload_bytes("avatars/u1_1", b"img", "image/jpeg")
    assert url == "https://cdn.example.test/avatars/u1_1"


def test_local_fallback_without_credentials(monkeypatch, tmp_path):
    monkeypatch.setattr(settings, "S3_ENDPOINT", None)
    monkeypatch.setattr(settings, "MINIO_ENDPOINT", None)
    monkeypatch.setattr(storage_mod, "LOCAL_UPLOAD_DIR", tmp_path)

    url = storage_mod.upload_bytes("messages/c1/1_notes.txt", b"hello", "text/plain")

    assert url.startswith("file://")
    assert (tmp_path / "messages" / "c1" / "1_notes.txt").read_bytes() == b"hello"


def test_s3_errors_propagate(dummy_s3, monkeypatch):
    def fail(**kwargs):
        raise ClientError({"Error": {"Code": "500", "Message": "boom"}}, "PutObject")

    monkeypatch.setattr(dummy_s3, "put_object", fail)
    with pytest.raises(ClientError):
        storage_mod.upload_bytes("messages/c1/1_a.png", b"x", "image/png")


def test_attachment_key_keeps_only_the_base_filename():
    key = storage_mod.attachment_key("c1", "../../../../escaped.txt")
    assert re.fullmatch(r"messages/c1/\d+_escaped\.txt", key)
    assert storage_mod.safe_filename("..\\..\\win.png") == "win.png"
    assert storage_mod.safe_filename("..") == "attachment"


def test_local_fallback_stays_inside_upload_dir(monkeypatch, tmp_path):
    monkeypatch.setattr(settings, "S3_ENDPOINT", None)
    monkeypatch.setattr(settings, "MINIO_ENDPOINT", None)
    upload_dir = tmp_path / "uploads"
    monkeypatch.setattr(storage_mod, "LOCAL_UPLOAD_DIR", upload_dir)

    url = storage_mod.upload_bytes(storage_mod.attachment_key("conv1", "../../../../../escaped.txt"), b"x")
    assert url.startswith(f"file://{upload_dir.resolve()}/messages/conv1/")

    with pytest.raises(ValueError):
        storage_mod.upload_bytes("messages/conv1/../../../escaped.txt", b"x")
    assert not (tmp_path / "escaped.txt").exists()
