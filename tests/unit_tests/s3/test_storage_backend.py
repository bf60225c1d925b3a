from unittest.mock import MagicMock

import pytest
from botocore.exceptions import ClientError, EndpointConnectionError, NoCredentialsError

from ibcol_api.adapters.storage import S3StorageBackend, create_s3_client
from ibcol_api.exceptions import NotFound, StorageError, StorageUnavailable
from tests.consts import TEST_BUCKET_NAME


@pytest.fixture(autouse=True)
def no_backoff_sleep(monkeypatch):
    monkeypatch.setattr("ibcol_api.utils.decorators.time.sleep", lambda seconds: None)


def _client_error(code: str, status: int) -> ClientError:
    return ClientError(
        {"Error": {"Code": code, "Message": code}, "ResponseMetadata": {"HTTPStatusCode": status}},
        "GetObject",
    )


def _backend_with(side_effect, max_attempts=3) -> tuple:
    s3_client = MagicMock()
    s3_client.generate_presigned_url.side_effect = side_effect
    return S3StorageBackend(TEST_BUCKET_NAME, s3_client, max_attempts=max_attempts), s3_client


def test_transient_failure_is_retried():
    backend, s3_client = _backend_with(
        [EndpointConnectionError(endpoint_url="https://s3.amazonaws.com"), "https://signed.example/url"]
    )

    assert backend.presign_download("uploads/key", 900) == "https://signed.example/url"
    assert s3_client.generate_presigned_url.call_count == 2


@pytest.mark.parametrize("error", [_client_error("SlowDown", 503), _client_error("InternalError", 500)])
def test_persistent_transient_failure_surfaces_as_unavailable(error):
    backend, s3_client = _backend_with(error, max_attempts=3)

    with pytest.raises(StorageUnavailable):
        backend.presign_upload("uploads/key", "application/pdf", 900)
    assert s3_client.generate_presigned_url.call_count == 3


@pytest.mark.parametrize("error", [_client_error("AccessDenied", 403), NoCredentialsError()])
def test_authorization_failure_is_not_retried(error):
    backend, s3_client = _backend_with(error)

    with pytest.raises(StorageError) as exc_info:
        backend.presign_download("uploads/key", 900)
    assert not isinstance(exc_info.value, StorageUnavailable)
    assert s3_client.generate_presigned_url.call_count == 1


def test_exists_and_delete(storage, mocked_aws):
    mocked_aws.put_object(Bucket=TEST_BUCKET_NAME, Key="uploads/present.pdf", Body=b"data")

    assert storage.exists("uploads/present.pdf")
    assert not storage.exists("uploads/absent.pdf")

    storage.delete("uploads/present.pdf")
    assert not storage.exists("uploads/present.pdf")


def test_delete_missing_object_is_not_found(storage):
    with pytest.raises(NotFound):
        storage.delete("uploads/absent.pdf")


def test_create_s3_client_uses_sigv4_and_timeouts(settings):
    s3_client = create_s3_client(settings)

    assert s3_client.meta.config.signature_version == "s3v4"
    assert s3_client.meta.config.connect_timeout == settings.storage_timeout_seconds
    assert s3_client.meta.config.read_timeout == settings.storage_timeout_seconds
    assert s3_client.meta.region_name == "us-east-1"


def test_create_s3_client_points_local_dev_at_moto_server(settings):
    local = settings.model_copy(update={"deployment_mode": "local-dev", "aws_endpoint_url": "http://localhost:5000"})
    assert create_s3_client(local).meta.endpoint_url == "http://localhost:5000"
