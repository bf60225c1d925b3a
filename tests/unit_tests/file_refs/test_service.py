from concurrent.futures import ThreadPoolExecutor
from urllib.parse import parse_qs, urlparse

import pytest

from ibcol_api.exceptions import InvalidReference, NotFound, UploadRejected
from ibcol_api.file_refs.service import FileReferenceService
from tests.consts import TEST_BUCKET_NAME, TEST_PDF_CONTENT, TEST_PDF_CONTENT_TYPE, TEST_PDF_NAME


def _query(url: str) -> dict:
    return parse_qs(urlparse(url).query)


def test_issue_upload_target__returns_write_signed_url(file_reference_service: FileReferenceService):
    target = file_reference_service.issue_upload_target(TEST_PDF_NAME, TEST_PDF_CONTENT_TYPE, 1024)

    assert target.storage_key.startswith("uploads/")
    assert target.storage_key.endswith(".pdf")
    assert urlparse(target.upload_url).path.endswith(target.storage_key)
    assert _query(target.upload_url)["X-Amz-Expires"] == ["900"]
    assert "content-type" in _query(target.upload_url)["X-Amz-SignedHeaders"][0]
    assert file_reference_service.codec.decode(target.file_ref) == target.storage_key
    assert target.expires_in == 900


def test_issue_upload_target__creates_no_object(file_reference_service, mocked_aws):
    file_reference_service.issue_upload_target(TEST_PDF_NAME, TEST_PDF_CONTENT_TYPE, 1024)

    response = mocked_aws.list_objects_v2(Bucket=TEST_BUCKET_NAME)
    assert response.get("KeyCount", 0) == 0


def test_issue_upload_target__original_name_not_in_key(file_reference_service):
    target = file_reference_service.issue_upload_target("../../secret-plans.pdf", TEST_PDF_CONTENT_TYPE, 1024)

    assert "secret-plans" not in target.storage_key
    assert "secret-plans" not in target.upload_url


def test_concurrent_issuance_never_collides(file_reference_service):
    def issue(_):
        return file_reference_service.issue_upload_target(TEST_PDF_NAME, TEST_PDF_CONTENT_TYPE, 1024)

    with ThreadPoolExecutor(max_workers=8) as pool:
        targets = list(pool.map(issue, range(64)))

    assert len({target.storage_key for target in targets}) == 64
    assert len({target.file_ref for target in targets}) == 64


@pytest.mark.parametrize(
    "size_bytes, status_code",
    [(0, 422), (-1, 422), (500 * 1024 * 1024 + 1, 413)],
)
def test_issue_upload_target__rejects_bad_sizes(file_reference_service, size_bytes, status_code):
    with pytest.raises(UploadRejected) as exc_info:
        file_reference_service.issue_upload_target(TEST_PDF_NAME, TEST_PDF_CONTENT_TYPE, size_bytes)
    assert exc_info.value.status_code == status_code


def test_issue_upload_target__accepts_limit_exactly(file_reference_service):
    target = file_reference_service.issue_upload_target(TEST_PDF_NAME, TEST_PDF_CONTENT_TYPE, 500 * 1024 * 1024)
    assert target.upload_url


def test_issue_upload_target__enforces_allowed_content_types(storage, settings):
    settings = settings.model_copy(update={"allowed_content_types": ["application/pdf", "image/png"]})
    service = FileReferenceService.from_settings(settings, storage=storage)

    assert service.issue_upload_target("logo.png", "image/PNG", 10).storage_key.endswith(".png")
    with pytest.raises(UploadRejected) as exc_info:
        service.issue_upload_target("virus.exe", "application/x-msdownload", 10)
    assert exc_info.value.status_code == 415


def test_resolve_download_target__returns_read_signed_url(file_reference_service):
    target = file_reference_service.issue_upload_target(TEST_PDF_NAME, TEST_PDF_CONTENT_TYPE, 1024)

    read_url = file_reference_service.resolve_download_target(target.file_ref)

    assert urlparse(read_url).path.endswith(target.storage_key)
    assert _query(read_url)["X-Amz-Expires"] == ["900"]
    assert read_url != target.upload_url


def test_resolve_download_target__mints_fresh_urls(file_reference_service, monkeypatch):
    target = file_reference_service.issue_upload_target(TEST_PDF_NAME, TEST_PDF_CONTENT_TYPE, 1024)
    calls = []
    original = file_reference_service.storage.presign_download

    def spy(key, expires_in):
        calls.append(key)
        return original(key, expires_in)

    monkeypatch.setattr(file_reference_service.storage, "presign_download", spy)
    file_reference_service.resolve_download_target(target.file_ref)
    file_reference_service.resolve_download_target(target.file_ref)

    assert calls == [target.storage_key, target.storage_key]


def test_resolve_download_target__does_not_require_object(file_reference_service):
    target = file_reference_service.issue_upload_target(TEST_PDF_NAME, TEST_PDF_CONTENT_TYPE, 1024)
    assert file_reference_service.resolve_download_target(target.file_ref)


def test_resolve_download_target__rejects_bad_token(file_reference_service):
    with pytest.raises(InvalidReference):
        file_reference_service.resolve_download_target("definitely-not-a-token")


def test_delete_reference__twice_is_not_found(file_reference_service, mocked_aws):
    target = file_reference_service.issue_upload_target(TEST_PDF_NAME, TEST_PDF_CONTENT_TYPE, len(TEST_PDF_CONTENT))
    # stand-in for the browser's direct PUT
    mocked_aws.put_object(
        Bucket=TEST_BUCKET_NAME,
        Key=target.storage_key,
        Body=TEST_PDF_CONTENT,
        ContentType=TEST_PDF_CONTENT_TYPE,
    )

    file_reference_service.delete_reference(target.file_ref)
    assert mocked_aws.list_objects_v2(Bucket=TEST_BUCKET_NAME).get("KeyCount", 0) == 0

    with pytest.raises(NotFound):
        file_reference_service.delete_reference(target.file_ref)


def test_delete_reference__rejects_bad_token(file_reference_service):
    with pytest.raises(InvalidReference):
        file_reference_service.delete_reference("definitely-not-a-token")


def test_tokens_survive_across_instances(settings, storage):
    issuer = FileReferenceService.from_settings(settings, storage=storage)
    resolver = FileReferenceService.from_settings(settings, storage=storage)

    target = issuer.issue_upload_target(TEST_PDF_NAME, TEST_PDF_CONTENT_TYPE, 1024)

    assert resolver.codec.decode(target.file_ref) == target.storage_key
