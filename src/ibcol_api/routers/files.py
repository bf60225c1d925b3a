from fastapi import (
    APIRouter,
    Depends,
    Path,
    status
)
from fastapi.responses import RedirectResponse

from ibcol_api.dependencies import get_file_reference_service
from ibcol_api.file_refs.service import FileReferenceService
from ibcol_api.schemas import (
    DeleteFileResponse,
    IssueUploadTargetRequest,
    UploadTargetResponse,
)

router = APIRouter()


@router.post(
    "/files",
    response_model=UploadTargetResponse,
    status_code=status.HTTP_201_CREATED,
)
def issue_upload_target(
    body: IssueUploadTargetRequest,
    service: FileReferenceService = Depends(get_file_reference_service),
) -> UploadTargetResponse:
    """
    Reserve a storage key and return a write-signed URL for it.

    The client uploads the file directly to `uploadUrl` with a `PUT` carrying
    the same `Content-Type`, then stores `fileRef` in its form. File bytes
    never pass through this API.
    """
    target = service.issue_upload_target(
        original_name=body.name,
        content_type=body.content_type,
        size_bytes=body.size_bytes,
    )
    return UploadTargetResponse(upload_url=target.upload_url, file_ref=target.file_ref)


@router.get(
    "/files/{file_ref}",
    response_class=RedirectResponse,
    status_code=status.HTTP_307_TEMPORARY_REDIRECT,
)
def download_file(
    file_ref: str = Path(..., description="File reference token returned by `POST /files`"),
    service: FileReferenceService = Depends(get_file_reference_service),
):
    """
    Redirect to a freshly minted read-signed URL for the referenced file.

    Every request mints a new URL, so the redirect must not be cached.
    """
    read_url = service.resolve_download_target(file_ref)
    return RedirectResponse(
        url=read_url,
        status_code=status.HTTP_307_TEMPORARY_REDIRECT,
        headers={"Cache-Control": "no-store"},
    )


@router.delete("/files/{file_ref}", response_model=DeleteFileResponse)
def delete_file(
    file_ref: str = Path(..., description="File reference token returned by `POST /files`"),
    service: FileReferenceService = Depends(get_file_reference_service),
) -> DeleteFileResponse:
    """
    Delete the referenced file from storage.

    Deleting a reference whose file is already gone answers 404.
    """
    service.delete_reference(file_ref)
    return DeleteFileResponse(success=True)
