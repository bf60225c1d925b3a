####################################
# --- Request/response schemas --- #
####################################

from typing import Dict, List, Any

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    field_validator,
)
from pydantic.alias_generators import to_camel

MAX_ORIGINAL_NAME_LENGTH = 255


class IssueUploadTargetRequest(BaseModel):
    """Request body for `POST /files`."""
    name: str = Field(
        min_length=1,
        max_length=MAX_ORIGINAL_NAME_LENGTH,
        description="Original filename as reported by the browser. Never used as the storage key.",
        json_schema_extra={"example": "team-proposal.pdf"},
    )
    content_type: str = Field(
        alias="type",
        min_length=1,
        max_length=255,
        pattern=r"^[\w.+-]+/[\w.+-]+$",
        description="MIME type the upload will be sent with.",
        json_schema_extra={"example": "application/pdf"},
    )
    size_bytes: int = Field(
        alias="size",
        description="Size of the file in bytes.",
        json_schema_extra={"example": 1048576},
    )

    model_config = ConfigDict(populate_by_name=True)

    @field_validator("content_type")
    @classmethod
    def lowercase_content_type(cls, v: str) -> str:
        return v.lower()


class UploadTargetResponse(BaseModel):
    """Response model for `POST /files`."""
    upload_url: str = Field(description="Write-signed URL the client PUTs the file to.")
    file_ref: str = Field(description="Opaque reference to store in the owning record.")

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        json_schema_extra={
            "example": {
                "uploadUrl": "https://ibcol-registration-uploads.s3.amazonaws.com/uploads/...",
                "fileRef": "gAAAAABm...",
            }
        },
    )


class DeleteFileResponse(BaseModel):
    """Response model for `DELETE /files/:fileRef`."""
    success: bool = True


class TranslationBundleResponse(BaseModel):
    """Response model for `GET /i18n/:locale/:namespace`."""
    locale: str = Field(description="Locale actually served after resolution.")
    namespace: str
    strings: Dict[str, Any]


class HealthResponse(BaseModel):
    status: str
    deployment_mode: str
    bucket: str
    default_locale: str
    supported_locales: List[str]
