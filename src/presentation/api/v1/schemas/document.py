from datetime import date, datetime

from pydantic import BaseModel, ConfigDict, Field


class DocumentResponse(BaseModel):
    """Schema for document responses"""

    id: str
    owner_id: str = Field(alias="ownerId")
    storage_key: str = Field(alias="filePath")
    document_type: str = Field(alias="documentType")
    display_name: str = Field(alias="name")
    original_filename: str = Field(alias="originalFileName")
    mime_type: str = Field(alias="mimeType")
    size_bytes: int = Field(alias="size")
    checksum: str
    uploaded_by: str = Field(alias="uploadedBy")
    visible_to_owner: bool = Field(alias="isVisibleToHelper")
    valid_until: date | None = Field(None, alias="validUntil")
    created_at: datetime = Field(alias="createdAt")

    model_config = ConfigDict(from_attributes=True, populate_by_name=True)


class DocumentUploadResponse(BaseModel):
    """Response after successful document upload"""

    message: str = "Document uploaded"
    document: DocumentResponse


class DocumentDeleteRequest(BaseModel):
    """Body of a delete request"""

    file_path: str | None = Field(None, alias="filePath")

    model_config = ConfigDict(populate_by_name=True)


class DocumentDeleteResponse(BaseModel):
    """Response after successful deletion"""

    message: str = "Document deleted"


class DocumentUrlResponse(BaseModel):
    """Direct-read URL for a document"""

    url: str
    expires_in: int = Field(alias="expiresIn")

    model_config = ConfigDict(populate_by_name=True)
