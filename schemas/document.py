from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, Field


class DocumentCreate(BaseModel):
    """Metadata for a file already stored in the blob store (`fileRef` is its handle)."""
    document_type: str = Field(..., alias="documentType")
    file_ref: str = Field(..., alias="fileRef")
    file_size_bytes: int = Field(..., alias="fileSizeBytes")
    content_type: str = Field(..., alias="contentType")
    file_name: Optional[str] = Field(None, alias="fileName")
    loan_application_id: Optional[str] = Field(None, alias="loanApplicationId")

    model_config = {"populate_by_name": True}


class DocumentReview(BaseModel):
    decision: str


class DocumentBulkReview(BaseModel):
    document_ids: list[str] = Field(..., alias="documentIds", min_length=1)
    decision: str

    model_config = {"populate_by_name": True}
