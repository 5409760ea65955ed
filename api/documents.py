from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends

from api.deps import get_gateway, get_principal
from api.serializers import document_to_response
from schemas.document import DocumentBulkReview, DocumentCreate, DocumentReview
from services.workflow import Principal, WorkflowGateway
from utils.case import dict_keys_to_camel

router = APIRouter(prefix="/api/documents", tags=["documents"])


@router.get("")
async def list_documents(
    loan_application_id: Optional[str] = None,
    principal: Principal = Depends(get_principal),
    gateway: WorkflowGateway = Depends(get_gateway),
):
    docs = await gateway.list_documents(principal, loan_application_id=loan_application_id)
    return [document_to_response(d) for d in docs]


@router.post("", status_code=201)
async def upload_document(
    body: DocumentCreate,
    principal: Principal = Depends(get_principal),
    gateway: WorkflowGateway = Depends(get_gateway),
):
    doc = await gateway.upload_document(
        principal,
        document_type=body.document_type,
        file_ref=body.file_ref,
        file_size_bytes=body.file_size_bytes,
        content_type=body.content_type,
        loan_application_id=body.loan_application_id,
        file_name=body.file_name,
    )
    return document_to_response(doc)


@router.post("/review")
async def review_documents(
    body: DocumentBulkReview,
    principal: Principal = Depends(get_principal),
    gateway: WorkflowGateway = Depends(get_gateway),
):
    """Review several documents; each result is reported independently (not atomic)."""
    outcomes = await gateway.review_documents(principal, body.document_ids, body.decision)
    return dict_keys_to_camel(outcomes)


@router.post("/{document_id}/review")
async def review_document(
    document_id: str,
    body: DocumentReview,
    principal: Principal = Depends(get_principal),
    gateway: WorkflowGateway = Depends(get_gateway),
):
    return document_to_response(await gateway.review_document(principal, document_id, body.decision))
