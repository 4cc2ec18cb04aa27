"""Document number API endpoints."""

from typing import Annotated

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import Identity, get_db, get_identity
from app.schemas.document_number import DocumentNumberRequest, DocumentNumberResponse
from app.services import document_number as document_number_service

router = APIRouter(prefix="/document-numbers", tags=["document-numbers"])


@router.post(
    "",
    response_model=DocumentNumberResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Allocate a document number",
)
async def allocate_document_number(
    request: DocumentNumberRequest,
    identity: Annotated[Identity, Depends(get_identity)],
    db: Annotated[AsyncSession, Depends(get_db)],
) -> DocumentNumberResponse:
    """Allocate the next number for a document type, or keep the form's valid one."""
    number = await document_number_service.ensure_document_number(
        db, identity.company_id, request.document_type, request.current_number
    )
    await db.commit()

    parsed = document_number_service.parse_document_number(number)
    return DocumentNumberResponse(
        document_number=number,
        document_type=parsed.document_type,
        issued_on=parsed.issued_on,
        sequence=parsed.sequence,
    )
