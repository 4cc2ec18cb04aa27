"""Document number and usage schemas."""

from datetime import date

from pydantic import BaseModel, Field

from app.models.document_counter import DocumentType


class DocumentNumberRequest(BaseModel):
    """Request a number for a document being created.

    A current_number that is already valid for the type is returned as is,
    so reopening a form does not burn another number.
    """

    document_type: DocumentType
    current_number: str | None = Field(None, description="Number already held by the form")


class DocumentNumberResponse(BaseModel):
    """Allocated (or kept) document number."""

    document_number: str
    document_type: DocumentType
    issued_on: date
    sequence: int


class UsageResponse(BaseModel):
    """Outcome of best-effort usage recording."""

    ok: bool
    warning: str | None = None
