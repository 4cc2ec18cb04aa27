"""Contractor API endpoints."""

from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import Identity, get_db, get_identity
from app.config import get_settings
from app.models import Contractor
from app.schemas.contractor import ContractorCreate, ContractorResponse, ContractorUpdate
from app.schemas.document_number import UsageResponse
from app.services import contractor as contractor_service

router = APIRouter(prefix="/contractors", tags=["contractors"])


async def _get_contractor_or_404(
    db: AsyncSession, contractor_id: UUID, identity: Identity
) -> Contractor:
    contractor = await contractor_service.get_contractor(db, contractor_id, identity.company_id)
    if not contractor:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Contractor {contractor_id} not found",
        )
    return contractor


@router.get("", response_model=list[ContractorResponse], summary="List contractors")
async def list_contractors(
    identity: Annotated[Identity, Depends(get_identity)],
    db: Annotated[AsyncSession, Depends(get_db)],
    search: Annotated[str | None, Query()] = None,
    tag: Annotated[list[str] | None, Query()] = None,
    specialty: Annotated[str | None, Query()] = None,
) -> list[Contractor]:
    """List contractors, filtered by search text, any of the tags, or a specialty."""
    if search:
        return await contractor_service.search_contractors(db, identity.company_id, search)
    if tag:
        return await contractor_service.get_contractors_by_tags(db, identity.company_id, tag)
    if specialty:
        return await contractor_service.get_contractors_by_specialty(
            db, identity.company_id, specialty
        )
    return await contractor_service.get_contractors(db, identity.company_id)


@router.get("/frequent", response_model=list[ContractorResponse], summary="Frequent contractors")
async def list_frequent_contractors(
    identity: Annotated[Identity, Depends(get_identity)],
    db: Annotated[AsyncSession, Depends(get_db)],
    limit: Annotated[int | None, Query(ge=1, le=100)] = None,
) -> list[Contractor]:
    return await contractor_service.get_frequent_contractors(
        db, identity.company_id, limit or get_settings().recent_items_limit
    )


@router.get("/recent", response_model=list[ContractorResponse], summary="Recent contractors")
async def list_recent_contractors(
    identity: Annotated[Identity, Depends(get_identity)],
    db: Annotated[AsyncSession, Depends(get_db)],
    limit: Annotated[int | None, Query(ge=1, le=100)] = None,
) -> list[Contractor]:
    return await contractor_service.get_recent_contractors(
        db, identity.company_id, limit or get_settings().recent_items_limit
    )


@router.post(
    "",
    response_model=ContractorResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create a contractor",
)
async def create_contractor(
    contractor_data: ContractorCreate,
    identity: Annotated[Identity, Depends(get_identity)],
    db: Annotated[AsyncSession, Depends(get_db)],
) -> Contractor:
    contractor = await contractor_service.save_contractor(
        db, identity.company_id, identity.user_id, contractor_data
    )
    await db.commit()
    return contractor


@router.get("/{contractor_id}", response_model=ContractorResponse, summary="Get contractor")
async def get_contractor(
    contractor_id: UUID,
    identity: Annotated[Identity, Depends(get_identity)],
    db: Annotated[AsyncSession, Depends(get_db)],
) -> Contractor:
    return await _get_contractor_or_404(db, contractor_id, identity)


@router.patch("/{contractor_id}", response_model=ContractorResponse, summary="Update contractor")
async def update_contractor(
    contractor_id: UUID,
    contractor_data: ContractorUpdate,
    identity: Annotated[Identity, Depends(get_identity)],
    db: Annotated[AsyncSession, Depends(get_db)],
) -> Contractor:
    contractor = await _get_contractor_or_404(db, contractor_id, identity)
    contractor = await contractor_service.update_contractor(db, contractor, contractor_data)
    await db.commit()
    return contractor


@router.delete(
    "/{contractor_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete contractor",
)
async def delete_contractor(
    contractor_id: UUID,
    identity: Annotated[Identity, Depends(get_identity)],
    db: Annotated[AsyncSession, Depends(get_db)],
) -> Response:
    contractor = await _get_contractor_or_404(db, contractor_id, identity)
    await contractor_service.delete_contractor(db, contractor)
    await db.commit()
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post(
    "/{contractor_id}/usage",
    response_model=UsageResponse,
    summary="Record contractor usage",
)
async def record_contractor_usage(
    contractor_id: UUID,
    identity: Annotated[Identity, Depends(get_identity)],
    db: Annotated[AsyncSession, Depends(get_db)],
) -> UsageResponse:
    await _get_contractor_or_404(db, contractor_id, identity)
    result = await contractor_service.update_contractor_usage(db, contractor_id)
    await db.commit()
    return UsageResponse(ok=result.ok, warning=str(result.warning) if result.warning else None)
