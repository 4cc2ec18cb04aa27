"""End customer API endpoints."""

from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import Identity, get_db, get_identity
from app.config import get_settings
from app.models import EndCustomer
from app.schemas.document_number import UsageResponse
from app.schemas.end_customer import (
    EndCustomerCreate,
    EndCustomerResponse,
    EndCustomerUpdate,
)
from app.services import end_customer as end_customer_service
from app.services import end_customer_sync as sync_service

router = APIRouter(prefix="/end-customers", tags=["end-customers"])


async def _get_end_customer_or_404(
    db: AsyncSession, end_customer_id: UUID, identity: Identity
) -> EndCustomer:
    end_customer = await end_customer_service.get_end_customer(
        db, end_customer_id, identity.company_id
    )
    if not end_customer:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"End customer {end_customer_id} not found",
        )
    return end_customer


@router.get(
    "",
    response_model=list[EndCustomerResponse],
    summary="List end customers",
)
async def list_end_customers(
    identity: Annotated[Identity, Depends(get_identity)],
    db: Annotated[AsyncSession, Depends(get_db)],
    search: Annotated[str | None, Query(description="Project, address, contact or phone")] = None,
    customer_id: Annotated[UUID | None, Query()] = None,
) -> list[EndCustomer]:
    """List end customers of the current company, optionally searched or per customer."""
    if search:
        return await end_customer_service.search_end_customers(
            db, identity.company_id, search, customer_id=customer_id
        )
    if customer_id is not None:
        return await end_customer_service.get_end_customers_by_customer(
            db, identity.company_id, customer_id
        )
    return await end_customer_service.get_end_customers(db, identity.company_id)


@router.get(
    "/recent",
    response_model=list[EndCustomerResponse],
    summary="Recently used end customers",
)
async def list_recent_end_customers(
    identity: Annotated[Identity, Depends(get_identity)],
    db: Annotated[AsyncSession, Depends(get_db)],
    limit: Annotated[int | None, Query(ge=1, le=100)] = None,
    customer_id: Annotated[UUID | None, Query()] = None,
) -> list[EndCustomer]:
    """End customers most recently picked for a document."""
    return await end_customer_service.get_recent_end_customers(
        db,
        identity.company_id,
        limit or get_settings().recent_items_limit,
        customer_id=customer_id,
    )


@router.post(
    "",
    response_model=EndCustomerResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create an end customer",
)
async def create_end_customer(
    end_customer_data: EndCustomerCreate,
    identity: Annotated[Identity, Depends(get_identity)],
    db: Annotated[AsyncSession, Depends(get_db)],
) -> EndCustomer:
    """Create an end customer and fill the owning customer's embedded project if empty."""
    end_customer = await sync_service.save_end_customer_with_sync(
        db, identity.company_id, identity.user_id, end_customer_data
    )
    await db.commit()
    return end_customer


@router.get(
    "/{end_customer_id}",
    response_model=EndCustomerResponse,
    summary="Get end customer by ID",
)
async def get_end_customer(
    end_customer_id: UUID,
    identity: Annotated[Identity, Depends(get_identity)],
    db: Annotated[AsyncSession, Depends(get_db)],
) -> EndCustomer:
    """Get end customer details."""
    return await _get_end_customer_or_404(db, end_customer_id, identity)


@router.patch(
    "/{end_customer_id}",
    response_model=EndCustomerResponse,
    summary="Update end customer",
)
async def update_end_customer(
    end_customer_id: UUID,
    end_customer_data: EndCustomerUpdate,
    identity: Annotated[Identity, Depends(get_identity)],
    db: Annotated[AsyncSession, Depends(get_db)],
) -> EndCustomer:
    """Update an end customer. Omitted or null fields keep their value."""
    end_customer = await _get_end_customer_or_404(db, end_customer_id, identity)
    end_customer = await end_customer_service.update_end_customer(
        db, end_customer, end_customer_data
    )
    await db.commit()
    return end_customer


@router.delete(
    "/{end_customer_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete end customer",
)
async def delete_end_customer(
    end_customer_id: UUID,
    identity: Annotated[Identity, Depends(get_identity)],
    db: Annotated[AsyncSession, Depends(get_db)],
) -> Response:
    """Delete an end customer and clear the customer's embedded copy of it."""
    deleted = await sync_service.delete_end_customer_with_sync(
        db, end_customer_id, company_id=identity.company_id
    )
    if not deleted:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"End customer {end_customer_id} not found",
        )
    await db.commit()
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post(
    "/{end_customer_id}/usage",
    response_model=UsageResponse,
    summary="Record end customer usage",
)
async def record_end_customer_usage(
    end_customer_id: UUID,
    identity: Annotated[Identity, Depends(get_identity)],
    db: Annotated[AsyncSession, Depends(get_db)],
) -> UsageResponse:
    """Record that an end customer was picked for a document. Never fails the request."""
    await _get_end_customer_or_404(db, end_customer_id, identity)
    result = await end_customer_service.update_end_customer_usage(db, end_customer_id)
    await db.commit()
    return UsageResponse(ok=result.ok, warning=str(result.warning) if result.warning else None)
