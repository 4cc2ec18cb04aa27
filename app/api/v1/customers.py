"""Customer API endpoints."""

from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import Identity, get_db, get_identity
from app.config import get_settings
from app.models import Customer, EndCustomer
from app.schemas.customer import CustomerCreate, CustomerResponse, CustomerUpdate
from app.schemas.document_number import UsageResponse
from app.schemas.end_customer import (
    EndCustomerBase,
    EndCustomerCreate,
    EndCustomerResponse,
    EndCustomerSyncResponse,
)
from app.services import customer as customer_service
from app.services import end_customer_sync as sync_service

router = APIRouter(prefix="/customers", tags=["customers"])


async def _get_customer_or_404(
    db: AsyncSession, customer_id: UUID, identity: Identity
) -> Customer:
    customer = await customer_service.get_customer(db, customer_id, identity.company_id)
    if not customer:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Customer {customer_id} not found",
        )
    return customer


@router.get(
    "",
    response_model=list[CustomerResponse],
    summary="List customers",
)
async def list_customers(
    identity: Annotated[Identity, Depends(get_identity)],
    db: Annotated[AsyncSession, Depends(get_db)],
    search: Annotated[str | None, Query(description="Name, phone or project")] = None,
) -> list[Customer]:
    """List customers of the current company, optionally filtered by search text."""
    if search:
        return await customer_service.search_customers(db, identity.company_id, search)
    return await customer_service.get_customers(db, identity.company_id)


@router.get(
    "/recent",
    response_model=list[CustomerResponse],
    summary="Recently used customers",
)
async def list_recent_customers(
    identity: Annotated[Identity, Depends(get_identity)],
    db: Annotated[AsyncSession, Depends(get_db)],
    limit: Annotated[int | None, Query(ge=1, le=100)] = None,
) -> list[Customer]:
    """Customers most recently picked for a document."""
    return await customer_service.get_recent_customers(
        db, identity.company_id, limit or get_settings().recent_items_limit
    )


@router.post(
    "",
    response_model=CustomerResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create a customer",
)
async def create_customer(
    customer_data: CustomerCreate,
    identity: Annotated[Identity, Depends(get_identity)],
    db: Annotated[AsyncSession, Depends(get_db)],
) -> Customer:
    """Create a new customer."""
    customer = await customer_service.save_customer(
        db, identity.company_id, identity.user_id, customer_data
    )
    await db.commit()
    return customer


@router.get(
    "/{customer_id}",
    response_model=CustomerResponse,
    summary="Get customer by ID",
)
async def get_customer(
    customer_id: UUID,
    identity: Annotated[Identity, Depends(get_identity)],
    db: Annotated[AsyncSession, Depends(get_db)],
) -> Customer:
    """Get customer details."""
    return await _get_customer_or_404(db, customer_id, identity)


@router.patch(
    "/{customer_id}",
    response_model=CustomerResponse,
    summary="Update customer",
)
async def update_customer(
    customer_id: UUID,
    customer_data: CustomerUpdate,
    identity: Annotated[Identity, Depends(get_identity)],
    db: Annotated[AsyncSession, Depends(get_db)],
) -> Customer:
    """Update a customer. Omitted or null fields keep their value."""
    customer = await _get_customer_or_404(db, customer_id, identity)
    customer = await customer_service.update_customer(db, customer, customer_data)
    await db.commit()
    return customer


@router.delete(
    "/{customer_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete customer",
)
async def delete_customer(
    customer_id: UUID,
    identity: Annotated[Identity, Depends(get_identity)],
    db: Annotated[AsyncSession, Depends(get_db)],
) -> Response:
    """Delete a customer. Its end customers are left in place."""
    customer = await _get_customer_or_404(db, customer_id, identity)
    await customer_service.delete_customer(db, customer)
    await db.commit()
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post(
    "/{customer_id}/usage",
    response_model=UsageResponse,
    summary="Record customer usage",
)
async def record_customer_usage(
    customer_id: UUID,
    identity: Annotated[Identity, Depends(get_identity)],
    db: Annotated[AsyncSession, Depends(get_db)],
) -> UsageResponse:
    """Record that a customer was picked for a document. Never fails the request."""
    await _get_customer_or_404(db, customer_id, identity)
    result = await customer_service.update_customer_usage(db, customer_id)
    await db.commit()
    return UsageResponse(ok=result.ok, warning=str(result.warning) if result.warning else None)


@router.get(
    "/{customer_id}/end-customers",
    response_model=list[EndCustomerResponse],
    summary="List end customers of a customer",
)
async def list_customer_end_customers(
    customer_id: UUID,
    identity: Annotated[Identity, Depends(get_identity)],
    db: Annotated[AsyncSession, Depends(get_db)],
    auto_sync: Annotated[bool, Query(description="Migrate the embedded project")] = True,
) -> list[EndCustomer]:
    """End customers from the table plus the customer's embedded project."""
    await _get_customer_or_404(db, customer_id, identity)
    end_customers = await sync_service.get_all_end_customers_for_customer(
        db, identity.company_id, customer_id, auto_sync=auto_sync
    )
    await db.commit()
    return end_customers


@router.post(
    "/{customer_id}/end-customers",
    response_model=EndCustomerResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create an end customer for a customer",
)
async def create_customer_end_customer(
    customer_id: UUID,
    end_customer_data: EndCustomerBase,
    identity: Annotated[Identity, Depends(get_identity)],
    db: Annotated[AsyncSession, Depends(get_db)],
) -> EndCustomer:
    """Create an end customer and fill the customer's embedded project if empty."""
    await _get_customer_or_404(db, customer_id, identity)
    end_customer = await sync_service.save_end_customer_with_sync(
        db,
        identity.company_id,
        identity.user_id,
        EndCustomerCreate(**end_customer_data.model_dump(), customer_id=customer_id),
    )
    await db.commit()
    return end_customer


@router.post(
    "/{customer_id}/end-customers/sync",
    response_model=EndCustomerSyncResponse,
    summary="Migrate the embedded end customer project",
)
async def sync_customer_end_customers(
    customer_id: UUID,
    identity: Annotated[Identity, Depends(get_identity)],
    db: Annotated[AsyncSession, Depends(get_db)],
) -> EndCustomerSyncResponse:
    """Move the customer's embedded project into the end customer table, once."""
    await _get_customer_or_404(db, customer_id, identity)
    end_customer = await sync_service.sync_end_customers_from_embedded(
        db, identity.company_id, customer_id, identity.user_id
    )
    await db.commit()
    return EndCustomerSyncResponse(
        created=end_customer is not None,
        end_customer=(
            EndCustomerResponse.model_validate(end_customer) if end_customer else None
        ),
    )
