"""End customer service - registry of the customers' own clients.

One Customer has many EndCustomers. The registry trusts the customer_id it
is given; callers check that the customer exists. Keeping a customer's
embedded project in step is the job of end_customer_sync.
"""

import logging
from uuid import UUID

from sqlalchemy import or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.models import EndCustomer
from app.schemas.end_customer import EndCustomerCreate, EndCustomerUpdate
from app.services.errors import (
    BestEffortResult,
    ValidationError,
    require_company,
    require_text,
    require_user,
    store_operation,
)
from app.services.usage import record_usage
from app.utils.records import clean_fields, update_payload

logger = logging.getLogger(__name__)


def _ordered(query):
    """Most recently used first, never-used last, then newest."""
    return query.order_by(
        EndCustomer.last_used_at.desc().nullslast(),
        EndCustomer.created_at.desc(),
    )


@store_operation("load end customer")
async def get_end_customer(
    db: AsyncSession, end_customer_id: UUID, company_id: UUID | None
) -> EndCustomer | None:
    """Get end customer by ID, scoped to company."""
    company_id = require_company(company_id)
    result = await db.execute(
        select(EndCustomer).where(
            EndCustomer.id == end_customer_id,
            EndCustomer.company_id == company_id,
        )
    )
    return result.scalar_one_or_none()


@store_operation("load end customers")
async def get_end_customers(db: AsyncSession, company_id: UUID | None) -> list[EndCustomer]:
    """List every end customer of a company."""
    company_id = require_company(company_id)
    result = await db.execute(
        _ordered(select(EndCustomer).where(EndCustomer.company_id == company_id))
    )
    return list(result.scalars().all())


@store_operation("load end customers")
async def get_end_customers_by_customer(
    db: AsyncSession, company_id: UUID | None, customer_id: UUID | None
) -> list[EndCustomer]:
    """List the end customers of one customer, most recently used first."""
    company_id = require_company(company_id)
    if customer_id is None:
        raise ValidationError("customer_id is required")

    result = await db.execute(
        _ordered(
            select(EndCustomer).where(
                EndCustomer.company_id == company_id,
                EndCustomer.customer_id == customer_id,
            )
        )
    )
    end_customers = list(result.scalars().all())
    logger.debug(f"Found {len(end_customers)} end customers for customer {customer_id}")
    return end_customers


@store_operation("search end customers")
async def search_end_customers(
    db: AsyncSession,
    company_id: UUID | None,
    search_text: str,
    customer_id: UUID | None = None,
) -> list[EndCustomer]:
    """Search project name, address and contact name (case-insensitive) and phone.

    Phone numbers are matched as typed. Blank search text returns everything
    in scope.
    """
    company_id = require_company(company_id)
    query = select(EndCustomer).where(EndCustomer.company_id == company_id)
    if customer_id is not None:
        query = query.where(EndCustomer.customer_id == customer_id)

    text = (search_text or "").strip()
    if text:
        query = query.where(
            or_(
                EndCustomer.project_name.icontains(text, autoescape=True),
                EndCustomer.project_address.icontains(text, autoescape=True),
                EndCustomer.contact_name.icontains(text, autoescape=True),
                EndCustomer.contact_phone.contains(text, autoescape=True),
            )
        )

    result = await db.execute(_ordered(query))
    return list(result.scalars().all())


@store_operation("load recent end customers")
async def get_recent_end_customers(
    db: AsyncSession,
    company_id: UUID | None,
    limit: int = 10,
    customer_id: UUID | None = None,
) -> list[EndCustomer]:
    """Top end customers by last use; never-used ones are left out."""
    company_id = require_company(company_id)
    query = select(EndCustomer).where(
        EndCustomer.company_id == company_id,
        EndCustomer.last_used_at.isnot(None),
    )
    if customer_id is not None:
        query = query.where(EndCustomer.customer_id == customer_id)

    result = await db.execute(query.order_by(EndCustomer.last_used_at.desc()).limit(limit))
    return list(result.scalars().all())


@store_operation("save end customer")
async def save_end_customer(
    db: AsyncSession,
    company_id: UUID | None,
    user_id: str | None,
    end_customer_data: EndCustomerCreate,
) -> EndCustomer:
    """Create a new end customer for a customer.

    Raises:
        AuthRequiredError / CompanyRequiredError: identity missing
        ValidationError: project_name blank
    """
    user_id = require_user(user_id)
    company_id = require_company(company_id)
    project_name = require_text(end_customer_data.project_name, "project_name")

    optional = clean_fields(
        end_customer_data.model_dump(
            include={"project_address", "contact_name", "contact_phone", "contact_email", "notes"}
        )
    )
    end_customer = EndCustomer(
        customer_id=end_customer_data.customer_id,
        company_id=company_id,
        user_id=user_id,
        project_name=project_name,
        usage_count=0,
        last_used_at=None,
        **optional,
    )
    db.add(end_customer)
    await db.flush()
    await db.refresh(end_customer)

    logger.info(
        f"Saved end customer {end_customer.id} for customer {end_customer.customer_id}"
    )
    return end_customer


@store_operation("update end customer")
async def update_end_customer(
    db: AsyncSession, end_customer: EndCustomer, end_customer_data: EndCustomerUpdate
) -> EndCustomer:
    """Update an end customer; unset or None fields keep their stored value."""
    update_dict = update_payload(end_customer_data)
    if "project_name" in update_dict:
        update_dict["project_name"] = require_text(update_dict["project_name"], "project_name")

    for key, value in update_dict.items():
        setattr(end_customer, key, value)
    await db.flush()
    await db.refresh(end_customer)

    logger.info(f"Updated end customer {end_customer.id}")
    return end_customer


@store_operation("delete end customer")
async def delete_end_customer(db: AsyncSession, end_customer: EndCustomer) -> None:
    """Hard delete an end customer without touching the owning customer."""
    end_customer_id = end_customer.id
    await db.delete(end_customer)
    await db.flush()
    logger.info(f"Deleted end customer {end_customer_id}")


async def update_end_customer_usage(
    db: AsyncSession, end_customer_id: UUID
) -> BestEffortResult:
    """Record that an end customer was selected for a document (best effort)."""
    return await record_usage(db, EndCustomer, end_customer_id)
