"""Customer service - business logic for the customer registry."""

import logging
from uuid import UUID

from sqlalchemy import or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.models import Customer
from app.schemas.customer import CustomerCreate, CustomerUpdate
from app.services.errors import (
    BestEffortResult,
    ValidationError,
    require_company,
    require_text,
    require_user,
    store_operation,
)
from app.services.usage import record_usage
from app.utils.records import update_payload

logger = logging.getLogger(__name__)


def _ordered(query):
    """Most recently used first, never-used last, then newest."""
    return query.order_by(
        Customer.last_used_at.desc().nullslast(),
        Customer.created_at.desc(),
    )


@store_operation("load customer")
async def get_customer(
    db: AsyncSession, customer_id: UUID, company_id: UUID | None
) -> Customer | None:
    """Get customer by ID, scoped to company."""
    company_id = require_company(company_id)
    result = await db.execute(
        select(Customer).where(
            Customer.id == customer_id,
            Customer.company_id == company_id,
        )
    )
    return result.scalar_one_or_none()


@store_operation("load customers")
async def get_customers(db: AsyncSession, company_id: UUID | None) -> list[Customer]:
    """List all customers of a company, most recently used first."""
    company_id = require_company(company_id)
    result = await db.execute(_ordered(select(Customer).where(Customer.company_id == company_id)))
    customers = list(result.scalars().all())
    logger.debug(f"Loaded {len(customers)} customers for company {company_id}")
    return customers


@store_operation("search customers")
async def search_customers(
    db: AsyncSession, company_id: UUID | None, search_text: str
) -> list[Customer]:
    """Case-insensitive substring search on name, phone and project name.

    Blank search text returns every customer of the company. On SQLite the
    case folding covers ASCII letters only.
    """
    company_id = require_company(company_id)
    query = select(Customer).where(Customer.company_id == company_id)

    text = (search_text or "").strip()
    if text:
        query = query.where(
            or_(
                Customer.customer_name.icontains(text, autoescape=True),
                Customer.phone.icontains(text, autoescape=True),
                Customer.project_name.icontains(text, autoescape=True),
            )
        )

    result = await db.execute(_ordered(query))
    return list(result.scalars().all())


@store_operation("load recent customers")
async def get_recent_customers(
    db: AsyncSession, company_id: UUID | None, limit: int = 10
) -> list[Customer]:
    """Top customers by last use; customers never used are left out."""
    company_id = require_company(company_id)
    result = await db.execute(
        select(Customer)
        .where(
            Customer.company_id == company_id,
            Customer.last_used_at.isnot(None),
        )
        .order_by(Customer.last_used_at.desc())
        .limit(limit)
    )
    return list(result.scalars().all())


@store_operation("save customer")
async def save_customer(
    db: AsyncSession,
    company_id: UUID | None,
    user_id: str | None,
    customer_data: CustomerCreate,
) -> Customer:
    """Create a new customer.

    Raises:
        AuthRequiredError / CompanyRequiredError: identity missing
        ValidationError: customer_name or phone blank
    """
    user_id = require_user(user_id)
    company_id = require_company(company_id)
    customer_name = require_text(customer_data.customer_name, "customer_name")
    phone = require_text(customer_data.phone, "phone")

    project = customer_data.end_customer_project
    customer = Customer(
        company_id=company_id,
        user_id=user_id,
        customer_name=customer_name,
        customer_type=customer_data.customer_type.value,
        phone=phone,
        alternate_phone=customer_data.alternate_phone,
        email=customer_data.email,
        line_id=customer_data.line_id,
        address=customer_data.address,
        district=customer_data.district,
        amphoe=customer_data.amphoe,
        province=customer_data.province,
        postal_code=customer_data.postal_code,
        project_name=customer_data.project_name,
        house_number=customer_data.house_number,
        tax_id=customer_data.tax_id,
        branch_code=customer_data.branch_code,
        branch_name=customer_data.branch_name,
        tags=list(customer_data.tags),
        notes=customer_data.notes,
        has_end_customer_project=project is not None,
        end_customer_project=project.to_embedded() if project else None,
        usage_count=0,
        last_used_at=None,
    )
    db.add(customer)
    await db.flush()
    await db.refresh(customer)

    logger.info(f"Saved customer {customer.id} for company {company_id}")
    return customer


@store_operation("update customer")
async def update_customer(
    db: AsyncSession, customer: Customer, customer_data: CustomerUpdate
) -> Customer:
    """Update a customer with the fields that were given.

    Fields left unset or None keep their stored value.
    """
    update_dict = update_payload(customer_data)

    for field in ("customer_name", "phone"):
        if field in update_dict:
            update_dict[field] = require_text(update_dict[field], field)

    project = customer_data.end_customer_project
    if project is not None:
        update_dict["end_customer_project"] = project.to_embedded()
        update_dict.setdefault("has_end_customer_project", True)
    elif update_dict.get("has_end_customer_project") is False:
        update_dict["end_customer_project"] = None
    elif update_dict.get("has_end_customer_project") and not customer.end_customer_project:
        raise ValidationError("end_customer_project is required with has_end_customer_project")

    for key, value in update_dict.items():
        setattr(customer, key, value)
    await db.flush()
    await db.refresh(customer)

    logger.info(f"Updated customer {customer.id}")
    return customer


@store_operation("delete customer")
async def delete_customer(db: AsyncSession, customer: Customer) -> None:
    """Hard delete a customer.

    End customers pointing at it are kept with a dangling customer_id.
    """
    customer_id = customer.id
    await db.delete(customer)
    await db.flush()
    logger.info(f"Deleted customer {customer_id}")


async def update_customer_usage(db: AsyncSession, customer_id: UUID) -> BestEffortResult:
    """Record that a customer was selected for a document (best effort)."""
    return await record_usage(db, Customer, customer_id)
