"""Keeps a Customer's embedded end customer project and the end_customers table in step.

Two representations of a customer's end customer projects coexist:
1. Customer.end_customer_project - a single embedded snapshot read by the
   older single-project forms
2. end_customers rows - the normalized, many-per-customer records

Reads return the union of both so customers created before the table existed
lose nothing. An embedded project is migrated into the table at most once:
it gets a primary key derived from (customer, project name), so a second or
concurrent migration collides on the key instead of inserting a duplicate.

Writes go through one session transaction, so the record and the snapshot
are committed together.
"""

import logging
from uuid import UUID, uuid5

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.models import Customer, EndCustomer
from app.schemas.customer import EndCustomerProject
from app.schemas.end_customer import EndCustomerCreate
from app.services import customer as customer_service
from app.services import end_customer as end_customer_service
from app.services.errors import (
    BestEffortResult,
    ServiceError,
    require_company,
    store_operation,
)

logger = logging.getLogger(__name__)


def _project_key(project_name: str | None) -> str:
    """Comparable form of a project name (whitespace and case insensitive)."""
    return " ".join((project_name or "").split()).casefold()


def embedded_end_customer_id(customer_id: UUID, project_name: str) -> UUID:
    """Stable ID for the end customer migrated from a customer's embedded project."""
    return uuid5(customer_id, f"embedded-project:{_project_key(project_name)}")


def _embedded_project(customer: Customer) -> dict | None:
    """The customer's embedded project, if it holds one."""
    project = customer.end_customer_project
    if not customer.has_end_customer_project or not project:
        return None
    if not _project_key(project.get("project_name")):
        return None
    return project


def _matches(customer_id: UUID, project: dict, end_customer_id: UUID, project_name: str) -> bool:
    """Same project by name, or the record migrated from it (renamed since)."""
    if end_customer_id == embedded_end_customer_id(customer_id, project["project_name"]):
        return True
    return _project_key(project_name) == _project_key(project.get("project_name"))


def _is_represented(customer: Customer, project: dict, end_customers: list[EndCustomer]) -> bool:
    return any(
        _matches(customer.id, project, ec.id, ec.project_name) for ec in end_customers
    )


def _mirrors(customer: Customer, end_customer_id: UUID, project_name: str) -> bool:
    """Whether the customer's embedded snapshot is this end customer."""
    project = _embedded_project(customer)
    return project is not None and _matches(customer.id, project, end_customer_id, project_name)


def _from_embedded(customer: Customer, project: dict, user_id: str | None = None) -> EndCustomer:
    """Build an end customer (not added to the session) from an embedded project."""
    return EndCustomer(
        id=embedded_end_customer_id(customer.id, project["project_name"]),
        customer_id=customer.id,
        company_id=customer.company_id,
        user_id=user_id or customer.user_id,
        project_name=project["project_name"].strip(),
        project_address=project.get("project_address"),
        contact_name=project.get("contact_name"),
        usage_count=0,
        last_used_at=None,
    )


def _snapshot(end_customer: EndCustomer) -> dict:
    return EndCustomerProject(
        project_name=end_customer.project_name,
        project_address=end_customer.project_address,
        contact_name=end_customer.contact_name,
    ).to_embedded()


async def get_all_end_customers_for_customer(
    db: AsyncSession,
    company_id: UUID | None,
    customer_id: UUID,
    auto_sync: bool = False,
) -> list[EndCustomer]:
    """End customers of a customer from both representations.

    Table rows come first (most recently used first). If the customer's
    embedded project has no matching row, a record built from it is appended;
    it carries the ID it will get once migrated. With auto_sync the embedded
    project is then migrated on a best-effort basis.
    """
    company_id = require_company(company_id)
    end_customers = await end_customer_service.get_end_customers_by_customer(
        db, company_id, customer_id
    )

    customer = await customer_service.get_customer(db, customer_id, company_id)
    if customer is None:
        return end_customers

    project = _embedded_project(customer)
    if project is None or _is_represented(customer, project, end_customers):
        return end_customers

    combined = [*end_customers, _from_embedded(customer, project)]
    if auto_sync:
        await sync_embedded_quietly(db, company_id, customer_id)
    return combined


@store_operation("sync embedded end customer project")
async def sync_end_customers_from_embedded(
    db: AsyncSession,
    company_id: UUID | None,
    customer_id: UUID,
    user_id: str | None = None,
) -> EndCustomer | None:
    """Migrate a customer's embedded project into the end_customers table.

    Idempotent: returns the new record, or None when there was nothing to
    migrate (no embedded project, already migrated, or migrated concurrently).
    """
    company_id = require_company(company_id)
    customer = await customer_service.get_customer(db, customer_id, company_id)
    if customer is None:
        logger.warning(f"Embedded sync skipped, customer {customer_id} not found")
        return None

    project = _embedded_project(customer)
    if project is None:
        return None

    existing = await end_customer_service.get_end_customers_by_customer(
        db, company_id, customer_id
    )
    if _is_represented(customer, project, existing):
        return None

    derived_id = embedded_end_customer_id(customer.id, project["project_name"])
    if await db.get(EndCustomer, derived_id) is not None:
        # Migrated earlier and renamed since
        return None

    end_customer = _from_embedded(customer, project, user_id)
    try:
        async with db.begin_nested():
            db.add(end_customer)
            await db.flush()
    except IntegrityError:
        logger.info(f"Embedded project of customer {customer_id} already migrated")
        return None

    await db.refresh(end_customer)
    logger.info(
        f"Migrated embedded project '{end_customer.project_name}' of customer "
        f"{customer_id} to end customer {end_customer.id}"
    )
    return end_customer


async def sync_embedded_quietly(
    db: AsyncSession, company_id: UUID, customer_id: UUID
) -> BestEffortResult:
    """Opportunistic migration on read; failures are logged, never raised."""
    try:
        async with db.begin_nested():
            await sync_end_customers_from_embedded(db, company_id, customer_id)
    except (ServiceError, SQLAlchemyError) as e:
        logger.warning(f"Auto-sync of embedded project failed for customer {customer_id}: {e}")
        return BestEffortResult.failed(
            f"Embedded project of customer {customer_id} not migrated yet"
        )
    return BestEffortResult.success()


async def sync_all_embedded_projects(db: AsyncSession, company_id: UUID | None) -> int:
    """Migrate every embedded project of a company; returns how many were created.

    A customer that fails is logged and skipped.
    """
    company_id = require_company(company_id)
    result = await db.execute(
        select(Customer.id).where(
            Customer.company_id == company_id,
            Customer.has_end_customer_project.is_(True),
        )
    )
    customer_ids = list(result.scalars().all())

    created = 0
    for customer_id in customer_ids:
        try:
            async with db.begin_nested():
                if await sync_end_customers_from_embedded(db, company_id, customer_id):
                    created += 1
        except (ServiceError, SQLAlchemyError) as e:
            logger.warning(f"Skipping customer {customer_id}: {e}")

    logger.info(
        f"Migrated {created} embedded projects across {len(customer_ids)} customers "
        f"for company {company_id}"
    )
    return created


@store_operation("save end customer")
async def save_end_customer_with_sync(
    db: AsyncSession,
    company_id: UUID | None,
    user_id: str | None,
    end_customer_data: EndCustomerCreate,
) -> EndCustomer:
    """Save an end customer and fill the customer's embedded snapshot if it is empty.

    A customer that already embeds a project keeps it: the snapshot holds the
    first project, not the latest.
    """
    end_customer = await end_customer_service.save_end_customer(
        db, company_id, user_id, end_customer_data
    )

    customer = await customer_service.get_customer(
        db, end_customer.customer_id, end_customer.company_id
    )
    if customer is None:
        logger.warning(
            f"Customer {end_customer.customer_id} not found, embedded snapshot not updated"
        )
        return end_customer

    if _embedded_project(customer) is None:
        customer.end_customer_project = _snapshot(end_customer)
        customer.has_end_customer_project = True
        await db.flush()
        logger.info(f"Embedded end customer {end_customer.id} into customer {customer.id}")

    return end_customer


@store_operation("clear embedded end customer project")
async def _clear_embedded_project(db: AsyncSession, customer: Customer) -> None:
    customer.end_customer_project = None
    customer.has_end_customer_project = False
    await db.flush()


async def delete_end_customer_with_sync(
    db: AsyncSession,
    end_customer_id: UUID,
    customer_id: UUID | None = None,
    company_id: UUID | None = None,
) -> bool:
    """Delete an end customer and clear the embedded snapshot if it mirrors it.

    Returns False when the end customer does not exist. A failure clearing
    the snapshot is raised as StoreIOError, never left silently stale.
    """
    query = select(EndCustomer).where(EndCustomer.id == end_customer_id)
    if company_id is not None:
        query = query.where(EndCustomer.company_id == company_id)
    end_customer = await _load_one(db, query)
    if end_customer is None:
        return False

    owner_id = customer_id or end_customer.customer_id
    owner_company_id = company_id or end_customer.company_id
    project_name = end_customer.project_name

    await end_customer_service.delete_end_customer(db, end_customer)

    customer = await customer_service.get_customer(db, owner_id, owner_company_id)
    if customer is not None and _mirrors(customer, end_customer_id, project_name):
        try:
            await _clear_embedded_project(db, customer)
        except ServiceError:
            logger.error(
                f"End customer {end_customer_id} deleted but customer {owner_id} "
                f"still embeds '{project_name}'"
            )
            raise
        logger.info(f"Cleared embedded project of customer {owner_id}")

    return True


@store_operation("load end customer")
async def _load_one(db: AsyncSession, query) -> EndCustomer | None:
    result = await db.execute(query)
    return result.scalar_one_or_none()
