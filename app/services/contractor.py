"""Contractor service - registry of crews and subcontractors."""

import logging
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.models import Contractor
from app.schemas.contractor import ContractorCreate, ContractorUpdate
from app.services.errors import (
    BestEffortResult,
    require_company,
    require_text,
    require_user,
    store_operation,
)
from app.services.usage import record_usage
from app.utils.records import update_payload

logger = logging.getLogger(__name__)


@store_operation("load contractor")
async def get_contractor(
    db: AsyncSession, contractor_id: UUID, company_id: UUID | None
) -> Contractor | None:
    """Get contractor by ID, scoped to company."""
    company_id = require_company(company_id)
    result = await db.execute(
        select(Contractor).where(
            Contractor.id == contractor_id,
            Contractor.company_id == company_id,
        )
    )
    return result.scalar_one_or_none()


@store_operation("load contractors")
async def get_contractors(db: AsyncSession, company_id: UUID | None) -> list[Contractor]:
    """List contractors of a company, most recently used first."""
    company_id = require_company(company_id)
    result = await db.execute(
        select(Contractor)
        .where(Contractor.company_id == company_id)
        .order_by(Contractor.last_used_at.desc().nullslast(), Contractor.created_at.desc())
    )
    return list(result.scalars().all())


@store_operation("search contractors")
async def search_contractors(
    db: AsyncSession, company_id: UUID | None, search_text: str
) -> list[Contractor]:
    """Search name, email, specialties and tags (case-insensitive) and phone.

    Phone numbers are matched as typed.
    """
    contractors = await get_contractors(db, company_id)
    text = (search_text or "").strip()
    needle = text.lower()
    if not needle:
        return contractors

    # specialties and tags are JSON lists, filtered here rather than in SQL
    return [
        c
        for c in contractors
        if needle in c.contractor_name.lower()
        or text in c.phone
        or needle in (c.email or "").lower()
        or any(needle in s.lower() for s in c.specialties or [])
        or any(needle in t.lower() for t in c.tags or [])
    ]


async def get_contractors_by_tags(
    db: AsyncSession, company_id: UUID | None, tags: list[str]
) -> list[Contractor]:
    """Contractors carrying at least one of the given tags (exact match)."""
    wanted = set(tags)
    contractors = await get_contractors(db, company_id)
    return [c for c in contractors if wanted.intersection(c.tags or [])]


async def get_contractors_by_specialty(
    db: AsyncSession, company_id: UUID | None, specialty: str
) -> list[Contractor]:
    """Contractors with a specialty containing the text (case-insensitive)."""
    needle = specialty.lower()
    contractors = await get_contractors(db, company_id)
    return [c for c in contractors if any(needle in s.lower() for s in c.specialties or [])]


@store_operation("load frequent contractors")
async def get_frequent_contractors(
    db: AsyncSession, company_id: UUID | None, limit: int = 10
) -> list[Contractor]:
    """Most used contractors; never-used ones are left out."""
    company_id = require_company(company_id)
    result = await db.execute(
        select(Contractor)
        .where(
            Contractor.company_id == company_id,
            Contractor.usage_count > 0,
        )
        .order_by(Contractor.usage_count.desc(), Contractor.last_used_at.desc())
        .limit(limit)
    )
    return list(result.scalars().all())


@store_operation("load recent contractors")
async def get_recent_contractors(
    db: AsyncSession, company_id: UUID | None, limit: int = 10
) -> list[Contractor]:
    """Top contractors by last use; never-used ones are left out."""
    company_id = require_company(company_id)
    result = await db.execute(
        select(Contractor)
        .where(
            Contractor.company_id == company_id,
            Contractor.last_used_at.isnot(None),
        )
        .order_by(Contractor.last_used_at.desc())
        .limit(limit)
    )
    return list(result.scalars().all())


@store_operation("save contractor")
async def save_contractor(
    db: AsyncSession,
    company_id: UUID | None,
    user_id: str | None,
    contractor_data: ContractorCreate,
) -> Contractor:
    """Create a new contractor."""
    user_id = require_user(user_id)
    company_id = require_company(company_id)

    contractor = Contractor(
        company_id=company_id,
        user_id=user_id,
        contractor_name=require_text(contractor_data.contractor_name, "contractor_name"),
        contractor_type=contractor_data.contractor_type.value,
        phone=require_text(contractor_data.phone, "phone"),
        alternate_phone=contractor_data.alternate_phone,
        email=contractor_data.email,
        line_id=contractor_data.line_id,
        address=contractor_data.address,
        district=contractor_data.district,
        amphoe=contractor_data.amphoe,
        province=contractor_data.province,
        postal_code=contractor_data.postal_code,
        id_card=contractor_data.id_card,
        tax_id=contractor_data.tax_id,
        specialties=list(contractor_data.specialties),
        tags=list(contractor_data.tags),
        notes=contractor_data.notes,
        usage_count=0,
        last_used_at=None,
    )
    db.add(contractor)
    await db.flush()
    await db.refresh(contractor)

    logger.info(f"Saved contractor {contractor.id} for company {company_id}")
    return contractor


@store_operation("update contractor")
async def update_contractor(
    db: AsyncSession, contractor: Contractor, contractor_data: ContractorUpdate
) -> Contractor:
    """Update a contractor with the fields that were given."""
    update_dict = update_payload(contractor_data)
    for field in ("contractor_name", "phone"):
        if field in update_dict:
            update_dict[field] = require_text(update_dict[field], field)

    for key, value in update_dict.items():
        setattr(contractor, key, value)
    await db.flush()
    await db.refresh(contractor)
    return contractor


@store_operation("delete contractor")
async def delete_contractor(db: AsyncSession, contractor: Contractor) -> None:
    """Hard delete a contractor."""
    await db.delete(contractor)
    await db.flush()


async def update_contractor_usage(db: AsyncSession, contractor_id: UUID) -> BestEffortResult:
    """Record that a contractor was hired for a document (best effort)."""
    return await record_usage(db, Contractor, contractor_id)
