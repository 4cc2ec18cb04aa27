"""Document number allocation: PREFIX-YYMMDDNN, sequential per company, type and day.

Example: DN-26012301 is the first delivery note issued on 2026-01-23.
The sequence is zero-padded to two digits and grows past 99 if needed.

The sequence lives in one document_counters row per (company, type, day).
The row is created at 0 if missing and then incremented with a single
UPDATE ... RETURNING, so two concurrent callers can never read the same
value. Gaps are allowed (a number may be allocated and never used),
duplicates are not.
"""

import logging
import re
from dataclasses import dataclass
from datetime import date, datetime
from uuid import UUID
from zoneinfo import ZoneInfo

from sqlalchemy import update
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from app.config import get_settings
from app.models import DOCUMENT_PREFIXES, DocumentCounter, DocumentType
from app.models.base import utcnow
from app.services.errors import (
    StoreIOError,
    ValidationError,
    require_company,
    store_operation,
)

logger = logging.getLogger(__name__)

SEQUENCE_WIDTH = 2
_MAX_SEQUENCE_RETRIES = 5
_COUNTER_KEY = ["company_id", "document_type", "day_key"]

DOCUMENT_NUMBER_PATTERN = re.compile(
    r"^(?P<prefix>[A-Z]{2,4})-(?P<day>\d{6})(?P<sequence>\d{2,})$"
)

# Dialects with INSERT ... ON CONFLICT DO NOTHING
_UPSERT_INSERTS = {
    "postgresql": pg_insert,
    "sqlite": sqlite_insert,
}

_TYPES_BY_PREFIX = {prefix: doc_type for doc_type, prefix in DOCUMENT_PREFIXES.items()}


@dataclass(frozen=True)
class ParsedDocumentNumber:
    """A document number split into its parts."""

    prefix: str
    document_type: DocumentType
    issued_on: date
    sequence: int


def _coerce_type(document_type: DocumentType | str) -> DocumentType:
    try:
        return DocumentType(document_type)
    except ValueError:
        raise ValidationError(f"Unknown document type: {document_type}") from None


def business_today() -> date:
    """Today in the business timezone, which decides the day key."""
    tz = ZoneInfo(get_settings().document_number_timezone)
    return datetime.now(tz).date()


def day_key(on_date: date) -> str:
    """YYMMDD key for a date."""
    return on_date.strftime("%y%m%d")


def format_document_number(
    document_type: DocumentType | str, on_date: date, sequence: int
) -> str:
    """Build a document number. Does not advance any counter."""
    if sequence < 1:
        raise ValidationError("Sequence starts at 1")
    doc_type = _coerce_type(document_type)
    return f"{doc_type.prefix}-{day_key(on_date)}{sequence:0{SEQUENCE_WIDTH}d}"


def parse_document_number(value: str) -> ParsedDocumentNumber:
    """Split a document number into prefix, type, day and sequence.

    Raises ValidationError when the value is not in the current format.
    """
    match = DOCUMENT_NUMBER_PATTERN.match(value or "")
    if match is None:
        raise ValidationError(f"Malformed document number: {value!r}")

    prefix = match.group("prefix")
    doc_type = _TYPES_BY_PREFIX.get(prefix)
    if doc_type is None:
        raise ValidationError(f"Unknown document number prefix: {prefix}")

    try:
        issued_on = datetime.strptime(match.group("day"), "%y%m%d").date()
    except ValueError:
        raise ValidationError(f"Invalid date in document number: {value!r}") from None

    sequence = int(match.group("sequence"))
    if sequence < 1:
        raise ValidationError(f"Invalid sequence in document number: {value!r}")

    return ParsedDocumentNumber(
        prefix=prefix, document_type=doc_type, issued_on=issued_on, sequence=sequence
    )


def is_valid_document_number(value: str | None, document_type: DocumentType | str) -> bool:
    """Check a value is a current-format number for this document type."""
    if not value:
        return False
    try:
        parsed = parse_document_number(value)
    except ValidationError:
        return False
    return parsed.document_type == _coerce_type(document_type)


def is_legacy_document_number(value: str | None, document_type: DocumentType | str) -> bool:
    """Check for the old PREFIX-YYYY-NNN placeholder that forms used to prefill."""
    if not value:
        return False
    prefix = re.escape(_coerce_type(document_type).prefix)
    return re.fullmatch(rf"{prefix}-\d{{4}}-\d{{3}}", value) is not None


async def _ensure_counter(
    db: AsyncSession, company_id: UUID, document_type: DocumentType, key: str
) -> None:
    """Create the counter row at 0 unless it exists."""
    insert_fn = _UPSERT_INSERTS.get(db.get_bind().dialect.name)
    values = {
        "company_id": company_id,
        "document_type": document_type.value,
        "day_key": key,
        "last_number": 0,
    }

    if insert_fn is not None:
        await db.execute(
            insert_fn(DocumentCounter).values(**values).on_conflict_do_nothing(
                index_elements=_COUNTER_KEY
            )
        )
        return

    # Other dialects: a concurrent creator makes our insert fail, which is fine
    try:
        async with db.begin_nested():
            db.add(DocumentCounter(**values))
            await db.flush()
    except IntegrityError:
        logger.debug(f"Counter {document_type.value}/{key} created concurrently")


async def _increment_counter(
    db: AsyncSession, company_id: UUID, document_type: DocumentType, key: str
) -> int | None:
    """Atomically add one to the counter and return the new value."""
    result = await db.execute(
        update(DocumentCounter)
        .where(
            DocumentCounter.company_id == company_id,
            DocumentCounter.document_type == document_type.value,
            DocumentCounter.day_key == key,
        )
        .values(last_number=DocumentCounter.last_number + 1, updated_at=utcnow())
        .returning(DocumentCounter.last_number)
        .execution_options(synchronize_session=False)
    )
    return result.scalar_one_or_none()


@store_operation("generate document number")
async def generate_document_number(
    db: AsyncSession,
    company_id: UUID | None,
    document_type: DocumentType | str,
    on_date: date | None = None,
) -> str:
    """Allocate the next document number for a company, type and day.

    on_date defaults to today in the business timezone, evaluated per call.
    Numbers already issued are never renumbered.

    Raises:
        CompanyRequiredError: company_id missing
        ValidationError: unknown document type
        StoreIOError: the counter could not be incremented
    """
    company_id = require_company(company_id)
    doc_type = _coerce_type(document_type)
    issued_on = on_date or business_today()
    key = day_key(issued_on)

    for _ in range(_MAX_SEQUENCE_RETRIES):
        await _ensure_counter(db, company_id, doc_type, key)
        sequence = await _increment_counter(db, company_id, doc_type, key)
        if sequence is not None:
            number = format_document_number(doc_type, issued_on, sequence)
            logger.info(f"Allocated document number {number} for company {company_id}")
            return number

    raise StoreIOError(
        f"Could not allocate {doc_type.value} number: counter unavailable after "
        f"{_MAX_SEQUENCE_RETRIES} attempts"
    )


async def ensure_document_number(
    db: AsyncSession,
    company_id: UUID | None,
    document_type: DocumentType | str,
    current: str | None = None,
) -> str:
    """Keep a valid number already held by a form, otherwise allocate one.

    Empty values, legacy placeholders and numbers of another type are replaced.
    """
    if is_valid_document_number(current, document_type):
        return current  # type: ignore[return-value]

    if is_legacy_document_number(current, document_type):
        logger.info(f"Replacing legacy placeholder number {current}")

    return await generate_document_number(db, company_id, document_type)
