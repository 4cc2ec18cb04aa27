"""Tests for sequential document number allocation."""

import asyncio
from datetime import date
from uuid import uuid4

import pytest
from sqlalchemy import select

from app.models import DocumentCounter, DocumentType
from app.services import document_number as document_number_service
from app.services.document_number import (
    ensure_document_number,
    format_document_number,
    generate_document_number,
    is_legacy_document_number,
    is_valid_document_number,
    parse_document_number,
)
from app.services.errors import CompanyRequiredError, ValidationError

pytestmark = pytest.mark.asyncio

JAN_23 = date(2026, 1, 23)
JAN_24 = date(2026, 1, 24)


class TestFormatting:
    """Tests for building and reading document numbers."""

    async def test_formats_prefix_day_and_padded_sequence(self):
        """Sequence is zero-padded to two digits after the YYMMDD day key."""
        assert format_document_number(DocumentType.DELIVERY, JAN_23, 1) == "DN-26012301"
        assert format_document_number("memo", JAN_23, 12) == "MEMO-26012312"

    async def test_sequence_grows_past_two_digits(self):
        assert format_document_number(DocumentType.INVOICE, JAN_23, 100) == "IN-260123100"

    async def test_rejects_sequence_below_one(self):
        with pytest.raises(ValidationError):
            format_document_number(DocumentType.INVOICE, JAN_23, 0)

    async def test_rejects_unknown_type(self):
        with pytest.raises(ValidationError):
            format_document_number("banana", JAN_23, 1)

    async def test_parses_number(self):
        parsed = parse_document_number("QT-26012307")

        assert parsed.prefix == "QT"
        assert parsed.document_type == DocumentType.QUOTATION
        assert parsed.issued_on == JAN_23
        assert parsed.sequence == 7

    @pytest.mark.parametrize(
        "value",
        ["", "DN-2601231", "DN-260123", "dn-26012301", "XX-26012301", "DN-26133201"],
    )
    async def test_parse_rejects_malformed(self, value):
        with pytest.raises(ValidationError):
            parse_document_number(value)

    async def test_validity_depends_on_type(self):
        assert is_valid_document_number("WR-26012301", DocumentType.WARRANTY)
        assert not is_valid_document_number("WR-26012301", DocumentType.RECEIPT)
        assert not is_valid_document_number(None, DocumentType.RECEIPT)

    async def test_detects_legacy_placeholder(self):
        """The old PREFIX-YYYY-NNN format is recognized so it can be replaced."""
        assert is_legacy_document_number("MEMO-2024-001", DocumentType.MEMO)
        assert not is_legacy_document_number("MEMO-26012301", DocumentType.MEMO)
        assert not is_legacy_document_number("VO-2024-001", DocumentType.MEMO)


class TestGenerateDocumentNumber:
    """Tests for generate_document_number."""

    async def test_sequential_numbers_same_day(self, db, company_id):
        """Three calls on the same day give 01, 02, 03."""
        numbers = [
            await generate_document_number(db, company_id, DocumentType.DELIVERY, JAN_23)
            for _ in range(3)
        ]

        assert numbers == ["DN-26012301", "DN-26012302", "DN-26012303"]

    async def test_counter_row_tracks_last_number(self, db, company_id):
        await generate_document_number(db, company_id, DocumentType.RECEIPT, JAN_23)
        await generate_document_number(db, company_id, DocumentType.RECEIPT, JAN_23)

        result = await db.execute(
            select(DocumentCounter).where(DocumentCounter.company_id == company_id)
        )
        counter = result.scalar_one()
        assert counter.document_type == "receipt"
        assert counter.day_key == "260123"
        assert counter.last_number == 2

    async def test_types_are_independent(self, db, company_id):
        assert await generate_document_number(db, company_id, "delivery", JAN_23) == "DN-26012301"
        assert await generate_document_number(db, company_id, "invoice", JAN_23) == "IN-26012301"
        assert await generate_document_number(db, company_id, "delivery", JAN_23) == "DN-26012302"

    async def test_days_are_independent(self, db, company_id):
        """A new day starts again at 01."""
        await generate_document_number(db, company_id, DocumentType.MEMO, JAN_23)
        await generate_document_number(db, company_id, DocumentType.MEMO, JAN_23)

        assert (
            await generate_document_number(db, company_id, DocumentType.MEMO, JAN_24)
            == "MEMO-26012401"
        )

    async def test_companies_are_independent(self, db, company_id):
        other_company = uuid4()
        await generate_document_number(db, company_id, DocumentType.QUOTATION, JAN_23)

        assert (
            await generate_document_number(db, other_company, DocumentType.QUOTATION, JAN_23)
            == "QT-26012301"
        )

    async def test_defaults_to_business_today(self, db, company_id, monkeypatch):
        monkeypatch.setattr(document_number_service, "business_today", lambda: JAN_24)

        number = await generate_document_number(db, company_id, DocumentType.PURCHASE_ORDER)

        assert number == "PO-26012401"

    async def test_requires_company(self, db):
        with pytest.raises(CompanyRequiredError):
            await generate_document_number(db, None, DocumentType.DELIVERY, JAN_23)

    async def test_concurrent_allocations_are_unique(self, session_factory, company_id):
        """Parallel callers each get a distinct number, together exactly 1..N."""
        n = 8

        async def allocate() -> str:
            async with session_factory() as session:
                number = await generate_document_number(
                    session, company_id, DocumentType.VARIATION_ORDER, JAN_23
                )
                await session.commit()
                return number

        numbers = await asyncio.gather(*(allocate() for _ in range(n)))

        sequences = sorted(parse_document_number(number).sequence for number in numbers)
        assert sequences == list(range(1, n + 1))


class TestEnsureDocumentNumber:
    """Tests for keeping or replacing the number a form already holds."""

    async def test_keeps_valid_number(self, db, company_id):
        kept = await ensure_document_number(
            db, company_id, DocumentType.DELIVERY, "DN-26012305"
        )

        assert kept == "DN-26012305"
        result = await db.execute(select(DocumentCounter))
        assert result.scalars().all() == []

    @pytest.mark.parametrize("current", [None, "", "DN-2026-001", "IN-26012301"])
    async def test_replaces_empty_legacy_or_foreign(self, db, company_id, monkeypatch, current):
        monkeypatch.setattr(document_number_service, "business_today", lambda: JAN_23)

        number = await ensure_document_number(db, company_id, DocumentType.DELIVERY, current)

        assert number == "DN-26012301"
