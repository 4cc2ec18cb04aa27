"""Tests for keeping embedded end customer projects and the end_customers table in step."""

from uuid import uuid4

import pytest
from sqlalchemy import func, select

from app.models import EndCustomer
from app.schemas.customer import CustomerCreate, CustomerUpdate, EndCustomerProject
from app.schemas.end_customer import EndCustomerCreate, EndCustomerUpdate
from app.services import customer as customer_service
from app.services import end_customer as end_customer_service
from app.services import end_customer_sync as sync_service
from app.services.end_customer_sync import embedded_end_customer_id
from app.services.errors import StoreIOError

pytestmark = pytest.mark.asyncio


async def _row_count(db, customer_id) -> int:
    result = await db.execute(
        select(func.count()).select_from(EndCustomer).where(EndCustomer.customer_id == customer_id)
    )
    return result.scalar_one()


class TestEmbeddedId:
    """Tests for the derived ID of a migrated embedded project."""

    async def test_stable_and_normalized(self):
        customer_id = uuid4()

        assert embedded_end_customer_id(customer_id, "Villa A") == embedded_end_customer_id(
            customer_id, "  villa   a "
        )
        assert embedded_end_customer_id(customer_id, "Villa A") != embedded_end_customer_id(
            uuid4(), "Villa A"
        )


class TestGetAllEndCustomers:
    """Tests for the union read."""

    async def test_includes_unmigrated_embedded_project(self, db, company_id, customer_with_project):
        end_customers = await sync_service.get_all_end_customers_for_customer(
            db, company_id, customer_with_project.id
        )

        assert len(end_customers) == 1
        synthesized = end_customers[0]
        assert synthesized.id == embedded_end_customer_id(customer_with_project.id, "Villa A")
        assert synthesized.project_name == "Villa A"
        assert synthesized.project_address == "99 Moo 1, Chalong"
        assert synthesized.contact_name == "Khun Mali"
        assert synthesized.customer_id == customer_with_project.id
        assert await _row_count(db, customer_with_project.id) == 0

    async def test_no_duplicate_when_project_has_a_row(
        self, db, company_id, user_id, customer_with_project
    ):
        await end_customer_service.save_end_customer(
            db,
            company_id,
            user_id,
            EndCustomerCreate(customer_id=customer_with_project.id, project_name=" VILLA a"),
        )

        end_customers = await sync_service.get_all_end_customers_for_customer(
            db, company_id, customer_with_project.id
        )

        assert len(end_customers) == 1
        assert end_customers[0].project_name == "VILLA a"

    async def test_table_rows_come_first(self, db, company_id, user_id, customer_with_project):
        row = await end_customer_service.save_end_customer(
            db,
            company_id,
            user_id,
            EndCustomerCreate(customer_id=customer_with_project.id, project_name="Villa B"),
        )

        end_customers = await sync_service.get_all_end_customers_for_customer(
            db, company_id, customer_with_project.id
        )

        assert [ec.project_name for ec in end_customers] == ["Villa B", "Villa A"]
        assert end_customers[0].id == row.id

    async def test_customer_without_project(self, db, company_id, customer):
        assert await sync_service.get_all_end_customers_for_customer(db, company_id, customer.id) == []

    async def test_flag_off_ignores_stale_snapshot(self, db, company_id, customer_with_project):
        customer_with_project.has_end_customer_project = False
        await db.flush()

        assert (
            await sync_service.get_all_end_customers_for_customer(
                db, company_id, customer_with_project.id
            )
            == []
        )

    async def test_auto_sync_migrates(self, db, company_id, customer_with_project):
        first = await sync_service.get_all_end_customers_for_customer(
            db, company_id, customer_with_project.id, auto_sync=True
        )
        second = await sync_service.get_all_end_customers_for_customer(
            db, company_id, customer_with_project.id, auto_sync=True
        )

        assert [ec.id for ec in first] == [ec.id for ec in second]
        assert await _row_count(db, customer_with_project.id) == 1

    async def test_auto_sync_failure_does_not_fail_read(
        self, db, company_id, customer_with_project, monkeypatch
    ):
        async def failing_sync(*args, **kwargs):
            raise StoreIOError("Could not sync embedded end customer project")

        monkeypatch.setattr(sync_service, "sync_end_customers_from_embedded", failing_sync)

        end_customers = await sync_service.get_all_end_customers_for_customer(
            db, company_id, customer_with_project.id, auto_sync=True
        )

        assert len(end_customers) == 1
        assert await _row_count(db, customer_with_project.id) == 0


class TestSyncFromEmbedded:
    """Tests for migrating an embedded project into the table."""

    async def test_migrates_once(self, db, company_id, customer_with_project):
        created = await sync_service.sync_end_customers_from_embedded(
            db, company_id, customer_with_project.id
        )
        again = await sync_service.sync_end_customers_from_embedded(
            db, company_id, customer_with_project.id
        )

        assert created is not None
        assert created.id == embedded_end_customer_id(customer_with_project.id, "Villa A")
        assert created.user_id == customer_with_project.user_id
        assert created.usage_count == 0
        assert again is None
        assert await _row_count(db, customer_with_project.id) == 1

    async def test_nothing_to_migrate(self, db, company_id, customer):
        assert await sync_service.sync_end_customers_from_embedded(db, company_id, customer.id) is None
        assert await sync_service.sync_end_customers_from_embedded(db, company_id, uuid4()) is None

    async def test_renamed_after_migration_is_not_migrated_again(
        self, db, company_id, customer_with_project
    ):
        created = await sync_service.sync_end_customers_from_embedded(
            db, company_id, customer_with_project.id
        )
        await end_customer_service.update_end_customer(
            db, created, EndCustomerUpdate(project_name="Villa A (Phase 2)")
        )

        again = await sync_service.sync_end_customers_from_embedded(
            db, company_id, customer_with_project.id
        )

        assert again is None
        assert await _row_count(db, customer_with_project.id) == 1

    async def test_renamed_migration_not_listed_twice(self, db, company_id, customer_with_project):
        """The union read recognizes the migrated record by its ID after a rename."""
        created = await sync_service.sync_end_customers_from_embedded(
            db, company_id, customer_with_project.id
        )
        await end_customer_service.update_end_customer(
            db, created, EndCustomerUpdate(project_name="Villa A2")
        )

        end_customers = await sync_service.get_all_end_customers_for_customer(
            db, company_id, customer_with_project.id
        )

        assert [(ec.id, ec.project_name) for ec in end_customers] == [(created.id, "Villa A2")]

    async def test_sync_all_embedded_projects(self, db, company_id, user_id, customer):
        for name in ("Villa A", "Villa B"):
            await customer_service.save_customer(
                db,
                company_id,
                user_id,
                CustomerCreate(
                    customer_name=f"Owner of {name}",
                    phone="080",
                    end_customer_project=EndCustomerProject(project_name=name),
                ),
            )

        assert await sync_service.sync_all_embedded_projects(db, company_id) == 2
        assert await sync_service.sync_all_embedded_projects(db, company_id) == 0
        assert len(await end_customer_service.get_end_customers(db, company_id)) == 2


class TestSaveWithSync:
    """Tests for saving an end customer through the synchronizer."""

    async def test_fills_empty_snapshot(self, db, company_id, user_id, customer):
        end_customer = await sync_service.save_end_customer_with_sync(
            db,
            company_id,
            user_id,
            EndCustomerCreate(
                customer_id=customer.id,
                project_name="Villa C",
                contact_name="Khun Jo",
                contact_phone="081",
            ),
        )
        await db.refresh(customer)

        assert end_customer.project_name == "Villa C"
        assert customer.has_end_customer_project is True
        assert customer.end_customer_project == {"project_name": "Villa C", "contact_name": "Khun Jo"}

    async def test_keeps_existing_snapshot(self, db, company_id, user_id, customer_with_project):
        await sync_service.save_end_customer_with_sync(
            db,
            company_id,
            user_id,
            EndCustomerCreate(customer_id=customer_with_project.id, project_name="Villa D"),
        )
        await db.refresh(customer_with_project)

        assert customer_with_project.end_customer_project["project_name"] == "Villa A"

    async def test_missing_customer_still_saves(self, db, company_id, user_id):
        end_customer = await sync_service.save_end_customer_with_sync(
            db, company_id, user_id, EndCustomerCreate(customer_id=uuid4(), project_name="Orphan")
        )

        assert end_customer.id is not None


class TestDeleteWithSync:
    """Tests for deleting an end customer through the synchronizer."""

    async def test_clears_mirrored_snapshot(self, db, company_id, customer_with_project):
        migrated = await sync_service.sync_end_customers_from_embedded(
            db, company_id, customer_with_project.id
        )

        deleted = await sync_service.delete_end_customer_with_sync(
            db, migrated.id, company_id=company_id
        )
        await db.refresh(customer_with_project)

        assert deleted is True
        assert customer_with_project.has_end_customer_project is False
        assert customer_with_project.end_customer_project is None
        assert (
            await sync_service.get_all_end_customers_for_customer(
                db, company_id, customer_with_project.id
            )
            == []
        )

    async def test_deleting_renamed_migration_stays_deleted(
        self, db, company_id, customer_with_project
    ):
        """A migrated record renamed before deletion still clears the snapshot."""
        migrated = await sync_service.sync_end_customers_from_embedded(
            db, company_id, customer_with_project.id
        )
        await end_customer_service.update_end_customer(
            db, migrated, EndCustomerUpdate(project_name="Villa A2")
        )

        await sync_service.delete_end_customer_with_sync(db, migrated.id, company_id=company_id)
        end_customers = await sync_service.get_all_end_customers_for_customer(
            db, company_id, customer_with_project.id, auto_sync=True
        )
        await db.refresh(customer_with_project)

        assert end_customers == []
        assert customer_with_project.end_customer_project is None
        assert (
            await end_customer_service.get_end_customers_by_customer(
                db, company_id, customer_with_project.id
            )
            == []
        )

    async def test_keeps_snapshot_of_other_project(
        self, db, company_id, user_id, customer_with_project
    ):
        other = await end_customer_service.save_end_customer(
            db,
            company_id,
            user_id,
            EndCustomerCreate(customer_id=customer_with_project.id, project_name="Villa B"),
        )

        await sync_service.delete_end_customer_with_sync(
            db, other.id, customer_with_project.id, company_id
        )
        await db.refresh(customer_with_project)

        assert customer_with_project.end_customer_project["project_name"] == "Villa A"
        assert await db.get(EndCustomer, other.id) is None

    async def test_missing_record_returns_false(self, db, company_id):
        assert await sync_service.delete_end_customer_with_sync(db, uuid4(), company_id=company_id) is False

    async def test_other_company_cannot_delete(self, db, company_id, user_id, customer):
        end_customer = await end_customer_service.save_end_customer(
            db, company_id, user_id, EndCustomerCreate(customer_id=customer.id, project_name="V")
        )

        assert (
            await sync_service.delete_end_customer_with_sync(db, end_customer.id, company_id=uuid4())
            is False
        )
        assert await db.get(EndCustomer, end_customer.id) is not None

    async def test_snapshot_clear_failure_raises(
        self, db, company_id, customer_with_project, monkeypatch
    ):
        migrated = await sync_service.sync_end_customers_from_embedded(
            db, company_id, customer_with_project.id
        )

        async def failing_clear(*args, **kwargs):
            raise StoreIOError("Could not clear embedded end customer project")

        monkeypatch.setattr(sync_service, "_clear_embedded_project", failing_clear)

        with pytest.raises(StoreIOError):
            await sync_service.delete_end_customer_with_sync(db, migrated.id, company_id=company_id)


class TestCustomerUpdateKeepsUnion:
    """Replacing a customer's embedded project changes what the union shows."""

    async def test_new_snapshot_appears_in_union(self, db, company_id, customer):
        await customer_service.update_customer(
            db, customer, CustomerUpdate(end_customer_project=EndCustomerProject(project_name="New"))
        )

        end_customers = await sync_service.get_all_end_customers_for_customer(
            db, company_id, customer.id
        )

        assert [ec.project_name for ec in end_customers] == ["New"]
