"""create crm and document numbering tables

Revision ID: 3f9c2a1d7e01
Revises:
Create Date: 2026-10-19 09:00:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision: str = '3f9c2a1d7e01'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _usage_columns() -> list[sa.Column]:
    return [
        sa.Column('usage_count', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('last_used_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('id', sa.UUID(), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False),
    ]


def upgrade() -> None:
    """Upgrade database schema."""
    op.create_table('customers',
        sa.Column('company_id', sa.UUID(), nullable=False),
        sa.Column('user_id', sa.String(length=128), nullable=False),
        sa.Column('customer_name', sa.String(length=255), nullable=False),
        sa.Column('customer_type', sa.String(length=20), nullable=False),
        sa.Column('phone', sa.String(length=50), nullable=False),
        sa.Column('alternate_phone', sa.String(length=50), nullable=True),
        sa.Column('email', sa.String(length=255), nullable=True),
        sa.Column('line_id', sa.String(length=100), nullable=True),
        sa.Column('address', sa.Text(), nullable=False, server_default=''),
        sa.Column('district', sa.String(length=100), nullable=True),
        sa.Column('amphoe', sa.String(length=100), nullable=True),
        sa.Column('province', sa.String(length=100), nullable=True),
        sa.Column('postal_code', sa.String(length=10), nullable=True),
        sa.Column('project_name', sa.String(length=255), nullable=True),
        sa.Column('house_number', sa.String(length=50), nullable=True),
        sa.Column('tax_id', sa.String(length=20), nullable=True),
        sa.Column('branch_code', sa.String(length=10), nullable=True),
        sa.Column('branch_name', sa.String(length=255), nullable=True),
        sa.Column('tags', postgresql.JSONB(astext_type=sa.Text()), nullable=False, server_default='[]'),
        sa.Column('notes', sa.Text(), nullable=True),
        sa.Column('has_end_customer_project', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('end_customer_project', postgresql.JSONB(astext_type=sa.Text()), nullable=True),
        *_usage_columns(),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_customers_company_id', 'customers', ['company_id'], unique=False)
    op.create_index('ix_customers_last_used_at', 'customers', ['last_used_at'], unique=False)
    # Recent customers per company
    op.create_index('ix_customer_company_last_used', 'customers', ['company_id', 'last_used_at'], unique=False)

    # customer_id is not a foreign key: deleting a customer leaves its end customers in place
    op.create_table('end_customers',
        sa.Column('customer_id', sa.UUID(), nullable=False),
        sa.Column('company_id', sa.UUID(), nullable=False),
        sa.Column('user_id', sa.String(length=128), nullable=False),
        sa.Column('project_name', sa.String(length=255), nullable=False),
        sa.Column('project_address', sa.Text(), nullable=True),
        sa.Column('contact_name', sa.String(length=255), nullable=True),
        sa.Column('contact_phone', sa.String(length=50), nullable=True),
        sa.Column('contact_email', sa.String(length=255), nullable=True),
        sa.Column('notes', sa.Text(), nullable=True),
        *_usage_columns(),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_end_customers_customer_id', 'end_customers', ['customer_id'], unique=False)
    op.create_index('ix_end_customers_company_id', 'end_customers', ['company_id'], unique=False)
    op.create_index('ix_end_customers_last_used_at', 'end_customers', ['last_used_at'], unique=False)
    op.create_index('ix_end_customer_company_customer', 'end_customers', ['company_id', 'customer_id'], unique=False)

    op.create_table('contractors',
        sa.Column('company_id', sa.UUID(), nullable=False),
        sa.Column('user_id', sa.String(length=128), nullable=False),
        sa.Column('contractor_name', sa.String(length=255), nullable=False),
        sa.Column('contractor_type', sa.String(length=20), nullable=False),
        sa.Column('phone', sa.String(length=50), nullable=False),
        sa.Column('alternate_phone', sa.String(length=50), nullable=True),
        sa.Column('email', sa.String(length=255), nullable=True),
        sa.Column('line_id', sa.String(length=100), nullable=True),
        sa.Column('address', sa.Text(), nullable=False, server_default=''),
        sa.Column('district', sa.String(length=100), nullable=True),
        sa.Column('amphoe', sa.String(length=100), nullable=True),
        sa.Column('province', sa.String(length=100), nullable=True),
        sa.Column('postal_code', sa.String(length=10), nullable=True),
        sa.Column('id_card', sa.String(length=20), nullable=True),
        sa.Column('tax_id', sa.String(length=20), nullable=True),
        sa.Column('specialties', postgresql.JSONB(astext_type=sa.Text()), nullable=False, server_default='[]'),
        sa.Column('tags', postgresql.JSONB(astext_type=sa.Text()), nullable=False, server_default='[]'),
        sa.Column('notes', sa.Text(), nullable=True),
        *_usage_columns(),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_contractors_company_id', 'contractors', ['company_id'], unique=False)
    op.create_index('ix_contractors_last_used_at', 'contractors', ['last_used_at'], unique=False)

    op.create_table('document_counters',
        sa.Column('company_id', sa.UUID(), nullable=False),
        sa.Column('document_type', sa.String(length=50), nullable=False),
        sa.Column('day_key', sa.String(length=6), nullable=False),
        sa.Column('last_number', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('id', sa.UUID(), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint('id'),
        # Target of INSERT ... ON CONFLICT DO NOTHING when a day's counter is first used
        sa.UniqueConstraint('company_id', 'document_type', 'day_key', name='uq_document_counter_key')
    )


def downgrade() -> None:
    """Downgrade database schema."""
    op.drop_table('document_counters')
    op.drop_index('ix_contractors_last_used_at', table_name='contractors')
    op.drop_index('ix_contractors_company_id', table_name='contractors')
    op.drop_table('contractors')
    op.drop_index('ix_end_customer_company_customer', table_name='end_customers')
    op.drop_index('ix_end_customers_last_used_at', table_name='end_customers')
    op.drop_index('ix_end_customers_company_id', table_name='end_customers')
    op.drop_index('ix_end_customers_customer_id', table_name='end_customers')
    op.drop_table('end_customers')
    op.drop_index('ix_customer_company_last_used', table_name='customers')
    op.drop_index('ix_customers_last_used_at', table_name='customers')
    op.drop_index('ix_customers_company_id', table_name='customers')
    op.drop_table('customers')
