"""Initial schema

Revision ID: 20261018_000001
Revises: None
Create Date: 2026-10-18

Creates the users, properties, tenants, invoices, receipts, expenses and
correspondence tables. Every business table carries user_id.
"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '20261018_000001'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _owned_columns():
    return [
        sa.Column('user_id', sa.Integer(), nullable=False),
        sa.Column('created_at', sa.DateTime(), server_default=sa.func.now(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), server_default=sa.func.now(), nullable=False),
    ]


def _user_fk(table: str):
    return sa.ForeignKeyConstraint(
        ['user_id'], ['users.id'], name=f'fk_{table}_user_id', ondelete='CASCADE'
    )


def upgrade() -> None:
    """Create every table."""
    op.create_table(
        'users',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('email', sa.String(length=255), nullable=False),
        sa.Column('name', sa.String(length=200), nullable=True),
        sa.Column('created_at', sa.DateTime(), server_default=sa.func.now(), nullable=False),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_users_email', 'users', ['email'], unique=True)

    op.create_table(
        'properties',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('name', sa.String(length=100), nullable=False),
        sa.Column('address', sa.String(length=200), nullable=False),
        sa.Column('property_type', sa.String(length=50), nullable=False),
        sa.Column('rent', sa.Numeric(precision=12, scale=2), nullable=False),
        sa.Column(
            'status',
            sa.Enum('occupied', 'vacant', 'maintenance', name='property_status', create_constraint=True),
            nullable=False,
        ),
        sa.Column('description', sa.Text(), nullable=True),
        *_owned_columns(),
        sa.PrimaryKeyConstraint('id'),
        _user_fk('properties'),
    )
    op.create_index('ix_properties_user_id', 'properties', ['user_id'])

    op.create_table(
        'tenants',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('property_id', sa.Integer(), nullable=True),
        sa.Column('name', sa.String(length=100), nullable=False),
        sa.Column('email', sa.String(length=255), nullable=False),
        sa.Column('phone', sa.String(length=20), nullable=True),
        sa.Column('tax_id', sa.String(length=20), nullable=True),
        sa.Column('rent', sa.Numeric(precision=12, scale=2), nullable=False),
        sa.Column('lease_start', sa.Date(), nullable=False),
        sa.Column('lease_end', sa.Date(), nullable=False),
        sa.Column(
            'payment_status',
            sa.Enum('paid', 'pending', 'overdue', name='tenant_payment_status', create_constraint=True),
            nullable=False,
        ),
        sa.Column('notes', sa.Text(), nullable=True),
        *_owned_columns(),
        sa.PrimaryKeyConstraint('id'),
        _user_fk('tenants'),
        sa.ForeignKeyConstraint(
            ['property_id'], ['properties.id'], name='fk_tenants_property_id', ondelete='SET NULL'
        ),
        sa.CheckConstraint('lease_end >= lease_start', name='ck_tenants_lease_period'),
    )
    op.create_index('ix_tenants_user_id', 'tenants', ['user_id'])
    op.create_index('ix_tenants_property_id', 'tenants', ['property_id'])

    op.create_table(
        'invoices',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('number', sa.String(length=30), nullable=False),
        sa.Column('tenant_id', sa.Integer(), nullable=True),
        sa.Column('property_id', sa.Integer(), nullable=True),
        sa.Column('amount', sa.Numeric(precision=12, scale=2), nullable=False),
        sa.Column('issue_date', sa.Date(), nullable=False),
        sa.Column('due_date', sa.Date(), nullable=False),
        sa.Column('paid_date', sa.Date(), nullable=True),
        sa.Column(
            'status',
            sa.Enum('pending', 'paid', 'overdue', 'cancelled', name='invoice_status', create_constraint=True),
            nullable=False,
        ),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('line_items', sa.JSON(), nullable=False),
        sa.Column('metadata', sa.JSON(), nullable=False),
        *_owned_columns(),
        sa.PrimaryKeyConstraint('id'),
        _user_fk('invoices'),
        sa.ForeignKeyConstraint(
            ['tenant_id'], ['tenants.id'], name='fk_invoices_tenant_id', ondelete='SET NULL'
        ),
        sa.ForeignKeyConstraint(
            ['property_id'], ['properties.id'], name='fk_invoices_property_id', ondelete='SET NULL'
        ),
        sa.UniqueConstraint('user_id', 'number', name='uq_invoices_user_number'),
    )

    # Create indexes for common queries
    op.create_index('ix_invoices_user_id', 'invoices', ['user_id'])
    op.create_index('ix_invoices_number', 'invoices', ['number'])
    op.create_index('ix_invoices_tenant_id', 'invoices', ['tenant_id'])
    op.create_index('ix_invoices_property_id', 'invoices', ['property_id'])
    op.create_index('ix_invoices_issue_date', 'invoices', ['issue_date'])
    op.create_index('ix_invoices_due_date', 'invoices', ['due_date'])
    op.create_index('ix_invoices_status', 'invoices', ['status'])

    op.create_table(
        'receipts',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('tenant_id', sa.Integer(), nullable=False),
        sa.Column('property_id', sa.Integer(), nullable=False),
        sa.Column('invoice_id', sa.Integer(), nullable=True),
        sa.Column('amount', sa.Numeric(precision=12, scale=2), nullable=False),
        sa.Column('date', sa.Date(), nullable=False),
        sa.Column(
            'type',
            sa.Enum('rent', 'deposit', 'maintenance', 'other', name='receipt_type', create_constraint=True),
            nullable=False,
        ),
        sa.Column(
            'status',
            sa.Enum('paid', 'pending', name='receipt_status', create_constraint=True),
            nullable=False,
        ),
        sa.Column('description', sa.String(length=500), nullable=True),
        *_owned_columns(),
        sa.PrimaryKeyConstraint('id'),
        _user_fk('receipts'),
        sa.ForeignKeyConstraint(
            ['tenant_id'], ['tenants.id'], name='fk_receipts_tenant_id', ondelete='CASCADE'
        ),
        sa.ForeignKeyConstraint(
            ['property_id'], ['properties.id'], name='fk_receipts_property_id', ondelete='NO ACTION'
        ),
        sa.ForeignKeyConstraint(
            ['invoice_id'], ['invoices.id'], name='fk_receipts_invoice_id', ondelete='SET NULL'
        ),
    )
    op.create_index('ix_receipts_user_id', 'receipts', ['user_id'])
    op.create_index('ix_receipts_tenant_id', 'receipts', ['tenant_id'])
    op.create_index('ix_receipts_property_id', 'receipts', ['property_id'])
    op.create_index('ix_receipts_date', 'receipts', ['date'])

    op.create_table(
        'expenses',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('property_id', sa.Integer(), nullable=False),
        sa.Column('amount', sa.Numeric(precision=12, scale=2), nullable=False),
        sa.Column('date', sa.Date(), nullable=False),
        sa.Column('category', sa.String(length=100), nullable=False),
        sa.Column('description', sa.String(length=500), nullable=True),
        *_owned_columns(),
        sa.PrimaryKeyConstraint('id'),
        _user_fk('expenses'),
        sa.ForeignKeyConstraint(
            ['property_id'], ['properties.id'], name='fk_expenses_property_id', ondelete='CASCADE'
        ),
    )
    op.create_index('ix_expenses_user_id', 'expenses', ['user_id'])
    op.create_index('ix_expenses_property_id', 'expenses', ['property_id'])
    op.create_index('ix_expenses_date', 'expenses', ['date'])

    op.create_table(
        'correspondence_templates',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('name', sa.String(length=100), nullable=False),
        sa.Column('type', sa.String(length=50), nullable=False),
        sa.Column('subject', sa.String(length=200), nullable=False),
        sa.Column('content', sa.Text(), nullable=False),
        sa.Column('variables', sa.JSON(), nullable=False),
        *_owned_columns(),
        sa.PrimaryKeyConstraint('id'),
        _user_fk('correspondence_templates'),
    )
    op.create_index('ix_correspondence_templates_user_id', 'correspondence_templates', ['user_id'])

    op.create_table(
        'correspondences',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('template_id', sa.Integer(), nullable=True),
        sa.Column('tenant_id', sa.Integer(), nullable=False),
        sa.Column('subject', sa.String(length=200), nullable=False),
        sa.Column('content', sa.Text(), nullable=False),
        sa.Column(
            'status',
            sa.Enum('draft', 'sent', name='correspondence_status', create_constraint=True),
            nullable=False,
        ),
        sa.Column('sent_at', sa.DateTime(), nullable=True),
        *_owned_columns(),
        sa.PrimaryKeyConstraint('id'),
        _user_fk('correspondences'),
        sa.ForeignKeyConstraint(
            ['template_id'], ['correspondence_templates.id'],
            name='fk_correspondences_template_id', ondelete='SET NULL'
        ),
        sa.ForeignKeyConstraint(
            ['tenant_id'], ['tenants.id'], name='fk_correspondences_tenant_id', ondelete='CASCADE'
        ),
    )
    op.create_index('ix_correspondences_user_id', 'correspondences', ['user_id'])
    op.create_index('ix_correspondences_template_id', 'correspondences', ['template_id'])
    op.create_index('ix_correspondences_tenant_id', 'correspondences', ['tenant_id'])


def downgrade() -> None:
    """Drop every table, dependents first."""
    for table in (
        'correspondences',
        'correspondence_templates',
        'expenses',
        'receipts',
        'invoices',
        'tenants',
        'properties',
        'users',
    ):
        op.drop_table(table)
