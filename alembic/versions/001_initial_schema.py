"""Initial marketplace schema

Revision ID: 001_initial_schema
Revises:
Create Date: 2025-10-01

This migration creates:
1. accounts, roles, account_roles
2. enterprise_accounts, external_links
3. products with categories, car models, brands, images and their join tables
4. account_saves
5. account_log, enterprise_log, product_log, account_save_log (append-only)
"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects.postgresql import JSONB

from marketplace.config.settings import settings


# revision identifiers, used by Alembic.
revision: str = '001_initial_schema'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

# Schema name
SCHEMA = settings.database_schema

SNAPSHOT = sa.JSON().with_variant(JSONB(), 'postgresql')


def _fk(table: str) -> str:
    return f'{SCHEMA}.{table}.id' if SCHEMA else f'{table}.id'


def _timestamps():
    return [
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
    ]


def _lookup(name: str, column: str, unique: bool) -> None:
    op.create_table(
        name,
        sa.Column('id', sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column(column, sa.String(500 if column == 'url' else 100), nullable=False, unique=unique),
        *_timestamps(),
        schema=SCHEMA,
    )


def _join(name: str, owner: str, owner_table: str, target: str, target_table: str) -> None:
    op.create_table(
        name,
        sa.Column(owner, sa.Integer(), sa.ForeignKey(_fk(owner_table), ondelete='CASCADE'), primary_key=True),
        sa.Column(target, sa.Integer(), sa.ForeignKey(_fk(target_table), ondelete='CASCADE'), primary_key=True, index=True),
        *_timestamps(),
        schema=SCHEMA,
    )


def _log(name: str, with_product: bool = False) -> None:
    columns = [
        sa.Column('id', sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column('subject_id', sa.Integer(), nullable=False, index=True),
        sa.Column('action', sa.String(50), nullable=False),
        sa.Column('snapshot', SNAPSHOT, nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
    ]
    if with_product:
        columns.append(sa.Column('product_id', sa.Integer(), nullable=False, index=True))
    op.create_table(name, *columns, schema=SCHEMA)


def upgrade() -> None:
    if SCHEMA:
        op.execute(f'CREATE SCHEMA IF NOT EXISTS {SCHEMA}')

    # 1. Accounts and roles
    op.create_table(
        'accounts',
        sa.Column('id', sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column('username', sa.String(50), nullable=False, unique=True),
        sa.Column('email', sa.String(100), nullable=False, unique=True),
        sa.Column('password_hash', sa.String(255), nullable=False),
        sa.Column('phone', sa.String(20), nullable=False),
        *_timestamps(),
        schema=SCHEMA,
    )
    _lookup('roles', 'name', unique=True)
    _join('account_roles', 'account_id', 'accounts', 'role_id', 'roles')

    # 2. Enterprises
    op.create_table(
        'enterprise_accounts',
        sa.Column('id', sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column('tax_id', sa.String(50), nullable=False, unique=True),
        sa.Column('address', sa.String(255), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('representative_name', sa.String(100), nullable=False),
        sa.Column('representative_id', sa.String(50), nullable=False),
        sa.Column('enabled', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('account_id', sa.Integer(), sa.ForeignKey(_fk('accounts'), ondelete='CASCADE'), nullable=True, unique=True),
        *_timestamps(),
        schema=SCHEMA,
    )
    op.create_table(
        'external_links',
        sa.Column('id', sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column('name', sa.String(100), nullable=False),
        sa.Column('url', sa.String(500), nullable=False),
        sa.Column('enterprise_id', sa.Integer(), sa.ForeignKey(_fk('enterprise_accounts'), ondelete='CASCADE'), nullable=False, index=True),
        *_timestamps(),
        schema=SCHEMA,
    )

    # 3. Products and their lookups
    op.create_table(
        'products',
        sa.Column('id', sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column('name', sa.String(200), nullable=False),
        sa.Column('stock', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('price', sa.Numeric(12, 2), nullable=False, server_default='0'),
        sa.Column('enterprise_id', sa.Integer(), sa.ForeignKey(_fk('enterprise_accounts'), ondelete='CASCADE'), nullable=True, index=True),
        *_timestamps(),
        schema=SCHEMA,
    )
    _lookup('categories', 'name', unique=True)
    _lookup('car_models', 'name', unique=False)
    _lookup('brands', 'name', unique=False)
    _lookup('images', 'url', unique=False)
    _join('product_categories', 'product_id', 'products', 'category_id', 'categories')
    _join('product_car_models', 'product_id', 'products', 'car_model_id', 'car_models')
    _join('product_brands', 'product_id', 'products', 'brand_id', 'brands')
    _join('product_images', 'product_id', 'products', 'image_id', 'images')

    # 4. Saves
    _join('account_saves', 'account_id', 'accounts', 'product_id', 'products')

    # 5. Audit logs
    _log('account_log')
    _log('enterprise_log')
    _log('product_log')
    _log('account_save_log', with_product=True)


def downgrade() -> None:
    for table in (
        'account_save_log',
        'product_log',
        'enterprise_log',
        'account_log',
        'account_saves',
        'product_images',
        'product_brands',
        'product_car_models',
        'product_categories',
        'images',
        'brands',
        'car_models',
        'categories',
        'products',
        'external_links',
        'enterprise_accounts',
        'account_roles',
        'roles',
        'accounts',
    ):
        op.drop_table(table, schema=SCHEMA)
