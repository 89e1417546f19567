"""Create users and products tables

Revision ID: 20261019_users_products
Revises:
Create Date: 2026-10-19 09:00:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects.postgresql import JSONB


# revision identifiers, used by Alembic.
revision: str = '20261019_users_products'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

json_type = sa.JSON().with_variant(JSONB(), "postgresql")


def upgrade() -> None:
    """Create users and products (idempotent)."""
    conn = op.get_bind()
    existing_tables = sa.inspect(conn).get_table_names()

    if 'users' not in existing_tables:
        op.create_table(
            'users',
            sa.Column('id', sa.String(36), primary_key=True),
            sa.Column('auth_user_id', sa.String(255), nullable=True),
            sa.Column('username', sa.String(100), nullable=True, unique=True),
            sa.Column('email', sa.String(255), nullable=False),
            sa.Column('hashed_password', sa.String(255), nullable=True),
            sa.Column('first_name', sa.String(255), nullable=True),
            sa.Column('last_name', sa.String(255), nullable=True),
            sa.Column('profile_picture', sa.Text(), nullable=True),
            sa.Column('provider', sa.String(20), nullable=False),
            sa.Column('provider_id', sa.String(255), nullable=True),
            sa.Column('role', sa.String(20), nullable=True),
            sa.Column('account_status', sa.String(30), nullable=True),
            sa.Column('phone', sa.String(50), nullable=True),
            sa.Column('address', json_type, nullable=True),
            sa.Column('business_name', sa.String(255), nullable=True),
            sa.Column('business_type', sa.String(20), nullable=True),
            sa.Column('business_description', sa.Text(), nullable=True),
            sa.Column('business_verified', sa.Boolean(), nullable=True),
            sa.Column('rating', sa.Float(), nullable=True),
            sa.Column('total_sales', sa.Integer(), nullable=True),
            sa.Column('total_orders', sa.Integer(), nullable=True),
            sa.Column('admin_permissions', json_type, nullable=True),
            sa.Column('admin_notes', sa.Text(), nullable=True),
            sa.Column('created_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
            sa.Column('last_login_at', sa.DateTime(timezone=True), nullable=True),
            sa.Column('verified_at', sa.DateTime(timezone=True), nullable=True),
            sa.UniqueConstraint('provider', 'provider_id', name='uq_users_provider_identity'),
        )
        op.create_index('ix_users_auth_user_id', 'users', ['auth_user_id'])
        op.create_index('ix_users_email', 'users', ['email'])
        op.create_index('ix_users_role', 'users', ['role'])
        op.create_index('ix_users_account_status', 'users', ['account_status'])
        op.create_index('ix_users_business_verified', 'users', ['business_verified'])
        op.create_index('idx_users_role_status', 'users', ['role', 'account_status'])

    if 'products' not in existing_tables:
        op.create_table(
            'products',
            sa.Column('id', sa.String(36), primary_key=True),
            sa.Column('seller_id', sa.String(36), sa.ForeignKey('users.id'), nullable=False),
            sa.Column('title', sa.Text(), nullable=False),
            sa.Column('description', sa.Text(), nullable=False),
            sa.Column('category', sa.String(100), nullable=False),
            sa.Column('subcategory', sa.String(100), nullable=True),
            sa.Column('price', sa.Float(), nullable=False),
            sa.Column('compare_at_price', sa.Float(), nullable=True),
            sa.Column('currency', sa.String(3), nullable=False),
            sa.Column('inventory', sa.Integer(), nullable=False, server_default='0'),
            sa.Column('sku', sa.String(100), nullable=True),
            sa.Column('track_inventory', sa.Boolean(), nullable=False, server_default=sa.true()),
            sa.Column('images', json_type, nullable=False),
            sa.Column('weight', sa.Float(), nullable=True),
            sa.Column('dimensions', json_type, nullable=True),
            sa.Column('attributes', json_type, nullable=True),
            sa.Column('status', sa.String(20), nullable=False, server_default='draft'),
            sa.Column('featured', sa.Boolean(), nullable=False, server_default=sa.false()),
            sa.Column('tags', json_type, nullable=True),
            sa.Column('meta_title', sa.String(255), nullable=True),
            sa.Column('meta_description', sa.Text(), nullable=True),
            sa.Column('rating', sa.Float(), nullable=False, server_default='0'),
            sa.Column('review_count', sa.Integer(), nullable=False, server_default='0'),
            sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
            sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
            sa.Column('published_at', sa.DateTime(timezone=True), nullable=True),
        )
        op.create_index('ix_products_seller_id', 'products', ['seller_id'])
        op.create_index('ix_products_category', 'products', ['category'])
        op.create_index('ix_products_status', 'products', ['status'])
        op.create_index('ix_products_featured', 'products', ['featured'])
        op.create_index('ix_products_price', 'products', ['price'])
        op.create_index('ix_products_created_at', 'products', ['created_at'])


def downgrade() -> None:
    op.drop_table('products')
    op.drop_table('users')
