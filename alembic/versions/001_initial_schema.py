"""initial_caravan_schema

Revision ID: 001
Revises: 
Create Date: 2026-10-19 09:00:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '001'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _timestamps():
    return [
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
    ]


def upgrade() -> None:
    """Upgrade schema."""
    # Create users table
    op.create_table(
        'users',
        sa.Column('id', sa.String(), nullable=False),
        sa.Column('email', sa.String(255), nullable=False),
        sa.Column('name', sa.String(100), nullable=True),
        sa.Column('photo_url', sa.String(500), nullable=True),
        sa.Column('is_active', sa.Boolean(), nullable=False),
        sa.Column('nomad_verified', sa.Boolean(), nullable=False),
        sa.Column('vouch_count', sa.Integer(), nullable=False),
        sa.Column('last_login', sa.DateTime(timezone=True), nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_users_id', 'users', ['id'])
    op.create_index('ix_users_email', 'users', ['email'], unique=True)

    # One-time login codes
    op.create_table(
        'otp_codes',
        sa.Column('id', sa.String(), nullable=False),
        sa.Column('email', sa.String(255), nullable=False),
        sa.Column('code', sa.String(10), nullable=False),
        sa.Column('expires_at', sa.DateTime(timezone=True), nullable=False),
        *_timestamps(),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_otp_codes_id', 'otp_codes', ['id'])
    op.create_index('ix_otp_codes_email', 'otp_codes', ['email'])
    op.create_index('ix_otp_codes_email_code', 'otp_codes', ['email', 'code'])
    op.create_index('ix_otp_codes_expires_at', 'otp_codes', ['expires_at'])

    # Caravan requests; one pending request per ordered pair
    op.create_table(
        'match_requests',
        sa.Column('id', sa.String(), nullable=False),
        sa.Column('requester_id', sa.String(), nullable=False),
        sa.Column('target_id', sa.String(), nullable=False),
        sa.Column('status', sa.String(16), nullable=False),
        sa.Column('resolved_at', sa.DateTime(timezone=True), nullable=True),
        *_timestamps(),
        sa.ForeignKeyConstraint(['requester_id'], ['users.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['target_id'], ['users.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_match_requests_id', 'match_requests', ['id'])
    op.create_index('ix_match_requests_requester_id', 'match_requests', ['requester_id'])
    op.create_index('ix_match_requests_target_id', 'match_requests', ['target_id'])
    op.create_index(
        'uq_match_requests_pending_pair',
        'match_requests',
        ['requester_id', 'target_id'],
        unique=True,
        postgresql_where=sa.text("status = 'pending'"),
        sqlite_where=sa.text("status = 'pending'"),
    )

    # Vouches
    op.create_table(
        'vouches',
        sa.Column('id', sa.String(), nullable=False),
        sa.Column('voucher_id', sa.String(), nullable=False),
        sa.Column('vouchee_id', sa.String(), nullable=False),
        *_timestamps(),
        sa.ForeignKeyConstraint(['voucher_id'], ['users.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['vouchee_id'], ['users.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('voucher_id', 'vouchee_id', name='uq_vouch_pair'),
    )
    op.create_index('ix_vouches_id', 'vouches', ['id'])
    op.create_index('ix_vouches_vouchee_id', 'vouches', ['vouchee_id'])

    # Subscriptions, keyed by the RevenueCat app user id
    op.create_table(
        'subscriptions',
        sa.Column('id', sa.String(), nullable=False),
        sa.Column('app_user_id', sa.String(255), nullable=False),
        sa.Column('status', sa.String(16), nullable=False),
        sa.Column('plan', sa.String(32), nullable=False),
        sa.Column('expires_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('revenue_cat_id', sa.String(255), nullable=True),
        sa.Column('product_id', sa.String(255), nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_subscriptions_id', 'subscriptions', ['id'])
    op.create_index('ix_subscriptions_app_user_id', 'subscriptions', ['app_user_id'], unique=True)


def downgrade() -> None:
    """Downgrade schema."""
    op.drop_table('subscriptions')
    op.drop_table('vouches')
    op.drop_index('uq_match_requests_pending_pair', table_name='match_requests')
    op.drop_table('match_requests')
    op.drop_table('otp_codes')
    op.drop_table('users')
