"""Create referral core tables

Revision ID: 20260301_000001
Revises:
Create Date: 2026-03-01

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '20260301_000001'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    # Users (referral fields of the platform user aggregate)
    op.create_table(
        'users',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('username', sa.String(255), nullable=True),
        sa.Column('email', sa.String(255), nullable=True),
        sa.Column('nickname', sa.String(100), nullable=True),
        sa.Column('is_active', sa.Boolean(), nullable=False, server_default='true'),
        sa.Column('is_banned', sa.Boolean(), nullable=False, server_default='false'),
        sa.Column('referral_code', sa.String(32), nullable=True),
        sa.Column('inviter_id', sa.Integer(), nullable=True),
        sa.Column('invited_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('commission_balance', sa.DECIMAL(12, 2), nullable=False, server_default='0'),
        sa.Column('total_commission_earned', sa.DECIMAL(12, 2), nullable=False, server_default='0'),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.ForeignKeyConstraint(['inviter_id'], ['users.id'], ondelete='SET NULL'),
        sa.PrimaryKeyConstraint('id'),
        sa.CheckConstraint('commission_balance >= 0', name='check_user_commission_balance_non_negative'),
        sa.CheckConstraint('total_commission_earned >= 0', name='check_user_total_commission_earned_non_negative'),
    )
    op.create_index('ix_users_username', 'users', ['username'])
    op.create_index('ix_users_referral_code', 'users', ['referral_code'], unique=True)
    op.create_index('ix_users_inviter_id', 'users', ['inviter_id'])

    # Inviter bindings
    op.create_table(
        'user_referrals',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('inviter_id', sa.Integer(), nullable=False),
        sa.Column('invitee_id', sa.Integer(), nullable=False),
        sa.Column('referral_code', sa.String(32), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.ForeignKeyConstraint(['inviter_id'], ['users.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['invitee_id'], ['users.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('invitee_id', name='uq_user_referrals_invitee'),
        sa.CheckConstraint('inviter_id <> invitee_id', name='check_user_referrals_not_self'),
    )
    op.create_index('ix_user_referrals_inviter_id', 'user_referrals', ['inviter_id'])

    # Commission rules and other versioned settings
    op.create_table(
        'system_settings',
        sa.Column('key', sa.String(100), nullable=False),
        sa.Column('value', sa.JSON(), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('version', sa.Integer(), nullable=False, server_default='1'),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column('updated_by', sa.Integer(), nullable=True),
        sa.ForeignKeyConstraint(['updated_by'], ['users.id'], ondelete='SET NULL'),
        sa.PrimaryKeyConstraint('key'),
    )

    # Paid event journal
    op.create_table(
        'referral_paid_events',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('invitee_id', sa.Integer(), nullable=False),
        sa.Column('order_id', sa.String(64), nullable=False),
        sa.Column('source', sa.String(32), nullable=False),
        sa.Column('order_amount', sa.DECIMAL(12, 2), nullable=False, server_default='0'),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.ForeignKeyConstraint(['invitee_id'], ['users.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('order_id', name='uq_referral_paid_events_order'),
    )
    op.create_index('idx_referral_paid_events_invitee', 'referral_paid_events', ['invitee_id', 'created_at'])

    # Commission records
    op.create_table(
        'referral_commissions',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('inviter_id', sa.Integer(), nullable=False),
        sa.Column('invitee_id', sa.Integer(), nullable=False),
        sa.Column('order_id', sa.String(64), nullable=True),
        sa.Column('order_amount', sa.DECIMAL(12, 2), nullable=False),
        sa.Column('commission_amount', sa.DECIMAL(12, 2), nullable=False),
        sa.Column('commission_rate', sa.DECIMAL(6, 4), nullable=False),
        sa.Column('event_type', sa.String(20), nullable=False),
        sa.Column('status', sa.String(20), nullable=False, server_default='pending'),
        sa.Column('review_notes', sa.Text(), nullable=True),
        sa.Column('reviewed_by', sa.Integer(), nullable=True),
        sa.Column('reviewed_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column('settled_at', sa.DateTime(timezone=True), nullable=True),
        sa.ForeignKeyConstraint(['inviter_id'], ['users.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['invitee_id'], ['users.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['reviewed_by'], ['users.id'], ondelete='SET NULL'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('order_id', name='uq_referral_commissions_order'),
        sa.CheckConstraint('commission_amount > 0', name='check_referral_commissions_amount_positive'),
        sa.CheckConstraint("event_type IN ('first_recharge', 'renewal')", name='check_referral_commissions_event_type'),
        sa.CheckConstraint(
            "status IN ('pending', 'approved', 'rejected', 'paid')",
            name='check_referral_commissions_status',
        ),
    )
    op.create_index('ix_referral_commissions_inviter_id', 'referral_commissions', ['inviter_id'])
    op.create_index('ix_referral_commissions_invitee_id', 'referral_commissions', ['invitee_id'])
    op.create_index('ix_referral_commissions_status', 'referral_commissions', ['status'])
    op.create_index('ix_referral_commissions_created_at', 'referral_commissions', ['created_at'])

    # Payout destinations
    op.create_table(
        'referral_payout_settings',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('user_id', sa.Integer(), nullable=False),
        sa.Column('method', sa.String(20), nullable=False),
        sa.Column('account', sa.String(255), nullable=False),
        sa.Column('account_name', sa.String(100), nullable=True),
        sa.Column('usdt_network', sa.String(32), nullable=True),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column('updated_by', sa.Integer(), nullable=True),
        sa.ForeignKeyConstraint(['user_id'], ['users.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['updated_by'], ['users.id'], ondelete='SET NULL'),
        sa.PrimaryKeyConstraint('id'),
        sa.CheckConstraint("method IN ('alipay', 'usdt')", name='check_referral_payout_settings_method'),
    )
    op.create_index('ix_referral_payout_settings_user_id', 'referral_payout_settings', ['user_id'], unique=True)

    # Payout requests
    op.create_table(
        'referral_payout_requests',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('user_id', sa.Integer(), nullable=False),
        sa.Column('amount', sa.DECIMAL(12, 2), nullable=False),
        sa.Column('method', sa.String(20), nullable=False),
        sa.Column('account', sa.String(255), nullable=False),
        sa.Column('account_name', sa.String(100), nullable=True),
        sa.Column('usdt_network', sa.String(32), nullable=True),
        sa.Column('status', sa.String(20), nullable=False, server_default='pending'),
        sa.Column('requested_notes', sa.Text(), nullable=True),
        sa.Column('review_notes', sa.Text(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column('reviewed_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('reviewed_by', sa.Integer(), nullable=True),
        sa.Column('paid_at', sa.DateTime(timezone=True), nullable=True),
        sa.ForeignKeyConstraint(['user_id'], ['users.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['reviewed_by'], ['users.id'], ondelete='SET NULL'),
        sa.PrimaryKeyConstraint('id'),
        sa.CheckConstraint('amount > 0', name='check_referral_payout_requests_amount_positive'),
        sa.CheckConstraint("method IN ('alipay', 'usdt')", name='check_referral_payout_requests_method'),
        sa.CheckConstraint(
            "status IN ('pending', 'approved', 'rejected', 'paid')",
            name='check_referral_payout_requests_status',
        ),
    )
    op.create_index('ix_referral_payout_requests_user_id', 'referral_payout_requests', ['user_id'])
    op.create_index('ix_referral_payout_requests_status', 'referral_payout_requests', ['status'])
    op.create_index('ix_referral_payout_requests_created_at', 'referral_payout_requests', ['created_at'])


def downgrade() -> None:
    op.drop_index('ix_referral_payout_requests_created_at', 'referral_payout_requests')
    op.drop_index('ix_referral_payout_requests_status', 'referral_payout_requests')
    op.drop_index('ix_referral_payout_requests_user_id', 'referral_payout_requests')
    op.drop_table('referral_payout_requests')

    op.drop_index('ix_referral_payout_settings_user_id', 'referral_payout_settings')
    op.drop_table('referral_payout_settings')

    op.drop_index('ix_referral_commissions_created_at', 'referral_commissions')
    op.drop_index('ix_referral_commissions_status', 'referral_commissions')
    op.drop_index('ix_referral_commissions_invitee_id', 'referral_commissions')
    op.drop_index('ix_referral_commissions_inviter_id', 'referral_commissions')
    op.drop_table('referral_commissions')

    op.drop_index('idx_referral_paid_events_invitee', 'referral_paid_events')
    op.drop_table('referral_paid_events')

    op.drop_table('system_settings')

    op.drop_index('ix_user_referrals_inviter_id', 'user_referrals')
    op.drop_table('user_referrals')

    op.drop_index('ix_users_inviter_id', 'users')
    op.drop_index('ix_users_referral_code', 'users')
    op.drop_index('ix_users_username', 'users')
    op.drop_table('users')
