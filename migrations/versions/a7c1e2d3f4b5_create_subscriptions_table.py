"""create subscriptions table

Revision ID: a7c1e2d3f4b5
Revises:
Create Date: 2025-09-01
"""
from alembic import op
import sqlalchemy as sa


revision = 'a7c1e2d3f4b5'
down_revision = None
branch_labels = None
depends_on = None


def upgrade():
    op.create_table(
        'subscriptions',
        sa.Column('id', sa.Uuid(), primary_key=True),
        sa.Column('service_name', sa.String(), nullable=False),
        sa.Column('price', sa.Integer(), nullable=False),
        sa.Column('user_id', sa.Uuid(), nullable=False),
        sa.Column('start_date', sa.Date(), nullable=False),
        sa.Column('end_date', sa.Date(), nullable=True),
    )
    op.create_index('idx_subscriptions_user', 'subscriptions', ['user_id'])


def downgrade():
    op.drop_index('idx_subscriptions_user', table_name='subscriptions')
    op.drop_table('subscriptions')
