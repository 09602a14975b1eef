"""Add session_id and country_code to analytics_events.

Revision ID: add_event_session_columns
Revises: add_user_insights
Create Date: 2026-10-12
"""
from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision = 'add_event_session_columns'
down_revision = 'add_user_insights'
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.add_column('analytics_events', sa.Column('session_id', sa.String(100), nullable=True))
    op.add_column('analytics_events', sa.Column('country_code', sa.String(8), nullable=True))

    # Collector filters by slug and window on every request
    op.create_index(
        'ix_analytics_events_slug_timestamp',
        'analytics_events',
        ['menu_slug', 'timestamp'],
        postgresql_where=sa.text("is_bot = false")
    )


def downgrade() -> None:
    op.drop_index('ix_analytics_events_slug_timestamp', table_name='analytics_events')
    op.drop_column('analytics_events', 'country_code')
    op.drop_column('analytics_events', 'session_id')
