"""Add user_insights table for stored insights reports.

Revision ID: add_user_insights
Revises:
Create Date: 2026-10-12
"""
from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision = 'add_user_insights'
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        'user_insights',
        sa.Column('id', postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column('user_id', postgresql.UUID(as_uuid=True),
                  sa.ForeignKey('users.id', ondelete='CASCADE'),
                  nullable=False, unique=True, index=True),
        # Full report as serialized JSON
        sa.Column('insights', sa.Text(), nullable=False),
        sa.Column('generated_at', sa.DateTime(timezone=True),
                  server_default=sa.func.now(), nullable=False),
        sa.Column('confidence', sa.Float(), nullable=False),
        sa.Column('data_quality', sa.String(20), nullable=False),
        sa.Column('analysis_type', sa.String(20), nullable=False),
    )


def downgrade() -> None:
    op.drop_table('user_insights')
