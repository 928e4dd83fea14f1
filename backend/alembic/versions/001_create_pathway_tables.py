"""Create procedure, hidden cost and hospital tables

Revision ID: 001_pathway
Revises: 
Create Date: 2026-10-19

This migration adds:
- procedures: Canonical procedures with private and PMJAY costs
- hidden_costs: Line items missing from sticker prices, per procedure
- hospitals: Hospitals with PMJAY empanelment and rating
"""

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = '001_pathway'
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    # Create procedures table
    op.create_table(
        'procedures',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('name', sa.String(255), nullable=False),
        sa.Column('avg_private_cost', sa.Float(), nullable=False),
        sa.Column('pmjay_rate', sa.Float(), nullable=True),
        sa.Column('recovery_days', sa.Integer(), nullable=True),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_procedures_id', 'procedures', ['id'])
    op.create_index('ix_procedures_name', 'procedures', ['name'])

    # Create hidden_costs table
    op.create_table(
        'hidden_costs',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('procedure_id', sa.Integer(), nullable=False),
        sa.Column('item_name', sa.String(255), nullable=False),
        sa.Column('avg_cost', sa.Float(), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('is_avoidable', sa.Boolean(), default=True, nullable=True),
        sa.PrimaryKeyConstraint('id'),
        sa.ForeignKeyConstraint(['procedure_id'], ['procedures.id'], ondelete='CASCADE'),
    )
    op.create_index('ix_hidden_costs_id', 'hidden_costs', ['id'])
    op.create_index('ix_hidden_costs_procedure_id', 'hidden_costs', ['procedure_id'])

    # Create hospitals table
    op.create_table(
        'hospitals',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('name', sa.String(255), nullable=False),
        sa.Column('location', sa.String(255), nullable=False),
        sa.Column('is_pmjay_empaneled', sa.Boolean(), default=False, nullable=True),
        sa.Column('rating', sa.Float(), default=0.0, nullable=True),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_hospitals_id', 'hospitals', ['id'])
    op.create_index('ix_hospitals_name', 'hospitals', ['name'])
    op.create_index('ix_hospitals_location', 'hospitals', ['location'])
    op.create_index('ix_hospitals_is_pmjay_empaneled', 'hospitals', ['is_pmjay_empaneled'])


def downgrade() -> None:
    op.drop_table('hidden_costs')
    op.drop_table('procedures')
    op.drop_table('hospitals')
