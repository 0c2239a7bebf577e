"""Create candidate score tables

Revision ID: 001_create_score_tables
Revises:
Create Date: 2026-10-17 12:00:00.000000

"""
from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision = '001_create_score_tables'
down_revision = None
branch_labels = None
depends_on = None


def upgrade():
    op.create_table('candidate_scores',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('roll_no', sa.String(length=64), nullable=False),
        sa.Column('points', sa.Float(), server_default='0', nullable=False),
        sa.Column('created_at', sa.DateTime(), server_default=sa.func.now(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), server_default=sa.func.now(), nullable=False),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('roll_no', name='uq_candidate_scores_roll_no')
    )
    op.create_index('ix_candidate_scores_id', 'candidate_scores', ['id'])
    op.create_index('idx_candidate_scores_points', 'candidate_scores', ['points'])

    op.create_table('candidate_score_ratings',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('roll_no', sa.String(length=64), nullable=False),
        sa.Column('rater', sa.String(length=128), nullable=True),
        sa.Column('points', sa.Float(), nullable=False),
        sa.Column('created_at', sa.DateTime(), server_default=sa.func.now(), nullable=False),
        sa.ForeignKeyConstraint(['roll_no'], ['candidate_scores.roll_no'], ),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('roll_no', 'rater', name='uq_candidate_score_ratings_roll_rater')
    )
    op.create_index('ix_candidate_score_ratings_id', 'candidate_score_ratings', ['id'])
    op.create_index('ix_candidate_score_ratings_roll_no', 'candidate_score_ratings', ['roll_no'])
    op.create_index('ix_candidate_score_ratings_rater', 'candidate_score_ratings', ['rater'])


def downgrade():
    op.drop_index('ix_candidate_score_ratings_rater', table_name='candidate_score_ratings')
    op.drop_index('ix_candidate_score_ratings_roll_no', table_name='candidate_score_ratings')
    op.drop_index('ix_candidate_score_ratings_id', table_name='candidate_score_ratings')
    op.drop_table('candidate_score_ratings')
    op.drop_index('idx_candidate_scores_points', table_name='candidate_scores')
    op.drop_index('ix_candidate_scores_id', table_name='candidate_scores')
    op.drop_table('candidate_scores')
