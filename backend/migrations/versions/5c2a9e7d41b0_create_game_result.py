"""create game_result ledger

Revision ID: 5c2a9e7d41b0
Revises:
Create Date: 2025-10-06 00:00:00
"""

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = '5c2a9e7d41b0'
down_revision = None
branch_labels = None
depends_on = None


def upgrade():
    bind = op.get_bind()
    insp = sa.inspect(bind)
    # create_app() may already have created the table on first boot
    if 'game_result' in set(insp.get_table_names()):
        return
    op.create_table(
        'game_result',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('total_score', sa.Integer(), nullable=False),
        sa.Column('skill1', sa.Integer(), nullable=False),
        sa.Column('skill2', sa.Integer(), nullable=False),
        sa.Column('skill3', sa.Integer(), nullable=False),
        sa.Column('nfc_id', sa.String(length=64), nullable=True),
        sa.Column('status', sa.String(length=16), nullable=False),
        sa.Column('error', sa.Text(), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=True),
        sa.Column('updated_at', sa.DateTime(), nullable=True),
    )
    op.create_index('ix_game_result_nfc_id', 'game_result', ['nfc_id'])


def downgrade():
    op.drop_index('ix_game_result_nfc_id', table_name='game_result')
    op.drop_table('game_result')
