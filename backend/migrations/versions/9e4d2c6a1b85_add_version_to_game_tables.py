"""add version counter to game tables

Revision ID: 9e4d2c6a1b85
Revises: 3c1f9a2b7d40
Create Date: 2025-10-09 21:12:00.000000

"""
from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = '9e4d2c6a1b85'
down_revision = '3c1f9a2b7d40'
branch_labels = None
depends_on = None

GAME_TABLES = ('rummy_game', 'chess_game', 'ace_game')


def upgrade():
    bind = op.get_bind()
    insp = sa.inspect(bind)
    existing_tables = set(insp.get_table_names())

    for table in GAME_TABLES:
        if table not in existing_tables:
            continue
        cols = {c['name'] for c in insp.get_columns(table)}
        if 'version' in cols:
            continue
        # Existing rows start at 1, same as a fresh insert
        with op.batch_alter_table(table) as batch_op:
            batch_op.add_column(sa.Column('version', sa.Integer(), nullable=False, server_default='1'))


def downgrade():
    bind = op.get_bind()
    insp = sa.inspect(bind)
    for table in GAME_TABLES:
        cols = {c['name'] for c in insp.get_columns(table)}
        if 'version' in cols:
            with op.batch_alter_table(table) as batch_op:
                batch_op.drop_column('version')
