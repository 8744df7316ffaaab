"""initial roster and per-variant game tables

Revision ID: 3c1f9a2b7d40
Revises:
Create Date: 2025-10-02 19:40:00.000000

"""
from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = '3c1f9a2b7d40'
down_revision = None
branch_labels = None
depends_on = None


def upgrade():
    op.create_table(
        'user',
        sa.Column('id', sa.String(length=64), nullable=False),
        sa.Column('username', sa.String(length=64), nullable=False),
        sa.Column('password_hash', sa.String(length=256), nullable=False),
        sa.Column('name', sa.String(length=64), nullable=False),
        sa.Column('role', sa.String(length=16), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=True),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index(op.f('ix_user_username'), 'user', ['username'], unique=True)

    op.create_table(
        'player',
        sa.Column('id', sa.String(length=64), nullable=False),
        sa.Column('name', sa.String(length=64), nullable=False),
        sa.Column('avatar', sa.String(length=16), nullable=False),
        sa.Column('wins', sa.Integer(), nullable=False),
        sa.Column('total_games', sa.Integer(), nullable=False),
        sa.Column('win_percentage', sa.Integer(), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=True),
        sa.PrimaryKeyConstraint('id'),
    )

    op.create_table(
        'rummy_game',
        sa.Column('id', sa.String(length=64), nullable=False),
        sa.Column('title', sa.String(length=128), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('status', sa.String(length=32), nullable=False),
        sa.Column('winner', sa.String(length=64), nullable=True),
        sa.Column('max_points', sa.Integer(), nullable=False),
        sa.Column('players_json', sa.Text(), nullable=False),
        sa.Column('rounds_json', sa.Text(), nullable=False),
        sa.Column('history_json', sa.Text(), nullable=True),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index(op.f('ix_rummy_game_created_at'), 'rummy_game', ['created_at'], unique=False)

    op.create_table(
        'chess_game',
        sa.Column('id', sa.String(length=64), nullable=False),
        sa.Column('title', sa.String(length=128), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('status', sa.String(length=32), nullable=False),
        sa.Column('winner', sa.String(length=64), nullable=True),
        sa.Column('player1_id', sa.String(length=64), nullable=False),
        sa.Column('player1_name', sa.String(length=64), nullable=False),
        sa.Column('player1_avatar', sa.String(length=16), nullable=False),
        sa.Column('player2_id', sa.String(length=64), nullable=False),
        sa.Column('player2_name', sa.String(length=64), nullable=False),
        sa.Column('player2_avatar', sa.String(length=16), nullable=False),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index(op.f('ix_chess_game_created_at'), 'chess_game', ['created_at'], unique=False)

    op.create_table(
        'ace_game',
        sa.Column('id', sa.String(length=64), nullable=False),
        sa.Column('title', sa.String(length=128), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('status', sa.String(length=32), nullable=False),
        sa.Column('winners', sa.Text(), nullable=True),
        sa.Column('players_json', sa.Text(), nullable=False),
        sa.Column('rounds_json', sa.Text(), nullable=False),
        sa.Column('history_json', sa.Text(), nullable=True),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index(op.f('ix_ace_game_created_at'), 'ace_game', ['created_at'], unique=False)


def downgrade():
    op.drop_index(op.f('ix_ace_game_created_at'), table_name='ace_game')
    op.drop_table('ace_game')
    op.drop_index(op.f('ix_chess_game_created_at'), table_name='chess_game')
    op.drop_table('chess_game')
    op.drop_index(op.f('ix_rummy_game_created_at'), table_name='rummy_game')
    op.drop_table('rummy_game')
    op.drop_table('player')
    op.drop_index(op.f('ix_user_username'), table_name='user')
    op.drop_table('user')
