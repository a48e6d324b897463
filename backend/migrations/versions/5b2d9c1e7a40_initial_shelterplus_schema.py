"""initial shelterplus schema: lobbies, games, cards, votes, minutes, events, invites

Revision ID: 5b2d9c1e7a40
Revises:
Create Date: 2026-09-02 18:20:00.000000

"""
from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = '5b2d9c1e7a40'
down_revision = None
branch_labels = None
depends_on = None


def _timestamps():
    return [
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=False),
    ]


def upgrade():
    op.create_table(
        'user',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('discord_id', sa.String(length=32), nullable=False),
        sa.Column('username', sa.String(length=128), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False),
    )
    op.create_index('ix_user_discord_id', 'user', ['discord_id'], unique=True)

    op.create_table(
        'lobby',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('mode', sa.String(length=16), nullable=False),
        sa.Column('rounds', sa.Integer(), nullable=False),
        sa.Column('minute_duration_sec', sa.Integer(), nullable=False),
        sa.Column('enabled_categories', sa.JSON(), nullable=False),
        sa.Column('channels_config', sa.JSON(), nullable=True),
        *_timestamps(),
    )

    op.create_table(
        'lobby_player',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('lobby_id', sa.Integer(), sa.ForeignKey('lobby.id', ondelete='CASCADE'), nullable=False),
        sa.Column('number', sa.Integer(), nullable=False),
        sa.Column('nickname', sa.String(length=128), nullable=False),
        sa.Column('discord_id', sa.String(length=32), nullable=True),
    )
    op.create_index('ix_lobby_player_lobby_id', 'lobby_player', ['lobby_id'])

    op.create_table(
        'game',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('lobby_id', sa.Integer(), sa.ForeignKey('lobby.id', ondelete='CASCADE'), nullable=False),
        sa.Column('apocalypse', sa.Text(), nullable=False),
        sa.Column('bunker', sa.Text(), nullable=False),
        sa.Column('seats', sa.Integer(), nullable=False),
        sa.Column('current_round', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('is_spectators_enabled', sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column('ending', sa.JSON(), nullable=True),
        *_timestamps(),
        sa.UniqueConstraint('lobby_id', name='uq_game_lobby_id'),
    )

    op.create_table(
        'player',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('game_id', sa.Integer(), sa.ForeignKey('game.id', ondelete='CASCADE'), nullable=False),
        sa.Column('number', sa.Integer(), nullable=False),
        sa.Column('nickname', sa.String(length=128), nullable=False),
        sa.Column('discord_id', sa.String(length=32), nullable=True),
        sa.Column('status', sa.String(length=16), nullable=False, server_default='ALIVE'),
        sa.Column('role', sa.String(length=16), nullable=False, server_default='PLAYER'),
    )
    op.create_index('ix_player_game_id', 'player', ['game_id'])

    op.create_table(
        'card',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('player_id', sa.Integer(), sa.ForeignKey('player.id', ondelete='CASCADE'), nullable=False),
        sa.Column('category', sa.String(length=32), nullable=False),
        sa.Column('payload', sa.JSON(), nullable=False),
        sa.Column('is_open', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('opened_at', sa.DateTime(), nullable=True),
        sa.Column('opened_round', sa.Integer(), nullable=True),
    )
    op.create_index('ix_card_player_id', 'card', ['player_id'])

    op.create_table(
        'vote',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('game_id', sa.Integer(), sa.ForeignKey('game.id', ondelete='CASCADE'), nullable=False),
        sa.Column('round', sa.Integer(), nullable=False),
        sa.Column('voter_player_id', sa.Integer(), sa.ForeignKey('player.id', ondelete='CASCADE'), nullable=False),
        sa.Column('target_player_id', sa.Integer(), sa.ForeignKey('player.id', ondelete='CASCADE'), nullable=True),
        sa.Column('source', sa.String(length=16), nullable=False, server_default='WEB'),
        *_timestamps(),
        sa.UniqueConstraint('game_id', 'round', 'voter_player_id', name='uq_vote_game_round_voter'),
    )
    op.create_index('ix_vote_game_id', 'vote', ['game_id'])

    op.create_table(
        'minute_request',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('game_id', sa.Integer(), sa.ForeignKey('game.id', ondelete='CASCADE'), nullable=False),
        sa.Column('round', sa.Integer(), nullable=False),
        sa.Column('player_id', sa.Integer(), sa.ForeignKey('player.id', ondelete='CASCADE'), nullable=False),
        sa.Column('position', sa.Integer(), nullable=False),
        sa.Column('approved', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('started_at', sa.DateTime(), nullable=True),
        sa.Column('duration_sec', sa.Integer(), nullable=True),
        *_timestamps(),
    )
    op.create_index('ix_minute_request_game_id', 'minute_request', ['game_id'])

    op.create_table(
        'reveal_plan',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('game_id', sa.Integer(), sa.ForeignKey('game.id', ondelete='CASCADE'), nullable=False),
        sa.Column('player_id', sa.Integer(), sa.ForeignKey('player.id', ondelete='CASCADE'), nullable=False),
        sa.Column('round', sa.Integer(), nullable=False),
        sa.Column('categories', sa.JSON(), nullable=False),
        *_timestamps(),
        sa.UniqueConstraint('game_id', 'player_id', 'round', name='uq_reveal_plan_game_player_round'),
    )
    op.create_index('ix_reveal_plan_game_id', 'reveal_plan', ['game_id'])

    op.create_table(
        'game_event',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('game_id', sa.Integer(), sa.ForeignKey('game.id', ondelete='CASCADE'), nullable=False),
        sa.Column('type', sa.String(length=64), nullable=False),
        sa.Column('payload', sa.JSON(), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False),
    )
    op.create_index('ix_game_event_type', 'game_event', ['type'])
    op.create_index('ix_game_event_game_created', 'game_event', ['game_id', 'created_at'])

    op.create_table(
        'game_admin',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('game_id', sa.Integer(), sa.ForeignKey('game.id', ondelete='CASCADE'), nullable=False),
        sa.Column('user_id', sa.String(length=64), nullable=False),
        sa.Column('role', sa.String(length=16), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.UniqueConstraint('game_id', 'user_id', name='uq_game_admin_game_user'),
    )
    op.create_index('ix_game_admin_game_id', 'game_admin', ['game_id'])

    op.create_table(
        'invite',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('game_id', sa.Integer(), sa.ForeignKey('game.id', ondelete='CASCADE'), nullable=False),
        sa.Column('code', sa.String(length=8), nullable=False),
        sa.Column('role', sa.String(length=16), nullable=False),
        sa.Column('expires_at', sa.DateTime(), nullable=False),
        sa.Column('used_by_user_id', sa.String(length=64), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False),
    )
    op.create_index('ix_invite_game_id', 'invite', ['game_id'])
    op.create_index('ix_invite_code', 'invite', ['code'], unique=True)


def downgrade():
    for table in ('invite', 'game_admin', 'game_event', 'reveal_plan', 'minute_request',
                  'vote', 'card', 'player', 'game', 'lobby_player', 'lobby', 'user'):
        op.drop_table(table)
