from shelterplus import db
from flask_login import UserMixin
from datetime import datetime, timezone


def utcnow() -> datetime:
    """Naive UTC timestamp, the form every DateTime column stores."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def to_iso(value):
    return value.isoformat() + 'Z' if value else None


class User(UserMixin, db.Model):
    __tablename__ = 'user'
    id = db.Column(db.Integer, primary_key=True)
    discord_id = db.Column(db.String(32), unique=True, nullable=False, index=True)
    username = db.Column(db.String(128), nullable=False)
    created_at = db.Column(db.DateTime, default=utcnow, nullable=False)

    def to_dict(self):
        return {
            'id': self.id,
            'discordId': self.discord_id,
            'username': self.username,
        }


class Lobby(db.Model):
    __tablename__ = 'lobby'
    id = db.Column(db.Integer, primary_key=True)
    mode = db.Column(db.String(16), nullable=False)  # OFFICIAL, CUSTOM, WEB
    rounds = db.Column(db.Integer, nullable=False)
    minute_duration_sec = db.Column(db.Integer, nullable=False)
    enabled_categories = db.Column(db.JSON, nullable=False)
    channels_config = db.Column(db.JSON(none_as_null=True), nullable=True)
    created_at = db.Column(db.DateTime, default=utcnow, nullable=False)
    updated_at = db.Column(db.DateTime, default=utcnow, onupdate=utcnow, nullable=False)
    players = db.relationship('LobbyPlayer', back_populates='lobby', cascade='all, delete-orphan',
                              order_by='LobbyPlayer.number')
    game = db.relationship('Game', back_populates='lobby', uselist=False, cascade='all, delete-orphan')

    def to_dict(self, include_players=True):
        data = {
            'id': self.id,
            'mode': self.mode,
            'rounds': self.rounds,
            'minuteDurationSec': self.minute_duration_sec,
            'enabledCategories': self.enabled_categories,
            'channelsConfig': self.channels_config or {},
            'createdAt': to_iso(self.created_at),
            'updatedAt': to_iso(self.updated_at),
            'game': {'id': self.game.id} if self.game else None,
        }
        if include_players:
            data['players'] = [p.to_dict() for p in self.players]
        return data


class LobbyPlayer(db.Model):
    __tablename__ = 'lobby_player'
    id = db.Column(db.Integer, primary_key=True)
    lobby_id = db.Column(db.Integer, db.ForeignKey('lobby.id', ondelete='CASCADE'), nullable=False, index=True)
    number = db.Column(db.Integer, nullable=False)
    nickname = db.Column(db.String(128), nullable=False)
    discord_id = db.Column(db.String(32), nullable=True)
    lobby = db.relationship('Lobby', back_populates='players')

    def to_dict(self):
        return {
            'id': self.id,
            'number': self.number,
            'nickname': self.nickname,
            'discordId': self.discord_id,
        }


class Game(db.Model):
    __tablename__ = 'game'
    id = db.Column(db.Integer, primary_key=True)
    # Unique: at most one game per lobby, enforced by the store
    lobby_id = db.Column(db.Integer, db.ForeignKey('lobby.id', ondelete='CASCADE'), unique=True, nullable=False)
    apocalypse = db.Column(db.Text, nullable=False)
    bunker = db.Column(db.Text, nullable=False)
    seats = db.Column(db.Integer, nullable=False)
    current_round = db.Column(db.Integer, default=0, nullable=False)
    is_spectators_enabled = db.Column(db.Boolean, default=True, nullable=False)
    ending = db.Column(db.JSON(none_as_null=True), nullable=True)
    created_at = db.Column(db.DateTime, default=utcnow, nullable=False)
    updated_at = db.Column(db.DateTime, default=utcnow, onupdate=utcnow, nullable=False)
    lobby = db.relationship('Lobby', back_populates='game')
    players = db.relationship('Player', back_populates='game', cascade='all, delete-orphan',
                              order_by='Player.number')
    votes = db.relationship('Vote', backref='game', lazy='dynamic', cascade='all, delete-orphan')
    minute_requests = db.relationship('MinuteRequest', backref='game', lazy='dynamic', cascade='all, delete-orphan')
    reveal_plans = db.relationship('RevealPlan', backref='game', lazy='dynamic', cascade='all, delete-orphan')
    events = db.relationship('GameEvent', backref='game', lazy='dynamic', cascade='all, delete-orphan')
    admins = db.relationship('GameAdmin', backref='game', lazy='dynamic', cascade='all, delete-orphan')
    invites = db.relationship('Invite', backref='game', lazy='dynamic', cascade='all, delete-orphan')

    def to_dict(self, include_cards=True):
        return {
            'id': self.id,
            'lobbyId': self.lobby_id,
            'apocalypse': self.apocalypse,
            'bunker': self.bunker,
            'seats': self.seats,
            'currentRound': self.current_round,
            'isSpectatorsEnabled': self.is_spectators_enabled,
            'ending': self.ending,
            'players': [p.to_dict(include_cards=include_cards) for p in self.players],
            'createdAt': to_iso(self.created_at),
        }


class Player(db.Model):
    __tablename__ = 'player'
    id = db.Column(db.Integer, primary_key=True)
    game_id = db.Column(db.Integer, db.ForeignKey('game.id', ondelete='CASCADE'), nullable=False, index=True)
    number = db.Column(db.Integer, nullable=False)
    nickname = db.Column(db.String(128), nullable=False)
    discord_id = db.Column(db.String(32), nullable=True)
    status = db.Column(db.String(16), default='ALIVE', nullable=False)  # ALIVE, OUT
    role = db.Column(db.String(16), default='PLAYER', nullable=False)  # PLAYER, SPECTATOR
    game = db.relationship('Game', back_populates='players')
    cards = db.relationship('Card', back_populates='player', cascade='all, delete-orphan', order_by='Card.id')

    def card_for(self, category):
        return next((c for c in self.cards if c.category == category), None)

    def to_dict(self, include_cards=True):
        data = {
            'id': self.id,
            'gameId': self.game_id,
            'number': self.number,
            'nickname': self.nickname,
            'discordId': self.discord_id,
            'status': self.status,
            'role': self.role,
        }
        if include_cards:
            data['cards'] = [c.to_dict() for c in self.cards]
        return data


class Card(db.Model):
    __tablename__ = 'card'
    id = db.Column(db.Integer, primary_key=True)
    player_id = db.Column(db.Integer, db.ForeignKey('player.id', ondelete='CASCADE'), nullable=False, index=True)
    category = db.Column(db.String(32), nullable=False)
    payload = db.Column(db.JSON, nullable=False)  # {"title": ..., "description": ...}
    is_open = db.Column(db.Boolean, default=False, nullable=False)
    opened_at = db.Column(db.DateTime, nullable=True)
    opened_round = db.Column(db.Integer, nullable=True)
    player = db.relationship('Player', back_populates='cards')

    @property
    def title(self):
        return (self.payload or {}).get('title') or 'Unknown'

    def to_dict(self):
        return {
            'id': self.id,
            'playerId': self.player_id,
            'category': self.category,
            'payload': self.payload,
            'isOpen': self.is_open,
            'openedAt': to_iso(self.opened_at),
            'openedRound': self.opened_round,
        }


class Vote(db.Model):
    __tablename__ = 'vote'
    __table_args__ = (db.UniqueConstraint('game_id', 'round', 'voter_player_id', name='uq_vote_game_round_voter'),)
    id = db.Column(db.Integer, primary_key=True)
    game_id = db.Column(db.Integer, db.ForeignKey('game.id', ondelete='CASCADE'), nullable=False, index=True)
    round = db.Column(db.Integer, nullable=False)
    voter_player_id = db.Column(db.Integer, db.ForeignKey('player.id', ondelete='CASCADE'), nullable=False)
    target_player_id = db.Column(db.Integer, db.ForeignKey('player.id', ondelete='CASCADE'), nullable=True)
    source = db.Column(db.String(16), default='WEB', nullable=False)  # WEB, DISCORD
    created_at = db.Column(db.DateTime, default=utcnow, nullable=False)
    updated_at = db.Column(db.DateTime, default=utcnow, onupdate=utcnow, nullable=False)

    def to_dict(self):
        return {
            'id': self.id,
            'gameId': self.game_id,
            'round': self.round,
            'voterPlayerId': self.voter_player_id,
            'targetPlayerId': self.target_player_id,
            'source': self.source,
            'createdAt': to_iso(self.created_at),
            'updatedAt': to_iso(self.updated_at),
        }


class MinuteRequest(db.Model):
    __tablename__ = 'minute_request'
    id = db.Column(db.Integer, primary_key=True)
    game_id = db.Column(db.Integer, db.ForeignKey('game.id', ondelete='CASCADE'), nullable=False, index=True)
    round = db.Column(db.Integer, nullable=False)
    player_id = db.Column(db.Integer, db.ForeignKey('player.id', ondelete='CASCADE'), nullable=False)
    position = db.Column(db.Integer, nullable=False)
    approved = db.Column(db.Boolean, default=False, nullable=False)
    started_at = db.Column(db.DateTime, nullable=True)
    duration_sec = db.Column(db.Integer, nullable=True)
    created_at = db.Column(db.DateTime, default=utcnow, nullable=False)
    updated_at = db.Column(db.DateTime, default=utcnow, onupdate=utcnow, nullable=False)

    def to_dict(self):
        return {
            'id': self.id,
            'gameId': self.game_id,
            'round': self.round,
            'playerId': self.player_id,
            'position': self.position,
            'approved': self.approved,
            'startedAt': to_iso(self.started_at),
            'durationSec': self.duration_sec,
            'createdAt': to_iso(self.created_at),
            'updatedAt': to_iso(self.updated_at),
        }


class RevealPlan(db.Model):
    __tablename__ = 'reveal_plan'
    __table_args__ = (db.UniqueConstraint('game_id', 'player_id', 'round', name='uq_reveal_plan_game_player_round'),)
    id = db.Column(db.Integer, primary_key=True)
    game_id = db.Column(db.Integer, db.ForeignKey('game.id', ondelete='CASCADE'), nullable=False, index=True)
    player_id = db.Column(db.Integer, db.ForeignKey('player.id', ondelete='CASCADE'), nullable=False)
    round = db.Column(db.Integer, nullable=False)
    categories = db.Column(db.JSON, nullable=False)
    created_at = db.Column(db.DateTime, default=utcnow, nullable=False)
    updated_at = db.Column(db.DateTime, default=utcnow, onupdate=utcnow, nullable=False)

    def to_dict(self):
        return {
            'id': self.id,
            'gameId': self.game_id,
            'playerId': self.player_id,
            'round': self.round,
            'categories': list(self.categories or []),
            'updatedAt': to_iso(self.updated_at),
        }


class GameEvent(db.Model):
    __tablename__ = 'game_event'
    __table_args__ = (db.Index('ix_game_event_game_created', 'game_id', 'created_at'),)
    id = db.Column(db.Integer, primary_key=True)
    game_id = db.Column(db.Integer, db.ForeignKey('game.id', ondelete='CASCADE'), nullable=False)
    type = db.Column(db.String(64), nullable=False, index=True)
    payload = db.Column(db.JSON, nullable=False)
    created_at = db.Column(db.DateTime, default=utcnow, nullable=False)

    def to_dict(self):
        return {
            'id': self.id,
            'gameId': self.game_id,
            'type': self.type,
            'payload': self.payload,
            'createdAt': to_iso(self.created_at),
        }


class GameAdmin(db.Model):
    __tablename__ = 'game_admin'
    __table_args__ = (db.UniqueConstraint('game_id', 'user_id', name='uq_game_admin_game_user'),)
    id = db.Column(db.Integer, primary_key=True)
    game_id = db.Column(db.Integer, db.ForeignKey('game.id', ondelete='CASCADE'), nullable=False, index=True)
    user_id = db.Column(db.String(64), nullable=False)
    role = db.Column(db.String(16), nullable=False)  # HOST, CO_HOST
    created_at = db.Column(db.DateTime, default=utcnow, nullable=False)

    def to_dict(self):
        return {
            'id': self.id,
            'gameId': self.game_id,
            'userId': self.user_id,
            'role': self.role,
            'createdAt': to_iso(self.created_at),
        }


class Invite(db.Model):
    __tablename__ = 'invite'
    id = db.Column(db.Integer, primary_key=True)
    game_id = db.Column(db.Integer, db.ForeignKey('game.id', ondelete='CASCADE'), nullable=False, index=True)
    code = db.Column(db.String(8), unique=True, nullable=False, index=True)
    role = db.Column(db.String(16), nullable=False)  # CO_HOST, SPECTATOR
    expires_at = db.Column(db.DateTime, nullable=False)
    used_by_user_id = db.Column(db.String(64), nullable=True)
    created_at = db.Column(db.DateTime, default=utcnow, nullable=False)

    def to_dict(self):
        return {
            'id': self.id,
            'gameId': self.game_id,
            'code': self.code,
            'role': self.role,
            'expiresAt': to_iso(self.expires_at),
            'usedByUserId': self.used_by_user_id,
            'createdAt': to_iso(self.created_at),
        }
