import re

from flask import current_app

from shelterplus import db
from shelterplus.errors import ValidationError
from shelterplus.models import Lobby, LobbyPlayer
from shelterplus.services.games.guards import get_lobby
from shelterplus.services.games.seeding import normalize_enabled_categories

LOBBY_MODES = ('OFFICIAL', 'CUSTOM', 'WEB')
CHANNEL_KEYS = ('guildId', 'voiceChannelId', 'textChannelId', 'officialPresetIndex')

# "12 Alice" -> seat 12, nickname "Alice"
_NUMBERED_NICKNAME = re.compile(r'^(\d+)\s*(.*)$')


def _positive_int(value, name) -> int:
    if isinstance(value, bool) or not isinstance(value, (int, str)):
        raise ValidationError(f'{name} must be a positive integer')
    try:
        number = int(value)
    except ValueError:
        raise ValidationError(f'{name} must be a positive integer')
    if number <= 0:
        raise ValidationError(f'{name} must be a positive integer')
    return number


def create_lobby(data: dict) -> Lobby:
    mode = data.get('mode')
    if mode not in LOBBY_MODES:
        raise ValidationError('Invalid lobby mode')
    rounds = _positive_int(data.get('rounds'), 'rounds')
    minute_duration_sec = _positive_int(data.get('minuteDurationSec'), 'minuteDurationSec')
    enabled = data.get('enabledCategories') or {}
    if not isinstance(enabled, dict):
        raise ValidationError('enabledCategories must be an object')

    raw_channels = data.get('channelsConfig') or {}
    if not isinstance(raw_channels, dict):
        raise ValidationError('channelsConfig must be an object')
    channels = {k: raw_channels[k] for k in CHANNEL_KEYS if raw_channels.get(k) is not None}

    if mode == 'OFFICIAL':
        try:
            preset_index = int(channels.get('officialPresetIndex', 0))
        except (TypeError, ValueError):
            raise ValidationError('officialPresetIndex must be an integer')
        channels['officialPresetIndex'] = preset_index
        preset = current_app.extensions['official_config'].get_by_index(preset_index)
        if preset:
            channels.update({
                'voiceChannelId': preset['voiceChannelId'],
                'textChannelId': preset['textChannelId'],
            })
        else:
            current_app.logger.warning(f"[lobby.create] official preset {preset_index} not found; keeping given channels")

    lobby = Lobby(
        mode=mode,
        rounds=rounds,
        minute_duration_sec=minute_duration_sec,
        enabled_categories=normalize_enabled_categories(enabled),
        channels_config=channels,
    )
    db.session.add(lobby)
    db.session.commit()
    current_app.logger.info(f"[lobby.create] lobby={lobby.id} mode={mode} rounds={rounds}")
    return lobby


def _ensure_editable(lobby: Lobby) -> None:
    if lobby.game is not None:
        raise ValidationError('Lobby already has a game')


def _replace_roster(lobby: Lobby, entries) -> list:
    LobbyPlayer.query.filter_by(lobby_id=lobby.id).delete()
    db.session.expire(lobby, ['players'])
    for entry in entries:
        db.session.add(LobbyPlayer(lobby_id=lobby.id, number=entry['number'],
                                   nickname=entry['nickname'], discord_id=entry.get('discordId')))
    db.session.commit()
    return LobbyPlayer.query.filter_by(lobby_id=lobby.id).order_by(LobbyPlayer.number).all()


def collect_players(lobby_id) -> list:
    """Rebuild the roster from whoever sits in the lobby's Discord voice channel."""
    lobby = get_lobby(lobby_id)
    _ensure_editable(lobby)
    channels = lobby.channels_config or {}
    voice_channel_id = channels.get('voiceChannelId')
    participants = []
    if voice_channel_id:
        try:
            participants = current_app.extensions['discord'].fetch_voice_participants(
                channels.get('guildId'), voice_channel_id)
        except Exception as exc:
            current_app.logger.warning(f"[lobby.collect] lobby={lobby.id} voice fetch failed: {exc}")
            participants = []

    if not participants:
        return list(lobby.players)

    fallback_number = 1
    entries = []
    for participant in participants:
        match = _NUMBERED_NICKNAME.match(participant['nickname'])
        if match:
            number = int(match.group(1))
            nickname = match.group(2).strip() or participant['nickname']
        else:
            number = fallback_number
            fallback_number += 1
            nickname = participant['nickname']
        entries.append({'number': number, 'nickname': nickname, 'discordId': participant['id']})

    current_app.logger.info(f"[lobby.collect] lobby={lobby.id} participants={len(entries)}")
    return _replace_roster(lobby, entries)


def update_players(lobby_id, players) -> list:
    lobby = get_lobby(lobby_id)
    _ensure_editable(lobby)
    if not isinstance(players, list):
        raise ValidationError('players must be a list')
    entries = []
    for raw in players:
        if not isinstance(raw, dict) or not raw.get('nickname'):
            raise ValidationError('Each player needs a nickname')
        try:
            number = int(raw.get('number'))
        except (TypeError, ValueError):
            raise ValidationError('Each player needs an integer number')
        discord_id = raw.get('discordId')
        entries.append({
            'number': number,
            'nickname': str(raw['nickname']),
            'discordId': str(discord_id) if discord_id else None,
        })
    return _replace_roster(lobby, entries)
