from flask import current_app
from sqlalchemy.exc import IntegrityError

from shelterplus import db
from shelterplus.errors import ValidationError
from shelterplus.models import Game, Player, Card, GameAdmin, utcnow
from .card_pool import APOCALYPSE_POOL, BUNKER_POOL, ENDING_POOL
from .dealer import deal_cards
from .fanout import (
    record_event, publish_event, emit_to_game, broadcast_public_state,
    post_to_channel, send_direct_message,
)
from .guards import get_lobby, get_game, get_player, ensure_round, parse_round
from .seeding import create_seed, make_rng, pick_item, normalize_enabled_categories, ENDING_SEED_SUFFIX


def start_from_lobby(lobby_id, host_user_id=None) -> Game:
    """Create the game for a lobby: scenario, seats, dealt cards and host admin.

    Game, players, cards, the start event and the host record are committed
    together. Discord notifications go out afterwards and never undo the game.
    """
    lobby = get_lobby(lobby_id)
    if not lobby.players:
        raise ValidationError('Cannot start game without players')
    if lobby.game is not None:
        raise ValidationError('Game already started')

    enabled = normalize_enabled_categories(lobby.enabled_categories)
    rng = make_rng(create_seed(lobby))
    apocalypse = pick_item(APOCALYPSE_POOL, rng)
    bunker = pick_item(BUNKER_POOL, rng)

    channels = lobby.channels_config or {}
    if lobby.mode == 'OFFICIAL':
        preset = current_app.extensions['official_config'].get_by_index(channels.get('officialPresetIndex', 0))
        if preset:
            apocalypse, bunker = preset['apocalypse'], preset['bunker']

    seats = len(lobby.players) // 2
    dealt = deal_cards(lobby.players, enabled, rng)

    game = Game(lobby=lobby, apocalypse=apocalypse, bunker=bunker, seats=seats, current_round=0)
    for entry in dealt:
        player = Player(number=entry.number, nickname=entry.nickname, discord_id=entry.discord_id,
                        status='ALIVE', role='PLAYER')
        player.cards = [Card(category=category, payload={'title': title}, is_open=False)
                        for category, title in entry.cards]
        game.players.append(player)
    try:
        db.session.add(game)
        db.session.flush()
        if host_user_id:
            db.session.add(GameAdmin(game_id=game.id, user_id=str(host_user_id), role='HOST'))
        event = record_event(game.id, 'GAME_STARTED', {
            'apocalypse': apocalypse,
            'bunker': bunker,
            'seats': seats,
            'players': len(dealt),
        })
        db.session.commit()
    except IntegrityError:
        # Lost a race with a concurrent start for the same lobby
        db.session.rollback()
        raise ValidationError('Game already started')

    current_app.logger.info(f"[game.start] lobby={lobby.id} game={game.id} players={len(dealt)} seats={seats}")
    publish_event(event)
    _notify_game_started(game, channels)
    return game


def _notify_game_started(game: Game, channels: dict) -> None:
    players = sorted(game.players, key=lambda p: p.number)
    text_channel_id = channels.get('textChannelId')
    if text_channel_id:
        post_to_channel(text_channel_id, f"**Apocalypse**: {game.apocalypse}\n**Bunker**: {game.bunker}")
        chunk_size = max(1, int(current_app.config.get('DISCORD_CHUNK_SIZE', 4)))
        for i in range(0, len(players), chunk_size):
            content = '\n\n'.join(
                f"**{p.number}. {p.nickname}**\n" + '\n'.join(f"- {c.category}: _hidden_" for c in p.cards)
                for p in players[i:i + chunk_size]
            )
            post_to_channel(text_channel_id, content)

    for player in players:
        if not player.discord_id:
            continue
        lines = [f"Apocalypse: {game.apocalypse}", f"Bunker: {game.bunker}", 'Your cards:']
        lines.extend(f"{c.category}: {c.title}" for c in player.cards)
        send_direct_message(player.discord_id, '\n'.join(lines))


def start_round(game_id, round_number) -> Game:
    game = get_game(game_id)
    round_number = parse_round(round_number)
    if round_number <= game.current_round:
        raise ValidationError(f'Round {round_number} has already started; current round is {game.current_round}')

    game.current_round = round_number
    events = [record_event(game.id, 'ROUND_STARTED', {'round': round_number})]

    revealed = []
    if round_number == 1:
        now = utcnow()
        for player in game.players:
            card = player.card_for('Profession')
            if card is None or card.is_open:
                continue
            card.is_open = True
            card.opened_at = now
            card.opened_round = round_number
            revealed.append((player, card))
        if revealed:
            events.append(record_event(game.id, 'PROFESSIONS_AUTO_REVEALED', {
                'round': round_number,
                'playerIds': [p.id for p, _ in revealed],
            }))
    db.session.commit()

    current_app.logger.info(f"[round.start] game={game.id} round={round_number} auto_revealed={len(revealed)}")
    emit_to_game(game.id, 'round:change', {'round': round_number, 'status': 'started'})
    for player, card in revealed:
        emit_to_game(game.id, 'char:open', {'playerId': player.id, 'card': card.to_dict(), 'auto': True})
    for event in events:
        publish_event(event)
    broadcast_public_state(game.id)
    return game


def end_round(game_id, round_number) -> dict:
    game = ensure_round(game_id, round_number)
    round_number = parse_round(round_number)
    event = record_event(game.id, 'ROUND_ENDED', {'round': round_number})
    db.session.commit()
    emit_to_game(game.id, 'round:change', {'round': round_number, 'status': 'ended'})
    publish_event(event)
    return {'gameId': game.id, 'round': round_number, 'ended': True}


def kick_player(game_id, player_id) -> Player:
    game = get_game(game_id)
    player = get_player(game, player_id)
    if player.status == 'OUT':
        return player
    player.status = 'OUT'
    event = record_event(game.id, 'PLAYER_KICKED', {
        'playerId': player.id,
        'number': player.number,
        'nickname': player.nickname,
    })
    db.session.commit()
    current_app.logger.info(f"[player.kick] game={game.id} player={player.id}")
    emit_to_game(game.id, 'player:kicked', {'playerId': player.id})
    publish_event(event)
    broadcast_public_state(game.id)
    return player


def set_spectators_enabled(game_id, enabled) -> Game:
    game = get_game(game_id)
    game.is_spectators_enabled = bool(enabled)
    event = record_event(game.id, 'SPECTATORS_TOGGLED', {'enabled': game.is_spectators_enabled})
    db.session.commit()
    publish_event(event)
    broadcast_public_state(game.id)
    return game


def draw_ending(lobby) -> dict:
    rng = make_rng(create_seed(lobby) + ENDING_SEED_SUFFIX)
    return dict(pick_item(ENDING_POOL, rng))


def trigger_ending(game_id) -> Game:
    game = get_game(game_id)
    if game.ending is not None:
        raise ValidationError('Ending already triggered')
    if not ENDING_POOL:
        raise ValidationError('No endings configured')

    ending = draw_ending(game.lobby)
    game.ending = ending
    event = record_event(game.id, 'ENDING_TRIGGERED', {'ending': ending, 'round': game.current_round})
    db.session.commit()

    current_app.logger.info(f"[ending] game={game.id} title={ending['title']!r}")
    channels = game.lobby.channels_config or {}
    post_to_channel(channels.get('textChannelId'), f"**Ending**: {ending['title']}\n{ending.get('description', '')}")
    emit_to_game(game.id, 'ending:show', {'ending': ending})
    publish_event(event)
    broadcast_public_state(game.id)
    return game
