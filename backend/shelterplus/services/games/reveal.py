from flask import current_app

from shelterplus import db
from shelterplus.errors import NotFoundError, ValidationError
from shelterplus.models import Card, RevealPlan, utcnow
from .fanout import record_event, publish_event, emit_to_game, broadcast_public_state
from .guards import ensure_round, get_player, parse_category, parse_round


def preselect_categories(game_id, player_id, round_number, categories) -> RevealPlan:
    """Store the categories a player plans to reveal this round. Cards stay closed."""
    game = ensure_round(game_id, round_number)
    round_number = parse_round(round_number)
    player = get_player(game, player_id)
    if not isinstance(categories, (list, tuple)):
        raise ValidationError('categories must be a list')
    selected = []
    for category in categories:
        category = parse_category(category)
        if category not in selected:
            selected.append(category)

    plan = RevealPlan.query.filter_by(game_id=game.id, player_id=player.id, round=round_number).first()
    if plan is None:
        plan = RevealPlan(game_id=game.id, player_id=player.id, round=round_number, categories=selected)
        db.session.add(plan)
    else:
        plan.categories = selected
    event = record_event(game.id, 'CATEGORIES_PRESELECTED', {
        'playerId': player.id,
        'round': round_number,
        'categories': selected,
    })
    db.session.commit()

    emit_to_game(game.id, 'char:preselect', {'playerId': player.id, 'round': round_number, 'categories': selected})
    publish_event(event)
    return plan


def open_category(game_id, player_id, category, round_number) -> Card:
    """Reveal one of a player's cards. Opening an open card changes nothing."""
    game = ensure_round(game_id, round_number)
    round_number = parse_round(round_number)
    player = get_player(game, player_id)
    category = parse_category(category)
    card = player.card_for(category)
    if card is None:
        raise NotFoundError('Card not found')
    if card.is_open:
        return card

    card.is_open = True
    card.opened_at = utcnow()
    card.opened_round = round_number
    event = record_event(game.id, 'CARD_OPENED', {
        'playerId': player.id,
        'category': category,
        'round': round_number,
        'title': card.title,
    })
    db.session.commit()

    current_app.logger.info(f"[char.open] game={game.id} player={player.id} category={category} round={round_number}")
    emit_to_game(game.id, 'char:open', {'playerId': player.id, 'card': card.to_dict(), 'auto': False})
    publish_event(event)
    broadcast_public_state(game.id)
    return card
